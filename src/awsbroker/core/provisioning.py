"""Broker operations: catalog, provision, last operation, deprovision, bind, unbind.

Each service instance is one CloudFormation stack created from the
instance's service template. Stacks can be created in other accounts by
naming a ``target_role_name`` (and optionally ``target_account_id``) in the
provision parameters; the broker assumes that role for every later call
on the instance.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from awsbroker.core.adapters.cloudformation import CfnClient
from awsbroker.core.broker import AwsBroker
from awsbroker.core.catalog import cached_services
from awsbroker.core.errors import ConflictError, NotFoundError, ValidationError
from awsbroker.core.models import (
    LastOperation,
    OperationState,
    ServiceBinding,
    ServiceDefinition,
    ServiceInstance,
    ServicePlan,
)
from awsbroker.core.templates import BROKER_PARAMS

logger = logging.getLogger(__name__)

_COMPLETE = {"CREATE_COMPLETE", "UPDATE_COMPLETE", "IMPORT_COMPLETE"}
_STACK_NAME_RX = re.compile(r"[^A-Za-z0-9-]+")
_CAMEL_RX = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def get_catalog(broker: AwsBroker) -> list[ServiceDefinition]:
    """Return the services currently offered by the broker."""
    return cached_services(broker.listing_cache, broker.catalog_cache, broker.db.account_uuid)


def find_service(broker: AwsBroker, service_id: str) -> ServiceDefinition:
    """Return a service from the current catalog by id or raise NotFoundError."""
    for service in get_catalog(broker):
        if service.id == service_id:
            return service
    raise NotFoundError(f"service {service_id} not found in catalog")


def stack_name(service: ServiceDefinition, instance_id: str) -> str:
    """Return the CloudFormation stack name for an instance."""
    raw = f"CfnServiceBroker-{service.name}-{instance_id}"
    return _STACK_NAME_RX.sub("-", raw)[:128]


def template_url(broker: AwsBroker, service: ServiceDefinition) -> str:
    """Return the HTTPS URL of the template behind ``service``."""
    key = broker.bucket_details.template_key(service.name)
    return f"https://{broker.s3_bucket}.s3.{broker.s3_region}.amazonaws.com/{key}"


def _param_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def _validate_params(plan: ServicePlan, params: Mapping[str, str]) -> None:
    schema = plan.schemas.get("service_instance", {}).get("create", {}).get("parameters", {})
    allowed = set(schema.get("properties") or {})
    for name in params:
        if name in plan.prescribed:
            raise ValidationError(f"parameter '{name}' is set by plan '{plan.name}'")
        if name not in allowed:
            raise ValidationError(f"unknown parameter '{name}'")
    missing = [name for name in schema.get("required") or () if name not in params]
    if missing:
        raise ValidationError(f"missing required parameter(s): {', '.join(missing)}")
    if params.get("target_account_id") and not params.get("target_role_name"):
        raise ValidationError("target_account_id requires target_role_name")


def _cfn_for(broker: AwsBroker, params: Mapping[str, str]) -> CfnClient:
    return broker.clients.new_cfn(broker.session_for(params, params.get("region")))


def _get_instance(broker: AwsBroker, instance_id: str) -> ServiceInstance:
    instance = broker.db.data_store_port.get_service_instance(instance_id)
    if instance is None:
        raise NotFoundError(f"service instance {instance_id} not found")
    return instance


def provision(
    broker: AwsBroker,
    instance_id: str,
    service_id: str,
    plan_id: str,
    params: Mapping[str, Any] | None = None,
) -> ServiceInstance:
    """
    Create the stack for a new service instance and record the instance.

    Provisioning the same instance id again with identical attributes
    returns the stored instance; different attributes raise ConflictError.

    Raises:
        NotFoundError: Unknown service or plan.
        ValidationError: Unknown, prescribed or missing parameters.
        ConflictError: Instance id already used with other attributes.
    """
    values = {str(k): _param_str(v) for k, v in (params or {}).items()}
    store = broker.db.data_store_port

    existing = store.get_service_instance(instance_id)
    if existing is not None:
        same = (existing.service_id, existing.plan_id, dict(existing.params)) == (
            service_id,
            plan_id,
            values,
        )
        if same:
            return existing
        raise ConflictError(f"service instance {instance_id} already exists")

    service = find_service(broker, service_id)
    plan = service.plan(plan_id)
    if plan is None:
        raise NotFoundError(f"plan {plan_id} not found for service {service.name}")
    _validate_params(plan, values)

    stack_params = {k: _param_str(v) for k, v in plan.prescribed.items()}
    stack_params.update({k: v for k, v in values.items() if k not in BROKER_PARAMS})

    stack_id = _cfn_for(broker, values).create_stack(
        name=stack_name(service, instance_id),
        template_url=template_url(broker, service),
        parameters=stack_params,
        tags={"ServiceBrokerId": broker.broker_id, "ServiceInstanceId": instance_id},
    )
    instance = ServiceInstance(
        id=instance_id,
        service_id=service_id,
        plan_id=plan_id,
        params=values,
        stack_id=stack_id,
    )
    try:
        store.put_service_instance(instance)
    except Exception:
        logger.error(
            "Stack %s was created for %s but the instance record was not saved",
            stack_id,
            instance_id,
        )
        raise
    logger.info("Provisioning %s (%s) as stack %s", instance_id, service.name, stack_id)
    return instance


def last_operation(broker: AwsBroker, instance_id: str) -> LastOperation:
    """Report the state of the stack behind an instance."""
    instance = _get_instance(broker, instance_id)
    stack = _cfn_for(broker, instance.params).describe_stack(instance.stack_id)

    status = str((stack or {}).get("StackStatus") or "DELETE_COMPLETE")
    reason = str((stack or {}).get("StackStatusReason") or "")

    if status == "DELETE_COMPLETE":
        broker.db.data_store_port.delete_service_instance(instance_id)
        return LastOperation(OperationState.SUCCEEDED, "stack deleted")
    if status.endswith("_IN_PROGRESS"):
        return LastOperation(OperationState.IN_PROGRESS, status)
    if status in _COMPLETE:
        return LastOperation(OperationState.SUCCEEDED, status)
    return LastOperation(OperationState.FAILED, f"{status}: {reason}" if reason else status)


def deprovision(broker: AwsBroker, instance_id: str) -> LastOperation:
    """Start deleting the stack behind an instance."""
    instance = _get_instance(broker, instance_id)
    _cfn_for(broker, instance.params).delete_stack(instance.stack_id)
    logger.info("Deprovisioning %s (stack %s)", instance_id, instance.stack_id)
    return LastOperation(OperationState.IN_PROGRESS, "DELETE_IN_PROGRESS")


def _credential_key(output_key: str) -> str:
    return _CAMEL_RX.sub("_", output_key).lower()


def bind(
    broker: AwsBroker,
    instance_id: str,
    binding_id: str,
) -> ServiceBinding:
    """
    Bind an instance: expose its stack outputs as credentials.

    Output values of the form ``ssm:<name>`` are read from SSM Parameter
    Store (decrypted) with the instance's credentials.
    """
    store = broker.db.data_store_port
    existing = store.get_service_binding(binding_id)
    if existing is not None:
        if existing.instance_id == instance_id:
            return existing
        raise ConflictError(f"service binding {binding_id} already exists")

    instance = _get_instance(broker, instance_id)
    try:
        service = broker.catalog_cache.get(instance.service_id)
    except NotFoundError:
        service = None
    if service is not None and not service.bindable:
        raise ValidationError(f"service {service.name} is not bindable")

    session = broker.session_for(instance.params, instance.params.get("region"))
    stack = broker.clients.new_cfn(session).describe_stack(instance.stack_id)
    if not stack or stack.get("StackStatus") not in _COMPLETE:
        raise ConflictError(f"stack for service instance {instance_id} is not ready")

    ssm = broker.clients.new_ssm(session)
    credentials = {
        _credential_key(str(o["OutputKey"])): ssm.resolve(str(o.get("OutputValue") or ""))
        for o in stack.get("Outputs") or []
    }
    binding = ServiceBinding(id=binding_id, instance_id=instance_id, credentials=credentials)
    store.put_service_binding(binding)
    return binding


def unbind(broker: AwsBroker, instance_id: str, binding_id: str) -> None:
    """Remove a binding."""
    store = broker.db.data_store_port
    binding = store.get_service_binding(binding_id)
    if binding is None or binding.instance_id != instance_id:
        raise NotFoundError(f"service binding {binding_id} not found")
    store.delete_service_binding(binding_id)
