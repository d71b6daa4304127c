"""Service template parsing.

Templates are CloudFormation documents (YAML or JSON) whose
``Metadata["AWS::ServiceBroker::Specification"]`` section describes the
catalog entry: display data, tags and the service plans with their
prescribed parameter values. This module turns such a document into a
``ServiceDefinition``.
"""

from __future__ import annotations

import uuid
from typing import Any, Mapping

import yaml

from awsbroker.core.errors import ParseError
from awsbroker.core.identity import service_uuid
from awsbroker.core.models import DashboardClient, ServiceDefinition, ServicePlan

BROKER_METADATA_KEY = "AWS::ServiceBroker::Specification"

# Parameters the broker itself understands on provision requests.
BROKER_PARAMS: dict[str, dict[str, Any]] = {
    "target_role_name": {
        "type": "string",
        "description": "IAM role to assume for provisioning into another account",
    },
    "target_account_id": {
        "type": "string",
        "description": "Account to provision into (requires target_role_name)",
    },
    "region": {"type": "string", "description": "AWS region to create the stack in"},
}

_METADATA_FIELDS = {
    "DisplayName": "displayName",
    "ImageUrl": "imageUrl",
    "LongDescription": "longDescription",
    "ProviderDisplayName": "providerDisplayName",
    "DocumentationUrl": "documentationUrl",
    "SupportUrl": "supportUrl",
}


class _CfnLoader(yaml.SafeLoader):
    """SafeLoader that accepts CloudFormation short-form intrinsics (!Ref, !Sub, ...)."""


def _construct_intrinsic(loader: yaml.SafeLoader, suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    name = suffix if suffix in ("Ref", "Condition") else f"Fn::{suffix}"
    if name == "Fn::GetAtt" and isinstance(value, str):
        value = value.split(".", 1)
    return {name: value}


_CfnLoader.add_multi_constructor("!", _construct_intrinsic)


def load_template(body: bytes | str) -> dict[str, Any]:
    """
    Parse a template body.

    Raises:
        ParseError: With the YAML parser's own message when the body is not
            valid YAML/JSON, or when the document is not a mapping.
    """
    try:
        doc = yaml.load(body, Loader=_CfnLoader)  # noqa: S506 - SafeLoader subclass
    except yaml.YAMLError as exc:
        raise ParseError(str(exc)) from exc
    if not isinstance(doc, dict):
        raise ParseError(
            f"cannot load {type(doc).__name__} {doc!r} into a template mapping"
        )
    return doc


def _json_type(cfn_type: str) -> str:
    if cfn_type == "Number":
        return "number"
    if cfn_type == "List<Number>":
        return "array"
    return "string"


def _parameter_schema(
    parameters: Mapping[str, Any], prescribed: Mapping[str, Any]
) -> dict[str, Any]:
    """Build the OSB create-parameters schema for one plan."""
    properties: dict[str, Any] = dict(BROKER_PARAMS)
    required: list[str] = []
    for name, param in parameters.items():
        if name in prescribed:
            continue
        param = param if isinstance(param, dict) else {}
        prop: dict[str, Any] = {"type": _json_type(str(param.get("Type") or "String"))}
        if param.get("Description"):
            prop["description"] = str(param["Description"])
        if "Default" in param:
            prop["default"] = param["Default"]
        else:
            required.append(name)
        if param.get("AllowedValues"):
            prop["enum"] = list(param["AllowedValues"])
        properties[name] = prop

    schema: dict[str, Any] = {
        "$schema": "http://json-schema.org/draft-04/schema#",
        "type": "object",
        "properties": properties,
    }
    if required:
        schema["required"] = required
    return {"service_instance": {"create": {"parameters": schema}}}


def _plans(
    service_id: str, plans: Mapping[str, Any], parameters: Mapping[str, Any]
) -> tuple[ServicePlan, ...]:
    out: list[ServicePlan] = []
    for plan_name, plan in plans.items():
        plan = plan if isinstance(plan, dict) else {}
        prescribed = dict(plan.get("ParameterValues") or {})
        metadata: dict[str, Any] = {}
        if plan.get("DisplayName"):
            metadata["displayName"] = plan["DisplayName"]
        if plan.get("LongDescription"):
            metadata["longDescription"] = plan["LongDescription"]
        if plan.get("Cost"):
            metadata["cost"] = plan["Cost"]
        out.append(
            ServicePlan(
                id=service_uuid(uuid.UUID(service_id), str(plan_name)),
                name=str(plan_name),
                description=str(plan.get("Description") or ""),
                free=not plan.get("Cost"),
                metadata=metadata,
                prescribed=prescribed,
                schemas=_parameter_schema(parameters, prescribed),
            )
        )
    return tuple(out)


def _dashboard_client(raw: Any) -> DashboardClient | None:
    if not isinstance(raw, dict) or not raw.get("ID"):
        return None
    return DashboardClient(
        id=str(raw["ID"]),
        secret=str(raw.get("Secret") or ""),
        redirect_uri=str(raw.get("RedirectURI") or ""),
    )


def build_service_definition(
    doc: Mapping[str, Any], name: str, tenant: uuid.UUID
) -> ServiceDefinition:
    """
    Turn a parsed template into a catalog service definition.

    Args:
        doc: Parsed template document.
        name: Template name; becomes the service name.
        tenant: Tenant UUID the service id is derived from.

    Raises:
        ParseError: If the template carries no broker metadata or no plans.
    """
    metadata = doc.get("Metadata") if isinstance(doc.get("Metadata"), dict) else {}
    meta = metadata.get(BROKER_METADATA_KEY)
    if not isinstance(meta, dict):
        raise ParseError(f"template {name} has no {BROKER_METADATA_KEY} metadata")
    plans = meta.get("ServicePlans")
    if not isinstance(plans, dict) or not plans:
        raise ParseError(f"template {name} defines no ServicePlans")

    service_id = service_uuid(tenant, name)
    parameters = doc.get("Parameters") if isinstance(doc.get("Parameters"), dict) else {}
    description = str(doc.get("Description") or meta.get("LongDescription") or name)

    return ServiceDefinition(
        id=service_id,
        name=name,
        description=description,
        tags=tuple(str(t) for t in meta.get("Tags") or ()),
        requires=tuple(str(r) for r in meta.get("Requires") or ()),
        bindable=bool(meta.get("Bindable", True)),
        plan_updatable=bool(meta.get("PlanUpdatable", False)),
        plans=_plans(service_id, plans, parameters),
        dashboard_client=_dashboard_client(meta.get("DashboardClient")),
        metadata={v: meta[k] for k, v in _METADATA_FIELDS.items() if meta.get(k)},
    )
