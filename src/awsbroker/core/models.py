"""Core domain models for the service broker.

These models describe catalog entries, provisioned instances and bindings
in a plain, immutable form. They are free of boto3 types so they can be
cached, persisted as JSON and rendered by any frontend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True)
class BucketDetailsRequest:
    """Where to look for templates: bucket, key prefix and name filter."""

    bucket: str
    prefix: str
    filter: str

    def template_key(self, name: str) -> str:
        """Return the object key of the template called ``name``."""
        return f"{self.prefix}{name}{self.filter}"


@dataclass(frozen=True)
class ServiceLastUpdate:
    """A template found in S3 together with its modification marker."""

    name: str
    last_modified: datetime | str | None = None


@dataclass(frozen=True)
class ServiceNeedsUpdate:
    """
    Listing cache entry for one template.

    Attributes:
        name: Template (service) name.
        update: True while the catalog entry still has to be (re)built.
    """

    name: str
    update: bool


@dataclass(frozen=True)
class DashboardClient:
    """OSB dashboard client descriptor."""

    id: str = ""
    secret: str = ""
    redirect_uri: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "secret": self.secret, "redirect_uri": self.redirect_uri}


@dataclass(frozen=True)
class ServicePlan:
    """
    A plan of a catalog service.

    Attributes:
        id: Deterministic plan id (derived from service id and plan name).
        name: Plan name as written in the template.
        description: Short plan description.
        free: Whether the plan is free of charge.
        metadata: Free-form OSB plan metadata (display name, costs, ...).
        prescribed: Template parameter values fixed by this plan.
        schemas: OSB schema block describing user-settable parameters.
    """

    id: str
    name: str
    description: str = ""
    free: bool = True
    metadata: Mapping[str, Any] = field(default_factory=dict)
    prescribed: Mapping[str, Any] = field(default_factory=dict)
    schemas: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "free": self.free,
            "metadata": dict(self.metadata),
            "prescribed": dict(self.prescribed),
            "schemas": dict(self.schemas),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServicePlan:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            free=bool(data.get("free", True)),
            metadata=dict(data.get("metadata") or {}),
            prescribed=dict(data.get("prescribed") or {}),
            schemas=dict(data.get("schemas") or {}),
        )


@dataclass(frozen=True)
class ServiceDefinition:
    """
    Full catalog definition of a service, as offered to the platform.

    Attributes:
        id: Deterministic service id (derived from tenant UUID and name).
        name: Service name (the template name in S3).
        description: Short description of the service.
        tags: Catalog tags.
        requires: OSB permissions the service requires.
        bindable: Whether instances can be bound.
        plan_updatable: Whether instances may switch plans.
        plans: Ordered list of plans.
        dashboard_client: Optional dashboard client descriptor.
        metadata: Free-form service metadata (display name, urls, ...).
    """

    id: str
    name: str
    description: str = ""
    tags: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    bindable: bool = True
    plan_updatable: bool = False
    plans: tuple[ServicePlan, ...] = ()
    dashboard_client: DashboardClient | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def plan(self, plan_id: str) -> ServicePlan | None:
        """Return the plan with the given id (or None)."""
        for plan in self.plans:
            if plan.id == plan_id:
                return plan
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "requires": list(self.requires),
            "bindable": self.bindable,
            "plan_updateable": self.plan_updatable,
            "plans": [p.to_dict() for p in self.plans],
            "dashboard_client": self.dashboard_client.to_dict()
            if self.dashboard_client
            else None,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServiceDefinition:
        dash = data.get("dashboard_client")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            tags=tuple(data.get("tags") or ()),
            requires=tuple(data.get("requires") or ()),
            bindable=bool(data.get("bindable", True)),
            plan_updatable=bool(data.get("plan_updateable", False)),
            plans=tuple(ServicePlan.from_dict(p) for p in data.get("plans") or ()),
            dashboard_client=DashboardClient(**dash) if dash else None,
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class ServiceInstance:
    """A provisioned service instance and the stack backing it."""

    id: str
    service_id: str
    plan_id: str
    params: Mapping[str, str] = field(default_factory=dict)
    stack_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "service_id": self.service_id,
            "plan_id": self.plan_id,
            "params": dict(self.params),
            "stack_id": self.stack_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServiceInstance:
        return cls(
            id=str(data["id"]),
            service_id=str(data.get("service_id") or ""),
            plan_id=str(data.get("plan_id") or ""),
            params=dict(data.get("params") or {}),
            stack_id=str(data.get("stack_id") or ""),
        )


@dataclass(frozen=True)
class ServiceBinding:
    """A binding of an instance; credentials come from the stack outputs."""

    id: str
    instance_id: str
    credentials: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "instance_id": self.instance_id,
            "credentials": dict(self.credentials),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServiceBinding:
        return cls(
            id=str(data["id"]),
            instance_id=str(data.get("instance_id") or ""),
            credentials=dict(data.get("credentials") or {}),
        )


class OperationState(str, Enum):
    """
    OSB last-operation states.

    Values:
        IN_PROGRESS: The stack operation is still running.
        SUCCEEDED: The stack reached its target state.
        FAILED: The stack operation failed or rolled back.
    """

    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class LastOperation:
    """Result of polling the stack behind an instance."""

    state: OperationState
    description: str = ""
