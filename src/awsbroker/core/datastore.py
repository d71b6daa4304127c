"""Persistence port for broker state.

The broker reads and writes service definitions, instances, bindings and
broker parameters only through the ``DataStore`` interface. Records are
scoped to one tenant partition (see ``Db.account_uuid``); the concrete
store decides how that partition is represented.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Protocol

from awsbroker.core.models import ServiceBinding, ServiceDefinition, ServiceInstance


class DataStore(Protocol):
    """Interface for persisted broker state used by the core domain."""

    def put_service_definition(self, sd: ServiceDefinition) -> None:
        """Persist a catalog service definition."""
        ...

    def get_service_definition(self, service_id: str) -> ServiceDefinition | None:
        """Return a persisted service definition, or None."""
        ...

    def put_service_instance(self, si: ServiceInstance) -> None:
        """Persist a service instance."""
        ...

    def get_service_instance(self, instance_id: str) -> ServiceInstance | None:
        """Return a persisted service instance, or None."""
        ...

    def delete_service_instance(self, instance_id: str) -> None:
        """Remove a service instance record."""
        ...

    def put_service_binding(self, sb: ServiceBinding) -> None:
        """Persist a service binding."""
        ...

    def get_service_binding(self, binding_id: str) -> ServiceBinding | None:
        """Return a persisted service binding, or None."""
        ...

    def delete_service_binding(self, binding_id: str) -> None:
        """Remove a service binding record."""
        ...

    def get_param(self, name: str) -> str:
        """Return a broker parameter value or raise NotFoundError."""
        ...

    def put_param(self, name: str, value: str) -> None:
        """Store a broker parameter value."""
        ...


@dataclass
class Db:
    """Tenant identity plus the data store that holds its records."""

    account_id: str
    account_uuid: uuid.UUID
    broker_id: str
    data_store_port: DataStore
