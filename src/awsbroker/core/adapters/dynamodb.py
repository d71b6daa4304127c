from __future__ import annotations

import json
import uuid
from typing import Any, Callable, TypeVar

from awsbroker.core.errors import NotFoundError
from awsbroker.core.models import ServiceBinding, ServiceDefinition, ServiceInstance

T = TypeVar("T")

_PARAM_PREFIX = "param:"


class DynamoDbDataStore:
    """
    DataStore backed by one DynamoDB table.

    Each record is an item keyed by ``id`` (hash) and ``userid`` (range, the
    tenant UUID) with the record kind in ``type`` and its JSON in ``value``.
    """

    def __init__(
        self, client: Any, table_name: str, account_uuid: uuid.UUID, broker_id: str
    ) -> None:
        self.client = client
        self.table_name = table_name
        self.userid = str(account_uuid)
        self.broker_id = broker_id

    def _key(self, record_id: str) -> dict[str, Any]:
        return {"id": {"S": record_id}, "userid": {"S": self.userid}}

    def _put(self, record_id: str, kind: str, value: Any) -> None:
        item = self._key(record_id)
        item.update(
            {
                "type": {"S": kind},
                "brokerid": {"S": self.broker_id},
                "value": {"S": json.dumps(value, sort_keys=True, default=str)},
            }
        )
        self.client.put_item(TableName=self.table_name, Item=item)

    def _get(self, record_id: str, kind: str) -> Any | None:
        resp = self.client.get_item(
            TableName=self.table_name, Key=self._key(record_id), ConsistentRead=True
        )
        item = resp.get("Item")
        if not item or item.get("type", {}).get("S") != kind:
            return None
        return json.loads(item["value"]["S"])

    def _get_as(self, record_id: str, kind: str, build: Callable[[Any], T]) -> T | None:
        data = self._get(record_id, kind)
        return build(data) if data is not None else None

    def _delete(self, record_id: str) -> None:
        self.client.delete_item(TableName=self.table_name, Key=self._key(record_id))

    def put_service_definition(self, sd: ServiceDefinition) -> None:
        self._put(sd.id, "service", sd.to_dict())

    def get_service_definition(self, service_id: str) -> ServiceDefinition | None:
        return self._get_as(service_id, "service", ServiceDefinition.from_dict)

    def put_service_instance(self, si: ServiceInstance) -> None:
        self._put(si.id, "instance", si.to_dict())

    def get_service_instance(self, instance_id: str) -> ServiceInstance | None:
        return self._get_as(instance_id, "instance", ServiceInstance.from_dict)

    def delete_service_instance(self, instance_id: str) -> None:
        self._delete(instance_id)

    def put_service_binding(self, sb: ServiceBinding) -> None:
        self._put(sb.id, "binding", sb.to_dict())

    def get_service_binding(self, binding_id: str) -> ServiceBinding | None:
        return self._get_as(binding_id, "binding", ServiceBinding.from_dict)

    def delete_service_binding(self, binding_id: str) -> None:
        self._delete(binding_id)

    def get_param(self, name: str) -> str:
        value = self._get(_PARAM_PREFIX + name, "param")
        if value is None:
            raise NotFoundError(f"param {name} not found")
        return str(value)

    def put_param(self, name: str, value: str) -> None:
        self._put(_PARAM_PREFIX + name, "param", value)
