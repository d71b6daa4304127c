from __future__ import annotations

import json
import uuid

import pytest

from awsbroker.core.adapters.dynamodb import DynamoDbDataStore
from awsbroker.core.errors import NotFoundError
from awsbroker.core.models import ServiceBinding, ServiceInstance
from awsbroker.core.templates import build_service_definition, load_template
from stubs import BROKER_ID, SQS_TEMPLATE, StubDynamo


@pytest.fixture
def ddb():
    return StubDynamo()


@pytest.fixture
def data_store(ddb, tenant):
    return DynamoDbDataStore(ddb, "awssb", tenant, BROKER_ID)


def test_service_definition_round_trip(data_store, tenant):
    service = build_service_definition(load_template(SQS_TEMPLATE), "sqs", tenant)

    data_store.put_service_definition(service)

    assert data_store.get_service_definition(service.id) == service


def test_item_layout(data_store, ddb, tenant):
    data_store.put_service_instance(
        ServiceInstance(
            id="inst-1", service_id="s", plan_id="p", params={"A": "1"}, stack_id="arn"
        )
    )

    item = ddb.items[("inst-1", str(tenant))]
    assert ddb.tables == {"awssb"}
    assert item["type"] == {"S": "instance"}
    assert item["brokerid"] == {"S": BROKER_ID}
    assert json.loads(item["value"]["S"])["stack_id"] == "arn"


def test_instance_and_binding_lifecycle(data_store):
    instance = ServiceInstance(id="inst-1", service_id="s", plan_id="p", stack_id="arn")
    binding = ServiceBinding(id="bind-1", instance_id="inst-1", credentials={"url": "x"})

    data_store.put_service_instance(instance)
    data_store.put_service_binding(binding)

    assert data_store.get_service_instance("inst-1") == instance
    assert data_store.get_service_binding("bind-1") == binding

    data_store.delete_service_binding("bind-1")
    data_store.delete_service_instance("inst-1")

    assert data_store.get_service_binding("bind-1") is None
    assert data_store.get_service_instance("inst-1") is None


def test_get_with_wrong_record_type_is_none(data_store):
    data_store.put_service_binding(ServiceBinding(id="same-id", instance_id="i"))

    assert data_store.get_service_instance("same-id") is None


def test_records_are_partitioned_by_tenant(ddb, tenant):
    mine = DynamoDbDataStore(ddb, "awssb", tenant, BROKER_ID)
    theirs = DynamoDbDataStore(ddb, "awssb", uuid.uuid4(), BROKER_ID)

    mine.put_param("color", "blue")

    with pytest.raises(NotFoundError):
        theirs.get_param("color")


def test_params(data_store):
    with pytest.raises(NotFoundError, match="param color not found"):
        data_store.get_param("color")

    data_store.put_param("color", "blue")
    data_store.put_param("color", "green")

    assert data_store.get_param("color") == "green"
