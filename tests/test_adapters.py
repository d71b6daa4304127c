from __future__ import annotations

import pytest
from botocore.exceptions import ClientError

from awsbroker.core.adapters.cloudformation import STACK_CAPABILITIES, CfnClient
from awsbroker.core.adapters.parameterstore import ParameterStore
from awsbroker.core.adapters.s3templates import S3Client, is_bucket_access_error
from awsbroker.core.errors import BucketAccessError, NotFoundError
from stubs import StubCfnApi, StubSsmApi


def _client_error(code: str, op: str = "ListObjectsV2") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, op)


class _S3Api:
    def __init__(self, pages=None, error=None):
        self.pages = pages or []
        self.error = error
        self.paginated: list[dict] = []

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        api = self

        class _Paginator:
            def paginate(self, **kwargs):
                api.paginated.append(kwargs)
                if api.error is not None:
                    raise api.error
                yield from api.pages

        return _Paginator()

    def get_object(self, Bucket, Key):
        if self.error is not None:
            raise self.error
        return {"Key": Key}


def test_list_objects_collects_every_page():
    api = _S3Api(pages=[{"Contents": [{"Key": "a"}]}, {}, {"Contents": [{"Key": "b"}]}])

    objects = S3Client(api).list_objects("bucket", "templates/")

    assert [o["Key"] for o in objects] == ["a", "b"]
    assert api.paginated == [{"Bucket": "bucket", "Prefix": "templates/"}]


@pytest.mark.parametrize("code", ["NoSuchBucket", "AccessDenied", "AllAccessDisabled"])
def test_list_objects_bucket_errors(code):
    with pytest.raises(BucketAccessError):
        S3Client(_S3Api(error=_client_error(code))).list_objects("bucket", "")


def test_list_objects_other_errors_pass_through():
    with pytest.raises(ClientError):
        S3Client(_S3Api(error=_client_error("SlowDown"))).list_objects("bucket", "")


def test_get_object_translates_missing_bucket_only():
    with pytest.raises(BucketAccessError):
        S3Client(_S3Api(error=_client_error("NoSuchBucket", "GetObject"))).get_object("b", "k")
    with pytest.raises(ClientError):
        S3Client(_S3Api(error=_client_error("NoSuchKey", "GetObject"))).get_object("b", "k")


@pytest.mark.parametrize(
    "exc,expected",
    [
        (_client_error("404"), True),
        (_client_error("Throttling"), False),
        (BucketAccessError("x"), True),
        (RuntimeError("x"), False),
    ],
)
def test_is_bucket_access_error(exc, expected):
    assert is_bucket_access_error(exc) is expected


def test_create_stack_sends_parameters_capabilities_and_tags():
    api = StubCfnApi()

    stack_id = CfnClient(api).create_stack(
        name="s",
        template_url="https://x",
        parameters={"A": 1},
        tags={"K": "V"},
    )

    assert stack_id in api.stacks
    assert api.created == [
        {
            "StackName": "s",
            "TemplateURL": "https://x",
            "Parameters": [{"ParameterKey": "A", "ParameterValue": "1"}],
            "Capabilities": STACK_CAPABILITIES,
            "Tags": [{"Key": "K", "Value": "V"}],
        }
    ]


def test_create_stack_without_stack_id_is_an_error():
    class _Api:
        def create_stack(self, **kwargs):
            return {}

    with pytest.raises(ValueError, match="StackId"):
        CfnClient(_Api()).create_stack(name="s", template_url="u", parameters={}, tags={})


def test_describe_stack_missing_is_none():
    assert CfnClient(StubCfnApi()).describe_stack("arn:missing") is None


def test_describe_stack_other_errors_pass_through():
    class _Api:
        def describe_stacks(self, StackName):
            raise _client_error("Throttling", "DescribeStacks")

    with pytest.raises(ClientError):
        CfnClient(_Api()).describe_stack("arn")


def test_parameter_store_resolves_ssm_references():
    api = StubSsmApi({"/db/password": "s3cret"})
    store = ParameterStore(api)

    assert store.resolve("ssm:/db/password") == "s3cret"
    assert store.resolve("plain") == "plain"
    assert api.requests == [("/db/password", True)]


def test_parameter_store_missing_parameter():
    with pytest.raises(NotFoundError, match="/nope"):
        ParameterStore(StubSsmApi()).get_parameter("/nope")
