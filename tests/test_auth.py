from __future__ import annotations

import pytest
from botocore.exceptions import ClientError, ProfileNotFound

from awsbroker.core import auth
from awsbroker.core.auth import build_role_arn, get_session
from awsbroker.core.errors import IdentityError


def test_build_role_arn_defaults_to_broker_account():
    arn = build_role_arn({"target_role_name": "worker"}, "123456654321")
    assert arn == "arn:aws:iam::123456654321:role/worker"


def test_build_role_arn_prefers_target_account():
    params = {"target_role_name": "worker", "target_account_id": "000000000000"}
    assert build_role_arn(params, "123456654321") == "arn:aws:iam::000000000000:role/worker"


def test_build_role_arn_without_role_name_keeps_format():
    assert build_role_arn({}, "123456654321") == "arn:aws:iam::123456654321:role/"


class _Session:
    """boto3.Session stand-in that records how it was built."""

    created: list[dict] = []
    assume_error: Exception | None = None

    def __init__(self, **kwargs):
        if kwargs.get("profile_name") == "missing":
            raise ProfileNotFound(profile="missing")
        self.kwargs = kwargs
        _Session.created.append(kwargs)

    def client(self, name, region_name=None):
        session = self

        class _Sts:
            def assume_role(self, RoleArn, RoleSessionName):
                if _Session.assume_error is not None:
                    raise _Session.assume_error
                session.assumed = (RoleArn, RoleSessionName)
                return {
                    "Credentials": {
                        "AccessKeyId": "ASIA",
                        "SecretAccessKey": "secret",
                        "SessionToken": "token",
                    }
                }

        assert name == "sts"
        return _Sts()


@pytest.fixture
def fake_boto(monkeypatch):
    _Session.created = []
    _Session.assume_error = None
    monkeypatch.setattr(auth.boto3, "Session", _Session)
    return _Session


def test_get_session_uses_static_keys(fake_boto):
    session = get_session("AKIA", "secret", "eu-west-1", "", None, {})

    assert session.kwargs == {
        "aws_access_key_id": "AKIA",
        "aws_secret_access_key": "secret",
        "region_name": "eu-west-1",
    }


def test_get_session_uses_profile_without_keys(fake_boto):
    session = get_session(None, None, "us-east-1", "", "dev", {})
    assert session.kwargs == {"profile_name": "dev", "region_name": "us-east-1"}


def test_get_session_unknown_profile_is_identity_error(fake_boto):
    with pytest.raises(IdentityError, match="profile 'missing'"):
        get_session(None, None, "us-east-1", "", "missing", {})


def test_get_session_assumes_target_role(fake_boto):
    session = get_session(
        None, None, "us-east-1", "123456654321", None, {"target_role_name": "worker"}
    )

    base, assumed = fake_boto.created
    assert base == {"region_name": "us-east-1"}
    assert assumed == {
        "aws_access_key_id": "ASIA",
        "aws_secret_access_key": "secret",
        "aws_session_token": "token",
        "region_name": "us-east-1",
    }
    assert session.kwargs is assumed


def test_get_session_assume_role_failure_is_identity_error(fake_boto):
    fake_boto.assume_error = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "nope"}}, "AssumeRole"
    )
    with pytest.raises(IdentityError, match="arn:aws:iam::123456654321:role/worker"):
        get_session(None, None, "us-east-1", "123456654321", None, {"target_role_name": "worker"})
