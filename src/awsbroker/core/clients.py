"""Client factory: one producer function per AWS service.

Each producer turns a boto3 session into the client the broker uses for
that service. Producers are independent so tests (and alternative
deployments) can replace any of them without touching the others.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import boto3

from awsbroker.core.adapters.cloudformation import CfnClient
from awsbroker.core.adapters.parameterstore import ParameterStore
from awsbroker.core.adapters.s3templates import S3Client


def new_cfn(session: boto3.Session) -> CfnClient:
    return CfnClient(session.client("cloudformation"))


def new_s3(session: boto3.Session) -> S3Client:
    return S3Client(session.client("s3"))


def new_ddb(session: boto3.Session) -> Any:
    return session.client("dynamodb")


def new_ssm(session: boto3.Session) -> ParameterStore:
    return ParameterStore(session.client("ssm"))


def new_sts(session: boto3.Session) -> Any:
    return session.client("sts")


@dataclass(frozen=True)
class AwsClients:
    """Producers for every backing service, keyed by service."""

    new_cfn: Callable[[Any], CfnClient]
    new_s3: Callable[[Any], S3Client]
    new_ddb: Callable[[Any], Any]
    new_ssm: Callable[[Any], ParameterStore]
    new_sts: Callable[[Any], Any]


def default_clients() -> AwsClients:
    """Return producers bound to real boto3 clients."""
    return AwsClients(
        new_cfn=new_cfn,
        new_s3=new_s3,
        new_ddb=new_ddb,
        new_ssm=new_ssm,
        new_sts=new_sts,
    )
