"""Authentication helpers for AWS.

This module centralizes creation of boto3 sessions for the broker and the
derivation of the role ARN used to provision into other accounts. Sessions
are built from static keys, a named profile or the default credential
chain, and can be swapped for temporary credentials of an assumed role.
"""

from __future__ import annotations

import logging
from typing import Mapping

import boto3
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from awsbroker.core.errors import IdentityError

logger = logging.getLogger(__name__)

ROLE_SESSION_NAME = "awsbroker"


def build_role_arn(params: Mapping[str, str], default_account_id: str) -> str:
    """
    Build the IAM role ARN to assume for a request.

    Args:
        params: Request parameters. ``target_role_name`` names the role,
            ``target_account_id`` optionally overrides the account.
        default_account_id: Account used when no target account is given.

    Returns:
        ARN in the form ``arn:aws:iam::<account>:role/<role-name>``.
    """
    account_id = params.get("target_account_id") or default_account_id
    role_name = params.get("target_role_name") or ""
    return f"arn:aws:iam::{account_id}:role/{role_name}"


def _base_session(
    key_id: str | None,
    secret_key: str | None,
    region: str,
    profile: str | None,
) -> boto3.Session:
    """Return a session from static keys, a profile or the default chain."""
    if key_id and secret_key:
        return boto3.Session(
            aws_access_key_id=key_id,
            aws_secret_access_key=secret_key,
            region_name=region,
        )
    try:
        if profile:
            return boto3.Session(profile_name=profile, region_name=region)
    except ProfileNotFound as exc:
        raise IdentityError(f"AWS profile '{profile}' could not be found") from exc
    return boto3.Session(region_name=region)


def assume_role_session(
    session: boto3.Session, role_arn: str, region: str
) -> boto3.Session:
    """Assume ``role_arn`` with ``session`` and return a session over the temporary credentials."""
    sts = session.client("sts", region_name=region)
    try:
        resp = sts.assume_role(RoleArn=role_arn, RoleSessionName=ROLE_SESSION_NAME)
    except (ClientError, BotoCoreError) as exc:
        raise IdentityError(f"Failed to assume role {role_arn}: {exc}") from exc
    creds = resp["Credentials"]
    logger.debug("Assumed role %s", role_arn)
    return boto3.Session(
        aws_access_key_id=creds["AccessKeyId"],
        aws_secret_access_key=creds["SecretAccessKey"],
        aws_session_token=creds["SessionToken"],
        region_name=region,
    )


def get_session(
    key_id: str | None,
    secret_key: str | None,
    region: str,
    account_id: str,
    profile: str | None,
    params: Mapping[str, str],
) -> boto3.Session:
    """
    Create the boto3 session the broker works with.

    When ``params`` carries a ``target_role_name`` the role built by
    :func:`build_role_arn` (defaulting to ``account_id``) is assumed and a
    session over its temporary credentials is returned instead.
    """
    session = _base_session(key_id, secret_key, region, profile)
    if params.get("target_role_name"):
        role_arn = build_role_arn(params, account_id)
        return assume_role_session(session, role_arn, region)
    return session
