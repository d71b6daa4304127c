"""Account identity resolution and tenant partitioning."""

from __future__ import annotations

import uuid
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from awsbroker.core.errors import IdentityError

_TENANT_NAMESPACE = uuid.UUID(int=0)


def get_account_id(sts_client: Any) -> str:
    """Return the AWS account id bound to the credentials of ``sts_client``."""
    try:
        resp = sts_client.get_caller_identity()
    except (ClientError, BotoCoreError) as exc:
        raise IdentityError(f"Failed to resolve AWS account: {exc}") from exc
    account_id = resp.get("Account")
    if not account_id:
        raise IdentityError("Failed to resolve AWS account: no account in response")
    return str(account_id)


def tenant_uuid(account_id: str, broker_id: str) -> uuid.UUID:
    """Derive the partition id for (account, broker); same inputs, same UUID."""
    return uuid.uuid5(_TENANT_NAMESPACE, account_id + broker_id)


def service_uuid(tenant: uuid.UUID, name: str) -> str:
    """Derive a stable service (or plan) id below a tenant (or service) id."""
    return str(uuid.uuid5(tenant, name))
