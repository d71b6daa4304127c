"""Application context management for the CLI."""

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from awsbroker.cli.common.exits import die
from awsbroker.core.adapters.dynamodb import DynamoDbDataStore
from awsbroker.core.auth import get_session
from awsbroker.core.broker import AwsBroker, new_aws_broker
from awsbroker.core.catalog import update_catalog
from awsbroker.core.clients import default_clients
from awsbroker.core.config import BrokerOptions, load_options, validate_options
from awsbroker.core.errors import BrokerError
from awsbroker.core.identity import get_account_id, tenant_uuid
from awsbroker.core.poller import poll_update


@dataclass
class IdentityAppContext:
    """Application context holding the resolved AWS identity of the broker."""

    options: BrokerOptions
    session: Any
    account_id: str
    tenant: uuid.UUID

    def data_store(self) -> DynamoDbDataStore:
        """Return the DynamoDB data store of this broker's tenant partition."""
        client = default_clients().new_ddb(self.session)
        return DynamoDbDataStore(
            client, self.options.table_name, self.tenant, self.options.broker_id
        )


@dataclass
class BrokerAppContext:
    """Application context holding a fully initialized broker."""

    options: BrokerOptions
    broker: AwsBroker


def resolve_options(config: Path | None, **overrides: Any) -> BrokerOptions:
    """Load the options file (if any) and apply flag/env overrides on top."""
    try:
        base = load_options(config) if config else BrokerOptions()
        options = base.merged(**overrides)
        validate_options(options)
    except BrokerError as exc:
        die(str(exc), code=2)
    return options


def build_identity_context(options: BrokerOptions) -> IdentityAppContext:
    """Resolve the session and account identity without starting a broker."""
    try:
        session = get_session(
            options.key_id, options.secret_key, options.region, "", options.profile, {}
        )
        account_id = get_account_id(default_clients().new_sts(session))
    except (BrokerError, ClientError, BotoCoreError) as exc:
        die(str(exc), code=1)
    return IdentityAppContext(
        options=options,
        session=session,
        account_id=account_id,
        tenant=tenant_uuid(account_id, options.broker_id),
    )


def build_broker_context(options: BrokerOptions) -> BrokerAppContext:
    """Build a broker (initial catalog sync included) for catalog commands.

    Args:
        options: Resolved broker options.

    Returns:
        BrokerAppContext: Context with the initialized broker.
    """
    try:
        broker = new_aws_broker(
            options,
            get_session,
            default_clients(),
            get_account_id,
            update_catalog,
            poll_update,
        )
    except (BrokerError, ClientError, BotoCoreError) as exc:
        die(str(exc), code=1)
    return BrokerAppContext(options=options, broker=broker)
