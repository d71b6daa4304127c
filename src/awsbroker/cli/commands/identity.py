from __future__ import annotations

import typer

from awsbroker.cli.common.context import build_identity_context
from awsbroker.cli.common.output import out
from awsbroker.core.auth import build_role_arn
from awsbroker.core.config import BrokerOptions


def whoami(ctx: typer.Context):
    """Show the AWS account and tenant the broker runs as."""
    options: BrokerOptions = ctx.obj
    with out.status("Resolving AWS identity..."):
        identity = build_identity_context(options)
    out.kv(
        {
            "account": identity.account_id,
            "broker id": options.broker_id,
            "tenant": identity.tenant,
            "region": options.region,
            "table": options.table_name,
        }
    )


def role_arn(
    ctx: typer.Context,
    role_name: str = typer.Option(..., "--role-name", help="Role to assume"),
    account_id: str | None = typer.Option(
        None, "--account-id", help="Target account (defaults to the broker's account)"
    ),
):
    """Print the role ARN a provision request would assume."""
    if account_id:
        default_account = account_id
    else:
        default_account = build_identity_context(ctx.obj).account_id
    typer.echo(build_role_arn({"target_role_name": role_name}, default_account))
