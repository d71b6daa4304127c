from __future__ import annotations

import typer
from botocore.exceptions import BotoCoreError, ClientError

from awsbroker.cli.common.context import BrokerAppContext, build_broker_context
from awsbroker.cli.common.exits import die, exit_from_exc
from awsbroker.cli.common.options import JsonOpt
from awsbroker.cli.common.output import out
from awsbroker.core.catalog import update_catalog
from awsbroker.core.errors import BrokerError
from awsbroker.core.models import ServiceDefinition
from awsbroker.core.provisioning import get_catalog

catalog_app = typer.Typer(
    help="Inspect and synchronize the service catalog.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@catalog_app.callback()
def _init(ctx: typer.Context):
    """Build the broker (initial catalog sync) for catalog commands."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    with out.status("Synchronizing catalog..."):
        appctx = build_broker_context(ctx.obj)
    ctx.call_on_close(appctx.broker.close)
    ctx.obj = appctx


def _services_or_exit(appctx: BrokerAppContext) -> list[ServiceDefinition]:
    try:
        return get_catalog(appctx.broker)
    except (BrokerError, ClientError, BotoCoreError) as exc:
        exit_from_exc(exc, message=f"Cannot read catalog: {exc}")


@catalog_app.command("list")
def catalog_list(ctx: typer.Context, as_json: bool = JsonOpt):
    """List the services the broker offers."""
    appctx: BrokerAppContext = ctx.obj
    services = _services_or_exit(appctx)

    if as_json:
        out.json([s.to_dict() for s in services])
        return
    if not services:
        out.warn(
            f"No templates matching '*{appctx.broker.template_filter}' under "
            f"s3://{appctx.broker.s3_bucket}/{appctx.broker.s3_key}"
        )
        return
    out.services_table(services)


@catalog_app.command("show")
def catalog_show(
    ctx: typer.Context,
    service: str = typer.Argument(..., help="Service name or id"),
    as_json: bool = JsonOpt,
):
    """Show one service and its plans."""
    appctx: BrokerAppContext = ctx.obj
    services = _services_or_exit(appctx)

    match = next((s for s in services if service in (s.id, s.name)), None)
    if match is None:
        die(f"Service '{service}' is not in the catalog", code=2)

    if as_json:
        out.json(match.to_dict())
        return

    out.header(match.name)
    out.kv(
        {
            "id": match.id,
            "description": match.description,
            "bindable": match.bindable,
            "tags": ", ".join(match.tags) or "-",
            "template": appctx.broker.bucket_details.template_key(match.name),
        }
    )
    out.plans_table(match.plans, title=f"Plans of {match.name}")


@catalog_app.command("sync")
def catalog_sync(ctx: typer.Context):
    """Synchronize the catalog with the template bucket now."""
    appctx: BrokerAppContext = ctx.obj
    try:
        with out.status("Synchronizing catalog..."):
            appctx.broker.sync_catalog(update_catalog)
    except (BrokerError, ClientError, BotoCoreError) as exc:
        exit_from_exc(exc, message=str(exc))
    services = _services_or_exit(appctx)
    out.success(f"Catalog synchronized: {len(services)} service(s)")
