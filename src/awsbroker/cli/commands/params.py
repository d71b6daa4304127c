from __future__ import annotations

import typer
from botocore.exceptions import BotoCoreError, ClientError

from awsbroker.cli.common.context import IdentityAppContext, build_identity_context
from awsbroker.cli.common.exits import die, exit_from_exc, ok_exit
from awsbroker.cli.common.options import YesOpt
from awsbroker.cli.common.output import out
from awsbroker.core.errors import BrokerError, NotFoundError

params_app = typer.Typer(
    help="Read and write broker parameters stored in DynamoDB.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@params_app.callback()
def _init(ctx: typer.Context):
    """Resolve the broker's identity for parameter commands."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_identity_context(ctx.obj)


@params_app.command("get")
def params_get(ctx: typer.Context, name: str = typer.Argument(..., help="Parameter name")):
    """Print a stored parameter."""
    appctx: IdentityAppContext = ctx.obj
    try:
        value = appctx.data_store().get_param(name)
    except NotFoundError as exc:
        die(str(exc), code=2)
    except (BrokerError, ClientError, BotoCoreError) as exc:
        exit_from_exc(exc, message=f"Cannot read parameter '{name}': {exc}")
    typer.echo(value)


@params_app.command("set")
def params_set(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Parameter name"),
    value: str = typer.Argument(..., help="Parameter value"),
    yes: bool = YesOpt,
):
    """Store a parameter, asking before an existing value is replaced."""
    appctx: IdentityAppContext = ctx.obj
    try:
        store = appctx.data_store()
        current = store.get_param(name)
    except NotFoundError:
        current = None
    except (BrokerError, ClientError, BotoCoreError) as exc:
        exit_from_exc(exc, message=f"Cannot read parameter '{name}': {exc}")

    if current is not None and current != value and not yes:
        out.kv({"current": current, "new": value})
        if not out.confirm(f"Overwrite parameter '{name}'?"):
            ok_exit("Aborted; parameter unchanged.")

    try:
        store.put_param(name, value)
    except (BrokerError, ClientError, BotoCoreError) as exc:
        exit_from_exc(exc, message=f"Cannot store parameter '{name}': {exc}")
    out.success(f"Stored parameter '{name}'")
