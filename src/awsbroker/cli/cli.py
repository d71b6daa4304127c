"""CLI application for the AWS service broker."""

from pathlib import Path

import typer

from awsbroker.cli.commands.catalog import catalog_app
from awsbroker.cli.commands.identity import role_arn, whoami
from awsbroker.cli.commands.params import params_app
from awsbroker.cli.common.context import resolve_options
from awsbroker.cli.common.logsetup import configure_logging
from awsbroker.cli.common.options import (
    BrokerIdOpt,
    BucketOpt,
    BucketRegionOpt,
    ConfigOpt,
    FilterOpt,
    KeyIdOpt,
    KeyPrefixOpt,
    ProfileOpt,
    RegionOpt,
    SecretKeyOpt,
    TableNameOpt,
    VerboseOpt,
)

app = typer.Typer(
    help="awsbroker - CloudFormation-backed service broker",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = ConfigOpt,
    profile: str | None = ProfileOpt,
    key_id: str | None = KeyIdOpt,
    secret_key: str | None = SecretKeyOpt,
    region: str | None = RegionOpt,
    broker_id: str | None = BrokerIdOpt,
    table_name: str | None = TableNameOpt,
    s3_bucket: str | None = BucketOpt,
    s3_key: str | None = KeyPrefixOpt,
    s3_region: str | None = BucketRegionOpt,
    template_filter: str | None = FilterOpt,
    verbose: bool = VerboseOpt,
):
    """Resolve broker options shared by every command."""
    configure_logging(verbose)
    ctx.obj = resolve_options(
        config,
        profile=profile,
        key_id=key_id,
        secret_key=secret_key,
        region=region,
        broker_id=broker_id,
        table_name=table_name,
        s3_bucket=s3_bucket,
        s3_key=s3_key,
        s3_region=s3_region,
        template_filter=template_filter,
    )


app.add_typer(catalog_app, name="catalog")
app.add_typer(params_app, name="params")
app.command("whoami")(whoami)
app.command("role-arn")(role_arn)


if __name__ == "__main__":
    app()
