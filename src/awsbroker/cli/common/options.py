"""Common CLI options for the CLI.

Every broker option can come from a flag, an ``AWSBROKER_*`` environment
variable or the ``--config`` YAML file, in that order of precedence.
"""

import typer

ConfigOpt = typer.Option(
    None,
    "--config",
    "-c",
    envvar="AWSBROKER_CONFIG",
    exists=True,
    dir_okay=False,
    help="YAML options file (keyid, secretkey, profile, tablename, s3bucket, ...)",
)

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    envvar="AWSBROKER_PROFILE",
    help="AWS shared-config profile",
)

KeyIdOpt = typer.Option(
    None,
    "--key-id",
    envvar="AWSBROKER_KEY_ID",
    help="AWS access key id (requires --secret-key)",
    show_default=False,
)

SecretKeyOpt = typer.Option(
    None,
    "--secret-key",
    envvar="AWSBROKER_SECRET_KEY",
    help="AWS secret access key",
    show_default=False,
)

RegionOpt = typer.Option(
    None,
    "--region",
    "-r",
    envvar="AWSBROKER_REGION",
    help="Region the broker provisions into",
)

BrokerIdOpt = typer.Option(
    None,
    "--broker-id",
    envvar="AWSBROKER_BROKER_ID",
    help="Broker id; one account can host several brokers",
)

TableNameOpt = typer.Option(
    None,
    "--table-name",
    envvar="AWSBROKER_TABLE_NAME",
    help="DynamoDB table holding broker state",
)

BucketOpt = typer.Option(
    None,
    "--s3-bucket",
    envvar="AWSBROKER_S3_BUCKET",
    help="Bucket holding the service templates",
)

KeyPrefixOpt = typer.Option(
    None,
    "--s3-key",
    envvar="AWSBROKER_S3_KEY",
    help="Key prefix of the templates inside the bucket",
)

BucketRegionOpt = typer.Option(
    None,
    "--s3-region",
    envvar="AWSBROKER_S3_REGION",
    help="Region of the template bucket",
)

FilterOpt = typer.Option(
    None,
    "--template-filter",
    envvar="AWSBROKER_TEMPLATE_FILTER",
    help="Suffix a key must end with to be a template",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log at DEBUG level",
)

JsonOpt = typer.Option(
    False,
    "--json",
    help="Print JSON instead of a table",
)

YesOpt = typer.Option(
    False,
    "--yes",
    "-y",
    help="Don't ask for confirmation",
)

