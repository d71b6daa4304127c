"""Logging setup for the CLI."""

import logging

from rich.logging import RichHandler

from awsbroker.cli.common.output import err_console


def configure_logging(verbose: bool = False) -> None:
    """Route the ``awsbroker`` loggers to stderr through rich."""
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=verbose)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root = logging.getLogger("awsbroker")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False

    # botocore stays at WARNING even with --verbose.
    logging.getLogger("botocore").setLevel(logging.WARNING)
