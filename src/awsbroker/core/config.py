"""Broker options: defaults, YAML loading and validation."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from awsbroker.core.errors import ValidationError

DEFAULT_POLL_INTERVAL = 300

# Flat keys accepted in options files, mapped to BrokerOptions fields.
_FILE_KEYS = {
    "keyid": "key_id",
    "secretkey": "secret_key",
    "profile": "profile",
    "tablename": "table_name",
    "s3bucket": "s3_bucket",
    "s3key": "s3_key",
    "s3region": "s3_region",
    "templatefilter": "template_filter",
    "region": "region",
    "brokerid": "broker_id",
    "pollinterval": "poll_interval",
}

_REQUIRED = ("region", "broker_id", "s3_bucket", "s3_region", "table_name", "template_filter")


@dataclass(frozen=True)
class BrokerOptions:
    """Configuration captured when a broker is constructed."""

    key_id: str | None = None
    secret_key: str | None = None
    profile: str | None = None
    table_name: str = "awssb"
    s3_bucket: str = "awsservicebroker"
    s3_key: str = "templates/latest/"
    s3_region: str = "us-east-1"
    template_filter: str = "-main.yaml"
    region: str = "us-east-1"
    broker_id: str = "awsservicebroker"
    poll_interval: int = DEFAULT_POLL_INTERVAL

    def merged(self, **overrides: Any) -> BrokerOptions:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def add_trailing_slash(prefix: str) -> str:
    """Normalize a key prefix so it ends with '/' (an empty prefix stays empty)."""
    if not prefix or prefix.endswith("/"):
        return prefix
    return f"{prefix}/"


def options_from_mapping(data: Mapping[str, Any]) -> BrokerOptions:
    """Build options from a mapping using flat file keys or field names."""
    known = {f.name for f in fields(BrokerOptions)}
    values: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = str(raw_key)
        name = _FILE_KEYS.get(key.lower(), key)
        if name not in known:
            raise ValidationError(f"Unknown option '{key}'")
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            raise ValidationError(f"Option '{key}' must be a single value")
        values[name] = value if name == "poll_interval" else str(value)
    if "poll_interval" in values:
        try:
            values["poll_interval"] = int(values["poll_interval"])
        except (TypeError, ValueError) as exc:
            raise ValidationError("poll_interval must be an integer") from exc
    return BrokerOptions(**values)


def load_options(path: str | Path) -> BrokerOptions:
    """Load broker options from a YAML file."""
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
    except OSError as exc:
        raise ValidationError(f"Cannot read options file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ValidationError(f"Invalid options file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError(f"Options file {path} must contain a mapping")
    return options_from_mapping(data)


def validate_options(options: BrokerOptions) -> None:
    """Raise ValidationError for missing required values or a bad interval."""
    missing = [name for name in _REQUIRED if not str(getattr(options, name) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required option(s): {', '.join(missing)}")
    if bool(options.key_id) != bool(options.secret_key):
        raise ValidationError("key_id and secret_key must be given together")
    if options.poll_interval <= 0:
        raise ValidationError("poll_interval must be a positive number of seconds")
