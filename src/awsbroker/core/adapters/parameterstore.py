from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError

from awsbroker.core.errors import NotFoundError

SSM_PREFIX = "ssm:"


class ParameterStore:
    """Adapter around the boto3 SSM client for reading (secure) parameters."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def get_parameter(self, name: str) -> str:
        """Return the decrypted value of parameter ``name``."""
        try:
            resp = self.client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ParameterNotFound":
                raise NotFoundError(f"ssm parameter {name} not found") from exc
            raise
        return str(resp["Parameter"]["Value"])

    def resolve(self, value: str) -> str:
        """Resolve ``ssm:<name>`` references; other values pass through."""
        if isinstance(value, str) and value.startswith(SSM_PREFIX):
            return self.get_parameter(value[len(SSM_PREFIX) :])
        return value
