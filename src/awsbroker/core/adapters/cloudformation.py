from __future__ import annotations

from typing import Any, Mapping

from botocore.exceptions import ClientError

STACK_CAPABILITIES = ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM", "CAPABILITY_AUTO_EXPAND"]


def _is_missing_stack(exc: ClientError) -> bool:
    err = exc.response.get("Error", {})
    return err.get("Code") == "ValidationError" and "does not exist" in str(
        err.get("Message") or ""
    )


class CfnClient:
    """Adapter around the boto3 CloudFormation client (stack lifecycle only)."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def create_stack(
        self,
        *,
        name: str,
        template_url: str,
        parameters: Mapping[str, Any],
        tags: Mapping[str, str],
    ) -> str:
        """Create a stack and return its StackId."""
        resp = self.client.create_stack(
            StackName=name,
            TemplateURL=template_url,
            Parameters=[
                {"ParameterKey": k, "ParameterValue": str(v)}
                for k, v in parameters.items()
            ],
            Capabilities=STACK_CAPABILITIES,
            Tags=[{"Key": k, "Value": v} for k, v in tags.items()],
        )
        stack_id = resp.get("StackId")
        if not stack_id:
            raise ValueError("CloudFormation did not return a StackId.")
        return stack_id

    def describe_stack(self, stack_id: str) -> dict[str, Any] | None:
        """Return the stack description, or None if the stack is gone."""
        try:
            resp = self.client.describe_stacks(StackName=stack_id)
        except ClientError as exc:
            if _is_missing_stack(exc):
                return None
            raise
        stacks = resp.get("Stacks") or []
        return stacks[0] if stacks else None

    def delete_stack(self, stack_id: str) -> None:
        """Request deletion of a stack."""
        self.client.delete_stack(StackName=stack_id)
