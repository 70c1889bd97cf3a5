"""Deployment outputs read from the service's CloudFormation stack."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

import boto3
from botocore.exceptions import ClientError

from .exceptions import DeploymentDataError
from .naming import (
    ACCESS_KEY_OUTPUT,
    SECRET_KEY_OUTPUT,
    lambda_version_output_id,
)

logger = logging.getLogger(__name__)


class DeploymentOutputs(Mapping[str, str]):
    """Read-only mapping of stack output key to value."""

    def __init__(self, outputs: Mapping[str, str], stack_name: str | None = None) -> None:
        self._outputs = dict(outputs)
        self.stack_name = stack_name

    def __getitem__(self, key: str) -> str:
        return self._outputs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._outputs)

    def __len__(self) -> int:
        return len(self._outputs)

    def __repr__(self) -> str:
        return f"DeploymentOutputs(stack_name={self.stack_name!r}, keys={sorted(self)})"

    @property
    def access_key(self) -> str | None:
        return self._outputs.get(ACCESS_KEY_OUTPUT)

    @property
    def secret_key(self) -> str | None:
        return self._outputs.get(SECRET_KEY_OUTPUT)

    def require_credentials(self) -> tuple[str, str]:
        """Return the gateway principal's access/secret key pair.

        Raises:
            DeploymentDataError: If either output is missing.
        """
        missing = [k for k in (ACCESS_KEY_OUTPUT, SECRET_KEY_OUTPUT) if not self._outputs.get(k)]
        if missing:
            raise DeploymentDataError(
                "Event Gateway Access Key or Secret Key not found in outputs",
                stack_name=self.stack_name,
                missing=missing,
            )
        return self._outputs[ACCESS_KEY_OUTPUT], self._outputs[SECRET_KEY_OUTPUT]

    def function_arn(self, name: str) -> str:
        """Return the versioned ARN output for function ``name``.

        Raises:
            DeploymentDataError: If the stack has no such output.
        """
        key = lambda_version_output_id(name)
        arn = self._outputs.get(key)
        if not arn:
            raise DeploymentDataError(
                f'No ARN output for function "{name}"',
                stack_name=self.stack_name,
                missing=[key],
            )
        return arn


def parse_outputs(stack: dict[str, Any]) -> dict[str, str]:
    """Collect ``OutputKey -> OutputValue`` pairs from a described stack."""
    return {
        o["OutputKey"]: o["OutputValue"]
        for o in stack.get("Outputs", [])
        if o.get("OutputKey") and o.get("OutputValue")
    }


def fetch_stack_outputs(
    stack_name: str,
    region: str | None = None,
    endpoint_url: str | None = None,
    client: Any | None = None,
) -> DeploymentOutputs:
    """Describe ``stack_name`` and return its outputs.

    Args:
        stack_name: CloudFormation stack name (``<service>-<stage>``).
        region: AWS region.
        endpoint_url: AWS endpoint URL (e.g., LocalStack).
        client: Optional boto3 CloudFormation client (injected for testing).

    Raises:
        DeploymentDataError: If the stack cannot be described.
    """
    if client is None:
        kwargs: dict[str, Any] = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        client = boto3.client("cloudformation", **kwargs)

    try:
        response = client.describe_stacks(StackName=stack_name)
    except ClientError as e:
        raise DeploymentDataError(
            f"Unable to fetch CloudFormation stack information: {e}",
            stack_name=stack_name,
        ) from e

    stacks = response.get("Stacks", [])
    if not stacks:
        raise DeploymentDataError(
            "Unable to fetch CloudFormation stack information", stack_name=stack_name
        )

    outputs = parse_outputs(stacks[-1])
    logger.debug("Stack %s has %d output(s)", stack_name, len(outputs))
    return DeploymentOutputs(outputs, stack_name=stack_name)
