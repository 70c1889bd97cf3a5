"""Identifier and naming utilities.

This module derives every name the reconciler computes rather than looks up:
- FunctionId: SHA-256 of the unversioned Lambda ARN
- Subscription paths scoped under the gateway subdomain
- CloudFormation output logical IDs, matching the Serverless Framework
"""

import hashlib
import os

from .exceptions import InvalidArnError

ARN_SEGMENTS = 7
"""Colon-delimited segments of an unqualified Lambda function ARN."""

DEFAULT_STATE_PATH = ".egstate.json"
"""State file name, relative to the working directory."""

STATE_PATH_ENV_VAR = "EG_STATE_PATH"
"""Environment variable for overriding the state file location."""

DEFAULT_STAGE = "dev"

ACCESS_KEY_OUTPUT = "EventGatewayUserAccessKey"
SECRET_KEY_OUTPUT = "EventGatewayUserSecretKey"


def stable_arn(arn: str) -> str:
    """
    Strip the version or alias qualifier from a Lambda ARN.

    ``arn:aws:lambda:us-east-1:123:function:hello:7`` becomes
    ``arn:aws:lambda:us-east-1:123:function:hello`` so the gateway always
    invokes the latest version.

    Raises:
        InvalidArnError: If the ARN has fewer than 7 segments
    """
    parts = arn.split(":")
    if len(parts) < ARN_SEGMENTS:
        raise InvalidArnError(arn)
    return ":".join(parts[:ARN_SEGMENTS])


def function_id(arn: str) -> str:
    """Derive the deterministic gateway FunctionId for a Lambda ARN."""
    return hashlib.sha256(stable_arn(arn).encode("utf-8")).hexdigest()


def normalize_path(path: str | None) -> str:
    """Return ``path`` as an absolute path, defaulting to ``/``."""
    if not path:
        return "/"
    if not path.startswith("/"):
        return "/" + path
    return path


def subscription_path(subdomain: str, path: str | None) -> str:
    """Scope a binding path under the gateway subdomain."""
    return f"/{subdomain}{normalize_path(path)}"


def normalized_function_name(name: str) -> str:
    """Normalize a function name the way Serverless builds logical IDs."""
    name = name.replace("-", "Dash").replace("_", "Underscore")
    return name[:1].upper() + name[1:]


def lambda_version_output_id(name: str) -> str:
    """Logical ID of the stack output holding the function's versioned ARN."""
    return f"{normalized_function_name(name)}LambdaFunctionQualifiedArn"


def stack_name(service: str, stage: str | None = None) -> str:
    """Serverless stack name: ``<service>-<stage>``."""
    return f"{service}-{stage or DEFAULT_STAGE}"


def resolve_state_path(path: str | None) -> str:
    """Resolve the state file path from explicit arg, env var, or default.

    Resolution order: ``path`` arg → ``EG_STATE_PATH`` env var →
    ``.egstate.json`` in the current working directory.
    """
    resolved = path or os.environ.get(STATE_PATH_ENV_VAR) or DEFAULT_STATE_PATH
    return os.path.abspath(resolved)
