"""
sls-eventgateway: Event Gateway configuration for Serverless services.

Keeps a hosted Event Gateway's registered functions and subscriptions in step
with a deployed service:
- Deterministic FunctionIds derived from Lambda ARNs
- Local state file recording every object created on the gateway
- Teardown and recreation on every deploy, persisted call by call

Example:
    from sls_eventgateway_provisioner import ServiceManifest, configure_event_gateway

    manifest = ServiceManifest.from_file("serverless.yml")
    outcome = configure_event_gateway(manifest)
    print(outcome.endpoint_url)
"""

from importlib.metadata import PackageNotFoundError, version

from .client import EventGatewayClient
from .config import GatewayConfig
from .emit import emit_event
from .exceptions import (
    ConfigurationError,
    DeploymentDataError,
    EventGatewayError,
    FunctionAlreadyRegisteredError,
    GatewayNotFoundError,
    InvalidArnError,
    InvalidEventDataError,
    RemoteCallError,
    StateStoreError,
)
from .naming import function_id, stable_arn
from .outputs import DeploymentOutputs, fetch_stack_outputs
from .state import ReconciliationState, StateStore

try:
    __version__ = version("sls-eventgateway")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    "__version__",
    "ConfigurationError",
    "DeploymentDataError",
    "DeploymentOutputs",
    "EventGatewayClient",
    "EventGatewayError",
    "FunctionAlreadyRegisteredError",
    "GatewayConfig",
    "GatewayNotFoundError",
    "InvalidArnError",
    "InvalidEventDataError",
    "ReconciliationState",
    "RemoteCallError",
    "StateStore",
    "StateStoreError",
    "emit_event",
    "fetch_stack_outputs",
    "function_id",
    "stable_arn",
]
