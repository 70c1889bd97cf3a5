"""Post-deploy entry point: configure the Event Gateway for a deployed service.

Runs in this order, stopping at the first failure:
1. Gateway configuration (subdomain, API key)
2. Stack outputs (function ARNs, gateway principal keys)
3. Teardown of previously created subscriptions and functions
4. Registration and subscription of the declared functions
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sls_eventgateway.client import EventGatewayClient
from sls_eventgateway.config import GatewayConfig
from sls_eventgateway.outputs import DeploymentOutputs, fetch_stack_outputs
from sls_eventgateway.state import StateStore

from .applier import ApplyResult, reconcile
from .differ import Change, compute_plan
from .manifest import ServiceManifest

logger = logging.getLogger(__name__)


@dataclass
class ConfigureResult:
    """Outcome of a full post-deploy configuration run."""

    result: ApplyResult
    endpoint_url: str


def _load_outputs(
    manifest: ServiceManifest,
    outputs: DeploymentOutputs | None,
    endpoint_url: str | None,
    cfn_client: Any | None,
) -> DeploymentOutputs:
    if outputs is not None:
        return outputs
    return fetch_stack_outputs(
        manifest.stack_name,
        region=manifest.region,
        endpoint_url=endpoint_url,
        client=cfn_client,
    )


def plan_event_gateway(
    manifest: ServiceManifest,
    *,
    state_path: str | None = None,
    apikey: str | None = None,
    outputs: DeploymentOutputs | None = None,
    endpoint_url: str | None = None,
    cfn_client: Any | None = None,
) -> list[Change]:
    """Compute the changes a configure run would make, without calling the gateway."""
    config = GatewayConfig.from_dict(manifest.eventgateway, apikey=apikey)
    deployment = _load_outputs(manifest, outputs, endpoint_url, cfn_client)
    previous = StateStore.open(state_path).load()
    return compute_plan(
        previous,
        manifest.functions_with_events(),
        deployment,
        config.subdomain,
        manifest.region,
    )


def configure_event_gateway(
    manifest: ServiceManifest,
    *,
    state_path: str | None = None,
    apikey: str | None = None,
    outputs: DeploymentOutputs | None = None,
    endpoint_url: str | None = None,
    cfn_client: Any | None = None,
    gateway_client: EventGatewayClient | None = None,
    register_is_upsert: bool = False,
    max_workers: int = 1,
) -> ConfigureResult:
    """Reconcile the gateway with the functions declared in ``manifest``.

    Args:
        manifest: Parsed serverless.yml.
        state_path: State file location (default ``./.egstate.json``).
        apikey: API key used when serverless.yml declares none.
        outputs: Pre-fetched stack outputs; described from CloudFormation
            when omitted.
        endpoint_url: AWS endpoint URL (e.g., LocalStack).
        cfn_client: Optional boto3 CloudFormation client (injected for testing).
        gateway_client: Optional gateway client (injected for testing).
        register_is_upsert: Capability flag for the default client.
        max_workers: Concurrent teardown calls per phase.

    Raises:
        ConfigurationError: Missing gateway configuration.
        DeploymentDataError: Missing stack or outputs.
        RemoteCallError: A gateway call failed; completed work is persisted.
        StateStoreError: State could not be read or written.
    """
    config = GatewayConfig.from_dict(manifest.eventgateway, apikey=apikey)
    deployment = _load_outputs(manifest, outputs, endpoint_url, cfn_client)
    store = StateStore.open(state_path)

    owns_client = gateway_client is None
    client = gateway_client or EventGatewayClient(config, register_is_upsert=register_is_upsert)
    try:
        result = reconcile(
            config,
            deployment,
            manifest.functions_with_events(),
            store,
            client,
            region=manifest.region,
            max_workers=max_workers,
        )
    finally:
        if owns_client:
            client.close()

    logger.info("Event Gateway endpoint: %s", config.events_api)
    return ConfigureResult(result=result, endpoint_url=config.events_api)
