"""HTTP client for the hosted Event Gateway.

The configuration API manages functions and subscriptions; the events API
accepts emitted events. Both authenticate with the API key passed to the
constructor.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import GatewayConfig
from .exceptions import (
    FunctionAlreadyRegisteredError,
    GatewayNotFoundError,
    RemoteCallError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class EventGatewayClient:
    """
    Sync client for Event Gateway function, subscription and event calls.

    Args:
        config: Gateway URLs and API key.
        register_is_upsert: Whether the gateway replaces an existing function
            on re-registration. When False, a conflict on register is
            tolerated by the reconciler as "already registered".
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (injected for testing).
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        register_is_upsert: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.register_is_upsert = register_is_upsert
        self._http = httpx.Client(
            headers={"Authorization": config.apikey},
            timeout=timeout,
            transport=transport,
        )
        self._config_url = config.configuration_api.rstrip("/")
        self._events_url = config.events_api.rstrip("/")

    def __enter__(self) -> EventGatewayClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def register_function(self, function_id: str, provider: dict[str, Any]) -> None:
        self._request(
            "register_function",
            "POST",
            f"{self._config_url}/v1/functions",
            target=function_id,
            json={"functionId": function_id, "provider": provider},
        )
        logger.info("Registered function %s", function_id)

    def delete_function(self, function_id: str) -> None:
        self._request(
            "delete_function",
            "DELETE",
            f"{self._config_url}/v1/functions/{function_id}",
            target=function_id,
        )
        logger.info("Deleted function %s", function_id)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, subscription: dict[str, Any]) -> str:
        """Create a subscription and return its ID."""
        response = self._request(
            "subscribe",
            "POST",
            f"{self._config_url}/v1/subscriptions",
            target=subscription.get("functionId"),
            json=subscription,
        )
        try:
            subscription_id = response.json()["subscriptionId"]
        except (ValueError, KeyError, TypeError) as e:
            raise RemoteCallError(
                "subscribe",
                f"response has no subscriptionId: {e}",
                target=subscription.get("functionId"),
                status_code=response.status_code,
            ) from e
        if subscription_id is None or subscription_id == "":
            raise RemoteCallError(
                "subscribe",
                "response has an empty subscriptionId",
                target=subscription.get("functionId"),
                status_code=response.status_code,
            )
        logger.info("Subscribed %s to %s", subscription.get("functionId"), subscription["event"])
        return str(subscription_id)

    def unsubscribe(self, subscription_id: str) -> None:
        self._request(
            "unsubscribe",
            "DELETE",
            f"{self._config_url}/v1/subscriptions/{subscription_id}",
            target=subscription_id,
        )
        logger.info("Removed subscription %s", subscription_id)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def emit(self, event: str, data: Any) -> None:
        self._request(
            "emit",
            "POST",
            f"{self._events_url}/",
            target=event,
            json=data,
            headers={"Event": event},
        )
        logger.info("Emitted event %s", event)

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        target: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteCallError(operation, str(e), target=target) from e

        if response.is_success:
            return response

        reason = response.text or response.reason_phrase
        if response.status_code == 404:
            raise GatewayNotFoundError(
                operation, reason, target=target, status_code=response.status_code
            )
        if response.status_code == 409 and operation == "register_function":
            raise FunctionAlreadyRegisteredError(
                operation, reason, target=target, status_code=response.status_code
            )
        raise RemoteCallError(operation, reason, target=target, status_code=response.status_code)
