"""Event Gateway configuration from the service's ``custom.eventgateway`` block."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigurationError

CONFIGURATION_API = "https://config.eventgateway-dev.io/"
EVENTS_API_TEMPLATE = "https://{subdomain}.eventgateway-dev.io"


@dataclass(frozen=True)
class GatewayConfig:
    """
    Hosted Event Gateway settings for one service.

    Attributes:
        subdomain: Tenant subdomain; also prefixes every subscription path
        apikey: API key sent to the gateway on every call
        configuration_api: Base URL for function/subscription management
    """

    subdomain: str
    apikey: str
    configuration_api: str = CONFIGURATION_API

    @property
    def events_api(self) -> str:
        return EVENTS_API_TEMPLATE.format(subdomain=self.subdomain)

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None, apikey: str | None = None) -> GatewayConfig:
        """Build from the raw ``custom.eventgateway`` mapping.

        Args:
            d: The mapping as declared in serverless.yml, or None if absent.
            apikey: Explicit API key; used only when the mapping has none.

        Raises:
            ConfigurationError: If the block, subdomain or API key is missing,
                or configurationAPI is not a string.
        """
        if not d:
            raise ConfigurationError(
                "No Event Gateway configuration provided in serverless.yml"
            )
        if not isinstance(d, dict):
            raise ConfigurationError("Event Gateway configuration must be a mapping")

        subdomain = d.get("subdomain")
        if not subdomain:
            raise ConfigurationError(
                'Required "subdomain" property is missing from Event Gateway '
                "configuration provided in serverless.yml",
                field="subdomain",
            )

        key = d.get("apikey") or apikey
        if not key:
            raise ConfigurationError(
                'Required "apikey" property is missing from Event Gateway '
                "configuration provided in serverless.yml",
                field="apikey",
            )

        configuration_api = d.get("configurationAPI") or CONFIGURATION_API
        if not isinstance(configuration_api, str):
            raise ConfigurationError(
                '"configurationAPI" must be a URL string',
                field="configurationAPI",
            )

        return cls(
            subdomain=str(subdomain),
            apikey=str(key),
            configuration_api=configuration_api,
        )
