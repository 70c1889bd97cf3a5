"""Emit a single event to the gateway's events API."""

from __future__ import annotations

import json
from typing import Any

from .client import EventGatewayClient
from .exceptions import InvalidEventDataError


def emit_event(client: EventGatewayClient, event: str, data: str) -> Any:
    """Parse ``data`` as JSON and emit it as ``event``.

    Returns:
        The decoded payload that was sent.

    Raises:
        InvalidEventDataError: If ``data`` is not valid JSON.
        RemoteCallError: If the gateway rejects the event.
    """
    try:
        payload = json.loads(data)
    except ValueError as e:
        raise InvalidEventDataError(str(e)) from e

    client.emit(event, payload)
    return payload
