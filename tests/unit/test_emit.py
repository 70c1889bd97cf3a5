"""Tests for the event emission helper."""

from unittest.mock import MagicMock

import pytest

from sls_eventgateway.emit import emit_event
from sls_eventgateway.exceptions import ConfigurationError, InvalidEventDataError


def test_emit_parses_and_sends():
    client = MagicMock()
    payload = emit_event(client, "user.created", '{"id": 1}')
    assert payload == {"id": 1}
    client.emit.assert_called_once_with("user.created", {"id": 1})


def test_invalid_json_sends_nothing():
    client = MagicMock()
    with pytest.raises(InvalidEventDataError) as exc_info:
        emit_event(client, "user.created", "{id: 1}")
    assert isinstance(exc_info.value, ConfigurationError)
    client.emit.assert_not_called()
