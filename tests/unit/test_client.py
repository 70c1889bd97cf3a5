"""Tests for the Event Gateway HTTP client."""

import json

import httpx
import pytest

from sls_eventgateway.client import EventGatewayClient
from sls_eventgateway.exceptions import (
    FunctionAlreadyRegisteredError,
    GatewayNotFoundError,
    RemoteCallError,
)


def _client(gateway_config, handler, **kwargs):
    return EventGatewayClient(gateway_config, transport=httpx.MockTransport(handler), **kwargs)


class TestEventGatewayClient:
    """Tests for request shapes and error mapping."""

    def test_register_function(self, gateway_config):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        with _client(gateway_config, handler) as client:
            client.register_function("fid", {"type": "awslambda", "arn": "arn"})

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://config.eventgateway-dev.io/v1/functions"
        assert request.headers["Authorization"] == "key-123"
        assert json.loads(request.content) == {
            "functionId": "fid",
            "provider": {"type": "awslambda", "arn": "arn"},
        }

    def test_subscribe_returns_id(self, gateway_config):
        def handler(request):
            assert request.url.path == "/v1/subscriptions"
            return httpx.Response(201, json={"subscriptionId": "sub-1"})

        with _client(gateway_config, handler) as client:
            assert client.subscribe({"functionId": "fid", "event": "e", "path": "/"}) == "sub-1"

    def test_subscribe_without_id_fails(self, gateway_config):
        with _client(gateway_config, lambda r: httpx.Response(200, json={})) as client:
            with pytest.raises(RemoteCallError, match="subscriptionId"):
                client.subscribe({"functionId": "fid", "event": "e", "path": "/"})

    @pytest.mark.parametrize("body", [{"subscriptionId": None}, {"subscriptionId": ""}])
    def test_subscribe_with_empty_id_fails(self, gateway_config, body):
        with _client(gateway_config, lambda r: httpx.Response(201, json=body)) as client:
            with pytest.raises(RemoteCallError, match="empty subscriptionId") as exc_info:
                client.subscribe({"functionId": "fid", "event": "e", "path": "/"})
        assert exc_info.value.target == "fid"

    def test_delete_and_unsubscribe_paths(self, gateway_config):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(204)

        with _client(gateway_config, handler) as client:
            client.delete_function("fid")
            client.unsubscribe("sub-1")

        assert seen == [("DELETE", "/v1/functions/fid"), ("DELETE", "/v1/subscriptions/sub-1")]

    def test_emit(self, gateway_config):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(202)

        with _client(gateway_config, handler) as client:
            client.emit("user.created", {"id": 1})

        request = seen[0]
        assert request.url.host == "acme.eventgateway-dev.io"
        assert request.headers["Event"] == "user.created"
        assert json.loads(request.content) == {"id": 1}

    def test_not_found(self, gateway_config):
        with _client(gateway_config, lambda r: httpx.Response(404, text="nope")) as client:
            with pytest.raises(GatewayNotFoundError) as exc_info:
                client.unsubscribe("sub-1")
        assert exc_info.value.status_code == 404
        assert exc_info.value.target == "sub-1"

    def test_register_conflict(self, gateway_config):
        with _client(gateway_config, lambda r: httpx.Response(409)) as client:
            with pytest.raises(FunctionAlreadyRegisteredError):
                client.register_function("fid", {})

    def test_server_error(self, gateway_config):
        with _client(gateway_config, lambda r: httpx.Response(500, text="down")) as client:
            with pytest.raises(RemoteCallError) as exc_info:
                client.delete_function("fid")
        assert not isinstance(exc_info.value, GatewayNotFoundError)
        assert "HTTP 500" in str(exc_info.value)

    def test_transport_error(self, gateway_config):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with _client(gateway_config, handler) as client:
            with pytest.raises(RemoteCallError) as exc_info:
                client.emit("e", {})
        assert exc_info.value.status_code is None

    def test_upsert_flag(self, gateway_config):
        with _client(gateway_config, lambda r: httpx.Response(200), register_is_upsert=True) as c:
            assert c.register_is_upsert is True
