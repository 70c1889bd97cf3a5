"""Unit test fixtures."""

import copy
import itertools

import pytest
from moto import mock_aws

from sls_eventgateway.config import GatewayConfig
from sls_eventgateway.exceptions import (
    FunctionAlreadyRegisteredError,
    GatewayNotFoundError,
    RemoteCallError,
)
from sls_eventgateway.outputs import DeploymentOutputs
from sls_eventgateway.state import StateStore

HELLO_ARN = "arn:aws:lambda:us-east-1:123456789012:function:svc-dev-hello:3"
WORLD_ARN = "arn:aws:lambda:us-east-1:123456789012:function:svc-dev-world:12"

SERVICE = {
    "service": "svc",
    "provider": {"name": "aws", "stage": "dev", "region": "us-east-1"},
    "custom": {"eventgateway": {"subdomain": "acme", "apikey": "key-123"}},
    "functions": {
        "hello": {
            "handler": "handler.hello",
            "events": [
                {"eventgateway": {"event": "http", "path": "hello"}},
                {"eventgateway": {"event": "user.created", "cors": True}},
            ],
        },
        "world": {
            "handler": "handler.world",
            "events": [{"eventgateway": {"event": "http", "path": "/world", "method": "post"}}],
        },
        "plain": {"handler": "handler.plain"},
    },
}


class FakeGateway:
    """In-memory gateway client that records every call.

    Set ``fail_on`` to ``(operation, target)`` to make that call raise, and
    ``missing`` to IDs the gateway reports as not found. When ``store`` is
    given, the persisted state is captured before each call.
    """

    def __init__(self, store=None, register_is_upsert=False):
        self.store = store
        self.register_is_upsert = register_is_upsert
        self.calls = []
        self.snapshots = []
        self.fail_on = None
        self.missing = set()
        self.conflicts = set()
        self._ids = itertools.count(1)

    def _record(self, operation, target):
        if self.store is not None:
            self.snapshots.append(self.store.load())
        self.calls.append((operation, target))
        if self.fail_on == (operation, target):
            raise RemoteCallError(operation, "boom", target=target, status_code=500)

    def register_function(self, function_id, provider):
        self._record("register_function", function_id)
        if function_id in self.conflicts:
            raise FunctionAlreadyRegisteredError(
                "register_function", "exists", target=function_id, status_code=409
            )

    def delete_function(self, function_id):
        self._record("delete_function", function_id)
        self._maybe_missing("delete_function", function_id)

    def subscribe(self, subscription):
        self._record("subscribe", subscription["functionId"])
        return f"sub-{next(self._ids)}"

    def unsubscribe(self, subscription_id):
        self._record("unsubscribe", subscription_id)
        self._maybe_missing("unsubscribe", subscription_id)

    def emit(self, event, data):
        self._record("emit", event)

    def _maybe_missing(self, operation, target):
        if target in self.missing:
            raise GatewayNotFoundError(operation, "not found", target=target, status_code=404)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def mock_cloudformation(aws_credentials):
    """Mock CloudFormation for tests."""
    with mock_aws():
        yield


@pytest.fixture
def service_dict():
    return copy.deepcopy(SERVICE)


@pytest.fixture
def gateway_config():
    return GatewayConfig(subdomain="acme", apikey="key-123")


@pytest.fixture
def outputs():
    return DeploymentOutputs(
        {
            "EventGatewayUserAccessKey": "AKIAEXAMPLE",
            "EventGatewayUserSecretKey": "secret",
            "HelloLambdaFunctionQualifiedArn": HELLO_ARN,
            "WorldLambdaFunctionQualifiedArn": WORLD_ARN,
            "ServiceEndpoint": "https://example.com",
        },
        stack_name="svc-dev",
    )


@pytest.fixture
def store(tmp_path):
    return StateStore(path=str(tmp_path / ".egstate.json"))


@pytest.fixture
def gateway(store):
    return FakeGateway(store=store)


@pytest.fixture
def make_gateway(store):
    """Factory for additional recording gateways sharing the same store."""

    def _make(**kwargs):
        return FakeGateway(store=store, **kwargs)

    return _make
