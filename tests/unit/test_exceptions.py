"""Tests for the exception hierarchy."""

import pytest

from sls_eventgateway.exceptions import (
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


@pytest.mark.parametrize(
    "exc",
    [
        ConfigurationError("x"),
        DeploymentDataError("x"),
        RemoteCallError("subscribe", "x"),
        StateStoreError("/tmp/s.json", "x"),
    ],
)
def test_all_inherit_from_base(exc):
    assert isinstance(exc, EventGatewayError)


def test_specific_exceptions_categories():
    assert issubclass(InvalidArnError, DeploymentDataError)
    assert issubclass(InvalidEventDataError, ConfigurationError)
    assert issubclass(GatewayNotFoundError, RemoteCallError)
    assert issubclass(FunctionAlreadyRegisteredError, RemoteCallError)


def test_remote_call_error_message():
    exc = RemoteCallError("delete_function", "server error", target="fid", status_code=503)
    assert str(exc) == "Event Gateway delete_function failed for fid (HTTP 503): server error"


def test_deployment_data_error_context():
    exc = DeploymentDataError("Outputs missing", stack_name="svc-dev", missing=["A", "B"])
    assert str(exc) == "Outputs missing [stack=svc-dev; missing=A, B]"
    assert exc.missing == ["A", "B"]
