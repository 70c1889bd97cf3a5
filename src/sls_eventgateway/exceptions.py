"""Exceptions for sls-eventgateway."""

# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class EventGatewayError(Exception):
    """
    Base exception for all sls-eventgateway errors.

    All exceptions raised by this library inherit from this class,
    allowing callers to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Category Exceptions
# ---------------------------------------------------------------------------


class ConfigurationError(EventGatewayError):
    """
    Raised when the Event Gateway configuration is missing or invalid.

    Always raised before any remote call is attempted.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class DeploymentDataError(EventGatewayError):
    """
    Raised when the deployment's stack or outputs are missing required data.

    Always raised before the teardown or creation phases begin.
    """

    def __init__(
        self,
        message: str,
        *,
        stack_name: str | None = None,
        missing: list[str] | None = None,
    ) -> None:
        self.stack_name = stack_name
        self.missing = missing or []
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        context = []
        if self.stack_name:
            context.append(f"stack={self.stack_name}")
        if self.missing:
            context.append(f"missing={', '.join(self.missing)}")
        if context:
            return f"{message} [{'; '.join(context)}]"
        return message


class RemoteCallError(EventGatewayError):
    """
    Raised when a call to the Event Gateway fails.

    Attributes:
        operation: Client operation that failed (e.g., "subscribe")
        target: Function or subscription ID the call was about, if any
        status_code: HTTP status returned by the gateway, if any
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        *,
        target: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.operation = operation
        self.reason = reason
        self.target = target
        self.status_code = status_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Event Gateway {self.operation} failed"
        if self.target:
            msg += f" for {self.target}"
        if self.status_code is not None:
            msg += f" (HTTP {self.status_code})"
        return f"{msg}: {self.reason}"


class StateStoreError(EventGatewayError):
    """Raised when the local reconciliation state cannot be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"State file {path}: {reason}")


# ---------------------------------------------------------------------------
# Specific Exceptions
# ---------------------------------------------------------------------------


class InvalidArnError(DeploymentDataError):
    """Raised when a Lambda ARN has fewer segments than a function ARN needs."""

    def __init__(self, arn: str) -> None:
        self.arn = arn
        super().__init__(f"Malformed Lambda ARN: {arn!r}")


class InvalidEventDataError(ConfigurationError):
    """Raised when event data to emit is not valid JSON."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Event data must be valid JSON: {reason}", field="data")


class GatewayNotFoundError(RemoteCallError):
    """Raised when the gateway does not know the function or subscription."""

    pass


class FunctionAlreadyRegisteredError(RemoteCallError):
    """Raised when registering a function ID the gateway already holds."""

    pass
