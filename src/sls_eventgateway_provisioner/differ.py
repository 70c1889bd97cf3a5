"""Plan computation for Event Gateway reconciliation.

Compares the previous reconciliation state against the declared functions
to produce the ordered list of gateway calls: every tracked subscription and
function is torn down, then every declared function is registered and
subscribed again.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sls_eventgateway.naming import function_id, stable_arn, subscription_path
from sls_eventgateway.outputs import DeploymentOutputs
from sls_eventgateway.state import ReconciliationState

from .manifest import HTTP_EVENT, FunctionEventDeclaration

PROVIDER_TYPE = "awslambda"

UNSUBSCRIBE = "unsubscribe"
DELETE_FUNCTION = "delete_function"
REGISTER_FUNCTION = "register_function"
SUBSCRIBE = "subscribe"

TEARDOWN_ACTIONS = (UNSUBSCRIBE, DELETE_FUNCTION)


@dataclass(frozen=True)
class Change:
    """A single gateway call to make."""

    action: str  # "unsubscribe", "delete_function", "register_function", "subscribe"
    target: str  # subscription ID or FunctionId
    function: str | None = None  # declared function name, for creation changes
    data: dict[str, Any] | None = None  # request body for register/subscribe

    @property
    def is_teardown(self) -> bool:
        return self.action in TEARDOWN_ACTIONS

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action, "target": self.target, "function": self.function}


def build_subscription(
    fid: str, subdomain: str, event: str, path: str, cors: bool | None, method: str | None
) -> dict[str, Any]:
    """Build the subscribe request body for one binding."""
    subscription: dict[str, Any] = {
        "functionId": fid,
        "event": event,
        "path": subscription_path(subdomain, path),
    }
    if cors is not None:
        subscription["cors"] = cors
    if event == HTTP_EVENT:
        subscription["method"] = method or "GET"
    return subscription


def compute_plan(
    previous: ReconciliationState,
    declarations: Iterable[FunctionEventDeclaration],
    outputs: DeploymentOutputs,
    subdomain: str,
    region: str,
) -> list[Change]:
    """Compute the ordered changes that bring the gateway to the declared set.

    Args:
        previous: State persisted by the last run.
        declarations: Declared functions; those without bindings are skipped.
        outputs: Stack outputs holding ARNs and the gateway principal's keys.
        subdomain: Gateway subdomain prefixed to every subscription path.
        region: AWS region of the Lambda functions.

    Returns:
        Changes in execution order: unsubscribes, function deletions, then
        each function's registration followed by its subscriptions.

    Raises:
        DeploymentDataError: If credentials or a function ARN are missing,
            or an ARN is malformed. Raised before anything is planned.
    """
    access_key, secret_key = outputs.require_credentials()

    creations: list[Change] = []
    for decl in declarations:
        if not decl.has_events:
            continue
        arn = stable_arn(outputs.function_arn(decl.name))
        fid = function_id(arn)
        creations.append(
            Change(
                action=REGISTER_FUNCTION,
                target=fid,
                function=decl.name,
                data={
                    "functionId": fid,
                    "provider": {
                        "type": PROVIDER_TYPE,
                        "arn": arn,
                        "region": region,
                        "awsAccessKeyId": access_key,
                        "awsSecretAccessKey": secret_key,
                    },
                },
            )
        )
        for binding in decl.bindings:
            creations.append(
                Change(
                    action=SUBSCRIBE,
                    target=fid,
                    function=decl.name,
                    data=build_subscription(
                        fid, subdomain, binding.event, binding.path, binding.cors, binding.method
                    ),
                )
            )

    changes = [Change(action=UNSUBSCRIBE, target=s) for s in previous.subscriptions]
    changes.extend(Change(action=DELETE_FUNCTION, target=f) for f in previous.functions)
    changes.extend(creations)
    return changes
