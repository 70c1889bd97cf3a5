"""Applies reconciliation changes to the Event Gateway.

Every successful gateway call is followed by a state write before the next
call is made, so after a crash the state file lags the gateway by at most
one call.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from itertools import groupby
from typing import Any

from sls_eventgateway.client import EventGatewayClient
from sls_eventgateway.config import GatewayConfig
from sls_eventgateway.exceptions import (
    FunctionAlreadyRegisteredError,
    GatewayNotFoundError,
)
from sls_eventgateway.outputs import DeploymentOutputs
from sls_eventgateway.state import ReconciliationState, StateStore

from .differ import (
    DELETE_FUNCTION,
    REGISTER_FUNCTION,
    SUBSCRIBE,
    UNSUBSCRIBE,
    Change,
    compute_plan,
)
from .manifest import FunctionEventDeclaration

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of applying changes."""

    state: ReconciliationState = field(default_factory=ReconciliationState)
    unsubscribed: int = 0
    deleted: int = 0
    registered: int = 0
    subscribed: int = 0
    already_gone: list[str] = field(default_factory=list)
    already_registered: list[str] = field(default_factory=list)
    # (function name, FunctionId) and (function name, event) in creation order
    registrations: list[tuple[str, str]] = field(default_factory=list)
    subscriptions_created: list[tuple[str, str]] = field(default_factory=list)


class _StateWriter:
    """Linearizes read-modify-write of the state across worker threads."""

    def __init__(self, store: StateStore, state: ReconciliationState) -> None:
        self._store = store
        self._lock = threading.Lock()
        self.state = state

    def update(
        self,
        mutate: Callable[[ReconciliationState], ReconciliationState],
        on_saved: Callable[[], None] | None = None,
    ) -> None:
        with self._lock:
            new_state = mutate(self.state)
            self._store.save(new_state)
            self.state = new_state
            if on_saved is not None:
                on_saved()


def _phase(change: Change) -> str:
    return change.action if change.is_teardown else "create"


def apply_changes(
    changes: list[Change],
    store: StateStore,
    client: EventGatewayClient,
    state: ReconciliationState | None = None,
    max_workers: int = 1,
) -> ApplyResult:
    """Apply a list of changes, persisting state after each gateway call.

    Changes run in phases in the order given. Within a teardown phase up to
    ``max_workers`` calls run concurrently; creation is always sequential so a
    function is registered before its subscriptions.

    Args:
        changes: Ordered changes from ``compute_plan``.
        store: State store written after every successful call.
        client: Event Gateway client.
        state: Starting state; loaded from ``store`` when omitted.
        max_workers: Concurrent calls allowed per teardown phase.

    Returns:
        ApplyResult with counts and the final persisted state.

    Raises:
        RemoteCallError: On the first failed call. Remaining changes in the
            phase and all later phases are skipped; state reflects every
            call that succeeded.
        StateStoreError: If state cannot be persisted.
    """
    writer = _StateWriter(store, state if state is not None else store.load())
    result = ApplyResult(state=writer.state)

    for phase, group in groupby(changes, key=_phase):
        batch = list(group)
        if phase == "create":
            for change in batch:
                _apply_create(client, writer, result, change)
        else:
            _run_teardown(
                batch, max_workers, lambda c: _apply_teardown(client, writer, result, c)
            )
        result.state = writer.state

    return result


def _run_teardown(
    batch: list[Change], max_workers: int, apply: Callable[[Change], None]
) -> None:
    if max_workers <= 1 or len(batch) <= 1:
        for change in batch:
            apply(change)
        return

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(apply, change) for change in batch]
        _, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        for future in not_done:
            future.cancel()
        for future in futures:
            if not future.cancelled():
                # Re-raises the first failure once in-flight calls settle
                future.result()


def _apply_teardown(
    client: EventGatewayClient,
    writer: _StateWriter,
    result: ApplyResult,
    change: Change,
) -> None:
    try:
        if change.action == UNSUBSCRIBE:
            client.unsubscribe(change.target)
        elif change.action == DELETE_FUNCTION:
            client.delete_function(change.target)
        else:
            raise ValueError(f"Unknown teardown action: {change.action}")
        gone = False
    except GatewayNotFoundError:
        logger.warning("%s %s: already gone, dropping from state", change.action, change.target)
        gone = True

    def _count() -> None:
        if gone:
            result.already_gone.append(change.target)
        if change.action == UNSUBSCRIBE:
            result.unsubscribed += 1
        else:
            result.deleted += 1

    if change.action == UNSUBSCRIBE:
        writer.update(lambda s: s.without_subscription(change.target), _count)
    else:
        writer.update(lambda s: s.without_function(change.target), _count)


def _apply_create(
    client: EventGatewayClient,
    writer: _StateWriter,
    result: ApplyResult,
    change: Change,
) -> None:
    data: dict[str, Any] = change.data or {}

    if change.action == REGISTER_FUNCTION:
        try:
            client.register_function(change.target, data["provider"])
        except FunctionAlreadyRegisteredError:
            if client.register_is_upsert:
                raise
            logger.warning("Function %s already registered, keeping it", change.target)
            result.already_registered.append(change.target)
        writer.update(lambda s: s.with_function(change.target))
        result.registered += 1
        result.registrations.append((change.function or change.target, change.target))
        logger.info('Function "%s" registered (ID: %s)', change.function, change.target)

    elif change.action == SUBSCRIBE:
        subscription_id = client.subscribe(data)
        writer.update(lambda s: s.with_subscription(subscription_id))
        result.subscribed += 1
        result.subscriptions_created.append((change.function or "", str(data.get("event"))))
        logger.info('Function "%s" subscribed to "%s" event', change.function, data.get("event"))

    else:
        raise ValueError(f"Unknown action: {change.action}")


def reconcile(
    config: GatewayConfig,
    outputs: DeploymentOutputs,
    declarations: Iterable[FunctionEventDeclaration],
    store: StateStore,
    client: EventGatewayClient,
    *,
    region: str,
    max_workers: int = 1,
) -> ApplyResult:
    """Tear down everything tracked in ``store`` and recreate the declared set.

    Pre-flight checks (credentials, ARNs) run before any gateway call.
    """
    previous = store.load()
    changes = compute_plan(previous, declarations, outputs, config.subdomain, region)
    logger.info(
        "Reconciling: %d teardown(s), %d creation(s)",
        sum(1 for c in changes if c.is_teardown),
        sum(1 for c in changes if not c.is_teardown),
    )
    return apply_changes(changes, store, client, state=previous, max_workers=max_workers)
