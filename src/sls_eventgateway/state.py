"""Local record of the gateway objects created by previous runs.

The state file is the only source of truth for teardown: anything not listed
here is never touched on the gateway. It is rewritten after every single
remote mutation, so at most one call separates it from the gateway's view.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from typing import Any

from .exceptions import StateStoreError
from .naming import resolve_state_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationState:
    """Function and subscription IDs currently believed to exist remotely."""

    functions: tuple[str, ...] = ()
    subscriptions: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.functions and not self.subscriptions

    def with_function(self, function_id: str) -> ReconciliationState:
        return ReconciliationState(self.functions + (function_id,), self.subscriptions)

    def with_subscription(self, subscription_id: str) -> ReconciliationState:
        return ReconciliationState(self.functions, self.subscriptions + (subscription_id,))

    def without_function(self, function_id: str) -> ReconciliationState:
        return ReconciliationState(
            tuple(f for f in self.functions if f != function_id), self.subscriptions
        )

    def without_subscription(self, subscription_id: str) -> ReconciliationState:
        return ReconciliationState(
            self.functions, tuple(s for s in self.subscriptions if s != subscription_id)
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {"functions": list(self.functions), "subscriptions": list(self.subscriptions)}

    @classmethod
    def from_dict(cls, d: Any) -> ReconciliationState:
        """Validate and build from the decoded JSON document.

        Raises:
            ValueError: If the document does not have the expected shape.
        """
        if not isinstance(d, dict):
            raise ValueError("expected a JSON object")

        values: dict[str, tuple[str, ...]] = {}
        for key in ("functions", "subscriptions"):
            items = d.get(key, [])
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                raise ValueError(f"'{key}' must be a list of strings")
            values[key] = tuple(items)
        return cls(**values)


@dataclass
class StateStore:
    """
    JSON file store for ``ReconciliationState``.

    Each ``save`` writes a complete document to a temporary sibling file and
    atomically replaces the target. Writes are serialized with a lock so
    concurrent teardown workers never interleave.
    """

    path: str
    _lock: threading.Lock = field(init=False, repr=False, default_factory=threading.Lock)

    @classmethod
    def open(cls, path: str | None = None) -> StateStore:
        """Open the store at ``path``, ``$EG_STATE_PATH`` or ``./.egstate.json``."""
        return cls(path=resolve_state_path(path))

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> ReconciliationState:
        """Load the persisted state, or an empty state if there is none.

        Raises:
            StateStoreError: If the file cannot be read or is corrupt.
        """
        if not self.exists():
            logger.debug("No state file at %s, starting empty", self.path)
            return ReconciliationState()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return ReconciliationState.from_dict(data)
        except OSError as e:
            raise StateStoreError(self.path, f"cannot read: {e}") from e
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            raise StateStoreError(self.path, f"corrupt state: {e}") from e

    def save(self, state: ReconciliationState) -> None:
        """Replace the persisted state with ``state``.

        Raises:
            StateStoreError: If the file cannot be written.
        """
        payload = json.dumps(state.to_dict())
        directory = os.path.dirname(self.path) or "."
        with self._lock:
            tmp_path = None
            try:
                fd, tmp_path = tempfile.mkstemp(
                    dir=directory, prefix=".egstate-", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, self.path)
            except OSError as e:
                if tmp_path and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise StateStoreError(self.path, f"cannot write: {e}") from e
        logger.debug(
            "Saved state: %d function(s), %d subscription(s)",
            len(state.functions),
            len(state.subscriptions),
        )

    def clear(self) -> bool:
        """Delete the state file. Returns True if a file was removed."""
        with self._lock:
            try:
                os.unlink(self.path)
            except FileNotFoundError:
                return False
            except OSError as e:
                raise StateStoreError(self.path, f"cannot delete: {e}") from e
        return True
