"""Event Gateway reconciliation engine."""

from .applier import ApplyResult, apply_changes, reconcile
from .differ import Change, compute_plan
from .handler import ConfigureResult, configure_event_gateway, plan_event_gateway
from .manifest import EventBinding, FunctionEventDeclaration, ServiceManifest

__all__ = [
    "ApplyResult",
    "Change",
    "ConfigureResult",
    "EventBinding",
    "FunctionEventDeclaration",
    "ServiceManifest",
    "apply_changes",
    "compute_plan",
    "configure_event_gateway",
    "plan_event_gateway",
    "reconcile",
]
