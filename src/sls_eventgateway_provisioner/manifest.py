"""serverless.yml parsing for Event Gateway declarations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sls_eventgateway.naming import DEFAULT_STAGE, normalize_path, stack_name

DEFAULT_REGION = "us-east-1"
DEFAULT_METHOD = "GET"
HTTP_EVENT = "http"


@dataclass(frozen=True)
class EventBinding:
    """A single ``eventgateway`` event entry on a function.

    ``method`` is only set for ``http`` events. It defaults to ``GET`` and is
    upper-cased, so ``post`` and ``POST`` declare the same subscription.
    """

    event: str
    path: str = "/"
    cors: bool | None = None
    method: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> EventBinding:
        event = d["event"]
        if not isinstance(event, str):
            raise ValueError(f"eventgateway 'event' must be a string, got {event!r}")
        path = d.get("path")
        if path is not None and not isinstance(path, str):
            raise ValueError(f"eventgateway 'path' must be a string, got {path!r}")
        method = None
        if event == HTTP_EVENT:
            method = str(d.get("method") or DEFAULT_METHOD).upper()
        return cls(
            event=event,
            path=normalize_path(path),
            cors=d.get("cors"),
            method=method,
        )


@dataclass(frozen=True)
class FunctionEventDeclaration:
    """A function and its active Event Gateway bindings."""

    name: str
    bindings: tuple[EventBinding, ...] = ()

    @classmethod
    def from_dict(cls, name: str, d: dict[str, Any] | None) -> FunctionEventDeclaration:
        bindings = []
        for entry in (d or {}).get("events") or []:
            if not isinstance(entry, dict):
                continue
            decl = entry.get("eventgateway")
            # Entries without an event name are not active bindings
            if not isinstance(decl, dict) or not decl.get("event"):
                continue
            bindings.append(EventBinding.from_dict(decl))
        return cls(name=name, bindings=tuple(bindings))

    @property
    def has_events(self) -> bool:
        return bool(self.bindings)


@dataclass(frozen=True)
class ServiceManifest:
    """The parts of serverless.yml the reconciler needs."""

    service: str
    stage: str = DEFAULT_STAGE
    region: str = DEFAULT_REGION
    eventgateway: dict[str, Any] | None = None
    functions: tuple[FunctionEventDeclaration, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(
        cls,
        d: dict[str, Any],
        stage: str | None = None,
        region: str | None = None,
    ) -> ServiceManifest:
        service = d.get("service")
        if isinstance(service, dict):
            service = service.get("name")
        if not service:
            raise ValueError("'service' is required in serverless.yml")

        provider = d.get("provider") or {}
        custom = d.get("custom") or {}
        declared = d.get("functions") or {}
        if not isinstance(declared, dict):
            raise ValueError("'functions' must be a mapping of function name to definition")
        functions = tuple(
            FunctionEventDeclaration.from_dict(name, decl) for name, decl in declared.items()
        )

        return cls(
            service=str(service),
            stage=stage or provider.get("stage") or DEFAULT_STAGE,
            region=region or provider.get("region") or DEFAULT_REGION,
            eventgateway=custom.get("eventgateway"),
            functions=functions,
        )

    @classmethod
    def from_yaml(
        cls, yaml_str: str, stage: str | None = None, region: str | None = None
    ) -> ServiceManifest:
        import yaml

        data = yaml.safe_load(yaml_str)
        if not isinstance(data, dict):
            raise ValueError("serverless.yml must contain a mapping")
        return cls.from_dict(data, stage=stage, region=region)

    @classmethod
    def from_file(
        cls, path: str, stage: str | None = None, region: str | None = None
    ) -> ServiceManifest:
        with open(path, encoding="utf-8") as f:
            return cls.from_yaml(f.read(), stage=stage, region=region)

    @property
    def stack_name(self) -> str:
        return stack_name(self.service, self.stage)

    def functions_with_events(self) -> list[FunctionEventDeclaration]:
        """Declarations with at least one active binding, in declaration order."""
        return [f for f in self.functions if f.has_events]
