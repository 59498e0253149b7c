"""Audit events emitted by the gateway.

An event carries the tenant, the actor and a flat ``meta`` dict of
primitives: counts, comma-separated type names, durations.  PII values,
mapping tables and prompt text never go in ``meta``; non-primitive meta
values are rejected outright.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol, Union

import structlog

MetaValue = Union[str, int, float, bool, None]


class AuditLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class AuditEvent:
    event: str
    tenant_id: str
    actor_id: str | None = None
    meta: dict[str, MetaValue] = field(default_factory=dict)
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        for key, value in self.meta.items():
            if value is not None and not isinstance(value, (str, int, float, bool)):
                raise TypeError(
                    f"audit meta '{key}' must be a primitive, got {type(value).__name__}"
                )


class AuditSink(Protocol):
    def emit(self, level: AuditLevel, event: AuditEvent) -> None: ...


class StructlogAuditSink:
    """Default sink: one structlog line per event."""

    def __init__(self, logger_name: str = "rgpd_gateway.audit") -> None:
        self._log = structlog.get_logger(logger_name)

    def emit(self, level: AuditLevel, event: AuditEvent) -> None:
        log = self._log.warning if level is AuditLevel.WARNING else self._log.info
        log(
            event.event,
            tenant_id=event.tenant_id,
            actor_id=event.actor_id,
            at=event.at.isoformat(),
            **event.meta,
        )


class MemoryAuditSink:
    """Keeps events in a list."""

    def __init__(self) -> None:
        self.records: list[tuple[AuditLevel, AuditEvent]] = []

    def emit(self, level: AuditLevel, event: AuditEvent) -> None:
        self.records.append((level, event))

    @property
    def events(self) -> list[AuditEvent]:
        return [e for _, e in self.records]

    def find(self, name: str) -> AuditEvent | None:
        return next((e for e in self.events if e.event == name), None)

    def clear(self) -> None:
        self.records.clear()
