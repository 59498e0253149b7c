"""Core types."""

from __future__ import annotations
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, overload


class PIIType(str, Enum):
    """Categories of PII the gateway masks before a provider call."""
    PERSON = "PERSON"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    ADDRESS = "ADDRESS"
    SSN = "SSN"
    IBAN = "IBAN"

    def __str__(self) -> str:
        return self.value


def format_token(pii_type: PIIType, index: int) -> str:
    """Placeholder sent to the provider, e.g. ``[EMAIL_1]``."""
    return f"[{PIIType(pii_type).value}_{index}]"


@dataclass(frozen=True, slots=True)
class PIIEntity:
    """A single detected PII entity."""
    type: PIIType
    value: str = field(repr=False)   # never shown in reprs / tracebacks
    start_index: int
    end_index: int
    confidence: float = 1.0          # 0.0–1.0, regex matches are 1.0
    source: str = "regex"            # "regex" | "presidio" | "custom"


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """Entities found in one text, ordered by start_index."""
    entities: tuple[PIIEntity, ...] = ()

    @property
    def total_count(self) -> int:
        return len(self.entities)

    @property
    def detected_types(self) -> frozenset[PIIType]:
        return frozenset(e.type for e in self.entities)


@dataclass(frozen=True, slots=True)
class PIIMapping:
    """One token ↔ original value pair."""
    token: str
    original_value: str = field(repr=False)
    type: PIIType


class PIIMappings(Sequence[PIIMapping]):
    """Read-only mapping table produced by one masking pass.

    Lives for a single gateway invocation.  Any attempt to change it
    raises, and its repr only lists tokens.
    """

    __slots__ = ("_items", "_by_token")

    def __init__(self, mappings: Iterable[PIIMapping] = ()) -> None:
        items = tuple(mappings)
        object.__setattr__(self, "_items", items)
        object.__setattr__(
            self, "_by_token", MappingProxyType({m.token: m for m in items})
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("PIIMappings is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("PIIMappings is read-only")

    @overload
    def __getitem__(self, index: int) -> PIIMapping: ...
    @overload
    def __getitem__(self, index: slice) -> PIIMappings: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return PIIMappings(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[PIIMapping]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PIIMappings):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"PIIMappings(tokens={list(self._by_token)!r})"

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(self._by_token)

    def lookup_token(self, token: str) -> str | None:
        """Look up the original value for a token."""
        mapping = self._by_token.get(token)
        return mapping.original_value if mapping else None


@dataclass(frozen=True, slots=True)
class MaskingResult:
    """Result of masking one text."""
    masked_text: str
    original_text: str = field(repr=False)
    mappings: PIIMappings = field(default_factory=PIIMappings)

    @property
    def mask_count(self) -> int:
        # unique values, not occurrences
        return len(self.mappings)


@dataclass(frozen=True, slots=True)
class RedactionContext:
    """Carries the mapping table from input redaction to output restoration.

    Memory-only: created once per gateway call and dropped with it.
    """
    tenant_id: str
    pii_detected: bool
    mappings: PIIMappings
    redacted_at: datetime

    @classmethod
    def create(
        cls, tenant_id: str, mappings: Iterable[PIIMapping] = ()
    ) -> RedactionContext:
        table = mappings if isinstance(mappings, PIIMappings) else PIIMappings(mappings)
        return cls(
            tenant_id=tenant_id,
            pii_detected=len(table) > 0,
            mappings=table,
            redacted_at=datetime.now(timezone.utc),
        )


@dataclass(frozen=True)
class LLMInput:
    """Payload of one gateway invocation (single prompt or OpenAI-style messages)."""
    purpose: str
    tenant_id: str
    policy: str
    actor_id: str | None = None
    text: str | None = None
    messages: list[dict] | None = None


@dataclass(frozen=True)
class LLMOutput:
    """Provider response."""
    text: str
    provider: str
    model: str
    usage: dict[str, int] | None = None
