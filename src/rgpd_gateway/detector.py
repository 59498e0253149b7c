"""Detector: finds PII in a prompt.  Layered: regex first, then Presidio NER.

Usage:
    from rgpd_gateway import detect_pii

    result = detect_pii("Contact Jean Dupont at jean@example.com")
    [e.type for e in result.entities]   # [PERSON, EMAIL]
    result.total_count                  # 2

Detection is a pure function of the text: no I/O, no state kept between
calls, and it never raises for ``str`` input.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from .patterns import scan_patterns, sort_entities
from .types import DetectionResult, PIIEntity, PIIType


@dataclass
class DetectorConfig:
    """Configuration for the Detector."""
    use_presidio: bool = False        # enable Layer 2 (NER)
    language: str = "fr"
    score_threshold: float = 0.35     # minimum confidence for Presidio
    custom_scanners: list[Callable[[str], list[PIIEntity]]] = field(default_factory=list)
    # PII types never reported
    skip_types: set[PIIType] = field(default_factory=set)
    # Allow-list: values that should NEVER be redacted
    allow_list: set[str] = field(default_factory=set)


class Detector:
    """Layered PII detector.

    Layer 1: Regex patterns (PERSON, EMAIL, PHONE, ADDRESS, SSN, IBAN)
    Layer 2: Presidio NER (optional)
    Layer 3: Custom scanners (user-provided callables)
    """

    def __init__(self, config: DetectorConfig | None = None) -> None:
        self.config = config or DetectorConfig()

    def detect(self, text: str) -> DetectionResult:
        """Detect PII in text, entities ordered by start index."""
        if not text or not text.strip():
            return DetectionResult()

        # --- Layer 1: Regex ---
        matches = scan_patterns(text)

        # --- Layer 2: Presidio NER (if enabled) ---
        if self.config.use_presidio:
            from .presidio_layer import scan_presidio
            regex_spans = [(e.start_index, e.end_index) for e in matches]
            matches.extend(scan_presidio(
                text,
                language=self.config.language,
                score_threshold=self.config.score_threshold,
                exclude_spans=regex_spans,
            ))

        # --- Layer 3: Custom scanners ---
        for scanner in self.config.custom_scanners:
            matches.extend(scanner(text))

        return DetectionResult(entities=tuple(sort_entities(self._filter(matches))))

    def detect_by_type(self, text: str, pii_type: PIIType) -> DetectionResult:
        """Regex detection restricted to a single category."""
        if not text or not text.strip():
            return DetectionResult()
        matches = scan_patterns(text, types={PIIType(pii_type)})
        return DetectionResult(entities=tuple(self._filter(matches)))

    def contains_pii(self, text: str) -> bool:
        """Quick yes/no check."""
        return self.detect(text).total_count > 0

    def _filter(self, matches: list[PIIEntity]) -> list[PIIEntity]:
        return [
            m for m in matches
            if m.type not in self.config.skip_types
            and m.value not in self.config.allow_list
        ]


_default = Detector()


def detect_pii(text: str) -> DetectionResult:
    """Detect PII with the default regex-only detector."""
    return _default.detect(text)


def detect_pii_by_type(text: str, pii_type: PIIType) -> DetectionResult:
    """Detect a single PII category with the default detector."""
    return _default.detect_by_type(text, pii_type)


def contains_pii(text: str) -> bool:
    """True if the default detector finds anything."""
    return _default.contains_pii(text)
