"""Masker: swaps detected PII for ``[TYPE_n]`` tokens.

Within one call:
  - Deterministic: the same value always maps to the same token
  - Counters are per type and start at 1; numbers whose token already
    appears in the text are skipped
  - The returned mapping table is read-only and is never persisted

Usage:
    entities = detect_pii(text).entities
    result = mask_pii(text, entities)
    result.masked_text     # "Contact [PERSON_1] at [EMAIL_1]"
    result.mappings        # PIIMappings(tokens=['[PERSON_1]', '[EMAIL_1]'])
"""

from __future__ import annotations
from collections import defaultdict
from collections.abc import Iterable, Sequence

from .types import (
    MaskingResult,
    PIIEntity,
    PIIMapping,
    PIIMappings,
    PIIType,
    format_token,
)


def mask_pii(text: str, entities: Sequence[PIIEntity]) -> MaskingResult:
    """Replace every entity span in text with its token.

    Characters outside the spans are kept as-is.  Overlapping spans are
    merged: the earliest (then longest) entity gives the type and the
    merged substring becomes the original value.
    """
    if not text or not entities:
        return MaskingResult(masked_text=text, original_text=text)

    counters: dict[PIIType, int] = defaultdict(int)
    value_to_token: dict[str, str] = {}
    mappings: list[PIIMapping] = []
    parts: list[str] = []
    last = 0

    for pii_type, start, end in _merge_spans(text, entities):
        value = text[start:end]
        token = value_to_token.get(value)
        if token is None:
            counters[pii_type] += 1
            token = format_token(pii_type, counters[pii_type])
            # A token the text already contains would be restored too
            while token in text:
                counters[pii_type] += 1
                token = format_token(pii_type, counters[pii_type])
            value_to_token[value] = token
            mappings.append(PIIMapping(token=token, original_value=value, type=pii_type))
        parts.append(text[last:start])
        parts.append(token)
        last = end

    parts.append(text[last:])
    return MaskingResult(
        masked_text="".join(parts),
        original_text=text,
        mappings=PIIMappings(mappings),
    )


def _merge_spans(
    text: str, entities: Iterable[PIIEntity]
) -> list[tuple[PIIType, int, int]]:
    """Sort entity spans and fold overlapping ones together."""
    ordered = sorted(entities, key=lambda e: (e.start_index, -e.end_index))
    spans: list[tuple[PIIType, int, int]] = []
    for e in ordered:
        if not 0 <= e.start_index < e.end_index <= len(text):
            raise ValueError(
                f"entity span {e.start_index}:{e.end_index} out of range "
                f"for text of length {len(text)}"
            )
        if spans and e.start_index < spans[-1][2]:
            pii_type, start, end = spans[-1]
            spans[-1] = (pii_type, start, max(end, e.end_index))
        else:
            spans.append((PIIType(e.type), e.start_index, e.end_index))
    return spans


def validate_masked_text(masked_text: str, mappings: Iterable[PIIMapping]) -> bool:
    """Return False if any original value is still present (leak)."""
    return not any(m.original_value in masked_text for m in mappings)


def get_pii_summary(mappings: Iterable[PIIMapping]) -> dict[str, object]:
    """Types and count for audit events.  Never includes original values."""
    mappings = list(mappings)
    types = list(dict.fromkeys(m.type.value for m in mappings))
    return {"pii_types": types, "pii_count": len(mappings)}
