"""Restorer: puts original values back in place of tokens.

Pure string substitution.  Tokens missing from the mapping table (the
provider invented ``[PERSON_7]`` or rewrote a token as "Person 1") are
left as they are; nothing is guessed.
"""

from __future__ import annotations
import re
from collections.abc import Iterable

from .types import PIIMapping


def restore_pii(text: str, mappings: Iterable[PIIMapping]) -> str:
    """Replace every occurrence of each known token with its original value."""
    table = {m.token: m.original_value for m in mappings}
    if not text or not table:
        return text
    # One pass, longest tokens first; restored values are never re-scanned
    pattern = re.compile(
        "|".join(re.escape(t) for t in sorted(table, key=len, reverse=True))
    )
    return pattern.sub(lambda m: table[m.group()], text)
