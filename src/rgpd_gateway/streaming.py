"""Streaming restorer: puts PII back into a chunked provider response.

Tokens can arrive split across chunks:
    "Bonjour [PER"  +  "SON_1], merci"

Text is released as soon as it cannot be part of a token.  A trailing
fragment that could still grow into ``[TYPE_n]`` is held back until the
next chunk (or ``flush``) settles it.

    restorer = StreamingRestorer(context.mappings)
    for chunk in provider_stream:
        text = restorer.feed(chunk)
        if text:
            yield text
    yield restorer.flush()
"""

from __future__ import annotations
import re

from .restorer import restore_pii
from .types import PIIMappings

_TOKEN = re.compile(r"\[[A-Z]+_\d+\]")
# Anything a token can start with: "[", "[EM", "[EMAIL_", "[EMAIL_1"
_PARTIAL = re.compile(r"\[[A-Z]*(?:_\d*)?")


class StreamingRestorer:
    """Restores tokens chunk by chunk for one response."""

    __slots__ = ("_mappings", "_buffer", "_max_token_len")

    def __init__(self, mappings: PIIMappings, *, max_token_len: int = 24) -> None:
        self._mappings = mappings
        self._buffer = ""
        # a held-back fragment longer than this is not a token
        self._max_token_len = max_token_len

    def feed(self, chunk: str) -> str:
        """Add a chunk; return the text that is safe to emit now."""
        self._buffer += chunk
        return self._release()

    def flush(self) -> str:
        """End of stream: return whatever is still held back."""
        rest, self._buffer = self._buffer, ""
        return restore_pii(rest, self._mappings)

    def _release(self) -> str:
        buf = self._buffer
        parts: list[str] = []
        pos = 0

        while pos < len(buf):
            bracket = buf.find("[", pos)
            if bracket < 0:
                parts.append(buf[pos:])
                pos = len(buf)
                break
            parts.append(buf[pos:bracket])

            token = _TOKEN.match(buf, bracket)
            if token is not None:
                original = self._mappings.lookup_token(token.group())
                parts.append(token.group() if original is None else original)
                pos = token.end()
                continue

            partial = _PARTIAL.match(buf, bracket)
            if partial.end() == len(buf) and len(buf) - bracket <= self._max_token_len:
                pos = bracket
                break

            parts.append("[")
            pos = bracket + 1

        self._buffer = buf[pos:]
        return "".join(parts)
