"""PII middleware: sits between the gateway and the LLM provider.

Usage:
    mw = PIIMiddleware()

    # Before sending to provider
    redacted_input, context = mw.redact_input(llm_input)
    output = provider.invoke(redacted_input)

    # After receiving response
    text = mw.restore_output(output.text, context)

Only the prompt text (or the content of the last user message) is
analysed.  Redaction runs under a soft deadline; on timeout or any
error the original input goes through unredacted with a warning event,
unless ``fail_closed`` is set.
"""

from __future__ import annotations
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Callable, NamedTuple

from .audit import AuditEvent, AuditLevel, AuditSink, StructlogAuditSink
from .detector import Detector, DetectorConfig
from .errors import RedactionError
from .masker import get_pii_summary, mask_pii
from .restorer import restore_pii
from .streaming import StreamingRestorer
from .types import LLMInput, RedactionContext

REDACTION_TIMEOUT_MS = 50.0


class Redaction(NamedTuple):
    redacted_input: LLMInput
    context: RedactionContext


class _DeadlineExceeded(Exception):
    pass


@dataclass
class PIIMiddleware:
    """Redacts prompts before the provider call and restores responses after."""

    detector: Detector = field(default_factory=Detector)
    audit: AuditSink = field(default_factory=StructlogAuditSink)
    timeout_ms: float = REDACTION_TIMEOUT_MS
    fail_closed: bool = False
    clock: Callable[[], float] = time.perf_counter

    @classmethod
    def create(
        cls,
        *,
        config: DetectorConfig | None = None,
        audit: AuditSink | None = None,
        timeout_ms: float = REDACTION_TIMEOUT_MS,
        fail_closed: bool = False,
    ) -> PIIMiddleware:
        """Factory: builds a middleware around a fresh detector."""
        return cls(
            detector=Detector(config),
            audit=audit or StructlogAuditSink(),
            timeout_ms=timeout_ms,
            fail_closed=fail_closed,
        )

    def redact_input(self, llm_input: LLMInput) -> Redaction:
        """Mask PII in the outbound prompt.  Never mutates ``llm_input``."""
        start = self.clock()
        try:
            text = get_text_from_input(llm_input)
            if not text or not text.strip():
                return Redaction(llm_input, RedactionContext.create(llm_input.tenant_id))

            detection = self.detector.detect(text)
            self._check_deadline(start)
            if detection.total_count == 0:
                return Redaction(llm_input, RedactionContext.create(llm_input.tenant_id))

            masking = mask_pii(text, detection.entities)
            self._check_deadline(start)

            summary = get_pii_summary(masking.mappings)
            self._emit(
                AuditLevel.INFO, "pii_detected", llm_input,
                pii_types=",".join(summary["pii_types"]),
                pii_count=summary["pii_count"],
            )

            redacted = replace_text_in_input(llm_input, masking.masked_text)
            context = RedactionContext.create(llm_input.tenant_id, masking.mappings)

            self._emit(
                AuditLevel.INFO, "pii_redaction_completed", llm_input,
                duration_ms=self._elapsed_ms(start),
                pii_count=masking.mask_count,
            )
            return Redaction(redacted, context)

        except _DeadlineExceeded:
            self._emit(
                AuditLevel.WARNING, "pii_redaction_timeout", llm_input,
                timeout_ms=self.timeout_ms,
                duration_ms=self._elapsed_ms(start),
            )
            return self._fail(llm_input, "PII redaction exceeded its time budget")

        except Exception as exc:
            # Exception text may quote the prompt; only the class is logged
            self._emit(
                AuditLevel.WARNING, "pii_redaction_error", llm_input,
                error=type(exc).__name__,
            )
            return self._fail(llm_input, "PII redaction failed")

    def restore_output(self, output_text: str, context: RedactionContext) -> str:
        """Restore tokens in the model's response."""
        if not context.pii_detected or not context.mappings:
            return output_text
        return restore_pii(output_text, context.mappings)

    def restore_stream(
        self, chunks: Iterable[str], context: RedactionContext
    ) -> Iterator[str]:
        """Restore tokens in a chunked response, yielding text as it becomes safe."""
        if not context.pii_detected or not context.mappings:
            yield from chunks
            return
        restorer = StreamingRestorer(context.mappings)
        for chunk in chunks:
            ready = restorer.feed(chunk)
            if ready:
                yield ready
        tail = restorer.flush()
        if tail:
            yield tail

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _elapsed_ms(self, start: float) -> int:
        return round((self.clock() - start) * 1000)

    def _check_deadline(self, start: float) -> None:
        if (self.clock() - start) * 1000 > self.timeout_ms:
            raise _DeadlineExceeded

    def _fail(self, llm_input: LLMInput, message: str) -> Redaction:
        if self.fail_closed:
            raise RedactionError(message)
        return Redaction(llm_input, RedactionContext.create(llm_input.tenant_id))

    def _emit(self, level: AuditLevel, name: str, llm_input: LLMInput, **meta) -> None:
        self.audit.emit(level, AuditEvent(
            event=name,
            tenant_id=llm_input.tenant_id,
            actor_id=llm_input.actor_id,
            meta=meta,
        ))


def get_text_from_input(llm_input: LLMInput) -> str:
    """The text to analyse: the prompt, or the last user message."""
    if llm_input.text:
        return llm_input.text
    for message in reversed(llm_input.messages or []):
        if message.get("role") == "user":
            content = message.get("content")
            return content if isinstance(content, str) else ""
    return ""


def replace_text_in_input(llm_input: LLMInput, redacted_text: str) -> LLMInput:
    """Write redacted text back where ``get_text_from_input`` found it."""
    if llm_input.text:
        return replace(llm_input, text=redacted_text)

    messages = list(llm_input.messages or [])
    for i in range(len(messages) - 1, -1, -1):
        if messages[i].get("role") == "user":
            messages[i] = {**messages[i], "content": redacted_text}
            return replace(llm_input, messages=messages)
    return llm_input
