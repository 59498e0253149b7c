"""Gateway: the only path from the platform to an LLM provider.

``invoke_llm`` runs the consent check and dispatches to the provider.
Callers are expected to enforce the use-case policy and to bracket the
call with PII redaction; ``Gateway.invoke_guarded`` does all of it in
order:

    policy → consent → redact input → provider → restore output
"""

from __future__ import annotations
from dataclasses import replace

from .audit import AuditEvent, AuditLevel, AuditSink, StructlogAuditSink
from .consent import ConsentRepo, check_consent
from .errors import ConfigurationError, ConsentError, ConsentFailure
from .middleware import PIIMiddleware
from .policy import enforce_use_case_policy
from .providers import Provider
from .types import LLMInput, LLMOutput


def invoke_llm(
    llm_input: LLMInput,
    provider: Provider,
    consent_repo: ConsentRepo | None = None,
) -> LLMOutput:
    """Check consent (when an actor and a repo are given), then call the provider.

    ConsentError propagates untouched and the provider is never reached.
    """
    if llm_input.actor_id and consent_repo is not None:
        check_consent(
            consent_repo, llm_input.tenant_id, llm_input.actor_id, llm_input.purpose
        )
    return provider.invoke(llm_input)


class Gateway:
    """Provider, consent store and redaction wired together once at startup."""

    def __init__(
        self,
        provider: Provider,
        *,
        consent_repo: ConsentRepo | None = None,
        redaction: PIIMiddleware | None = None,
        audit: AuditSink | None = None,
    ) -> None:
        self.provider = provider
        self.consent_repo = consent_repo
        self.audit = audit or StructlogAuditSink()
        self.redaction = redaction or PIIMiddleware(audit=self.audit)

    def invoke(self, llm_input: LLMInput) -> LLMOutput:
        return invoke_llm(llm_input, self.provider, self.consent_repo)

    def invoke_guarded(self, llm_input: LLMInput, use_case: str) -> LLMOutput:
        """Full bracket around the provider call.

        Raises ForbiddenUseCaseError or ConsentError before any redaction
        work or provider cost.  The returned text has PII restored.
        """
        validation = enforce_use_case_policy(use_case)

        if validation.consent_required:
            if self.consent_repo is None:
                raise ConfigurationError(
                    f"use case {validation.use_case} requires consent but no consent store is configured"
                )
            if not llm_input.actor_id:
                raise ConsentError(
                    "tenantId, userId and purpose are required",
                    ConsentFailure.MISSING_CONTEXT,
                )

        # Consent is checked here, before redaction, so the provider is called directly
        if llm_input.actor_id and self.consent_repo is not None:
            check_consent(
                self.consent_repo, llm_input.tenant_id, llm_input.actor_id, llm_input.purpose
            )

        redacted_input, context = self.redaction.redact_input(llm_input)
        output = self.provider.invoke(redacted_input)
        restored = self.redaction.restore_output(output.text, context)

        self.audit.emit(AuditLevel.INFO, AuditEvent(
            event="llm_invoked",
            tenant_id=llm_input.tenant_id,
            actor_id=llm_input.actor_id,
            meta={
                "use_case": validation.use_case,
                "risk_level": validation.risk_level.value,
                "human_validation_required": validation.human_validation_required,
                "provider": output.provider,
                "model": output.model,
                "pii_redacted": context.pii_detected,
            },
        ))
        return replace(output, text=restored)
