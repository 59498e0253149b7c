"""Use-case policy: which kinds of LLM work the platform accepts.

The allow and deny lists are closed enums: a new use case needs a code
change.  Anything that is in neither list is rejected.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .errors import ForbiddenUseCaseError


class AllowedUseCase(str, Enum):
    # A. Transformation
    REFORMULATION = "REFORMULATION"
    SUMMARY = "SUMMARY"
    TEXT_NORMALIZATION = "TEXT_NORMALIZATION"
    PII_ANONYMIZATION = "PII_ANONYMIZATION"
    PII_REDACTION = "PII_REDACTION"
    # B. Classification
    CATEGORIZATION = "CATEGORIZATION"
    DOCUMENT_TYPE_DETECTION = "DOCUMENT_TYPE_DETECTION"
    NON_DECISIONAL_SCORING = "NON_DECISIONAL_SCORING"
    # C. Extraction
    FIELD_EXTRACTION = "FIELD_EXTRACTION"
    CONTENT_STRUCTURING = "CONTENT_STRUCTURING"
    # D. Assisted generation
    WRITING_ASSISTANCE = "WRITING_ASSISTANCE"
    SUGGESTIONS = "SUGGESTIONS"


class ForbiddenUseCase(str, Enum):
    AUTOMATED_DECISION = "AUTOMATED_DECISION"        # decision with legal effect (Art. 22)
    MEDICAL_DIAGNOSIS = "MEDICAL_DIAGNOSIS"          # health data (Art. 9)
    LEGAL_ADVICE = "LEGAL_ADVICE"                    # binding legal advice
    PROFILING_NO_BASIS = "PROFILING_NO_BASIS"        # profiling without consent / legal basis
    TRAINING_ON_USER_DATA = "TRAINING_ON_USER_DATA"
    FRONTEND_LLM_CALL = "FRONTEND_LLM_CALL"          # bypasses the gateway
    LOAN_APPROVAL = "LOAN_APPROVAL"
    EMPLOYMENT_DECISION = "EMPLOYMENT_DECISION"
    CREDIT_SCORING = "CREDIT_SCORING"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class UseCaseValidation:
    """Outcome of checking one use case against the policy."""
    allowed: bool
    use_case: str
    risk_level: RiskLevel
    consent_required: bool
    human_validation_required: bool
    rejection_reason: str | None = None


# (risk, consent required, human validation required)
_RISK_PROFILES: dict[AllowedUseCase, tuple[RiskLevel, bool, bool]] = {
    AllowedUseCase.REFORMULATION: (RiskLevel.LOW, True, False),
    AllowedUseCase.SUMMARY: (RiskLevel.LOW, True, False),
    AllowedUseCase.TEXT_NORMALIZATION: (RiskLevel.LOW, True, False),
    AllowedUseCase.PII_ANONYMIZATION: (RiskLevel.LOW, True, False),
    AllowedUseCase.PII_REDACTION: (RiskLevel.LOW, True, False),
    AllowedUseCase.CATEGORIZATION: (RiskLevel.MODERATE, True, False),
    AllowedUseCase.DOCUMENT_TYPE_DETECTION: (RiskLevel.MODERATE, True, False),
    AllowedUseCase.NON_DECISIONAL_SCORING: (RiskLevel.MODERATE, True, False),
    AllowedUseCase.FIELD_EXTRACTION: (RiskLevel.MODERATE, True, False),
    AllowedUseCase.CONTENT_STRUCTURING: (RiskLevel.MODERATE, True, False),
    AllowedUseCase.WRITING_ASSISTANCE: (RiskLevel.HIGH, True, True),
    AllowedUseCase.SUGGESTIONS: (RiskLevel.HIGH, True, True),
}

_ALLOWED = {u.value: u for u in AllowedUseCase}
_FORBIDDEN = {u.value for u in ForbiddenUseCase}


def validate_use_case(use_case: str) -> UseCaseValidation:
    """Classify a use case identifier as allowed, forbidden or unknown."""
    key = use_case.value if isinstance(use_case, Enum) else use_case

    if key in _FORBIDDEN:
        return UseCaseValidation(
            allowed=False,
            use_case=key,
            risk_level=RiskLevel.HIGH,
            consent_required=False,
            human_validation_required=False,
            rejection_reason=f"Forbidden use case: {key} (violates LLM usage policy §3)",
        )

    allowed = _ALLOWED.get(key)
    if allowed is not None:
        risk, consent, human = _RISK_PROFILES[allowed]
        return UseCaseValidation(
            allowed=True,
            use_case=key,
            risk_level=risk,
            consent_required=consent,
            human_validation_required=human,
        )

    # Unknown: reject by default
    return UseCaseValidation(
        allowed=False,
        use_case=key,
        risk_level=RiskLevel.HIGH,
        consent_required=False,
        human_validation_required=False,
        rejection_reason=f"Unknown use case: {key} (not in allowlist)",
    )


def enforce_use_case_policy(use_case: str) -> UseCaseValidation:
    """Raise ForbiddenUseCaseError unless the use case is allowed."""
    validation = validate_use_case(use_case)
    if not validation.allowed:
        raise ForbiddenUseCaseError(validation.rejection_reason, validation.use_case)
    return validation


def requires_human_validation(use_case: str) -> bool:
    return validate_use_case(use_case).human_validation_required
