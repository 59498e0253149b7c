"""rgpd-gateway: consent, use-case policy and reversible PII masking for LLM calls."""

from .types import (
    PIIType, PIIEntity, DetectionResult, PIIMapping, PIIMappings,
    MaskingResult, RedactionContext, LLMInput, LLMOutput,
)
from .detector import Detector, DetectorConfig, detect_pii, detect_pii_by_type, contains_pii
from .masker import mask_pii, validate_masked_text, get_pii_summary
from .restorer import restore_pii
from .streaming import StreamingRestorer
from .policy import (
    AllowedUseCase, ForbiddenUseCase, RiskLevel, UseCaseValidation,
    validate_use_case, enforce_use_case_policy, requires_human_validation,
)
from .consent import Consent, ConsentRepo, InMemoryConsentRepo, PurposeIdentifier, check_consent
from .audit import AuditEvent, AuditLevel, AuditSink, MemoryAuditSink, StructlogAuditSink
from .middleware import PIIMiddleware, Redaction
from .providers import Provider, StubProvider, get_provider
from .gateway import Gateway, invoke_llm
from .config import create_gateway, create_middleware, load_config, load_from_yaml
from .errors import (
    GatewayError, ForbiddenUseCaseError, ConsentError, ConsentFailure,
    RedactionError, ProviderError, ConfigurationError,
)

__all__ = [
    "PIIType", "PIIEntity", "DetectionResult", "PIIMapping", "PIIMappings",
    "MaskingResult", "RedactionContext", "LLMInput", "LLMOutput",
    "Detector", "DetectorConfig", "detect_pii", "detect_pii_by_type", "contains_pii",
    "mask_pii", "validate_masked_text", "get_pii_summary",
    "restore_pii", "StreamingRestorer",
    "AllowedUseCase", "ForbiddenUseCase", "RiskLevel", "UseCaseValidation",
    "validate_use_case", "enforce_use_case_policy", "requires_human_validation",
    "Consent", "ConsentRepo", "InMemoryConsentRepo", "PurposeIdentifier", "check_consent",
    "AuditEvent", "AuditLevel", "AuditSink", "MemoryAuditSink", "StructlogAuditSink",
    "PIIMiddleware", "Redaction",
    "Provider", "StubProvider", "get_provider",
    "Gateway", "invoke_llm",
    "create_gateway", "create_middleware", "load_config", "load_from_yaml",
    "GatewayError", "ForbiddenUseCaseError", "ConsentError", "ConsentFailure",
    "RedactionError", "ProviderError", "ConfigurationError",
]
__version__ = "0.1.0"
