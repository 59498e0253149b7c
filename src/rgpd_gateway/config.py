"""YAML/dict config loader for rgpd-gateway.

Supports loading from a YAML file or a plain dict (for embedding in a
larger application config).

Example YAML:

    rgpd_gateway:
      provider: stub
      model: stub-echo
      redaction:
        enabled: true
        timeout_ms: 50
        fail_closed: false       # true = reject the call if redaction fails
        use_presidio: false
        language: fr
        score_threshold: 0.35
        skip_types:
          - ADDRESS
        allow_list:
          - dpo@example.com
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

from .audit import AuditSink, StructlogAuditSink
from .consent import ConsentRepo
from .detector import DetectorConfig
from .errors import ConfigurationError
from .gateway import Gateway
from .middleware import REDACTION_TIMEOUT_MS, PIIMiddleware, Redaction
from .providers import get_provider
from .types import LLMInput, PIIType, RedactionContext


class _NoopMiddleware:
    """Pass-through middleware when redaction is disabled."""
    def redact_input(self, llm_input: LLMInput) -> Redaction:
        return Redaction(llm_input, RedactionContext.create(llm_input.tenant_id))
    def restore_output(self, output_text: str, context: RedactionContext) -> str:
        return output_text
    def restore_stream(self, chunks, context):
        yield from chunks


def _pii_types(values: Any) -> set[PIIType]:
    try:
        return {PIIType(str(v).upper()) for v in values or []}
    except ValueError as e:
        raise ConfigurationError(f"invalid PII type in skip_types: {e}") from None


def load_config(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    # Support nested under "rgpd_gateway" key or flat
    if "rgpd_gateway" in data:
        data = data["rgpd_gateway"] or {}

    redaction = data.get("redaction") or {}
    timeout_ms = float(redaction.get("timeout_ms", REDACTION_TIMEOUT_MS))
    if timeout_ms <= 0:
        raise ConfigurationError("redaction.timeout_ms must be positive")

    return {
        "provider": data.get("provider", "stub"),
        "model": data.get("model"),
        "redaction_enabled": redaction.get("enabled", True),
        "timeout_ms": timeout_ms,
        "fail_closed": bool(redaction.get("fail_closed", False)),
        "use_presidio": redaction.get("use_presidio", False),
        "language": redaction.get("language", "fr"),
        "score_threshold": float(redaction.get("score_threshold", 0.35)),
        "skip_types": _pii_types(redaction.get("skip_types")),
        "allow_list": set(redaction.get("allow_list", [])),
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path) as f:
        return load_config(yaml.safe_load(f) or {})


def create_middleware(
    config: dict[str, Any],
    audit: AuditSink | None = None,
) -> PIIMiddleware:
    """Create a redaction middleware from a config dict."""
    cfg = load_config(config) if "redaction_enabled" not in config else config

    if not cfg["redaction_enabled"]:
        return _NoopMiddleware()

    detector_config = DetectorConfig(
        use_presidio=cfg["use_presidio"],
        language=cfg["language"],
        score_threshold=cfg["score_threshold"],
        skip_types=cfg["skip_types"],
        allow_list=cfg["allow_list"],
    )
    return PIIMiddleware.create(
        config=detector_config,
        audit=audit,
        timeout_ms=cfg["timeout_ms"],
        fail_closed=cfg["fail_closed"],
    )


def create_gateway(
    config: dict[str, Any],
    *,
    consent_repo: ConsentRepo | None = None,
    audit: AuditSink | None = None,
) -> Gateway:
    """Create a fully configured gateway from a config dict."""
    cfg = load_config(config) if "redaction_enabled" not in config else config
    audit = audit or StructlogAuditSink()

    options = {"model": cfg["model"]} if cfg["model"] else {}
    return Gateway(
        get_provider(cfg["provider"], **options),
        consent_repo=consent_repo,
        redaction=create_middleware(cfg, audit),
        audit=audit,
    )
