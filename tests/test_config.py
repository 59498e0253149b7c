"""Tests for config loading and the factories built on it."""

import pytest

from rgpd_gateway import (
    ConfigurationError, Gateway, PIIMiddleware, PIIType,
    create_gateway, create_middleware, load_config, load_from_yaml,
)

from conftest import make_input


YAML = """\
rgpd_gateway:
  provider: stub
  model: stub-small
  redaction:
    timeout_ms: 80
    fail_closed: true
    skip_types:
      - address
    allow_list:
      - dpo@example.com
"""


# ── load_config ──────────────────────────────────────────────────────

def test_defaults():
    cfg = load_config({})
    assert cfg["provider"] == "stub"
    assert cfg["model"] is None
    assert cfg["redaction_enabled"] is True
    assert cfg["timeout_ms"] == 50.0
    assert cfg["fail_closed"] is False
    assert cfg["use_presidio"] is False
    assert cfg["language"] == "fr"
    assert cfg["skip_types"] == set()
    assert cfg["allow_list"] == set()


def test_nested_and_flat_forms_match():
    flat = {"provider": "stub", "redaction": {"timeout_ms": 20}}
    assert load_config({"rgpd_gateway": flat}) == load_config(flat)


def test_skip_types_are_parsed():
    cfg = load_config({"redaction": {"skip_types": ["phone", "IBAN"]}})
    assert cfg["skip_types"] == {PIIType.PHONE, PIIType.IBAN}


def test_invalid_skip_type():
    with pytest.raises(ConfigurationError):
        load_config({"redaction": {"skip_types": ["CREDIT_CARD"]}})


@pytest.mark.parametrize("timeout", [0, -5])
def test_timeout_must_be_positive(timeout):
    with pytest.raises(ConfigurationError):
        load_config({"redaction": {"timeout_ms": timeout}})


def test_load_from_yaml(tmp_path):
    path = tmp_path / "gateway.yaml"
    path.write_text(YAML)

    cfg = load_from_yaml(path)

    assert cfg["model"] == "stub-small"
    assert cfg["timeout_ms"] == 80.0
    assert cfg["fail_closed"] is True
    assert cfg["skip_types"] == {PIIType.ADDRESS}
    assert cfg["allow_list"] == {"dpo@example.com"}


def test_load_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_from_yaml(path) == load_config({})


# ── Factories ────────────────────────────────────────────────────────

def test_create_middleware_from_config(audit):
    mw = create_middleware({"redaction": {"timeout_ms": 80, "fail_closed": True}}, audit)
    assert isinstance(mw, PIIMiddleware)
    assert mw.timeout_ms == 80.0
    assert mw.fail_closed
    assert mw.audit is audit


def test_disabled_redaction_passes_through(audit):
    mw = create_middleware({"redaction": {"enabled": False}}, audit)
    llm_input = make_input("Contact Jean Dupont")
    redacted, context = mw.redact_input(llm_input)
    assert redacted is llm_input
    assert not context.pii_detected
    assert mw.restore_output("[PERSON_1]", context) == "[PERSON_1]"
    assert list(mw.restore_stream(["a", "b"], context)) == ["a", "b"]


def test_create_gateway(tmp_path, consent_repo, audit):
    path = tmp_path / "gateway.yaml"
    path.write_text(YAML)
    consent_repo.grant("tenant-a", "user-1", "ai_processing")

    gateway = create_gateway(load_from_yaml(path), consent_repo=consent_repo, audit=audit)
    assert isinstance(gateway, Gateway)
    assert gateway.provider.model == "stub-small"

    text = "Écrire à dpo@example.com et jean@example.com"
    output = gateway.invoke_guarded(make_input(text, actor_id="user-1"), "SUMMARY")

    assert output.text == text
    assert audit.find("pii_detected").meta == {"pii_types": "EMAIL", "pii_count": 1}


def test_create_gateway_unknown_provider():
    with pytest.raises(ConfigurationError):
        create_gateway({"provider": "nope"})
