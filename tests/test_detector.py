"""Tests for the detector: regex layer, filters and custom scanners."""

import pytest

from rgpd_gateway import (
    Detector, DetectorConfig, PIIEntity, PIIType,
    contains_pii, detect_pii, detect_pii_by_type,
)
from rgpd_gateway.patterns import is_whitelisted_name, scan_patterns


def _of_type(result, pii_type):
    return [e for e in result.entities if e.type is pii_type]


# ── PERSON ───────────────────────────────────────────────────────────

def test_person_first_and_last_name():
    persons = _of_type(detect_pii("Bonjour, Jean Dupont est disponible"), PIIType.PERSON)
    assert len(persons) == 1
    assert persons[0].value == "Jean Dupont"


def test_person_hyphenated_first_name():
    persons = _of_type(detect_pii("Marie-Claire Martin travaille ici"), PIIType.PERSON)
    assert [p.value for p in persons] == ["Marie-Claire Martin"]


def test_person_uppercase_surname():
    persons = _of_type(detect_pii("Rendez-vous avec Jean DUPONT demain"), PIIType.PERSON)
    assert [p.value for p in persons] == ["Jean DUPONT"]


def test_person_leading_greeting_is_trimmed():
    persons = _of_type(detect_pii("Contact Jean Dupont at jean@example.com"), PIIType.PERSON)
    assert len(persons) == 1
    assert persons[0].value == "Jean Dupont"
    assert persons[0].start_index == 8


def test_person_split_at_conjunction():
    persons = _of_type(detect_pii("Jean Dupont Et Marie Martin"), PIIType.PERSON)
    assert [(p.value, p.start_index) for p in persons] == [
        ("Jean Dupont", 0), ("Marie Martin", 15),
    ]


def test_person_split_leaves_single_words_out():
    persons = _of_type(detect_pii("Merci Jean Dupont Et Marie"), PIIType.PERSON)
    assert [p.value for p in persons] == ["Jean Dupont"]


def test_person_keeps_inner_particle():
    persons = _of_type(detect_pii("Discours de Charles De Gaulle"), PIIType.PERSON)
    assert [p.value for p in persons] == ["Charles De Gaulle"]


def test_city_alone_is_not_a_person():
    assert _of_type(detect_pii("Paris est une belle ville"), PIIType.PERSON) == []


def test_acronyms_are_not_persons():
    assert _of_type(detect_pii("API REST HTTP JSON RGPD"), PIIType.PERSON) == []


def test_whitelist_lookup():
    assert is_whitelisted_name("Bonjour")
    assert is_whitelisted_name("RGPD")
    assert not is_whitelisted_name("Dupont")


# ── EMAIL ────────────────────────────────────────────────────────────

def test_email_detection():
    emails = _of_type(detect_pii("Envoyer à jean.dupont@example.com"), PIIType.EMAIL)
    assert [e.value for e in emails] == ["jean.dupont@example.com"]


def test_email_with_plus_sign():
    emails = _of_type(detect_pii("Mail: user+tag@domain.co.uk"), PIIType.EMAIL)
    assert [e.value for e in emails] == ["user+tag@domain.co.uk"]


def test_email_inside_angle_brackets():
    emails = _of_type(detect_pii("<test@example.com>"), PIIType.EMAIL)
    assert [e.value for e in emails] == ["test@example.com"]


def test_invalid_emails_are_ignored():
    assert _of_type(detect_pii("invalid@ @domain.com user@"), PIIType.EMAIL) == []


def test_email_position():
    result = detect_pii("Email: test@example.com")
    email = _of_type(result, PIIType.EMAIL)[0]
    assert (email.start_index, email.end_index) == (7, 23)
    assert email.confidence == 1.0
    assert email.source == "regex"


# ── PHONE ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("text, value", [
    ("Appelez le 06 12 34 56 78", "06 12 34 56 78"),
    ("Tel: 06.12.34.56.78", "06.12.34.56.78"),
    ("Numero: 0612345678", "0612345678"),
    ("Call +33 6 12 34 56 78", "+33 6 12 34 56 78"),
    ("Standard 01-23-45-67-89", "01-23-45-67-89"),
])
def test_french_phone_formats(text, value):
    phones = _of_type(detect_pii(text), PIIType.PHONE)
    assert [p.value for p in phones] == [value]


# ── ADDRESS / SSN / IBAN ─────────────────────────────────────────────

def test_address_with_postcode_and_city():
    addresses = _of_type(detect_pii("Habite au 123 rue de la Paix, 75001 Paris"), PIIType.ADDRESS)
    assert [a.value for a in addresses] == ["123 rue de la Paix, 75001 Paris"]


def test_address_with_hyphenated_street():
    text = "Adresse: 45 avenue des Champs-Élysées, 75008 Paris"
    addresses = _of_type(detect_pii(text), PIIType.ADDRESS)
    assert [a.value for a in addresses] == ["45 avenue des Champs-Élysées, 75008 Paris"]


def test_ssn_with_spaces():
    ssns = _of_type(detect_pii("SSN: 1 89 05 75 123 456 78"), PIIType.SSN)
    assert [s.value for s in ssns] == ["1 89 05 75 123 456 78"]


@pytest.mark.parametrize("nir", ["189057512345678", "1890575123456"])
def test_ssn_without_spaces(nir):
    ssns = _of_type(detect_pii(f"Numéro: {nir}"), PIIType.SSN)
    assert [s.value for s in ssns] == [nir]


def test_french_iban():
    text = "IBAN: FR76 1234 5678 90AB CDEF GHIJ K12"
    ibans = _of_type(detect_pii(text), PIIType.IBAN)
    assert [i.value for i in ibans] == ["FR76 1234 5678 90AB CDEF GHIJ K12"]


def test_german_iban():
    result = detect_pii("Compte DE89 3704 0044 0532 0130 00")
    assert PIIType.IBAN in result.detected_types


# ── Result shape ─────────────────────────────────────────────────────

def test_multiple_types_in_one_text():
    text = "Jean Dupont, jean@example.com, 06 12 34 56 78, NIR 1 89 05 75 123 456 78"
    result = detect_pii(text)
    assert result.total_count >= 4
    assert {PIIType.PERSON, PIIType.EMAIL, PIIType.PHONE, PIIType.SSN} <= result.detected_types


def test_entities_sorted_by_position():
    result = detect_pii("Call 06 12 34 56 78 or email test@example.com")
    starts = [e.start_index for e in result.entities]
    assert starts == sorted(starts)
    assert result.entities[0].type is PIIType.PHONE


def test_entity_value_matches_span():
    text = "Contact Jean Dupont at jean@example.com, 06 12 34 56 78"
    for e in detect_pii(text).entities:
        assert text[e.start_index:e.end_index] == e.value


def test_overlapping_categories_are_both_reported():
    result = detect_pii("12 rue Victor Hugo")
    assert {PIIType.ADDRESS, PIIType.PERSON} <= result.detected_types


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_text(text):
    result = detect_pii(text)
    assert result.total_count == 0
    assert result.detected_types == frozenset()


def test_entity_repr_hides_value():
    entity = detect_pii("jean@example.com").entities[0]
    assert "jean@example.com" not in repr(entity)


# ── By type / contains ───────────────────────────────────────────────

def test_detect_by_type_only_returns_that_type():
    text = "Contact Jean Dupont at jean@example.com, phone 06 12 34 56 78"
    result = detect_pii_by_type(text, PIIType.EMAIL)
    assert result.total_count == 1
    assert result.entities[0].value == "jean@example.com"


def test_contains_pii():
    assert contains_pii("Contact Jean Dupont")
    assert contains_pii("jean@example.com")
    assert not contains_pii("This is a clean text without any PII")
    assert not contains_pii("")


# ── Config ───────────────────────────────────────────────────────────

def test_allow_list():
    detector = Detector(DetectorConfig(allow_list={"dpo@example.com"}))
    result = detector.detect("Écrire à dpo@example.com ou jean@example.com")
    assert [e.value for e in result.entities] == ["jean@example.com"]


def test_skip_types():
    detector = Detector(DetectorConfig(skip_types={PIIType.PHONE}))
    result = detector.detect("jean@example.com, 06 12 34 56 78")
    assert result.detected_types == {PIIType.EMAIL}


def test_custom_scanner():
    def employee_ids(text):
        i = text.find("EMP-")
        if i < 0:
            return []
        return [PIIEntity(PIIType.PERSON, text[i:i + 8], i, i + 8, source="custom")]

    detector = Detector(DetectorConfig(custom_scanners=[employee_ids]))
    result = detector.detect("Badge EMP-1234 validé")
    assert [(e.value, e.source) for e in result.entities] == [("EMP-1234", "custom")]


def test_scan_patterns_restricted_types():
    matches = scan_patterns("Jean Dupont, jean@example.com", types={PIIType.PERSON})
    assert [m.type for m in matches] == [PIIType.PERSON]


# ── Presidio layer ───────────────────────────────────────────────────

class _FakeResult:
    def __init__(self, entity_type, start, end, score):
        self.entity_type, self.start, self.end, self.score = entity_type, start, end, score


class _FakeEngine:
    def __init__(self, results):
        self.results = results

    def analyze(self, text, language, entities, score_threshold):
        return [r for r in self.results if r.score >= score_threshold]


def test_presidio_results_are_mapped(monkeypatch):
    from rgpd_gateway import presidio_layer
    text = "rencontre avec jean dupont à 10h"
    engine = _FakeEngine([
        _FakeResult("PERSON", 15, 26, 0.85),
        _FakeResult("DATE_TIME", 29, 32, 0.9),   # no gateway category
        _FakeResult("PERSON", 0, 9, 0.1),        # below threshold
    ])
    monkeypatch.setattr(presidio_layer, "_get_engine", lambda language: engine)

    found = presidio_layer.scan_presidio(text)
    assert [(e.type, e.value, e.source) for e in found] == [
        (PIIType.PERSON, "jean dupont", "presidio"),
    ]


def test_presidio_skips_spans_covered_by_regex(monkeypatch):
    from rgpd_gateway import presidio_layer
    engine = _FakeEngine([_FakeResult("EMAIL_ADDRESS", 0, 16, 1.0)])
    monkeypatch.setattr(presidio_layer, "_get_engine", lambda language: engine)
    assert presidio_layer.scan_presidio("jean@example.com", exclude_spans=[(0, 16)]) == []


def test_detector_runs_presidio_layer_when_enabled(monkeypatch):
    from rgpd_gateway import presidio_layer
    text = "rencontre avec jean dupont"
    engine = _FakeEngine([_FakeResult("PERSON", 15, 26, 0.85)])
    monkeypatch.setattr(presidio_layer, "_get_engine", lambda language: engine)

    assert detect_pii(text).total_count == 0
    result = Detector(DetectorConfig(use_presidio=True)).detect(text)
    assert [e.value for e in result.entities] == ["jean dupont"]


def test_presidio_model_names():
    from rgpd_gateway.presidio_layer import _model_name
    assert _model_name("en") == "en_core_web_sm"
    assert _model_name("fr") == "fr_core_news_sm"
