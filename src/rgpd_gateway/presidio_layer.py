"""Optional NER layer backed by Presidio.

Catches person names the capitalization heuristics miss (lowercase
names, unusual spellings).  Presidio results are mapped onto the
gateway's PII categories; entity kinds without a counterpart are dropped.

Requires the ``presidio`` extra and the spaCy model for the language.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .types import PIIEntity, PIIType

if TYPE_CHECKING:
    from presidio_analyzer import AnalyzerEngine

# One engine per language, built on first use (loading spaCy is slow)
_engines: dict[str, AnalyzerEngine] = {}

ENTITY_MAP: dict[str, PIIType] = {
    "PERSON": PIIType.PERSON,
    "EMAIL_ADDRESS": PIIType.EMAIL,
    "PHONE_NUMBER": PIIType.PHONE,
    "IBAN_CODE": PIIType.IBAN,
}


def _model_name(language: str) -> str:
    # spaCy ships English as "web" models, other languages as "news" models
    if language == "en":
        return "en_core_web_sm"
    return f"{language}_core_news_sm"


def _get_engine(language: str) -> AnalyzerEngine:
    engine = _engines.get(language)
    if engine is None:
        from presidio_analyzer import AnalyzerEngine
        from presidio_analyzer.nlp_engine import NlpEngineProvider

        nlp_engine = NlpEngineProvider(nlp_configuration={
            "nlp_engine_name": "spacy",
            "models": [{"lang_code": language, "model_name": _model_name(language)}],
        }).create_engine()
        engine = _engines[language] = AnalyzerEngine(
            nlp_engine=nlp_engine, supported_languages=[language]
        )
    return engine


def _overlaps(start: int, end: int, spans: list[tuple[int, int]]) -> bool:
    return any(start < s_end and end > s_start for s_start, s_end in spans)


def scan_presidio(
    text: str,
    *,
    language: str = "fr",
    score_threshold: float = 0.35,
    exclude_spans: list[tuple[int, int]] | None = None,
) -> list[PIIEntity]:
    """Entities Presidio finds in text, ordered by position.

    Anything overlapping ``exclude_spans`` (what the regex layer already
    matched) is skipped.
    """
    results = _get_engine(language).analyze(
        text=text,
        language=language,
        entities=list(ENTITY_MAP),
        score_threshold=score_threshold,
    )

    covered = exclude_spans or []
    found = [
        PIIEntity(
            type=ENTITY_MAP[r.entity_type],
            value=text[r.start:r.end],
            start_index=r.start,
            end_index=r.end,
            confidence=r.score,
            source="presidio",
        )
        for r in results
        if r.entity_type in ENTITY_MAP and not _overlaps(r.start, r.end, covered)
    ]
    found.sort(key=lambda e: e.start_index)
    return found
