"""Regex patterns for French-context PII.

Deterministic and near-zero cost: every category is a compiled pattern
run over the whole text.  PERSON matches go through an extra filter that
cuts them at words known to produce false positives (greetings, titles, place
names, technical acronyms).
"""

from __future__ import annotations
import re

from .types import PIIEntity, PIIType

_UPPER = "A-ZÀ-ÖØ-Þ"
_LOWER = "a-zß-öø-ÿ"

# Capitalized word, hyphenated parts allowed: "Jean", "Marie-Claire"
_NAME_WORD = rf"[{_UPPER}][{_LOWER}]+(?:-[{_UPPER}][{_LOWER}]+)*"
# Surnames are often written in capitals: "Jean DUPONT"
_SURNAME_WORD = rf"(?:{_NAME_WORD}|[{_UPPER}]{{2,}}(?:-[{_UPPER}]{{2,}})*)"

_STREET_TYPES = (
    "rue|avenue|av\\.|boulevard|bd|place|pl\\.|allée|allee|chemin|impasse|quai"
    "|route|cours|square|passage|rond-point|voie|sentier|hameau|résidence"
    "|residence|lotissement|cité|cite|villa|esplanade|parvis|promenade"
)
_STREET_PARTICLE = r"(?:(?:de|du|des|la|le|les|aux|au)[ \t]+|[dDlL]['’])"
_STREET_WORD = rf"(?:[{_UPPER}]|\d{{1,2}}\b)[^\W_]*(?:-[^\W\d_]+)*"
_CITY = rf"[{_UPPER}][^\W\d_]*(?:-[{_UPPER}][^\W\d_]*)*"

# Each pattern: (entity_type, compiled_regex, score)
PATTERNS: list[tuple[PIIType, re.Pattern, float]] = [
    (PIIType.PERSON, re.compile(
        rf"(?<![\w-]){_NAME_WORD}(?:[ \t]+{_SURNAME_WORD})+(?![\w-])"
    ), 1.0),

    (PIIType.EMAIL, re.compile(
        r"(?<![\w.%+\-])[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9\-]+(?:\.[a-zA-Z0-9\-]+)*\.[a-zA-Z]{2,}\b"
    ), 1.0),

    # 06 12 34 56 78 / 06.12.34.56.78 / 0612345678 / +33 6 12 34 56 78
    (PIIType.PHONE, re.compile(
        r"(?<![\d+])"
        r"(?:(?:\+33|0033)[\s.\-]?(?:\(0\)[\s.\-]?)?[1-9]|0[1-9])"
        r"(?:[\s.\-]?\d{2}){4}"
        r"(?!\d)"
    ), 1.0),

    # 123 rue de la Paix, 75001 Paris
    (PIIType.ADDRESS, re.compile(
        rf"(?<![\d,.])\d{{1,4}}(?:[ \t]?(?i:bis|ter))?,?[ \t]+(?i:{_STREET_TYPES})[ \t]+"
        rf"{_STREET_PARTICLE}*{_STREET_WORD}"
        rf"(?:[ \t]+{_STREET_PARTICLE}*{_STREET_WORD}){{0,4}}"
        rf"(?:,?[ \t]*\d{{5}}[ \t]+{_CITY})?"
    ), 1.0),

    # NIR: sex, year, month, department (2A/2B for Corsica), commune, order, key
    (PIIType.SSN, re.compile(
        r"(?<![\dA-Za-z])[12][ .]?\d{2}[ .]?\d{2}[ .]?(?:\d{2}|2[ABab])"
        r"[ .]?\d{3}[ .]?\d{3}(?:[ .]?\d{2})?(?![\dA-Za-z])"
    ), 1.0),

    # FR76 1234 5678 90AB CDEF GHIJ K12 / DE89 3704 0044 0532 0130 00
    (PIIType.IBAN, re.compile(
        r"\b[A-Z]{2}\d{2}(?:[ ]?[A-Z0-9]{4}){2,7}(?:[ ]?[A-Z0-9]{1,3})?\b"
    ), 1.0),
]

PATTERNS_BY_TYPE: dict[PIIType, tuple[re.Pattern, float]] = {
    t: (p, s) for t, p, s in PATTERNS
}

# Capitalized words that start sentences, open letters or name places and
# acronyms, never a person on their own.
NON_NAME_WORDS: frozenset[str] = frozenset({
    # greetings / verbs at sentence start
    "Bonjour", "Bonsoir", "Salut", "Coucou", "Hello", "Hi", "Hey", "Dear",
    "Cher", "Chère", "Chers", "Contact", "Contacter", "Contactez", "Call",
    "Appeler", "Appelez", "Email", "Mail", "Courriel", "Tel", "Tél",
    "Merci", "Thanks", "Urgent", "Note", "Objet", "Subject", "Re", "Fwd",
    "Envoyer", "Send", "Voir", "See", "Signé", "Cordialement", "Regards",
    # titles
    "Monsieur", "Madame", "Mademoiselle", "Messieurs", "Mesdames", "Mr",
    "Mrs", "Ms", "Miss", "Dr", "Docteur", "Maître", "Me", "Mme", "Mlle",
    "Pr", "Professeur", "Sir",
    # determiners / pronouns
    "Le", "La", "Les", "Un", "Une", "Des", "Du", "De", "Je", "Tu", "Il",
    "Elle", "Nous", "Vous", "Ils", "Elles", "On", "Ce", "Cet", "Cette",
    "Ces", "Mon", "Ma", "Mes", "Ton", "Ta", "Tes", "Son", "Sa", "Ses",
    "Notre", "Votre", "Leur", "The", "A", "An", "This", "That", "These",
    "Those", "My", "Your", "Our", "Their", "We", "You", "He", "She", "It",
    "They", "Et", "Ou", "Mais", "Donc", "And", "Or", "But",
    # days / months
    "Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi", "Dimanche",
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin", "Juillet", "Août",
    "Septembre", "Octobre", "Novembre", "Décembre", "Monday", "Tuesday",
    "Wednesday", "Thursday", "Friday", "Saturday", "Sunday", "January",
    "February", "March", "April", "May", "June", "July", "August",
    "September", "October", "November", "December",
    # places
    "Paris", "Lyon", "Marseille", "Toulouse", "Nice", "Nantes", "Bordeaux",
    "Lille", "Strasbourg", "Montpellier", "Rennes", "France", "Europe",
    "Belgique", "Suisse", "Allemagne", "Espagne", "Italie",
    # acronyms / tech
    "API", "REST", "HTTP", "HTTPS", "JSON", "XML", "SQL", "RGPD", "GDPR",
    "CNIL", "PDF", "URL", "LLM", "IA", "AI", "UE", "EU", "DPIA", "DPO",
    "CSV", "HTML", "SaaS", "IBAN", "SSN", "NIR", "OK",
})


# Whitelisted words that may sit between a first name and a surname
_NAME_PARTICLES: frozenset[str] = frozenset({"De", "Du", "Des", "La", "Le"})


def is_whitelisted_name(word: str) -> bool:
    """True if a capitalized word is a known non-name."""
    return word in NON_NAME_WORDS


def scan_patterns(
    text: str, types: set[PIIType] | None = None
) -> list[PIIEntity]:
    """Run the patterns (all, or ``types`` only) against text.

    Matches of different categories may overlap; the masker resolves
    that.  Result is sorted by start index.
    """
    entities: list[PIIEntity] = []
    for entity_type, pattern, score in PATTERNS:
        if types is not None and entity_type not in types:
            continue
        for m in pattern.finditer(text):
            if entity_type is PIIType.PERSON:
                entities.extend(_split_person(text, m))
                continue
            entities.append(PIIEntity(
                type=entity_type,
                value=m.group(),
                start_index=m.start(),
                end_index=m.end(),
                confidence=score,
            ))
    return sort_entities(entities)


def sort_entities(entities: list[PIIEntity]) -> list[PIIEntity]:
    """Position order; longer span first on ties so masking stays stable."""
    return sorted(entities, key=lambda e: (e.start_index, -e.end_index, e.type.value))


def _split_person(text: str, match: re.Match) -> list[PIIEntity]:
    """Cut a PERSON candidate at whitelisted words.

    "Jean Dupont Et Marie Martin" gives two people.  Particles stay inside
    a name ("Charles De Gaulle") but never start or end one.  Runs of fewer
    than two words are dropped.
    """
    runs: list[list[re.Match]] = [[]]
    for word in re.finditer(r"\S+", match.group()):
        if not is_whitelisted_name(word.group()):
            runs[-1].append(word)
        elif word.group() in _NAME_PARTICLES and runs[-1]:
            runs[-1].append(word)
        else:
            runs.append([])

    base = match.start()
    entities = []
    for run in runs:
        while run and is_whitelisted_name(run[-1].group()):
            run.pop()
        if len(run) < 2:
            continue
        start = base + run[0].start()
        end = base + run[-1].end()
        entities.append(PIIEntity(
            type=PIIType.PERSON,
            value=text[start:end],
            start_index=start,
            end_index=end,
            confidence=1.0,
        ))
    return entities
