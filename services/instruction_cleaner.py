# services/instruction_cleaner.py
"""
Cleans operator notes before they are handed to the text-generation service.

Operators paste listings straight from booking sites, so the notes arrive
with links, sales copy and first-person phrasing that must not leak into the
generated route page.
"""
from __future__ import annotations

import logging
import re
from typing import List, Pattern, Tuple

log = logging.getLogger("pipeline")

_URL_RE = re.compile(r"https?://\S+")

# (pattern, replacement) pairs applied in order
_BOILERPLATE: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"read more about.*$", re.I | re.M), ""),
    (re.compile(r"visit (?:the )?official page.*$", re.I | re.M), ""),
    (re.compile(r"(?:click here|book (?:now|today|online))\b[^.!?\n]*[.!?]?", re.I), ""),
    (re.compile(r"\bviator\.com\b", re.I), "BookShuttles.com"),
    (re.compile(r"affiliate (?:link|service|partner)", re.I), "service"),
    (re.compile(r"Viator affiliate", re.I), "shuttle service"),
)

# Order matters: multi-word forms first, bare pronouns last.
_FIRST_PERSON: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"\b(?:we|our)\s+(?:offer|provide|have)\b", re.I), "the service offers"),
    (re.compile(r"\b(?:you|your)\s+(?:can|will)\s+(?:enjoy|experience|receive)\b", re.I), "travelers can enjoy"),
    (re.compile(r"\b(?:we|our)\s+(?:staff|team|drivers)\b", re.I), "the staff"),
    (re.compile(r"\b(?:you|your)\s+(?:journey|trip|travel)\b", re.I), "the journey"),
    (re.compile(r"\b(?:we|our)\s+vehicles\b", re.I), "the vehicles"),
    (re.compile(r"\byou(?:'ll|’ll| will)\b", re.I), "travelers will"),
    (re.compile(r"\byour\b", re.I), "the"),
    (re.compile(r"\bwe\b", re.I), "the service"),
    (re.compile(r"\bour\b", re.I), "the"),
    (re.compile(r"\byou\b", re.I), "travelers"),
)

_SUPERLATIVES = re.compile(
    r"\b(?:best|top|premier|luxury|exclusive|exceptional|outstanding|unparalleled"
    r"|amazing|incredible|extraordinary|spectacular|remarkable)\b",
    re.I,
)

_TAX_WORD = re.compile(r"\b(?:tax|taxes|fee|fees)\b", re.I)
# One sentence with its closing punctuation; consecutive chunks cover a whole line.
_SENTENCE_CHUNK = re.compile(r"[^.!?\n]+[.!?]*|[.!?]+")

_WHEELCHAIR_DISCLAIMER = re.compile(r"[ \t]*\bnot wheelchair accessible\b[.!]?", re.I)

SECTION_HEADERS = (
    "Cities Served:",
    "Hotels Served:",
    "What's Included:",
    "What Is Included:",
    "Important Information:",
    "Additional Info:",
    "Pickup Details:",
    "Departure Point:",
    "Return Details:",
)

KNOWN_LIST_ITEMS = (
    "Bottled water",
    "Air-conditioned vehicle",
    "WiFi on board",
    "Hotel pickup",
    "Private transportation",
    "Flight monitoring",
    "Infant seats available",
    "Service animals allowed",
    "Stroller accessible",
    "Most travelers can participate",
)

def _alternation(phrases) -> str:
    return "|".join(re.escape(p) for p in phrases)

_HEADER_INLINE = re.compile(rf"(?<=\S)[ \t]+({_alternation(SECTION_HEADERS)})", re.I)
_HEADER_AFTER_LINE = re.compile(rf"(?<=[^\n])\n(?=(?:{_alternation(SECTION_HEADERS)}))", re.I)
_LIST_ITEM_AFTER = re.compile(
    rf"(:|\b(?:{_alternation(KNOWN_LIST_ITEMS)}))[ \t]+(?=(?:{_alternation(KNOWN_LIST_ITEMS)})\b)",
    re.I,
)

# Chars scanned after a lead phrase; keeps extraction linear in the note length.
CITY_WINDOW = 200
HOTEL_WINDOW = 300

_CITY_LEADS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b(?:between|connecting)\s+", re.I),
    re.compile(r"\bcities\s*(?:include|:)\s*", re.I),
    re.compile(r"\b(?:provides service to|serves)\s+", re.I),
)
_CLAUSE_END = re.compile(r"[^\w \t,&]")
_CONJUNCTION = re.compile(r"\s(?:and|&)\s|\s*&\s*", re.I)

_HOTEL_LEAD = re.compile(r"\b(?:hotels?|accommodations?|lodging)(?:\s+include[sd]?|\s*:)[ \t]*", re.I)
_HOTEL_NAME = re.compile(
    r"\b([A-Z][\w'’-]*(?:[ \t]+(?:[A-Z][\w'’-]*|de|del|la|las|los|el|y|of|the|&)){0,5}"
    r"[ \t]+(?:Inn|Hotel|Lodge|Motel|Suites|Resort|Plaza))\b"
)

def _tidy(text: str) -> str:
    text = re.sub(r"[ \t]{2,}", " ", text)
    text = re.sub(r"[ \t]+([,.;:!?])", r"\1", text)
    text = re.sub(r"(?m)^[ \t]+|[ \t]+$", "", text)
    return text

def _strip_boilerplate(text: str) -> str:
    text = _URL_RE.sub("", text)
    for pattern, repl in _BOILERPLATE:
        text = pattern.sub(repl, text)
    return text

def _to_third_person(text: str) -> str:
    for pattern, repl in _FIRST_PERSON:
        text = pattern.sub(repl, text)
    return text

def _drop_tax_sentences(text: str) -> str:
    lines = []
    for line in text.split("\n"):
        lines.append("".join(s for s in _SENTENCE_CHUNK.findall(line) if not _TAX_WORD.search(s)))
    return "\n".join(lines)

def _clause_after(match: re.Match, text: str, limit: int) -> str:
    window = text[match.end():match.end() + limit]
    stop = _CLAUSE_END.search(window)
    return window[:stop.start()] if stop else window

def extract_cities(text: str) -> List[str]:
    for lead in _CITY_LEADS:
        m = lead.search(text)
        if not m:
            continue
        clause = _clause_after(m, text, CITY_WINDOW)
        conjunctions = list(_CONJUNCTION.finditer(clause))
        if not conjunctions:
            continue
        # the list runs to the first comma after its last "and"
        comma = clause.find(",", conjunctions[-1].end())
        chunk = clause[:comma] if comma != -1 else clause
        chunk = _CONJUNCTION.sub(", ", chunk)
        cities = [c.strip() for c in chunk.split(",")]
        cities = [c for c in cities if len(c) > 1]
        if len(cities) >= 2:
            return cities
    return []

def extract_hotels(text: str) -> List[str]:
    """Hotel names listed after 'Hotels include' / 'Accommodations:' style lead-ins."""
    hotels: List[str] = []
    for lead in _HOTEL_LEAD.finditer(text):
        clause = text[lead.end():lead.end() + HOTEL_WINDOW].split("\n", 1)[0].split(".", 1)[0]
        for m in _HOTEL_NAME.finditer(clause):
            name = re.sub(r"^(?:The|A|An)[ \t]+", "", m.group(1).strip())
            if len(name) > 5 and name not in hotels:
                hotels.append(name)
    return hotels

def clean_editor_notes(raw: str) -> str:
    """Drop links, sales copy, tax/fee talk and first-person voice."""
    if not raw or not raw.strip():
        return ""
    cleaned = raw.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _strip_boilerplate(cleaned)
    cleaned = _drop_tax_sentences(cleaned)
    cleaned = _to_third_person(cleaned)
    cleaned = _SUPERLATIVES.sub("", cleaned)
    return _tidy(cleaned).strip()

def clean_editor_notes_strict(raw: str) -> str:
    """
    clean_editor_notes plus structure: section headers and known list items on
    their own lines, explicit "Cities Served:" / "Hotels Served:" blocks, and
    the misleading "Not wheelchair accessible" disclaimer removed.
    """
    if not raw or not raw.strip():
        return ""
    # Removed before anything else so no later step can resurrect it.
    cleaned = _WHEELCHAIR_DISCLAIMER.sub("", raw)
    cleaned = clean_editor_notes(cleaned)
    if not cleaned:
        return ""

    cleaned = _HEADER_INLINE.sub(r"\n\n\1", cleaned)
    cleaned = _HEADER_AFTER_LINE.sub("\n\n", cleaned)
    cleaned = _LIST_ITEM_AFTER.sub(r"\1\n", cleaned)

    if "cities served:" not in cleaned.lower():
        cities = extract_cities(cleaned)
        if cities:
            cleaned += "\n\nCities Served:\n" + "\n".join(f"- {c}" for c in cities)
    if "hotels served:" not in cleaned.lower():
        hotels = extract_hotels(cleaned)
        if hotels:
            cleaned += "\n\nHotels Served:\n" + "\n".join(f"- {h}" for h in hotels)

    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    log.debug("Notes cleaned (strict)", extra={"raw_chars": len(raw), "clean_chars": len(cleaned)})
    return cleaned.strip()
