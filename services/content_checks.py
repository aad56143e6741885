# services/content_checks.py
from __future__ import annotations

import re
from typing import List

_URL = re.compile(r"https?://")
_OPERATOR_NAMES = re.compile(r"\b(?:Viator|Cantrip Shuttle|GetYourGuide)\b", re.I)
_FIRST_PERSON = re.compile(r"\b(?:we|our|you|your)\b", re.I)
_SENTENCE_SPLIT = re.compile(r"[.!?]\s+")

MIN_SENTENCES = 6
MAX_SENTENCES = 12

def validate_generated_content(output: str) -> List[str]:
    """Advisory SEO/formatting issues for an editor to review. Empty list means clean."""
    if not output:
        return ["Content is empty."]
    issues: List[str] = []
    lower = output.lower()

    if "\n\n" not in output:
        issues.append("Content is only one paragraph. Add paragraph breaks for better readability.")
    if _URL.search(output):
        issues.append("External URL detected; it must be removed.")
    if _OPERATOR_NAMES.search(output):
        issues.append("Shuttle operator name found; it should not be included.")
    if _FIRST_PERSON.search(output):
        issues.append("First-person phrasing found; rewrite to neutral third-person.")

    sentences = len(_SENTENCE_SPLIT.split(output))
    if sentences < MIN_SENTENCES:
        issues.append(f"Content is too short (<{MIN_SENTENCES} sentences). Add more information for better SEO.")
    elif sentences > MAX_SENTENCES:
        issues.append(f"Content is very long (>{MAX_SENTENCES} sentences). Consider trimming for better readability.")

    if ("city" in lower or "cities" in lower) and "Cities Served:" not in output:
        issues.append('Missing "Cities Served:" section. Format city lists properly.')
    if ("hotel" in lower or "accommodation" in lower) and "Hotels Served:" not in output:
        issues.append('Missing "Hotels Served:" section. Format hotel lists properly.')
    return issues
