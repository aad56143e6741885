# services/duration.py
from __future__ import annotations

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

DEFAULT_DURATION_MINUTES = 240

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")

def parse_duration_minutes(hint: Optional[str]) -> int:
    """'3.5 hours' -> 210. The first number is read as hours; 240 when there is none."""
    if not hint:
        return DEFAULT_DURATION_MINUTES
    m = _NUMBER_RE.search(hint.replace(",", "."))
    if not m:
        return DEFAULT_DURATION_MINUTES
    minutes = (Decimal(m.group(0)) * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    if minutes <= 0:
        return DEFAULT_DURATION_MINUTES
    return int(minutes)

def format_travel_time(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} minutes"
    hours = Decimal(minutes) / Decimal(60)
    hours = hours.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP).normalize()
    text = format(hours, "f")
    return f"{text} hour" if text == "1" else f"{text} hours"
