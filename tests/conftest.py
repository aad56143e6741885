from __future__ import annotations

from typing import Any, Callable, Dict, List, Union

import pytest

from config import settings

Scripted = Union[Dict[str, Any], Exception, Callable[[List[Dict[str, str]]], Any]]

class FakeTextClient:
    """Plays back scripted replies; the last one repeats once the script runs out."""

    def __init__(self, *script: Scripted):
        self.script = list(script)
        self.calls: List[Dict[str, Any]] = []

    def complete_json(self, messages, *, temperature=None, max_tokens=None):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        idx = min(len(self.calls) - 1, len(self.script) - 1)
        step = self.script[idx]
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(messages)
        return step

@pytest.fixture(autouse=True)
def _pipeline_settings(monkeypatch):
    monkeypatch.setattr(settings, "GENERATION_MAX_ATTEMPTS", 3)
    monkeypatch.setattr(settings, "GENERATION_BACKOFF_SECONDS", 1.0)

@pytest.fixture
def sleeps() -> List[float]:
    return []

@pytest.fixture
def fake_sleep(sleeps) -> Callable[[float], None]:
    return sleeps.append

@pytest.fixture
def good_payload() -> Dict[str, Any]:
    return {
        "metaTitle": "San Jose to La Fortuna, Costa Rica | Shuttle & Transfer Service",
        "metaDescription": "Shared shuttle between San Jose and La Fortuna with hotel pickup.",
        "metaKeywords": "San Jose shuttle, La Fortuna shuttle, Costa Rica transfer",
        "seoDescription": (
            "This shuttle connects San Jose and La Fortuna. The vehicle is air-conditioned and has WiFi.\n\n"
            "La Fortuna sits at the foot of Arenal Volcano. Hot springs and waterfalls are nearby."
        ),
        "travelTime": "3.5 hours",
        "otherStops": ["San Ramon"],
    }
