from __future__ import annotations

import pytest

from services.amenity_matcher import (
    AMENITY_TRIGGERS,
    CANONICAL_AMENITIES,
    match_amenities,
    normalize_text,
    update_route_amenities,
)

def test_air_conditioning_and_wifi():
    assert match_amenities("Air-conditioned van with free WiFi") == ["A/C", "WiFi"]

def test_union_across_passages_sorted():
    assert match_amenities("Free WiFi", "Child seat on request") == ["Car Seats", "WiFi"]

def test_punctuation_is_ignored():
    assert match_amenities("Includes (Wi-Fi)") == ["WiFi"]
    assert "A/C" in match_amenities("A.C. minivan")

def test_missing_passages_are_skipped():
    assert match_amenities(None, "", "Daily departures.") == []
    assert match_amenities() == []

def test_substring_matching_known_false_positive():
    # triggers match as substrings, so "ac" fires inside "pharmacy"
    assert "A/C" in match_amenities("Pickup at the local pharmacy")

def test_normalize_text():
    assert normalize_text("  Hotel  Pickup.\n(Free) •  WiFi ") == "hotel pickup free wifi"

def test_trigger_table_is_read_only():
    with pytest.raises(TypeError):
        AMENITY_TRIGGERS["shuttle"] = "Private Shuttle"

def test_every_trigger_maps_to_a_canonical_name():
    assert set(AMENITY_TRIGGERS.values()) <= set(CANONICAL_AMENITIES)

class FakeStore:
    def __init__(self):
        self.ids = {}

    def find_or_create(self, name):
        return self.ids.setdefault(name, f"am-{len(self.ids) + 1}")

class FakeRoutes:
    def __init__(self):
        self.saved = {}

    def set_route_amenities(self, route_id, amenity_ids):
        self.saved[route_id] = list(amenity_ids)

def test_update_route_amenities_replaces_set():
    store, routes = FakeStore(), FakeRoutes()
    ids = update_route_amenities("route-1", ["A/C", "WiFi"], store, routes)
    assert ids == ["am-1", "am-2"]
    assert routes.saved == {"route-1": ["am-1", "am-2"]}

    ids = update_route_amenities("route-1", ["WiFi"], store, routes)
    assert ids == ["am-2"]
    assert routes.saved["route-1"] == ["am-2"]

def test_update_route_amenities_propagates_store_errors():
    class BrokenStore:
        def find_or_create(self, name):
            raise RuntimeError("db down")

    routes = FakeRoutes()
    with pytest.raises(RuntimeError):
        update_route_amenities("route-1", ["WiFi"], BrokenStore(), routes)
    assert routes.saved == {}

def test_vehicle_sentence_yields_exactly_ac_and_wifi():
    assert set(match_amenities("The vehicle is air-conditioned and has WiFi")) == {"A/C", "WiFi"}
