from __future__ import annotations

import pytest

from errors import ResponseParseError, TransportError
from models import Waypoint
from services.waypoint_service import (
    COUNTRY_BOUNDS,
    apply_geofence,
    bounds_for,
    decode_stops,
    generate_waypoints,
    target_stop_count,
)
from tests.conftest import FakeTextClient

@pytest.mark.parametrize("minutes,stops", [(30, 2), (60, 2), (180, 3), (240, 4), (330, 6), (600, 6)])
def test_target_stop_count_is_clamped(minutes, stops):
    assert target_stop_count(minutes) == stops

def test_geofence_drops_points_outside_country():
    new_york = Waypoint(name="X", lat=40.0, lng=-74.0)
    san_jose = Waypoint(name="Y", lat=9.93, lng=-84.08)
    assert apply_geofence([new_york, san_jose], "Costa Rica") == [san_jose]

def test_geofence_skipped_for_unknown_country():
    stops = [Waypoint(name="X", lat=40.0, lng=-74.0)]
    assert apply_geofence(stops, "Atlantis") == stops

def test_bounds_lookup_ignores_case_and_spaces():
    assert bounds_for(" COSTA RICA ") is COUNTRY_BOUNDS["costa rica"]
    assert bounds_for(None) is None

def test_decode_stops_keeps_only_well_formed_entries():
    stops = decode_stops({"stops": [
        {"name": "Arenal Volcano", "lat": 10.46, "lng": -84.70},
        {"name": "Bad lat", "lat": "10.1", "lng": -84.0},
        {"name": "", "lat": 10.0, "lng": -84.0},
        {"name": "Off the map", "lat": 123.0, "lng": -84.0},
        "not an object",
    ]})
    assert [s.name for s in stops] == ["Arenal Volcano"]
    assert decode_stops({"stops": "none"}) == []
    assert decode_stops([]) == []

def _stops_reply(messages):
    return {"stops": [
        {"name": "Times Square", "lat": 40.75, "lng": -73.98},
        {"name": "Arenal Volcano", "lat": 10.46, "lng": -84.70},
        {"name": "bad", "lat": "x", "lng": 1},
        {"name": "La Fortuna Waterfall", "lat": 10.44, "lng": -84.67},
        {"name": "Mistico Hanging Bridges", "lat": 10.52, "lng": -84.76},
        {"name": "Lake Arenal", "lat": 10.53, "lng": -84.90},
    ]}

def test_generate_waypoints_filters_and_truncates():
    client = FakeTextClient(_stops_reply)
    stops = generate_waypoints("La Fortuna", 180, "Costa Rica", client=client)

    assert [s.name for s in stops] == ["Arenal Volcano", "La Fortuna Waterfall", "Mistico Hanging Bridges"]
    box = COUNTRY_BOUNDS["costa rica"]
    assert all(box.contains(s.lat, s.lng) for s in stops)

    prompt = client.calls[0]["messages"][1]["content"]
    assert "exactly 3" in prompt
    assert "La Fortuna" in prompt

@pytest.mark.parametrize("failure", [
    TransportError("timed out"),
    ResponseParseError("not json"),
    RuntimeError("boom"),
])
def test_generate_waypoints_failures_yield_empty_list(failure):
    assert generate_waypoints("La Fortuna", 240, "Costa Rica", client=FakeTextClient(failure)) == []

def test_generate_waypoints_bad_payload_yields_empty_list():
    assert generate_waypoints("La Fortuna", 240, "Costa Rica", client=FakeTextClient({"stops": "nope"})) == []

def test_generate_waypoints_rejects_invalid_input_without_calling():
    client = FakeTextClient({"stops": []})
    assert generate_waypoints("", 240, "Costa Rica", client=client) == []
    assert generate_waypoints("La Fortuna", 0, "Costa Rica", client=client) == []
    assert client.calls == []
