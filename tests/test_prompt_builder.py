from __future__ import annotations

import json

from models import RouteType, Waypoint
from services.prompt_builder import build_generation_request, build_messages, extract_other_stops

def _user_payload(messages):
    return json.loads(messages[1]["content"].split("\n\n", 1)[1])

def _request(route_type=RouteType.CITY_TO_CITY, **overrides):
    kwargs = dict(
        departure_city="San Jose",
        destination_city="La Fortuna",
        departure_country=None,
        destination_country="Costa Rica",
        route_type=route_type,
    )
    kwargs.update(overrides)
    return build_generation_request(**kwargs)

def test_extract_other_stops_skips_stoplist_and_endpoints():
    text = "Pickup at any hotel in Tamarindo or hotel in the area. Drop at hotel in La Fortuna"
    assert extract_other_stops(text, exclude=["La Fortuna"]) == ["Tamarindo"]
    assert extract_other_stops("") == []

def test_request_fills_departure_country_and_duration():
    req = _request(duration_hint="2.5 hours")
    assert req.departure_country == "Costa Rica"
    assert req.duration_minutes == 150

def test_known_stops_come_from_instructions():
    req = _request(instructions="Drop-off at any hotel in Tamarindo.")
    assert req.known_stops == ["Tamarindo"]
    assert _user_payload(build_messages(req))["route"]["knownStops"] == ["Tamarindo"]

def test_waypoints_only_forwarded_for_private_driver():
    stops = [Waypoint(name="Arenal Volcano", lat=10.46, lng=-84.70)]
    assert _request(RouteType.CITY_TO_CITY, waypoints=stops).waypoints is None

    req = _request(RouteType.PRIVATE_DRIVER, waypoints=stops)
    assert req.waypoints == stops
    payload = _user_payload(build_messages(req))
    assert payload["waypoints"] == [{"name": "Arenal Volcano", "lat": 10.46, "lng": -84.70}]

def test_map_waypoints_requested_only_for_tours():
    assert "mapWaypoints" not in _user_payload(build_messages(_request()))["outputSchema"]
    for rt in (RouteType.PRIVATE_DRIVER, RouteType.SIGHTSEEING_SHUTTLE):
        assert "mapWaypoints" in _user_payload(build_messages(_request(rt)))["outputSchema"]

def test_messages_carry_route_type_and_notes():
    messages = build_messages(_request(RouteType.AIRPORT_PICKUP, instructions="Meet at arrivals."))
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[0]["content"].startswith("You are a professional travel writer")
    payload = _user_payload(messages)
    assert payload["route"]["routeType"] == "AirportPickup"
    assert payload["operatorNotes"] == "Meet at arrivals."
    assert "operatorNotes" not in _user_payload(build_messages(_request()))
