# services/waypoint_service.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from config import settings
from errors import ContentPipelineError
from models import Waypoint
from request_context import get_request_id

log = logging.getLogger("waypoints")

MIN_STOPS = 2
MAX_STOPS = 6
STOPS_PER_HOUR = 1.2

@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

# Keyed by lower-cased country name. Boxes are loose on purpose: they only
# have to reject coordinates that land in the wrong part of the world.
COUNTRY_BOUNDS: Mapping[str, BoundingBox] = MappingProxyType({
    "costa rica": BoundingBox(min_lat=8.0, max_lat=11.2, min_lng=-85.9, max_lng=-82.5),
    "panama": BoundingBox(min_lat=7.2, max_lat=9.7, min_lng=-83.1, max_lng=-77.1),
    "nicaragua": BoundingBox(min_lat=10.7, max_lat=15.1, min_lng=-87.7, max_lng=-82.6),
    "guatemala": BoundingBox(min_lat=13.7, max_lat=17.9, min_lng=-92.3, max_lng=-88.2),
    "belize": BoundingBox(min_lat=15.8, max_lat=18.5, min_lng=-89.3, max_lng=-87.4),
    "mexico": BoundingBox(min_lat=14.5, max_lat=32.8, min_lng=-118.5, max_lng=-86.7),
})

def bounds_for(country: Optional[str]) -> Optional[BoundingBox]:
    if not country:
        return None
    return COUNTRY_BOUNDS.get(country.strip().lower())

def target_stop_count(duration_minutes: int) -> int:
    """clamp(floor(hours * 1.2), 2, 6)"""
    hours = duration_minutes / 60
    return max(MIN_STOPS, min(MAX_STOPS, math.floor(hours * STOPS_PER_HOUR)))

def build_waypoint_messages(origin: str, country: str, duration_minutes: int, stops: int) -> List[dict]:
    hours = duration_minutes / 60
    prompt = (
        f"Suggest a realistic sightseeing driving route in or near {origin}, {country} "
        f"that takes approximately {hours:.1f} hours. Include exactly {stops} interesting and "
        f"geographically logical stops (landmarks, parks, scenic viewpoints, museums or unique "
        f"local attractions). Every stop must be inside {country} and close to {origin}. "
        'Return ONLY a JSON object with a single key "stops" whose value is an array of objects, '
        'each with "name" (string), "lat" (number) and "lng" (number). '
        "Coordinates must be accurate for the named place."
    )
    return [
        {"role": "system", "content": "You are a local travel expert. Reply with JSON only."},
        {"role": "user", "content": prompt},
    ]

def decode_stops(payload: Any) -> List[Waypoint]:
    """Keep every well-formed stop; skip the rest."""
    stops = payload.get("stops") if isinstance(payload, dict) else payload
    if not isinstance(stops, list):
        return []
    out: List[Waypoint] = []
    for raw in stops:
        if not isinstance(raw, dict):
            continue
        try:
            out.append(Waypoint.model_validate(raw, strict=True))
        except PydanticValidationError:
            log.debug("Skipping malformed stop", extra={"stop": str(raw)[:200]})
    return out

def apply_geofence(stops: List[Waypoint], country: Optional[str]) -> List[Waypoint]:
    box = bounds_for(country)
    if box is None:
        log.warning("No bounding box configured; geofence skipped", extra={"country": country})
        return list(stops)
    kept = [s for s in stops if box.contains(s.lat, s.lng)]
    dropped = len(stops) - len(kept)
    if dropped:
        log.info(
            "Geofence dropped stops",
            extra={"country": country, "dropped": dropped, "names": [s.name for s in stops if s not in kept]},
        )
    return kept

def generate_waypoints(
    origin: str,
    duration_minutes: int,
    country: str,
    *,
    client=None,
) -> List[Waypoint]:
    """
    Ask the text-generation service for named stops near `origin`.
    Enrichment only: any failure yields an empty list.
    """
    rid = get_request_id()
    if not origin or not duration_minutes or duration_minutes <= 0:
        log.warning("Invalid waypoint input", extra={"request_id": rid, "origin": origin, "duration_minutes": duration_minutes})
        return []

    stops_wanted = target_stop_count(duration_minutes)
    log.info(
        "Requesting waypoints",
        extra={"request_id": rid, "origin": origin, "country": country, "stops": stops_wanted},
    )
    try:
        if client is None:
            from services.llm_client import TextGenerationClient  # deferred: needs an API key
            client = TextGenerationClient()
        payload = client.complete_json(
            build_waypoint_messages(origin, country, duration_minutes, stops_wanted),
            temperature=settings.WAYPOINT_TEMPERATURE,
        )
    except ContentPipelineError as e:
        log.warning("Waypoint generation failed: %s", e, extra={"request_id": rid, "origin": origin})
        return []
    except Exception:
        log.exception("Unexpected waypoint generation error", extra={"request_id": rid, "origin": origin})
        return []

    stops = apply_geofence(decode_stops(payload), country)[:stops_wanted]
    log.info("Waypoints ready", extra={"request_id": rid, "origin": origin, "count": len(stops)})
    return stops
