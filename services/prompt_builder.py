# services/prompt_builder.py
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from models import GenerationRequest, RouteType, Waypoint
from services.duration import format_travel_time, parse_duration_minutes
from services.route_type import is_tour_type

SYSTEM_PROMPT = """You are a professional travel writer creating SEO-optimized descriptions for
airport, intercity and private-driver shuttle routes.

Return strictly VALID JSON: one object, no markdown, no prose around it.
IMPORTANT:
- Include every field listed in outputSchema, with the stated JSON type.
- Never copy example or placeholder text from these instructions into a field.
- Use otherStops for real intermediate towns or hotels only; use [] when there are none.

Style:
- Factual and informative, not promotional. No superlatives.
- Neutral third person. Never "we", "our", "you" or "your".
- No URLs, prices, taxes, fees or operator names.
- seoDescription is plain text: paragraphs separated by a blank line. Keep any
  "Cities Served:" or "Hotels Served:" block from the operator notes as a list of "- " lines.
"""

ROUTE_TYPE_RULES: Dict[RouteType, List[str]] = {
    RouteType.AIRPORT_PICKUP: [
        "Describe a transfer that starts at the airport in the departure city and ends at the destination.",
        "Mention meeting travelers at arrivals and help with luggage only if the operator notes say so.",
    ],
    RouteType.AIRPORT_DROPOFF: [
        "Describe a transfer that ends at the airport in the destination city.",
        "Mention planning around flight departure times in neutral terms.",
    ],
    RouteType.CITY_TO_CITY: [
        "Describe a city-to-city shuttle between the departure and destination.",
        "Briefly mention one or two attractions at the destination.",
    ],
    RouteType.PRIVATE_DRIVER: [
        "Describe a private driver service for a custom day of sightseeing.",
        "If waypoints are provided, describe the stops in that order and return them unchanged in mapWaypoints.",
        "The route may start and end in the same city.",
    ],
    RouteType.SIGHTSEEING_SHUTTLE: [
        "Describe a sightseeing shuttle tour with scenic stops.",
        "Return the stops as mapWaypoints with accurate coordinates inside the country.",
        "The route may start and end in the same city.",
    ],
}

# Words that follow "hotel in" without naming a place.
OTHER_STOP_STOPLIST = frozenset({
    "the", "a", "an", "your", "our", "their", "town", "city", "area",
    "advance", "case", "order", "addition", "general", "question",
})

_HOTEL_IN = re.compile(r"(?i:\bhotels?\s+in)\s+([A-Za-zÀ-ÿ'’-]+(?:[ \t]+[A-Z][A-Za-zÀ-ÿ'’-]*){0,2})")

def extract_other_stops(text: str, exclude: Optional[List[str]] = None) -> List[str]:
    """Places named in 'hotel in <Place>' phrases, minus endpoints and stoplisted words."""
    if not text:
        return []
    skip = {e.strip().casefold() for e in (exclude or []) if e}
    stops: List[str] = []
    for m in _HOTEL_IN.finditer(text):
        place = m.group(1).strip(" '’-")
        first = place.split()[0].casefold() if place else ""
        if not place or first in OTHER_STOP_STOPLIST or place.casefold() in skip:
            continue
        if place not in stops:
            stops.append(place)
    return stops

def build_generation_request(
    *,
    departure_city: str,
    destination_city: str,
    departure_country: Optional[str],
    destination_country: str,
    route_type: RouteType,
    instructions: str = "",
    duration_hint: Optional[str] = None,
    waypoints: Optional[List[Waypoint]] = None,
    tour_link: Optional[str] = None,
) -> GenerationRequest:
    return GenerationRequest(
        departure_city=departure_city,
        destination_city=destination_city,
        departure_country=departure_country or destination_country,
        destination_country=destination_country,
        route_type=route_type,
        duration_hint=duration_hint,
        duration_minutes=parse_duration_minutes(duration_hint),
        known_stops=extract_other_stops(instructions, exclude=[departure_city, destination_city]),
        instructions=instructions,
        # Only private-driver pages carry a pre-generated stop list
        waypoints=list(waypoints) if waypoints and route_type == RouteType.PRIVATE_DRIVER else None,
        tour_link=str(tour_link) if tour_link else None,
    )

def _output_schema(req: GenerationRequest) -> Dict[str, Any]:
    dep, dest, country = req.departure_city, req.destination_city, req.destination_country
    schema: Dict[str, Any] = {
        "metaTitle": f"string: '{dep} to {dest}, {country} | Shuttle & Transfer Service' or similar, under 70 characters",
        "metaDescription": "string: 150-160 character neutral summary of the route and destination",
        "metaKeywords": "string: comma-separated search phrases for this route",
        "seoDescription": "string: 2-4 paragraphs, 120-200 words in total",
        "travelTime": f"string: approximate duration, for example '{format_travel_time(req.duration_minutes)}'",
        "otherStops": "array of strings: intermediate towns or hotels on the way, [] if none",
    }
    if is_tour_type(req.route_type):
        schema["mapWaypoints"] = "array of objects {name: string, lat: number, lng: number}"
    return schema

def build_user_payload(req: GenerationRequest) -> Dict[str, Any]:
    route: Dict[str, Any] = {
        "departureCity": req.departure_city,
        "departureCountry": req.departure_country,
        "destinationCity": req.destination_city,
        "destinationCountry": req.destination_country,
        "routeType": req.route_type.value,
        "durationMinutes": req.duration_minutes,
        "knownStops": req.known_stops,
    }
    if req.duration_hint:
        route["durationHint"] = req.duration_hint
    if req.tour_link:
        route["tourLink"] = req.tour_link

    payload: Dict[str, Any] = {
        "task": "Write the SEO content for this shuttle route page.",
        "route": route,
        "writingRules": ROUTE_TYPE_RULES[req.route_type],
        "outputSchema": _output_schema(req),
    }
    if req.instructions:
        payload["operatorNotes"] = req.instructions
        payload["writingRules"] = payload["writingRules"] + [
            "Use operatorNotes as the source of facts for the first paragraph; do not invent services they do not mention.",
        ]
    if req.waypoints:
        payload["waypoints"] = [w.model_dump() for w in req.waypoints]
    return payload

def build_messages(req: GenerationRequest) -> List[Dict[str, str]]:
    user = "Return a JSON object as described in outputSchema.\n\n" + json.dumps(
        build_user_payload(req), ensure_ascii=False, indent=2
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]
