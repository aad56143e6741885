# services/amenity_matcher.py
"""
Phrase-trigger classifier for canonical amenities.

Matching is plain substring containment on normalized text, with no word
boundaries: short triggers such as "ac" also fire inside longer words.
"""
from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Protocol

log = logging.getLogger("amenities")

BILINGUAL_DRIVER = "Bilingual Driver"
HOTEL_PICKUP = "Hotel Pickup"
AIR_CONDITIONING = "A/C"
WIFI = "WiFi"
BOTTLED_WATER = "Bottled Water"
STOPS_ON_REQUEST = "Driver Will Make Stops on Request"
FLIGHT_DELAY_FRIENDLY = "Flight Delay Friendly"
PRIVATE_SHUTTLE = "Private Shuttle"
WHEELCHAIR_ACCESSIBLE = "Wheelchair Accessible"
CAR_SEATS = "Car Seats"
SERVICE_ANIMALS = "Service Animals Allowed"

CANONICAL_AMENITIES = (
    BILINGUAL_DRIVER,
    HOTEL_PICKUP,
    AIR_CONDITIONING,
    WIFI,
    BOTTLED_WATER,
    STOPS_ON_REQUEST,
    FLIGHT_DELAY_FRIENDLY,
    PRIVATE_SHUTTLE,
    WHEELCHAIR_ACCESSIBLE,
    CAR_SEATS,
    SERVICE_ANIMALS,
)

_TRIGGERS_BY_AMENITY = {
    BILINGUAL_DRIVER: (
        "certified driver", "experienced driver", "friendly driver", "bilingual driver",
        "english speaking driver", "spanish speaking driver", "english and spanish",
        "speaks english", "speaks spanish", "experienced and friendly drivers",
        "experienced and friendly",
    ),
    HOTEL_PICKUP: (
        "hotel", "resort", "pickup from hotel", "dropoff at hotel", "hotel pickup",
        "hotel drop", "from sjo airport to hotel", "from hotel resort to sjo airport",
        "to the hotel",
    ),
    AIR_CONDITIONING: (
        "air-conditioned", "air conditioned", "a/c", "ac", "air conditioning",
        "climate control", "air conditioned vehicle", "comfortable air conditioned",
        "fully equipped with ac", "modern mini bus fully equipped",
    ),
    WIFI: ("wi-fi", "wifi", "wireless internet", "internet"),
    BOTTLED_WATER: (
        "bottle of water", "complimentary water", "water provided", "free water",
        "bottled water", "bottle of water for each", "service include a bottle of water",
        "service includes a bottle of water", "service include a bottle",
    ),
    STOPS_ON_REQUEST: (
        "photo stop", "stop for photos", "buy at any store", "rest stop", "restaurant stop",
        "stops on request", "can stop", "will stop", "make stops", "bathrooms",
        "take a picture", "anything that travelers would like",
        "anything travelers would like to do", "stopping to take photos", "stopping to take",
        "driver can stop", "along the way if",
    ),
    FLIGHT_DELAY_FRIENDLY: (
        "flight delay", "waiting for delayed flight", "no extra charge for delays",
        "flight monitoring", "monitor flight", "track flight", "delayed flight",
        "flight is delayed", "if for any reason the flight is delayed",
        "no additional cost for the wait", "no matter what time", "let us know of the delay",
        "will be waiting for travelers", "no additional cost", "holding a sign",
        "holding a sign with the name", "travelers dont have to worry",
        "service will be waiting", "no matter what time travelers arrive",
    ),
    PRIVATE_SHUTTLE: (
        "private transfer", "just for the group", "private transportation", "private vehicle",
        "private service", "private shuttle", "exclusive service", "exclusive transfer",
        "private tour/activity", "this is a private transfer", "this is a private tour",
        "only the group", "only your group", "this is a private tour/activity",
        "only your group will participate", "private tour", "this is a private",
        "only the group will participate",
    ),
    WHEELCHAIR_ACCESSIBLE: (
        "wheelchair", "accessible", "handicap", "disability", "wheelchair accessible",
        "transportation is wheelchair accessible", "surfaces are wheelchair accessible",
        "most travelers can participate", "stroller accessible",
    ),
    CAR_SEATS: (
        "infant seat", "child seat", "car seat", "stroller", "baby seat", "booster seat",
        "infant seats available", "travelling with children",
    ),
    SERVICE_ANIMALS: (
        "service animal", "service animals allowed", "travelling with pets",
        "if travelers are travelling with pets", "indicate in the comments",
        "indicate it in the comments", "indicate in the additional comments",
    ),
}

_PUNCTUATION = re.compile(r"[.,•()]")
_WHITESPACE = re.compile(r"\s+")

def normalize_text(text: str) -> str:
    text = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()

# Normalized trigger phrase -> canonical amenity name. Read-only for the process lifetime.
AMENITY_TRIGGERS: Mapping[str, str] = MappingProxyType({
    normalize_text(trigger): amenity
    for amenity, triggers in _TRIGGERS_BY_AMENITY.items()
    for trigger in triggers
})

def match_amenities(*passages: Optional[str]) -> List[str]:
    """
    Canonical amenity names whose trigger phrase appears in any passage.
    Returns a sorted, de-duplicated list; never raises.
    """
    matched = set()
    for idx, passage in enumerate(passages):
        if not passage or not isinstance(passage, str):
            continue
        normalized = normalize_text(passage)
        for trigger, amenity in AMENITY_TRIGGERS.items():
            if amenity not in matched and trigger in normalized:
                matched.add(amenity)
                log.debug("Amenity trigger hit", extra={"passage": idx, "trigger": trigger, "amenity": amenity})
    result = sorted(matched)
    log.info("Amenities matched", extra={"amenities": result})
    return result

class AmenityStore(Protocol):
    def find_or_create(self, name: str) -> str: ...

class RouteAmenityWriter(Protocol):
    def set_route_amenities(self, route_id: str, amenity_ids: List[str]) -> None: ...

def update_route_amenities(
    route_id: str,
    amenity_names: Iterable[str],
    store: AmenityStore,
    routes: RouteAmenityWriter,
) -> List[str]:
    """
    Resolve each matched name to a stored amenity id and replace the route's
    amenity set with exactly those ids. Collaborator errors propagate.
    """
    ids: List[str] = []
    for name in amenity_names:
        amenity_id = store.find_or_create(name)
        if amenity_id not in ids:
            ids.append(amenity_id)
    routes.set_route_amenities(route_id, ids)
    log.info("Route amenities replaced", extra={"route_id": route_id, "count": len(ids)})
    return ids
