# services/route_type.py
from __future__ import annotations

import logging
from typing import Dict

from errors import RequestParseError
from models import RouteType, RouteTypeFlags

log = logging.getLogger("pipeline")

_FLAG_TO_TYPE: Dict[str, RouteType] = {
    "is_airport_pickup": RouteType.AIRPORT_PICKUP,
    "is_airport_dropoff": RouteType.AIRPORT_DROPOFF,
    "is_city_to_city": RouteType.CITY_TO_CITY,
    "is_private_driver": RouteType.PRIVATE_DRIVER,
    "is_sightseeing_shuttle": RouteType.SIGHTSEEING_SHUTTLE,
}

TOUR_TYPES = frozenset({RouteType.PRIVATE_DRIVER, RouteType.SIGHTSEEING_SHUTTLE})

def resolve_route_type(flags: RouteTypeFlags) -> RouteType:
    """
    Collapse the five form flags into one route type.
    Exactly one set flag passes through; none or several resolve to CityToCity.
    """
    chosen = [rt for attr, rt in _FLAG_TO_TYPE.items() if getattr(flags, attr)]
    if len(chosen) == 1:
        return chosen[0]
    if len(chosen) > 1:
        log.info("Conflicting route-type flags; using CityToCity", extra={"flags": [rt.value for rt in chosen]})
    return RouteType.CITY_TO_CITY

def is_tour_type(route_type: RouteType) -> bool:
    return route_type in TOUR_TYPES

def check_route_endpoints(departure: str, destination: str, route_type: RouteType) -> None:
    """Same start and end city only makes sense for tours."""
    same = departure.strip().casefold() == destination.strip().casefold()
    if same and not is_tour_type(route_type):
        raise RequestParseError(
            f"Departure and destination are both '{departure.strip()}'; "
            "only PrivateDriver or SightseeingShuttle routes may start and end in the same city."
        )
