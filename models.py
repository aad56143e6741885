from __future__ import annotations

from enum import Enum
from typing import List, Optional
from pydantic import (
    BaseModel,
    Field,
    HttpUrl,
    ConfigDict,
    field_validator,
    conint,
    confloat,
)
from pydantic.alias_generators import to_camel

# Wire names are camelCase (admin UI contract); attributes stay snake_case.
_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# -----------------------------
# Shared atoms
# -----------------------------

class RouteType(str, Enum):
    AIRPORT_PICKUP = "AirportPickup"
    AIRPORT_DROPOFF = "AirportDropoff"
    CITY_TO_CITY = "CityToCity"
    PRIVATE_DRIVER = "PrivateDriver"
    SIGHTSEEING_SHUTTLE = "SightseeingShuttle"

class RouteTypeFlags(BaseModel):
    """The five independent booleans an operator ticks on the route form."""
    model_config = ConfigDict(**_CAMEL, extra="forbid")
    is_airport_pickup: bool = False
    is_airport_dropoff: bool = False
    is_city_to_city: bool = False
    is_private_driver: bool = False
    is_sightseeing_shuttle: bool = False

class Waypoint(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str = Field(min_length=1)
    lat: confloat(ge=-90, le=90)
    lng: confloat(ge=-180, le=180)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("waypoint name cannot be blank")
        return v

# -----------------------------
# Requests
# -----------------------------

class ContentGenerationInput(BaseModel):
    """Raw caller input for the full pipeline (what the route editor posts)."""
    model_config = ConfigDict(**_CAMEL, extra="ignore")

    departure_city_name: str = Field(min_length=1, max_length=100)
    destination_city_name: str = Field(min_length=1, max_length=100)
    departure_country_name: Optional[str] = Field(default=None, max_length=100)
    destination_country_name: str = Field(min_length=1, max_length=100)

    is_airport_pickup: bool = False
    is_airport_dropoff: bool = False
    is_city_to_city: bool = False
    is_private_driver: bool = False
    is_sightseeing_shuttle: bool = False

    travel_time: Optional[str] = Field(default=None, max_length=100, description="Duration hint, e.g. '3.5 hours'")
    additional_instructions: str = Field(default="", max_length=20000)
    strict_cleaning: bool = True
    waypoints: Optional[List[Waypoint]] = None
    tour_link: Optional[HttpUrl] = None

    @field_validator("departure_city_name", "destination_city_name", "destination_country_name")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("additional_instructions", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    def flags(self) -> RouteTypeFlags:
        return RouteTypeFlags(
            is_airport_pickup=self.is_airport_pickup,
            is_airport_dropoff=self.is_airport_dropoff,
            is_city_to_city=self.is_city_to_city,
            is_private_driver=self.is_private_driver,
            is_sightseeing_shuttle=self.is_sightseeing_shuttle,
        )

    @property
    def origin_country(self) -> str:
        return self.departure_country_name or self.destination_country_name

class WaypointGenerationInput(BaseModel):
    model_config = ConfigDict(**_CAMEL, extra="ignore")
    origin: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=1, max_length=100)
    duration_minutes: conint(ge=1, le=24 * 60) = 240

class GenerationRequest(BaseModel):
    """Everything the orchestrator needs for one generation call. Built per request."""
    model_config = ConfigDict(**_CAMEL, extra="forbid")

    departure_city: str
    destination_city: str
    departure_country: str
    destination_country: str
    route_type: RouteType = RouteType.CITY_TO_CITY
    duration_hint: Optional[str] = None
    duration_minutes: conint(ge=1) = 240
    known_stops: List[str] = Field(default_factory=list)
    instructions: str = ""
    waypoints: Optional[List[Waypoint]] = None
    tour_link: Optional[str] = None

    @field_validator("known_stops", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return [] if v is None else v

# -----------------------------
# Response
# -----------------------------

class GeneratedContent(BaseModel):
    """Strict decoder for the service payload; anything off-shape is a ValidationError."""
    model_config = ConfigDict(**_CAMEL, extra="ignore", strict=True)

    meta_title: str
    meta_description: str
    meta_keywords: str
    seo_description: str
    travel_time: str
    other_stops: List[str]

class GenerationResult(BaseModel):
    model_config = ConfigDict(**_CAMEL, extra="forbid")

    seo_description: str = ""
    meta_title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""
    other_stops: List[str] = Field(default_factory=list)
    travel_time: str = ""
    map_waypoints: Optional[List[Waypoint]] = None
    matched_amenity_ids: List[str] = Field(default_factory=list)

    display_name: str = ""
    attempts: conint(ge=0) = 0
    degraded: bool = False
    quality_issues: List[str] = Field(default_factory=list)

    @field_validator("seo_description", "meta_title", "meta_description", "meta_keywords", "travel_time", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("other_stops", "matched_amenity_ids", "quality_issues", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return [] if v is None else v
