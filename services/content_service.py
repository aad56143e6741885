# services/content_service.py
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from config import settings
from errors import (
    ConfigurationError,
    RequestParseError,
    ResponseParseError,
    TransportError,
    ValidationError,
)
from models import (
    ContentGenerationInput,
    GeneratedContent,
    GenerationRequest,
    GenerationResult,
    RouteType,
    Waypoint,
)
from request_context import get_request_id
from services.amenity_matcher import match_amenities
from services.content_checks import validate_generated_content
from services.duration import format_travel_time, parse_duration_minutes
from services.instruction_cleaner import clean_editor_notes, clean_editor_notes_strict
from services.prompt_builder import build_generation_request, build_messages
from services.route_type import check_route_endpoints, is_tour_type, resolve_route_type
from services.text_postprocessor import postprocess_description
from services.waypoint_service import apply_geofence, generate_waypoints, target_stop_count

log = logging.getLogger("pipeline")

RETRYABLE_ERRORS = (TransportError, ResponseParseError, ValidationError)
PLACEHOLDER_PREFIX = "e.g."

_WAYPOINT_LIST = TypeAdapter(List[Waypoint])

# ---------- payload decoding ----------

def normalize_keywords(raw: str) -> str:
    """Lower-case, trim, drop empties, de-duplicate keeping first-seen order."""
    seen: List[str] = []
    for part in (raw or "").split(","):
        kw = part.strip().lower()
        if kw and kw not in seen:
            seen.append(kw)
    return ", ".join(seen)

def _coerce_other_stops(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(payload)
    stops = data.get("otherStops")
    if isinstance(stops, str):
        if stops.strip().lower().startswith(PLACEHOLDER_PREFIX):
            # template text echoed back by the model
            log.info("Discarding placeholder otherStops", extra={"value": stops[:80]})
            data["otherStops"] = []
        else:
            data["otherStops"] = [s.strip() for s in stops.split(",") if s.strip()]
    elif isinstance(stops, list):
        data["otherStops"] = [s.strip() if isinstance(s, str) else s for s in stops]
        data["otherStops"] = [s for s in data["otherStops"] if s != ""]
    return data

def decode_generated_content(payload: Any) -> GeneratedContent:
    """Fully typed content or a ValidationError naming the offending fields."""
    if not isinstance(payload, dict):
        raise ValidationError(f"expected an object, got {type(payload).__name__}")
    try:
        return GeneratedContent.model_validate(_coerce_other_stops(payload))
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise ValidationError(f"missing or mistyped fields: {', '.join(fields)}", fields=fields) from e

def _salvage(payload: Optional[Dict[str, Any]]) -> GeneratedContent:
    """Keep whatever is well-typed in the last payload; '' and [] for the rest."""
    data = _coerce_other_stops(payload) if isinstance(payload, dict) else {}

    def text(key: str) -> str:
        v = data.get(key)
        return v if isinstance(v, str) else ""

    stops = data.get("otherStops")
    return GeneratedContent(
        meta_title=text("metaTitle"),
        meta_description=text("metaDescription"),
        meta_keywords=text("metaKeywords"),
        seo_description=text("seoDescription"),
        travel_time=text("travelTime"),
        other_stops=[s for s in stops if isinstance(s, str)] if isinstance(stops, list) else [],
    )

def decode_map_waypoints(payload: Optional[Dict[str, Any]], request: GenerationRequest) -> Optional[List[Waypoint]]:
    """Generated waypoints for tour routes; anything malformed is dropped, never retried."""
    if not is_tour_type(request.route_type):
        if isinstance(payload, dict) and payload.get("mapWaypoints"):
            log.info("Ignoring mapWaypoints for non-tour route", extra={"route_type": request.route_type.value})
        return None
    if request.waypoints:
        return list(request.waypoints)
    raw = payload.get("mapWaypoints") if isinstance(payload, dict) else None
    if raw is None:
        return None
    try:
        points = _WAYPOINT_LIST.validate_python(raw, strict=True)
    except PydanticValidationError:
        log.info("Dropping malformed mapWaypoints", extra={"request_id": get_request_id()})
        return None
    return apply_geofence(points, request.departure_country)[: target_stop_count(request.duration_minutes)]

# ---------- orchestrator ----------

def _progress_fn(progress: Optional[Callable[[str], None]]) -> Callable[[str], None]:
    def p(msg: str) -> None:
        if not progress:
            return
        try:
            progress(msg)
        except Exception:
            log.debug("progress callback failed", exc_info=True)
    return p

def generate_content(
    request: GenerationRequest,
    *,
    client=None,
    sleep: Callable[[float], None] = time.sleep,
    progress: Optional[Callable[[str], None]] = None,
) -> GenerationResult:
    """
    Call the text-generation service with bounded retries and return a
    structurally complete GenerationResult.

    Transport, parse and validation failures are retried up to
    GENERATION_MAX_ATTEMPTS; after that the last payload is salvaged with
    '' / [] defaults. Only ConfigurationError escapes.
    """
    rid = get_request_id()
    p = _progress_fn(progress)
    if client is None:
        from services.llm_client import TextGenerationClient
        client = TextGenerationClient()

    messages = build_messages(request)
    max_attempts = settings.GENERATION_MAX_ATTEMPTS
    content: Optional[GeneratedContent] = None
    last_payload: Optional[Dict[str, Any]] = None
    attempts = 0

    for attempt in range(1, max_attempts + 1):
        attempts = attempt
        p(f"Calling text-generation service (attempt {attempt}/{max_attempts})")
        try:
            payload = client.complete_json(
                messages,
                temperature=settings.CONTENT_TEMPERATURE,
                max_tokens=settings.CONTENT_MAX_TOKENS,
            )
            last_payload = payload if isinstance(payload, dict) else None
            content = decode_generated_content(payload)
            break
        except ConfigurationError:
            raise
        except RETRYABLE_ERRORS as e:
            log.warning(
                "Generation attempt failed: %s",
                e,
                extra={"request_id": rid, "attempt": attempt, "error_type": type(e).__name__},
            )
            p(f"Attempt {attempt} failed ({type(e).__name__})")
            if attempt < max_attempts:
                sleep(settings.GENERATION_BACKOFF_SECONDS * attempt)

    degraded = content is None
    if content is None:
        log.error(
            "Generation retries exhausted; returning defaults",
            extra={"request_id": rid, "attempts": attempts, "route_type": request.route_type.value},
        )
        p("Retries exhausted, using defaults")
        content = _salvage(last_payload)

    result = _finish(request, content, last_payload, attempts=attempts, degraded=degraded)
    p("Generation complete")
    log.info(
        "Content generated",
        extra={
            "request_id": rid,
            "attempts": attempts,
            "degraded": degraded,
            "amenities": len(result.matched_amenity_ids),
            "waypoints": len(result.map_waypoints or []),
        },
    )
    return result

def _finish(
    request: GenerationRequest,
    content: GeneratedContent,
    payload: Optional[Dict[str, Any]],
    *,
    attempts: int,
    degraded: bool,
) -> GenerationResult:
    description = postprocess_description(content.seo_description)
    travel_time = content.travel_time.strip()
    if not travel_time and not degraded:
        travel_time = format_travel_time(request.duration_minutes)

    return GenerationResult(
        seo_description=description,
        meta_title=content.meta_title.strip(),
        meta_description=content.meta_description.strip(),
        meta_keywords=normalize_keywords(content.meta_keywords),
        other_stops=content.other_stops,
        travel_time=travel_time,
        map_waypoints=decode_map_waypoints(payload, request),
        matched_amenity_ids=match_amenities(description, request.instructions),
        display_name=f"Shuttles from {request.departure_city} to {request.destination_city}",
        attempts=attempts,
        degraded=degraded,
        quality_issues=validate_generated_content(description),
    )

# ---------- full pipeline ----------

def run_pipeline(
    payload: Union[ContentGenerationInput, Dict[str, Any]],
    *,
    client=None,
    sleep: Callable[[float], None] = time.sleep,
    progress: Optional[Callable[[str], None]] = None,
) -> GenerationResult:
    """Raw route-editor input to finished content: clean, resolve, enrich, generate."""
    if isinstance(payload, ContentGenerationInput):
        data = payload
    else:
        try:
            data = ContentGenerationInput.model_validate(payload)
        except PydanticValidationError as e:
            raise RequestParseError(f"Invalid content generation input: {e.error_count()} error(s)") from e

    route_type = resolve_route_type(data.flags())
    check_route_endpoints(data.departure_city_name, data.destination_city_name, route_type)

    cleaner = clean_editor_notes_strict if data.strict_cleaning else clean_editor_notes
    instructions = cleaner(data.additional_instructions)

    if client is None:
        from services.llm_client import TextGenerationClient
        client = TextGenerationClient()

    waypoints = data.waypoints
    if route_type == RouteType.PRIVATE_DRIVER and not waypoints:
        _p = _progress_fn(progress)
        _p("Generating waypoints")
        waypoints = generate_waypoints(
            data.departure_city_name,
            parse_duration_minutes(data.travel_time),
            data.origin_country,
            client=client,
        )

    request = build_generation_request(
        departure_city=data.departure_city_name,
        destination_city=data.destination_city_name,
        departure_country=data.departure_country_name,
        destination_country=data.destination_country_name,
        route_type=route_type,
        instructions=instructions,
        duration_hint=data.travel_time,
        waypoints=waypoints,
        tour_link=str(data.tour_link) if data.tour_link else None,
    )
    log.info(
        "Generation request built",
        extra={
            "request_id": get_request_id(),
            "route_type": route_type.value,
            "duration_minutes": request.duration_minutes,
            "known_stops": len(request.known_stops),
            "waypoints": len(request.waypoints or []),
        },
    )
    return generate_content(request, client=client, sleep=sleep, progress=progress)
