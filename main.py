# main.py
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import settings
from errors import ConfigurationError, RequestParseError
from jobs import manager
from logging_config import setup_logging
from models import ContentGenerationInput, GenerationResult, Waypoint, WaypointGenerationInput
from request_context import get_request_id, new_request_id
from security import SecurityValidator, screen_operator_notes, security_headers_middleware
from services.content_service import run_pipeline
from services.llm_client import TextGenerationClient
from services.waypoint_service import generate_waypoints

# Initialize logging BEFORE creating the app
setup_logging(settings.log_level)
log = logging.getLogger("app")

@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("App starting", extra={
        "model": settings.OPENAI_MODEL,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "max_attempts": settings.GENERATION_MAX_ATTEMPTS,
    })
    yield

app = FastAPI(
    title="Shuttle Route Content API",
    version="0.1.0",
    description="SEO copy, waypoint and amenity generation for shuttle route pages",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
    expose_headers=["X-Request-Id"],
)

app.middleware("http")(security_headers_middleware())

@app.middleware("http")
async def request_logging_mw(request: Request, call_next):
    rid = new_request_id()
    start = time.perf_counter()
    response: Response | None = None

    if request.method in ("POST", "PUT", "PATCH"):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            try:
                SecurityValidator.validate_request_size(int(content_length), max_size=settings.MAX_REQUEST_BYTES)
            except HTTPException as e:
                return JSONResponse(status_code=e.status_code, content={"detail": e.detail})

    try:
        response = await call_next(request)
        return response
    finally:
        dur_ms = int((time.perf_counter() - start) * 1000)
        if response is not None:
            response.headers["X-Request-Id"] = rid
        log.info(
            f"{request.method} {request.url.path} -> {getattr(response, 'status_code', '?')} in {dur_ms}ms",
            extra={"request_id": rid, "path": request.url.path, "status": getattr(response, "status_code", None), "duration_ms": dur_ms},
        )

@app.exception_handler(RequestParseError)
async def request_parse_error_handler(request: Request, exc: RequestParseError):
    log.info("Rejected request: %s", exc, extra={"request_id": get_request_id()})
    return JSONResponse(status_code=422, content={"detail": str(exc)})

@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    log.error("Configuration error: %s", exc, extra={"request_id": get_request_id()})
    return JSONResponse(status_code=500, content={"detail": str(exc)})

def get_text_client() -> TextGenerationClient:
    return TextGenerationClient()

def get_waypoint_client() -> Optional[TextGenerationClient]:
    """Waypoints are enrichment; without a configured key the endpoint answers with no stops."""
    try:
        return TextGenerationClient()
    except ConfigurationError as e:
        log.warning("Waypoint client unavailable: %s", e, extra={"request_id": get_request_id()})
        return None

class WaypointResponse(BaseModel):
    waypoints: List[Waypoint]

@app.get("/health")
def health():
    return {"status": "ok", "openai_key_loaded": bool(settings.OPENAI_API_KEY), "model": settings.OPENAI_MODEL}

@app.post("/routes/generate-content", response_model=GenerationResult)
def generate_content_endpoint(
    req: ContentGenerationInput,
    client: TextGenerationClient = Depends(get_text_client),
) -> GenerationResult:
    screen_operator_notes(req.additional_instructions, route=f"{req.departure_city_name}->{req.destination_city_name}")
    return run_pipeline(req, client=client)

@app.post("/routes/waypoints", response_model=WaypointResponse)
def generate_waypoints_endpoint(
    req: WaypointGenerationInput,
    client: Optional[TextGenerationClient] = Depends(get_waypoint_client),
) -> WaypointResponse:
    if client is None:
        return WaypointResponse(waypoints=[])
    stops = generate_waypoints(req.origin, req.duration_minutes, req.country, client=client)
    return WaypointResponse(waypoints=stops)

# --- JOB ENDPOINTS ---
@app.post("/jobs/content")
def create_content_job(
    req: ContentGenerationInput,
    client: TextGenerationClient = Depends(get_text_client),
):
    screen_operator_notes(req.additional_instructions, route=f"{req.departure_city_name}->{req.destination_city_name}")
    pruned = manager.prune(settings.JOB_RETENTION_SECONDS)
    if pruned:
        log.info("Pruned finished jobs", extra={"count": pruned})
    job = manager.create(target=run_pipeline, args=(req,), kwargs={"client": client})
    log.info("Content job created", extra={"job_id": job.id, "route": f"{req.departure_city_name}->{req.destination_city_name}"})
    return {"job_id": job.id, "status": job.status}

@app.get("/jobs/{job_id}")
def get_job(job_id: str):
    job = manager.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="job not found")

    payload = {
        "id": job.id,
        "status": job.status,
        "steps": job.steps,
        "updated_at": job.updated_at,
    }
    if job.status == "done":
        payload["result"] = job.result.model_dump(mode="json", by_alias=True)
    if job.status == "error":
        payload["error"] = job.error
        payload["error_type"] = job.error_type
    return JSONResponse(payload)

# Production entry point
if __name__ == "__main__":
    import uvicorn

    log.info(f"Starting server on {settings.HOST}:{settings.PORT}")
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,
        access_log=True,
        log_level="info" if settings.APP_ENV == "production" else "debug",
    )
