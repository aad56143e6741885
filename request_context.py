from __future__ import annotations

import uuid
from contextvars import ContextVar

# One id per HTTP request or background job; pipeline log lines carry it.
_request_id: ContextVar[str] = ContextVar("_request_id", default="-")

def new_request_id() -> str:
    rid = uuid.uuid4().hex[:12]
    _request_id.set(rid)
    return rid

def bind_request_id(rid: str) -> None:
    """Adopt an id minted elsewhere, e.g. a job id inside its worker thread."""
    _request_id.set(rid or "-")

def get_request_id() -> str:
    return _request_id.get()
