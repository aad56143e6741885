# services/llm_client.py
from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

import httpx
from openai import (
    OpenAI,
    APIError,
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    PermissionDeniedError,
)

from config import settings
from errors import ConfigurationError, ResponseParseError, TransportError
from request_context import get_request_id

log = logging.getLogger("llm")

# Stray control characters make json.loads choke on otherwise valid replies.
_CONTROL_CHARS = re.compile(r"[\u0000-\u001F\u007F-\u009F]")
_PLACEHOLDER_KEYS = {"", "your-openai-api-key-here"}

def _strip_code_fences(s: str | None) -> str:
    if not s:
        return ""
    t = s.strip()
    if t.startswith("```"):
        parts = t.split("```")
        if len(parts) >= 3:
            t = parts[1].strip()
            # drop a language tag such as ```json
            if t[:4].lower() == "json":
                t = t[4:].strip()
    return t

def parse_json_object(content: str | None) -> Dict[str, Any]:
    """Turn a chat reply into a dict or raise ResponseParseError."""
    text = _strip_code_fences(content)
    if not text:
        raise ResponseParseError("empty response from text-generation service")
    text = _CONTROL_CHARS.sub("", text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"response is not valid JSON: {e.msg}", raw=text[:300]) from e
    if not isinstance(data, dict):
        raise ResponseParseError(f"expected a JSON object, got {type(data).__name__}", raw=text[:300])
    return data

class TextGenerationClient:
    """
    Thin boundary around the OpenAI chat API: one structured prompt in,
    one JSON object out. SDK-level retries are disabled; the orchestrator
    owns the retry policy.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> None:
        key = settings.OPENAI_API_KEY if api_key is None else api_key
        if not key or key in _PLACEHOLDER_KEYS:
            raise ConfigurationError("OpenAI API key not configured.")
        self.model = model or settings.OPENAI_MODEL
        self.timeout_s = timeout_s or settings.LLM_REQUEST_TIMEOUT
        self._client = OpenAI(
            api_key=key,
            base_url=base_url or settings.OPENAI_BASE_URL,
            timeout=httpx.Timeout(self.timeout_s),
            max_retries=0,
        )

    def complete_json(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        rid = get_request_id()
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": settings.CONTENT_TEMPERATURE if temperature is None else temperature,
            "response_format": {"type": "json_object"},
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        start = time.perf_counter()
        try:
            chat = self._client.chat.completions.create(**kwargs)
        except (AuthenticationError, PermissionDeniedError) as e:
            raise ConfigurationError(f"OpenAI rejected the configured credentials: {e}") from e
        except APITimeoutError as e:
            raise TransportError(f"OpenAI call timed out after {self.timeout_s}s") from e
        except APIConnectionError as e:
            raise TransportError(f"OpenAI connection failed: {e}") from e
        except APIError as e:
            raise TransportError(f"OpenAI API error: {e}") from e

        dur_ms = int((time.perf_counter() - start) * 1000)
        content = chat.choices[0].message.content if chat.choices else None
        log.info("LLM call ok", extra={"request_id": rid, "model": self.model, "duration_ms": dur_ms})
        return parse_json_object(content)
