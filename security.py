# security.py
"""
Request hardening for the content API.

Operator notes are pasted from third-party listings and end up inside an
LLM prompt, so they are screened for injected instructions before use.
"""
from __future__ import annotations

import re
import logging
from typing import List, Tuple

from fastapi import HTTPException, Request

log = logging.getLogger("security")

# Phrases that try to steer the model rather than describe a shuttle service
PROMPT_INJECTION_PATTERNS = [
    r'\b(ignore|forget|disregard)\s+(previous|above|all|these|your|the)\s+(instructions?|prompts?|rules?)\b',
    r'\b(act|behave|pretend|roleplay)\s+as\s+(a|an)?\s*\w+',
    r'\bnow\s+you\s+are\b',
    r'<\s*/?(system|assistant|user)\s*>',
    r'^\s*(system|assistant)\s*:',
    r'\b(jailbreak|bypass\s+(the\s+)?(rules|filters?))\b',
    r'```\s*(python|javascript|bash|sh|cmd|powershell|sql)',
    r'\b(eval|exec|__import__)\s*\(',
    r'\b(return|output|respond\s+with)\s+(only\s+)?(the\s+)?(following|this)\s+json\b',
]

COMPILED_PATTERNS = [re.compile(pattern, re.IGNORECASE | re.MULTILINE) for pattern in PROMPT_INJECTION_PATTERNS]

def detect_prompt_injection(text: str) -> Tuple[bool, List[str]]:
    """
    Look for instruction-like content in free text.

    Returns:
        Tuple of (is_suspicious, list_of_matched_patterns)
    """
    if not text:
        return False, []
    matched = [PROMPT_INJECTION_PATTERNS[i] for i, p in enumerate(COMPILED_PATTERNS) if p.search(text)]
    return bool(matched), matched

def screen_operator_notes(notes: str, *, route: str) -> bool:
    """Log suspicious operator notes. The notes still flow through the cleaner; returns the verdict."""
    is_suspicious, patterns = detect_prompt_injection(notes)
    if is_suspicious:
        log.warning("Suspicious operator notes", extra={"route": route, "patterns": patterns})
    return is_suspicious

def security_headers_middleware():
    """
    Add security headers to responses.
    """
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        return response

    return add_security_headers

class SecurityValidator:
    """
    Main security validation class for request processing.
    """

    @staticmethod
    def validate_request_size(request_size: int, max_size: int = 1024 * 50):
        """Reject oversized bodies before they are parsed."""
        if request_size > max_size:
            log.warning("Request size too large", extra={"size": request_size, "max_size": max_size})
            raise HTTPException(
                status_code=413,
                detail=f"Request too large. Maximum {max_size} bytes allowed.",
            )
