"""
Upstream failure diagnostics.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

MAX_EXCERPT_LENGTH = 600


@dataclass(frozen=True)
class ErrorHint:
    """Remediation hint for a known failure signature.

    ``status`` of ``None`` matches any status; ``contains`` of ``None``
    matches any body. ``contains`` is compared case-insensitively.
    """
    status: Optional[int]
    contains: Optional[str]
    hint: str

    def matches(self, status: int, body: str) -> bool:
        if self.status is not None and self.status != status:
            return False
        if self.contains is not None and self.contains.lower() not in body.lower():
            return False
        return True


GENERIC_HINTS = (
    ErrorHint(403, "scope", "key is missing required scope"),
    ErrorHint(401, None, "API key was rejected; check that it is valid and not revoked"),
    ErrorHint(403, None, "key does not have access to billing data"),
    ErrorHint(429, None, "rate limited by provider; the next refresh will retry"),
)


class UpstreamError(Exception):
    """Raised inside an adapter when a provider call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def body_excerpt(body: str, limit: int = MAX_EXCERPT_LENGTH) -> str:
    """Collapse whitespace and cut ``body`` to at most ``limit`` characters."""
    text = " ".join(body.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def find_hint(status: int, body: str, hints=()) -> Optional[str]:
    """First matching hint, provider-specific ones before the generic set."""
    for candidate in (*hints, *GENERIC_HINTS):
        if candidate.matches(status, body):
            return candidate.hint
    return None


def describe_http_error(provider_name: str, response: httpx.Response, hints=()) -> str:
    """Build a human-readable diagnostic for a non-2xx response."""
    try:
        body = response.text
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        body = ""

    parts = [f"{provider_name} API error: {response.status_code} {response.reason_phrase}".rstrip()]

    excerpt = body_excerpt(body)
    if excerpt:
        parts.append(f"response: {excerpt}")

    hint = find_hint(response.status_code, body, hints)
    if hint:
        parts.append(f"hint: {hint}")

    return " | ".join(parts)


def describe_transport_error(provider_name: str, exc: Exception) -> str:
    """Diagnostic for a network, DNS or timeout failure."""
    detail = str(exc) or exc.__class__.__name__
    return f"{provider_name} request failed: {detail}"
