"""
Relay Errors

One exception per failure category. Components raise these; the relay
turns them into JSON responses at the request boundary.
"""

from typing import Any, Dict, Optional

# Diagnostic excerpt limits
UPSTREAM_DETAIL_LIMIT = 300
RAW_OUTPUT_LIMIT = 400


def truncate(text: Optional[str], limit: int) -> str:
    """Cut text down to at most `limit` characters."""
    if not text:
        return ""
    return text[:limit]


class RelayError(Exception):
    """Base class for failures that become an error response."""
    status_code = 500

    def __init__(self, error: str, **extra: Optional[str]):
        super().__init__(error)
        self.error = error
        self.extra = {k: v for k, v in extra.items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error body."""
        return {"error": self.error, **self.extra}


class BadRequest(RelayError):
    """Malformed JSON or a field outside its allowed range."""
    status_code = 400


class OriginNotAllowed(RelayError):
    """Caller origin is not on the allow-list."""
    status_code = 403

    def __init__(self, origin: str):
        super().__init__("Origin not allowed", origin=origin)


class MethodNotAllowed(RelayError):
    """Anything but POST/OPTIONS (and GET when the liveness probe is on)."""
    status_code = 405

    def __init__(self, method: str):
        super().__init__("Method not allowed")
        self.method = method


class Misconfigured(RelayError):
    """Server is missing something it needs, e.g. the API key."""
    status_code = 500


class UpstreamError(RelayError):
    """Transport failure or non-2xx status from the grading API."""
    status_code = 502

    def __init__(self, error: str, detail: Optional[str] = None, upstream_status: Optional[int] = None):
        super().__init__(error, detail=truncate(detail, UPSTREAM_DETAIL_LIMIT))
        self.upstream_status = upstream_status


class ModelOutputError(RelayError):
    """Grading API answered 2xx but the model text was not JSON."""
    status_code = 500

    def __init__(self, raw: Optional[str]):
        super().__init__("Model returned non-JSON", raw=truncate(raw, RAW_OUTPUT_LIMIT))


class InvalidVerdict(RelayError):
    """Model JSON does not match the verdict shape (strict mode only)."""
    status_code = 500

    def __init__(self, detail: str):
        super().__init__("Model returned invalid verdict", detail=detail)
