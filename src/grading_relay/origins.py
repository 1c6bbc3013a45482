"""
Origin Policy

Decides which browser origins may call the relay and builds the matching
CORS headers. An origin is allowed when it:
- exactly equals one of the configured origins, or
- fully matches one of the configured regex patterns, or
- is http://localhost:<port> (when allow_localhost is on)

Requests with no Origin header (or "null") are rejected unless
allow_missing_origin is set, in which case they get "*".
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Sequence, Tuple

from .config import Settings

LOCALHOST_PATTERN = r"http://localhost:\d+"
MATCH_ALL = "*"

CORS_ALLOW_METHODS = "POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"


@dataclass(frozen=True)
class OriginPolicy:
    """Static allow-list of caller origins."""
    origins: Tuple[str, ...] = ()
    patterns: Tuple[Pattern, ...] = ()
    allow_missing: bool = False

    @classmethod
    def build(
        cls,
        origins: Sequence[str] = (),
        patterns: Sequence[str] = (),
        allow_localhost: bool = True,
        allow_missing: bool = False,
    ) -> "OriginPolicy":
        compiled = [re.compile(p) for p in patterns]
        if allow_localhost:
            compiled.append(re.compile(LOCALHOST_PATTERN))
        return cls(
            origins=tuple(origins),
            patterns=tuple(compiled),
            allow_missing=allow_missing,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OriginPolicy":
        return cls.build(
            origins=settings.allowed_origins,
            patterns=settings.origin_patterns,
            allow_localhost=settings.allow_localhost,
            allow_missing=settings.allow_missing_origin,
        )

    def resolve(self, origin: Optional[str]) -> Optional[str]:
        """
        Resolve the value to echo in Access-Control-Allow-Origin.

        Args:
            origin: Raw Origin header value (None if absent)

        Returns:
            The origin itself if allowed, "*" for a missing origin under the
            match-all policy, otherwise None
        """
        if not origin or origin == "null":
            return MATCH_ALL if self.allow_missing else None

        if origin in self.origins:
            return origin

        for pattern in self.patterns:
            if pattern.fullmatch(origin):
                return origin

        return None

    def is_allowed(self, origin: Optional[str]) -> bool:
        return self.resolve(origin) is not None


def cors_headers(allowed_origin: Optional[str]) -> Dict[str, str]:
    """CORS headers for a resolved origin; empty if the origin was rejected."""
    if not allowed_origin:
        return {}

    headers = {
        "Access-Control-Allow-Origin": allowed_origin,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }
    if allowed_origin != MATCH_ALL:
        headers["Vary"] = "Origin"
    return headers
