"""
Relay Configuration

All deployment policy lives in a single Settings object that is passed into
the relay, the grading client and the app factory:
- OpenAI API key (server-side secret, never sent to the browser)
- Allowed origins and origin patterns
- Model, timeout and rubric selection

Values are read from the process environment, with a .env file in the
project root loaded first for local development.
"""

import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from .rubrics import DEFAULT_RUBRIC, get_rubric

DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_TIMEOUT = 30.0

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Per-deployment configuration for the grading relay."""
    api_key: str = ""
    allowed_origins: Tuple[str, ...] = ()
    origin_patterns: Tuple[str, ...] = ()
    allow_localhost: bool = True
    # Opt-in only: treats requests without an Origin header as allowed ("*")
    allow_missing_origin: bool = False
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT
    base_url: Optional[str] = None
    rubric: str = DEFAULT_RUBRIC
    strict_verdict: bool = False
    enable_liveness_probe: bool = False

    def __post_init__(self):
        get_rubric(self.rubric)
        for pattern in self.origin_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid origin pattern {pattern!r}: {e}")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def _parse_list(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _parse_timeout(value: Optional[str]) -> float:
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"OPENAI_TIMEOUT must be a number of seconds, got {value!r}")


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings: The parsed configuration

    Raises:
        ValueError: If a value cannot be parsed (bad timeout, rubric or pattern)
    """
    env = os.environ if environ is None else environ

    return Settings(
        api_key=env.get("OPENAI_API_KEY", "").strip(),
        allowed_origins=_parse_list(env.get("ALLOWED_ORIGINS")),
        origin_patterns=_parse_list(env.get("ALLOWED_ORIGIN_PATTERNS")),
        allow_localhost=_parse_bool(env.get("ALLOW_LOCALHOST"), True),
        allow_missing_origin=_parse_bool(env.get("ALLOW_MISSING_ORIGIN"), False),
        model=env.get("OPENAI_MODEL", "").strip() or DEFAULT_MODEL,
        timeout=_parse_timeout(env.get("OPENAI_TIMEOUT")),
        base_url=env.get("OPENAI_BASE_URL", "").strip() or None,
        rubric=env.get("GRADING_RUBRIC", "").strip() or DEFAULT_RUBRIC,
        strict_verdict=_parse_bool(env.get("STRICT_VERDICT"), False),
        enable_liveness_probe=_parse_bool(env.get("ENABLE_LIVENESS_PROBE"), False),
    )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load Settings for the running process.

    Fallback chain:
    1. Process environment variables
    2. .env file (given path, or the project root)

    Variables already present in the environment win over the .env file.
    """
    if env_file is None:
        project_root = Path(__file__).parent.parent.parent
        env_file = project_root / ".env"
    load_dotenv(env_file)

    return settings_from_env()
