"""
Grading Relay

Request handling for the single grading endpoint. Every request runs the
same linear pipeline:

1. Gatekeeper: method, origin, JSON body and field checks
2. Prompt builder: render system/user instructions from the rubric
3. Grading client: one OpenAI call, parse the model's JSON
4. Emitter: JSON body plus CORS headers for the resolved origin

Each check short-circuits. Failures are raised as RelayError subclasses
and converted to responses in handle(); nothing is retried.
"""

import json
import logging
import time
from typing import Any, Optional

from starlette.responses import JSONResponse, PlainTextResponse, Response

from .client import GradingClient
from .config import Settings
from .errors import (
    BadRequest,
    InvalidVerdict,
    MethodNotAllowed,
    Misconfigured,
    OriginNotAllowed,
    RelayError,
)
from .models import MAX_RESPONSE_LENGTH, MIN_RESPONSE_LENGTH, GradingRequest, review_verdict
from .origins import OriginPolicy, cors_headers
from .prompts import build_prompts
from .rubrics import get_rubric

logger = logging.getLogger("grading_relay.relay")

LIVENESS_MESSAGE = "Grading relay is running. POST a learner response to grade it."


def _coerce_text(value: Any) -> str:
    # Falsy values (missing, null, 0, "") all count as empty
    return str(value or "").strip()


def parse_grading_request(body: bytes) -> GradingRequest:
    """
    Parse and validate a request body.

    Args:
        body: Raw request body

    Returns:
        GradingRequest with trimmed text fields

    Raises:
        BadRequest: Invalid JSON, response_text out of range, or missing
            learning_objective
    """
    try:
        data = json.loads(body)
    except (ValueError, RecursionError):
        raise BadRequest("Invalid JSON")

    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON", detail="Body must be a JSON object")

    response_text = _coerce_text(data.get("response_text"))
    learning_objective = _coerce_text(data.get("learning_objective"))
    raw_criteria = data.get("criteria")
    criteria = [str(c) for c in raw_criteria] if isinstance(raw_criteria, list) else []

    if not MIN_RESPONSE_LENGTH <= len(response_text) <= MAX_RESPONSE_LENGTH:
        raise BadRequest("Response length out of range")

    if not learning_objective:
        raise BadRequest("Missing learning_objective")

    return GradingRequest(
        response_text=response_text,
        learning_objective=learning_objective,
        criteria=criteria,
    )


class GradingRelay:
    """
    Stateless handler for the grading endpoint.

    All configuration comes in through Settings; the grading client can be
    injected (tests) or is built from Settings on first use.
    """

    def __init__(self, settings: Settings, grading_client: Optional[Any] = None):
        self.settings = settings
        self.origin_policy = OriginPolicy.from_settings(settings)
        self.rubric = get_rubric(settings.rubric)
        self._grading_client = grading_client

    @property
    def grading_client(self):
        if self._grading_client is None:
            self._grading_client = GradingClient(self.settings)
        return self._grading_client

    def check_request(
        self,
        method: str,
        origin: Optional[str],
        allowed_origin: Optional[str],
        body: bytes,
    ) -> GradingRequest:
        """Run the gatekeeper checks (everything after preflight)."""
        if method != "POST":
            raise MethodNotAllowed(method)

        if allowed_origin is None:
            raise OriginNotAllowed(origin or "")

        grading_request = parse_grading_request(body)

        if not self.settings.has_api_key:
            raise Misconfigured("Missing OPENAI_API_KEY")

        return grading_request

    async def grade(self, grading_request: GradingRequest) -> Any:
        """Build prompts, call the grading client and review its verdict."""
        system_instruction, user_instruction = build_prompts(
            grading_request.learning_objective,
            grading_request.criteria,
            grading_request.response_text,
            self.rubric,
        )
        payload = await self.grading_client.grade(system_instruction, user_instruction)

        problems = review_verdict(payload, grading_request.criteria)
        if problems:
            logger.warning(f"Verdict shape problems: {'; '.join(problems)}")
            if self.settings.strict_verdict:
                raise InvalidVerdict("; ".join(problems))

        return payload

    def error_response(self, error: RelayError, allowed_origin: Optional[str]) -> Response:
        """Convert a RelayError into a response."""
        if isinstance(error, MethodNotAllowed):
            return PlainTextResponse(error.error, status_code=error.status_code)

        return JSONResponse(
            error.to_dict(),
            status_code=error.status_code,
            headers=cors_headers(allowed_origin),
        )

    async def handle(self, method: str, origin: Optional[str], body: bytes = b"") -> Response:
        """
        Handle one request.

        Args:
            method: HTTP method
            origin: Origin header value (None if absent)
            body: Raw request body

        Returns:
            Response with status, JSON (or empty/plain) body and CORS headers
        """
        method = method.upper()
        allowed_origin = self.origin_policy.resolve(origin)

        if method == "OPTIONS":
            return Response(status_code=204, headers=cors_headers(allowed_origin))

        if method == "GET" and self.settings.enable_liveness_probe:
            return PlainTextResponse(LIVENESS_MESSAGE)

        start_time = time.perf_counter()
        try:
            grading_request = self.check_request(method, origin, allowed_origin, body)
            payload = await self.grade(grading_request)
        except RelayError as e:
            logger.warning(f"{method} rejected | {e.status_code} {e.error} | Origin: {origin!r}")
            return self.error_response(e, allowed_origin)

        duration = time.perf_counter() - start_time
        logger.info(
            f"Graded response | Criteria: {len(grading_request.criteria)} | "
            f"Duration: {duration:.2f}s"
        )
        return JSONResponse(payload, headers=cors_headers(allowed_origin))

    async def aclose(self):
        """Release the grading client's HTTP resources."""
        if self._grading_client is not None and hasattr(self._grading_client, "close"):
            await self._grading_client.close()
