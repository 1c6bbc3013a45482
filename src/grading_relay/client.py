"""
Async OpenAI Grading Client

Sends one grading prompt to the OpenAI Responses API and turns the reply
into a parsed JSON object:
- Bearer credential and model come from Settings
- Output format is constrained to a JSON object
- No retries: the SDK retry loop is disabled, a failed call fails the request
- Non-2xx and transport failures become UpstreamError (502)
- Non-JSON model text becomes ModelOutputError (500)
"""

import json
import logging
from typing import Any, Dict, Optional

from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from .config import Settings
from .errors import Misconfigured, ModelOutputError, UpstreamError

# Logger for this module
logger = logging.getLogger("grading_relay.client")


def extract_output_text(data: Dict[str, Any]) -> str:
    """
    Pull the model's text out of a Responses API payload.

    Prefers the consolidated `output_text` field; otherwise scans
    output[].content[] for the first non-empty `text`.

    Args:
        data: Response payload as a dict

    Returns:
        Stripped text, or "" if none was found
    """
    output_text = data.get("output_text")
    if isinstance(output_text, str) and output_text.strip():
        return output_text.strip()

    output = data.get("output")
    if not isinstance(output, list):
        return ""

    for item in output:
        content = item.get("content") if isinstance(item, dict) else None
        if not isinstance(content, list):
            continue
        for part in content:
            text = part.get("text") if isinstance(part, dict) else None
            if isinstance(text, str) and text.strip():
                return text.strip()

    return ""


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_model_output(text: str) -> Any:
    """
    Parse the model text as strict JSON.

    NaN and Infinity are rejected: they cannot be sent back to the caller.

    Raises:
        ModelOutputError: If the text is empty or not valid JSON
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        raise ModelOutputError(raw=text)


class GradingClient:
    """
    Async client for one-shot grading calls.

    Holds an AsyncOpenAI instance configured from Settings. Stateless across
    requests apart from the underlying HTTP connection pool.
    """

    def __init__(self, settings: Settings, openai_client: Optional[Any] = None):
        """
        Initialize the client.

        Args:
            settings: Relay settings (API key, model, timeout, base URL)
            openai_client: Pre-built AsyncOpenAI-compatible client (tests)
        """
        self.model = settings.model

        if openai_client is None:
            if not settings.has_api_key:
                raise Misconfigured("Missing OPENAI_API_KEY")
            openai_client = AsyncOpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=settings.timeout,
                max_retries=0,
            )
        self.client = openai_client

    async def _call_api(self, system_instruction: str, user_instruction: str) -> Dict[str, Any]:
        """Make a single Responses API call and return its payload as a dict."""
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_instruction},
                ],
                text={"format": {"type": "json_object"}},
            )
        except APIStatusError as e:
            logger.warning(f"OpenAI returned HTTP {e.status_code}")
            raise UpstreamError("OpenAI error", detail=e.response.text, upstream_status=e.status_code)
        except APIConnectionError as e:
            logger.warning(f"OpenAI request failed: {e}")
            raise UpstreamError("OpenAI error", detail=str(e))

        data = response.model_dump()
        # output_text is a computed property on the SDK object, not a field
        data["output_text"] = getattr(response, "output_text", None)
        return data

    async def grade(self, system_instruction: str, user_instruction: str) -> Any:
        """
        Grade one response.

        Args:
            system_instruction: Rendered system instruction
            user_instruction: Rendered user instruction

        Returns:
            The model's parsed JSON, unmodified

        Raises:
            UpstreamError: Non-2xx or transport failure
            ModelOutputError: Model text was not JSON
        """
        data = await self._call_api(system_instruction, user_instruction)
        text = extract_output_text(data)
        if not text:
            logger.warning("OpenAI response contained no output text")
        return parse_model_output(text)

    async def close(self):
        """Close the underlying HTTP client."""
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()
