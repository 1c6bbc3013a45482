"""
FastAPI Backend for the Grading Relay

Single route, method-dispatched. The browser client POSTs a learner
response; the relay grades it with OpenAI and returns the verdict JSON.
The OpenAI key stays on the server.

CORS is handled by the relay itself rather than CORSMiddleware, because a
rejected origin must also be refused with 403, not just left without headers.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response

from .config import Settings, load_settings
from .relay import GradingRelay

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger("grading_relay")

# Every method reaches the relay, which decides what is allowed
ROUTE_METHODS = ["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE", "HEAD"]


def create_app(settings: Optional[Settings] = None, grading_client: Optional[Any] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Relay settings. If None, uses load_settings()
        grading_client: Grading client override (tests)

    Returns:
        Configured FastAPI app
    """
    if settings is None:
        settings = load_settings()

    relay = GradingRelay(settings, grading_client=grading_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        origins = ", ".join(settings.allowed_origins) or "(none)"
        logger.info(
            f"Grading relay ready | Model: {settings.model} | Rubric: {settings.rubric} | "
            f"Origins: {origins} | Localhost: {settings.allow_localhost}"
        )
        if settings.allow_missing_origin:
            logger.warning("ALLOW_MISSING_ORIGIN is on: requests without an Origin header are accepted")
        if not settings.has_api_key:
            logger.warning("OPENAI_API_KEY is not set: grading requests will fail with 500")
        yield
        await relay.aclose()

    app = FastAPI(
        title="Grading Relay API",
        description="Grade free-text learner responses with an LLM without exposing the API key",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.relay = relay

    @app.api_route("/", methods=ROUTE_METHODS)
    async def grade(request: Request) -> Response:
        """Grade a learner response (POST), answer preflight (OPTIONS)."""
        body = await request.body()
        return await relay.handle(request.method, request.headers.get("origin"), body)

    return app


def run_server(host: str = "0.0.0.0", port: Optional[int] = None):
    """
    Build the app from the environment and serve it with uvicorn.

    Settings are loaded here, not at import, so importing this module
    never reads .env. For uvicorn directly use:
    uvicorn grading_relay.api:create_app --factory
    """
    import uvicorn
    if port is None:
        port = int(os.environ.get("PORT", 8000))
    uvicorn.run(create_app(), host=host, port=port)
