"""
Module 09D - FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import json
import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.routes import health, stats, verify
from api.errors import (
    APIError,
    api_error_handler,
    domain_error_handler,
    generic_error_handler,
    validation_error_handler,
)
from core.schemas import SwarmProofException


# Configure logging: respects SWARMPROOF_LOG_LEVEL env var and swarmproof.json log_level
def _resolve_log_level() -> int:
    """Resolve log level from env var or swarmproof.json, defaulting to INFO."""
    raw = os.getenv("SWARMPROOF_LOG_LEVEL")
    if raw is None:
        cfg_path = Path.cwd() / "swarmproof.json"
        if cfg_path.exists():
            try:
                with open(cfg_path) as f:
                    raw = json.load(f).get("api", {}).get("log_level")
            except (OSError, ValueError, AttributeError):
                raw = None
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Swarmproof Verifier API",
        description="""
HTTP API for verifying that a claimed swarm of agents is genuinely
machine-driven.

## Endpoints

- **POST /verify** - Challenge every agent at once and score the responses
- **GET /result/{verification_id}** - Fetch a stored verification
- **GET /stats** - Verdict counts and average score
- **GET /health** - Health check

## Verdicts

- `genuine` - overall score >= 70
- `suspicious` - overall score >= 40
- `likely_fake` - anything lower
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(SwarmProofException, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(verify.router)
    app.include_router(stats.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
