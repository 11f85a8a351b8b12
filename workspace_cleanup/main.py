"""FastAPI application factory for the workspace cleanup service."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes.workflows import router as workflows_router


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    allowed_origins = os.getenv("ALLOWED_ORIGINS")
    if not allowed_origins:
        raise RuntimeError("ALLOWED_ORIGINS environment variable is required")

    _configure_logging()

    app = FastAPI(title="REANA Workspace Cleanup", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in allowed_origins.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(workflows_router, prefix="/api/workflows")
    return app
