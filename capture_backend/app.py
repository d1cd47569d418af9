"""
FastAPI application entry point for the capture backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from capture_backend.config import get_settings
from capture_backend.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=logging.INFO)
    app = FastAPI(title=settings.api_title, version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
