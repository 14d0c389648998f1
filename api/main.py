"""
DramaBox catalog API - FastAPI application.

Read-only hand-off of the synced catalog to presentation clients:
- Browsing shows and their episodes
- Genre groupings
- Title search
"""
from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import genres, shows

logger = logging.getLogger(__name__)


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins from environment.
    Set CORS_ALLOW_ORIGINS as comma-separated list of origins.
    """
    origins_str = os.getenv("CORS_ALLOW_ORIGINS", "")
    if not origins_str:
        return []
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


app = FastAPI(
    title="DramaBox Catalog API",
    description="Read-only access to the synced DramaBox show catalog",
    version="0.1.0",
)

cors_origins = get_cors_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(shows.router, prefix="/api/v1")
app.include_router(genres.router, prefix="/api/v1")


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "dramabox-backend"}
