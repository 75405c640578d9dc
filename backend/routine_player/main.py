"""
Routine Player API
==================
FastAPI application entry point. Mount routers here.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routine_player.config import get_settings
from routine_player.routers import routines, session

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Routine Player API",
    description="Exercise routine expansion and timed session playback",
    version="0.1.0",
    docs_url="/api/docs" if settings.environment != "production" else None,
    redoc_url="/api/redoc" if settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routines.router)
app.include_router(session.router)


@app.get("/api/v1/health")
async def health_check() -> dict:
    return {"status": "ok", "service": "routine-player-api"}
