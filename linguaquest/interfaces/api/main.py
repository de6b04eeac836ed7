"""
FastAPI application for the LinguaQuest web client.

Provides REST API endpoints for progress recording, stats and AI features.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tortoise import Tortoise

from linguaquest.config import config
from linguaquest.database.config import TORTOISE_ORM
from linguaquest.interfaces.api.routers import ai, exercise, progress, stats, user

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup, close it on shutdown."""
    await Tortoise.init(config=TORTOISE_ORM)
    if config.ENVIRONMENT != "production":
        # AICODE-NOTE: Production schema is managed by migrations
        await Tortoise.generate_schemas()
    logger.info(f"Database initialized ({config.ENVIRONMENT})")
    yield
    await Tortoise.close_connections()
    logger.info("Database connections closed")


app = FastAPI(
    title="LinguaQuest API",
    description="Progress, levels, streaks and AI practice for language learners",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=config.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(user.router)
app.include_router(progress.router)
app.include_router(stats.router)
app.include_router(exercise.router)
app.include_router(ai.router)


@app.get("/api/health")
async def api_health():
    """API health check endpoint."""
    return {"status": "ok", "service": "linguaquest-api"}
