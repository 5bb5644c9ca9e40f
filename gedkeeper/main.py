"""
GedKeeper FastAPI application.

This is the web service entry point. Every API request that writes runs
in a single database transaction.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from gedkeeper.api import api_router
from gedkeeper.config import configure_logging, settings
from gedkeeper.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    # Startup
    configure_logging()
    init_db()
    yield
    # Shutdown
    pass


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

# Mount API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}
