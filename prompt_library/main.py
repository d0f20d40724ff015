"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prompt_library.api.router import api_router
from prompt_library.config import get_settings
from prompt_library.db.client import get_supabase_client
from prompt_library.utils.logging import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("prompt_library.starting", port=settings.port)

    get_supabase_client()
    logger.info("prompt_library.supabase_connected")

    yield

    logger.info("prompt_library.shutdown")


app = FastAPI(
    title="Prompt Library",
    description="Publishing and composition of compound text prompts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Service info endpoint."""
    return {"service": "prompt-library", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "prompt-library", "version": "0.1.0"}
