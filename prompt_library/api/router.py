"""Main API router — aggregates all endpoint modules."""

from fastapi import APIRouter

from prompt_library.api.compound import router as compound_router
from prompt_library.api.prompts import router as prompts_router

api_router = APIRouter()

api_router.include_router(prompts_router, prefix="/prompts", tags=["prompts"])
api_router.include_router(compound_router, tags=["compound"])
