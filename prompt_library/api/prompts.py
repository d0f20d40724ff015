"""Prompt endpoints — create, replace components, resolve."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException

from prompt_library.api.models import (
    BulkResolveRequest,
    BulkResolveResponse,
    ComponentsReplace,
    CompoundErrorDetail,
    CompoundPromptCreate,
    DependenciesResponse,
    PromptCreate,
    PromptResponse,
    ResolvedPromptResponse,
)
from prompt_library.config import Settings, get_settings
from prompt_library.core.bulk import bulk_resolve_prompts
from prompt_library.core.errors import CompoundPromptError
from prompt_library.core.registry import CompoundPromptRegistry, get_registry
from prompt_library.core.resolution import get_prompt_dependencies, resolve_compound_prompt
from prompt_library.db.fetcher import SupabasePromptFetcher, get_prompt_fetcher

logger = structlog.get_logger()

router = APIRouter()


def integrity_error(e: CompoundPromptError) -> HTTPException:
    """Turn a compound prompt error into a field-level 422."""
    detail = CompoundErrorDetail(code=e.code, message=e.message, details=e.details)
    return HTTPException(status_code=422, detail=detail.model_dump())


@router.post("", response_model=PromptResponse, status_code=201)
async def create_prompt(
    data: PromptCreate,
    registry: CompoundPromptRegistry = Depends(get_registry),
) -> PromptResponse:
    """Create a plain text prompt."""
    prompt = registry.create_prompt(title=data.title, prompt_text=data.prompt_text)
    return PromptResponse(**prompt)


@router.post("/compound", response_model=PromptResponse, status_code=201)
async def create_compound_prompt(
    data: CompoundPromptCreate,
    registry: CompoundPromptRegistry = Depends(get_registry),
) -> PromptResponse:
    """Create a compound prompt after validating its components."""
    try:
        prompt = registry.create_compound_prompt(title=data.title, components=data.components)
    except CompoundPromptError as e:
        raise integrity_error(e)
    return PromptResponse(**prompt)


@router.post("/resolve", response_model=BulkResolveResponse)
async def resolve_many(
    data: BulkResolveRequest,
    fetcher: SupabasePromptFetcher = Depends(get_prompt_fetcher),
    settings: Settings = Depends(get_settings),
) -> BulkResolveResponse:
    """Resolve prompts for a listing, substituting a placeholder for broken ones."""
    result = bulk_resolve_prompts(data.prompt_ids, fetcher.fetch_many)
    resolved = dict(result.resolved_texts)
    for prompt_id, error in result.errors.items():
        logger.warning("compound.resolve_failed", prompt_id=prompt_id, error=error)
        resolved[prompt_id] = settings.resolution_error_placeholder
    return BulkResolveResponse(
        resolved=resolved,
        errors=result.errors,
        queries_executed=result.queries_executed,
    )


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: str,
    registry: CompoundPromptRegistry = Depends(get_registry),
) -> PromptResponse:
    """Get a prompt by ID."""
    prompt = registry.get_prompt(prompt_id)
    if not prompt:
        raise HTTPException(status_code=404, detail=f"Prompt '{prompt_id}' not found")
    return PromptResponse(**prompt)


@router.put("/{prompt_id}/components", response_model=PromptResponse)
async def replace_components(
    prompt_id: str,
    data: ComponentsReplace,
    registry: CompoundPromptRegistry = Depends(get_registry),
) -> PromptResponse:
    """Replace a compound prompt's components."""
    try:
        prompt = registry.replace_components(prompt_id, data.components)
    except CompoundPromptError as e:
        raise integrity_error(e)
    if not prompt:
        raise HTTPException(status_code=404, detail=f"Prompt '{prompt_id}' not found")
    return PromptResponse(**prompt)


@router.get("/{prompt_id}/resolved", response_model=ResolvedPromptResponse)
async def resolve_one(
    prompt_id: str,
    fetcher: SupabasePromptFetcher = Depends(get_prompt_fetcher),
) -> ResolvedPromptResponse:
    """Resolve a prompt to its final text."""
    if fetcher(prompt_id) is None:
        raise HTTPException(status_code=404, detail=f"Prompt '{prompt_id}' not found")
    try:
        result = resolve_compound_prompt(prompt_id, fetcher)
    except CompoundPromptError as e:
        raise integrity_error(e)
    return ResolvedPromptResponse(prompt_id=prompt_id, **result.model_dump())


@router.get("/{prompt_id}/dependencies", response_model=DependenciesResponse)
async def dependencies(
    prompt_id: str,
    fetcher: SupabasePromptFetcher = Depends(get_prompt_fetcher),
) -> DependenciesResponse:
    """List every prompt a resolution of this prompt uses."""
    if fetcher(prompt_id) is None:
        raise HTTPException(status_code=404, detail=f"Prompt '{prompt_id}' not found")
    try:
        ids = get_prompt_dependencies(prompt_id, fetcher)
    except CompoundPromptError as e:
        raise integrity_error(e)
    return DependenciesResponse(prompt_id=prompt_id, dependencies=ids)
