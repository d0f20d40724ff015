"""Compound prompt preview and validation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from prompt_library.api.models import (
    PreviewRequest,
    PreviewResponse,
    ValidateComponentRequest,
    ValidateComponentResponse,
)
from prompt_library.api.prompts import integrity_error
from prompt_library.core.errors import CompoundPromptError
from prompt_library.core.resolution import preview_components
from prompt_library.core.validation import (
    validate_component,
    validate_component_structure,
)
from prompt_library.db.fetcher import SupabasePromptFetcher, get_prompt_fetcher

router = APIRouter()


@router.post("/compound/preview", response_model=PreviewResponse)
async def preview(
    data: PreviewRequest,
    fetcher: SupabasePromptFetcher = Depends(get_prompt_fetcher),
) -> PreviewResponse:
    """Show how unsaved components would resolve."""
    try:
        validate_component_structure(data.components)
        text = preview_components(data.components, fetcher)
    except CompoundPromptError as e:
        raise integrity_error(e)
    return PreviewResponse(resolved_text=text)


@router.post("/compound/validate", response_model=ValidateComponentResponse)
async def validate(
    data: ValidateComponentRequest,
    fetcher: SupabasePromptFetcher = Depends(get_prompt_fetcher),
) -> ValidateComponentResponse:
    """Check that a compound prompt may reference another prompt."""
    try:
        depths: dict[str, int] = {}
        validate_component(data.compound_prompt_id, data.component_prompt_id, fetcher, depths)
        depth = 1 + depths[data.component_prompt_id]
    except CompoundPromptError as e:
        raise integrity_error(e)
    return ValidateComponentResponse(valid=True, max_depth=depth)
