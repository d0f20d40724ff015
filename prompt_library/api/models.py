"""Pydantic request/response models for the API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from prompt_library.core.types import ComponentDraft


# --- Prompts ---


class PromptCreate(BaseModel):
    """Create a plain text prompt."""

    title: str = Field(..., min_length=1, max_length=200)
    prompt_text: str = Field(..., min_length=1)


class CompoundPromptCreate(BaseModel):
    """Create a compound prompt from an ordered component list."""

    title: str = Field(..., min_length=1, max_length=200)
    components: list[ComponentDraft]


class ComponentsReplace(BaseModel):
    """Replace a compound prompt's component set wholesale."""

    components: list[ComponentDraft]


class PromptResponse(BaseModel):
    """Prompt response."""

    id: str
    title: str = ""
    prompt_text: str | None = None
    is_compound: bool
    max_depth: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --- Resolution ---


class ResolvedPromptResponse(BaseModel):
    """A prompt flattened to its final text."""

    prompt_id: str
    resolved_text: str
    depth_reached: int
    used_prompt_ids: list[str]


class DependenciesResponse(BaseModel):
    prompt_id: str
    dependencies: list[str]


class PreviewRequest(BaseModel):
    """Unsaved components to preview."""

    components: list[ComponentDraft]


class PreviewResponse(BaseModel):
    resolved_text: str


class BulkResolveRequest(BaseModel):
    """Resolve several prompts for a listing."""

    prompt_ids: list[str] = Field(..., max_length=100)


class BulkResolveResponse(BaseModel):
    """Resolved texts; failed prompts carry the display placeholder."""

    resolved: dict[str, str]
    errors: dict[str, str] = Field(default_factory=dict)
    queries_executed: int = 0


# --- Validation ---


class ValidateComponentRequest(BaseModel):
    """Check whether one compound prompt may reference another prompt."""

    compound_prompt_id: str
    component_prompt_id: str


class ValidateComponentResponse(BaseModel):
    valid: bool
    max_depth: int | None = None


class CompoundErrorDetail(BaseModel):
    """Field-level error body returned with 422 responses."""

    field: str = "components"
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
