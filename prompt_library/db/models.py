"""Database models / type definitions.

These mirror the Supabase tables backing compound prompts.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class PromptRow(BaseModel):
    """Row from the prompts table."""

    id: str
    title: str = ""
    prompt_text: str | None = None
    is_compound: bool = False
    max_depth: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ComponentRow(BaseModel):
    """Row from the compound_prompt_components table."""

    id: str
    compound_prompt_id: str
    component_prompt_id: str | None = None
    position: int
    custom_text_before: str | None = None
    custom_text_after: str | None = None
    created_at: datetime | None = None
