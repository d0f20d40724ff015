"""Reference graph model for compound prompts.

A compound prompt owns an ordered list of components. Each component may point
at another prompt (plain or compound) and may wrap it in literal text. The
storage layer hands these shapes to the core through a fetch callable; the core
never talks to storage itself.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pydantic import BaseModel, Field


class BasePrompt(BaseModel):
    """The fields of a prompt needed to validate and resolve it."""

    id: str
    title: str = ""
    prompt_text: str | None = None
    is_compound: bool = False
    max_depth: int | None = None


class ComponentDraft(BaseModel):
    """A component that may not be persisted yet."""

    position: int
    component_prompt_id: str | None = None
    custom_text_before: str | None = None
    custom_text_after: str | None = None

    @property
    def has_content(self) -> bool:
        return bool(
            self.component_prompt_id or self.custom_text_before or self.custom_text_after
        )


class CompoundPromptComponent(ComponentDraft):
    """A persisted component slot belonging to one compound prompt."""

    id: str
    compound_prompt_id: str
    created_at: datetime | None = None


class ComponentWithPrompt(CompoundPromptComponent):
    """Component with its directly referenced prompt inlined (one level only)."""

    component_prompt: BasePrompt | None = None


class PromptWithComponents(BasePrompt):
    """A prompt record as returned by the fetch port."""

    compound_components: list[ComponentWithPrompt] = Field(default_factory=list)

    def ordered_components(self) -> list[ComponentWithPrompt]:
        return sorted(self.compound_components, key=lambda c: c.position)

    def referenced_ids(self) -> list[str]:
        """Referenced prompt ids in position order."""
        return [
            c.component_prompt_id
            for c in self.ordered_components()
            if c.component_prompt_id
        ]


class ResolutionResult(BaseModel):
    """Outcome of flattening a prompt into its display text."""

    resolved_text: str
    depth_reached: int
    used_prompt_ids: list[str]


class PromptFetcher(Protocol):
    """Fetch port: look up one prompt with its ordered components."""

    def __call__(self, prompt_id: str) -> PromptWithComponents | None: ...


class BulkPromptFetcher(Protocol):
    """Bulk fetch port: look up many prompts in a single round trip.

    Ids that do not exist are simply absent from the returned mapping.
    """

    def __call__(self, prompt_ids: list[str]) -> dict[str, PromptWithComponents]: ...
