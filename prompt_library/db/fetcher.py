"""Fetch port backed by Supabase.

Loads a prompt together with its ordered components, inlining each component's
directly referenced prompt. Deeper levels are left to the caller, which fetches
again as it walks the graph.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from prompt_library.core.types import BasePrompt, ComponentWithPrompt, PromptWithComponents
from prompt_library.db.client import SupabaseClient, get_supabase_client
from prompt_library.db.models import ComponentRow, PromptRow

PROMPTS_TABLE = "prompts"
COMPONENTS_TABLE = "compound_prompt_components"


class SupabasePromptFetcher:
    """Implements both the single and the bulk fetch port over Supabase tables."""

    def __init__(self, db: SupabaseClient) -> None:
        self.db = db

    def __call__(self, prompt_id: str) -> PromptWithComponents | None:
        rows = self.db.select(PROMPTS_TABLE, filters={"id": prompt_id})
        if not rows:
            return None
        components = self.db.select(
            COMPONENTS_TABLE,
            filters={"compound_prompt_id": prompt_id},
            order_by="position",
        )
        return self._assemble([rows[0]], components)[prompt_id]

    def fetch_many(self, prompt_ids: list[str]) -> dict[str, PromptWithComponents]:
        """Fetch many prompts with their components in three queries."""
        rows = self.db.select_in(PROMPTS_TABLE, "id", prompt_ids)
        compound_ids = [r["id"] for r in rows if r.get("is_compound")]
        components = self.db.select_in(
            COMPONENTS_TABLE, "compound_prompt_id", compound_ids, order_by="position"
        )
        return self._assemble(rows, components)

    def _assemble(
        self,
        prompt_rows: list[dict[str, Any]],
        component_rows: list[dict[str, Any]],
    ) -> dict[str, PromptWithComponents]:
        components = [ComponentRow(**c) for c in component_rows]
        referenced = {c.component_prompt_id for c in components if c.component_prompt_id}
        inlined = {
            r["id"]: BasePrompt(**PromptRow(**r).model_dump(exclude={"created_at", "updated_at"}))
            for r in self.db.select_in(PROMPTS_TABLE, "id", sorted(referenced))
        }

        by_owner: dict[str, list[ComponentWithPrompt]] = {}
        for component in sorted(components, key=lambda c: c.position):
            by_owner.setdefault(component.compound_prompt_id, []).append(
                ComponentWithPrompt(
                    **component.model_dump(),
                    component_prompt=inlined.get(component.component_prompt_id or ""),
                )
            )

        result: dict[str, PromptWithComponents] = {}
        for row in prompt_rows:
            prompt = PromptRow(**row)
            result[prompt.id] = PromptWithComponents(
                **prompt.model_dump(exclude={"created_at", "updated_at"}),
                compound_components=by_owner.get(prompt.id, []),
            )
        return result


@lru_cache
def get_prompt_fetcher() -> SupabasePromptFetcher:
    """Get cached fetcher instance."""
    return SupabasePromptFetcher(get_supabase_client())
