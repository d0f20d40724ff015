"""Compound prompt registry — stores prompts and replaces component sets."""

from __future__ import annotations

from functools import lru_cache
from typing import Any
from uuid import uuid4

import structlog

from prompt_library.core.errors import (
    CompoundPromptError,
    InvalidComponentError,
    MaxDepthExceededError,
)
from prompt_library.core.types import ComponentDraft, PromptFetcher
from prompt_library.core.validation import (
    MAX_NESTING_DEPTH,
    calculate_max_depth,
    validate_component,
    validate_component_structure,
)
from prompt_library.db.client import SupabaseClient, get_supabase_client
from prompt_library.db.fetcher import (
    COMPONENTS_TABLE,
    PROMPTS_TABLE,
    get_prompt_fetcher,
)

logger = structlog.get_logger()


class CompoundPromptRegistry:
    """Creates prompts and keeps compound component sets valid.

    A compound prompt's components are never edited one by one: every edit
    inserts a new set and then deletes the old one, after which ``max_depth``
    is recomputed on a best-effort basis.
    """

    def __init__(self, db: SupabaseClient, fetch: PromptFetcher) -> None:
        self.db = db
        self.fetch = fetch

    def get_prompt(self, prompt_id: str) -> dict[str, Any] | None:
        """Get a prompt row by ID."""
        results = self.db.select(PROMPTS_TABLE, filters={"id": prompt_id})
        return results[0] if results else None

    def create_prompt(self, title: str, prompt_text: str) -> dict[str, Any]:
        """Create a plain text prompt."""
        prompt = self.db.insert(
            PROMPTS_TABLE,
            {
                "id": str(uuid4()),
                "title": title,
                "prompt_text": prompt_text,
                "is_compound": False,
                "max_depth": 0,
            },
        )
        logger.info("prompt.created", prompt_id=prompt["id"])
        return prompt

    def create_compound_prompt(
        self, title: str, components: list[ComponentDraft]
    ) -> dict[str, Any]:
        """Validate and store a new compound prompt with its components.

        If the component rows cannot be written the prompt row is deleted again,
        so a failed create leaves nothing behind.
        """
        prompt_id = str(uuid4())
        self._validate(prompt_id, components)

        prompt = self.db.insert(
            PROMPTS_TABLE,
            {
                "id": prompt_id,
                "title": title,
                "prompt_text": None,
                "is_compound": True,
                "max_depth": None,
            },
        )
        try:
            self._insert_components(prompt_id, components)
        except Exception:
            logger.error("compound.create_failed", prompt_id=prompt_id)
            self.db.delete_where(PROMPTS_TABLE, "id", prompt_id)
            raise
        logger.info("compound.created", prompt_id=prompt_id, components=len(components))

        depth = self.refresh_max_depth(prompt_id)
        if depth is not None:
            prompt["max_depth"] = depth
        return prompt

    def replace_components(
        self, prompt_id: str, components: list[ComponentDraft]
    ) -> dict[str, Any] | None:
        """Swap a compound prompt's whole component set for a new one.

        The new rows are inserted before the old ones are deleted by id. A
        failed insert leaves the old set untouched; a failed delete removes the
        new rows again. Either way the prompt keeps exactly one component set.

        Prompts that already reference this one are checked too: an edit that
        would push any of them past MAX_NESTING_DEPTH is rejected.

        Returns None if the prompt does not exist.
        """
        prompt = self.get_prompt(prompt_id)
        if not prompt:
            return None
        if not prompt.get("is_compound"):
            raise InvalidComponentError(
                f"Prompt {prompt_id} is not a compound prompt", {"prompt_id": prompt_id}
            )

        depths = self._validate(prompt_id, components)
        new_depth = 1 + max(
            (depths[c.component_prompt_id] for c in components if c.component_prompt_id),
            default=0,
        )
        self._check_referrers(prompt_id, new_depth)

        old_ids = [
            row["id"]
            for row in self.db.select(COMPONENTS_TABLE, filters={"compound_prompt_id": prompt_id})
        ]
        new_ids = self._insert_components(prompt_id, components)
        if old_ids:
            try:
                self.db.delete_in(COMPONENTS_TABLE, "id", old_ids)
            except Exception:
                logger.error("compound.components_replace_failed", prompt_id=prompt_id)
                self.db.delete_in(COMPONENTS_TABLE, "id", new_ids)
                raise
        logger.info("compound.components_replaced", prompt_id=prompt_id, components=len(components))

        depth = self.refresh_max_depth(prompt_id)
        if depth is not None:
            prompt["max_depth"] = depth
        return prompt

    def refresh_max_depth(self, prompt_id: str) -> int | None:
        """Recompute and store ``max_depth``.

        The stored value is a display hint only. When the computation fails the
        previous value stays in place and None is returned.
        """
        try:
            depth = calculate_max_depth(prompt_id, self.fetch)
        except CompoundPromptError as e:
            logger.warning(
                "compound.max_depth_refresh_failed", prompt_id=prompt_id, error=e.message
            )
            return None
        self.db.update(PROMPTS_TABLE, prompt_id, {"max_depth": depth})
        return depth

    def _validate(self, prompt_id: str, components: list[ComponentDraft]) -> dict[str, int]:
        """Validate a component set; return the depths computed along the way."""
        validate_component_structure(components)
        depths: dict[str, int] = {}
        for component in components:
            if component.component_prompt_id:
                validate_component(
                    prompt_id, component.component_prompt_id, self.fetch, depths
                )
        return depths

    def _check_referrers(self, prompt_id: str, depth: int) -> None:
        # Walks upwards through every compound prompt that embeds prompt_id
        rows = self.db.select(COMPONENTS_TABLE, filters={"component_prompt_id": prompt_id})
        for owner_id in {row["compound_prompt_id"] for row in rows}:
            owner_depth = depth + 1
            if owner_depth > MAX_NESTING_DEPTH:
                raise MaxDepthExceededError(
                    f"Prompt {owner_id} would exceed maximum nesting depth of "
                    f"{MAX_NESTING_DEPTH}",
                    MAX_NESTING_DEPTH,
                    owner_depth,
                )
            self._check_referrers(owner_id, owner_depth)

    def _insert_components(
        self, prompt_id: str, components: list[ComponentDraft]
    ) -> list[str]:
        rows = [
            {
                "id": str(uuid4()),
                "compound_prompt_id": prompt_id,
                **component.model_dump(include=set(ComponentDraft.model_fields)),
            }
            for component in components
        ]
        self.db.insert_many(COMPONENTS_TABLE, rows)
        return [row["id"] for row in rows]


@lru_cache
def get_registry() -> CompoundPromptRegistry:
    """Get cached registry instance."""
    return CompoundPromptRegistry(get_supabase_client(), get_prompt_fetcher())
