"""Compound prompt resolution — flattens a reference graph into display text.

Each component contributes ``custom_text_before``, then the resolved text of the
prompt it references, then ``custom_text_after``. Contributions are joined with
no separator; any whitespace has to live in the custom text itself.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from prompt_library.core.errors import InvalidComponentError, MaxDepthExceededError
from prompt_library.core.types import ComponentDraft, PromptFetcher, ResolutionResult
from prompt_library.core.validation import MAX_NESTING_DEPTH

logger = structlog.get_logger()


class _Resolution:
    """State for one resolution call: the ordered set of prompts touched."""

    def __init__(self, fetch: PromptFetcher) -> None:
        self.fetch = fetch
        self.used: dict[str, None] = {}

    def prompt(self, prompt_id: str, level: int) -> tuple[str, int]:
        """Resolve one prompt found ``level`` references below the root."""
        prompt = self.fetch(prompt_id)
        if prompt is None:
            raise InvalidComponentError(
                f"Prompt not found: {prompt_id}", {"prompt_id": prompt_id}
            )
        self.used.setdefault(prompt_id, None)

        if not prompt.is_compound:
            return prompt.prompt_text or "", 0

        if level >= MAX_NESTING_DEPTH:
            raise MaxDepthExceededError(
                f"Resolution exceeded maximum nesting depth of {MAX_NESTING_DEPTH}",
                MAX_NESTING_DEPTH,
                level + 1,
            )
        return self.components(prompt.compound_components, level)

    def components(
        self, components: Sequence[ComponentDraft], level: int
    ) -> tuple[str, int]:
        """Compose a component list owned by a compound at ``level``."""
        parts: list[str] = []
        deepest = 0
        for component in sorted(components, key=lambda c: c.position):
            parts.append(component.custom_text_before or "")
            if component.component_prompt_id:
                text, depth = self.prompt(component.component_prompt_id, level + 1)
                parts.append(text)
                deepest = max(deepest, depth)
            parts.append(component.custom_text_after or "")
        return "".join(parts), 1 + deepest


def resolve_compound_prompt(prompt_id: str, fetch: PromptFetcher) -> ResolutionResult:
    """Resolve a prompt and report how deep it went and which prompts it used.

    Works for plain prompts too. Missing prompts raise InvalidComponentError;
    nothing is replaced with a placeholder here.
    """
    resolution = _Resolution(fetch)
    text, depth = resolution.prompt(prompt_id, 0)
    logger.debug(
        "compound.resolved",
        prompt_id=prompt_id,
        depth=depth,
        prompts_used=len(resolution.used),
    )
    return ResolutionResult(
        resolved_text=text,
        depth_reached=depth,
        used_prompt_ids=list(resolution.used),
    )


def resolve_prompt(prompt_id: str, fetch: PromptFetcher) -> str:
    """Resolve a prompt to its final text."""
    return resolve_compound_prompt(prompt_id, fetch).resolved_text


def preview_components(components: Sequence[ComponentDraft], fetch: PromptFetcher) -> str:
    """Resolve an unsaved component list as if it belonged to a compound prompt."""
    text, _ = _Resolution(fetch).components(components, 0)
    return text


def get_prompt_dependencies(prompt_id: str, fetch: PromptFetcher) -> list[str]:
    """List every prompt id a resolution touches, the root included."""
    return resolve_compound_prompt(prompt_id, fetch).used_prompt_ids
