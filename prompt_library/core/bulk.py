"""Bulk resolution — resolve many prompts from a level-by-level prefetch.

Listings resolve dozens of prompts at once. Instead of one fetch per reference,
the graph is loaded breadth first with one bulk query per nesting level, then
each root is resolved in memory with the normal resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from prompt_library.core.errors import CompoundPromptError
from prompt_library.core.resolution import resolve_prompt
from prompt_library.core.types import BulkPromptFetcher, PromptWithComponents
from prompt_library.core.validation import MAX_NESTING_DEPTH

logger = structlog.get_logger()


@dataclass
class BulkResolutionResult:
    """Resolved texts and per-prompt failures of a bulk resolution."""

    resolved_texts: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    queries_executed: int = 0

    @property
    def success_count(self) -> int:
        return len(self.resolved_texts)

    @property
    def error_count(self) -> int:
        return len(self.errors)


def bulk_fetch_prompts_for_resolution(
    prompt_ids: list[str],
    fetch_many: BulkPromptFetcher,
    max_depth: int = MAX_NESTING_DEPTH,
) -> tuple[dict[str, PromptWithComponents], int]:
    """Load every prompt needed to resolve ``prompt_ids``.

    Returns the prompt map and the number of bulk queries issued. Plain
    component prompts come inlined with their parent and are not queried again;
    compound ones are queried on the next level, down to ``max_depth`` levels
    below the roots.
    """
    prompts: dict[str, PromptWithComponents] = {}
    queries = 0
    pending = list(dict.fromkeys(prompt_ids))
    level = 0

    while pending and level <= max_depth:
        batch = fetch_many(pending)
        queries += 1
        next_level: dict[str, None] = {}

        for prompt in batch.values():
            prompts[prompt.id] = prompt
            if not prompt.is_compound:
                continue
            for component in prompt.compound_components:
                child = component.component_prompt
                if child is None or child.id in prompts:
                    continue
                if child.is_compound:
                    next_level.setdefault(child.id, None)
                else:
                    prompts[child.id] = PromptWithComponents(**child.model_dump())

        pending = [pid for pid in next_level if pid not in prompts]
        level += 1

    return prompts, queries


def bulk_resolve_prompts(
    prompt_ids: list[str],
    fetch_many: BulkPromptFetcher,
) -> BulkResolutionResult:
    """Resolve many prompts; one broken prompt does not fail the others.

    Failures are reported as messages in ``errors``. Substituting a display
    placeholder is left to the caller.
    """
    result = BulkResolutionResult()
    if not prompt_ids:
        return result

    prompts, result.queries_executed = bulk_fetch_prompts_for_resolution(prompt_ids, fetch_many)

    for prompt_id in prompt_ids:
        if prompt_id not in prompts:
            result.errors[prompt_id] = "Prompt not found"
            continue
        try:
            result.resolved_texts[prompt_id] = resolve_prompt(prompt_id, prompts.get)
        except CompoundPromptError as e:
            result.errors[prompt_id] = e.message

    logger.info(
        "compound.bulk_resolved",
        requested=len(prompt_ids),
        resolved=result.success_count,
        failed=result.error_count,
        queries=result.queries_executed,
    )
    return result
