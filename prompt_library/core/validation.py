"""Compound prompt validation — structure, cycles and nesting depth.

Cycle detection tracks only the current depth-first path, so two branches that
converge on a shared descendant are accepted. Depth calculation memoizes per
prompt id instead. The two are separate state: a memo hit must never hide a
cycle, and a path entry must never change a depth.

Every check reads the graph through the fetch callable one prompt at a time.
There is no locking: concurrent edits between two fetches may be observed as a
mix of old and new components.
"""

from __future__ import annotations

from collections.abc import Sequence

from prompt_library.core.errors import (
    CircularReferenceError,
    InvalidComponentError,
    MaxDepthExceededError,
)
from prompt_library.core.types import ComponentDraft, PromptFetcher, PromptWithComponents

MAX_NESTING_DEPTH = 5


def _fetch_or_raise(prompt_id: str, fetch: PromptFetcher) -> PromptWithComponents:
    prompt = fetch(prompt_id)
    if prompt is None:
        raise InvalidComponentError(
            f"Prompt not found: {prompt_id}", {"prompt_id": prompt_id}
        )
    return prompt


def check_circular_reference(
    prompt_id: str,
    fetch: PromptFetcher,
    path: Sequence[str] = (),
) -> bool:
    """Walk the reference graph from ``prompt_id`` and fail on any cycle.

    ``path`` holds the ids already on the current branch; callers can seed it to
    ask whether a given prompt is reachable from ``prompt_id``.

    Raises CircularReferenceError with the full path (ending in the repeated id)
    or InvalidComponentError when a referenced prompt does not exist.
    """
    if prompt_id in path:
        cycle = [*path, prompt_id]
        raise CircularReferenceError(
            f"Circular reference detected: {' → '.join(cycle)}", cycle
        )

    prompt = _fetch_or_raise(prompt_id, fetch)
    if not prompt.is_compound:
        return True

    branch = [*path, prompt_id]
    for child_id in prompt.referenced_ids():
        check_circular_reference(child_id, fetch, branch)
    return True


def _exceeded(actual: int) -> MaxDepthExceededError:
    return MaxDepthExceededError(
        f"Maximum nesting depth of {MAX_NESTING_DEPTH} exceeded. Actual depth: {actual}",
        MAX_NESTING_DEPTH,
        actual,
    )


def _depth(
    prompt_id: str,
    fetch: PromptFetcher,
    cache: dict[str, int],
    ancestors: int,
) -> int:
    # ancestors = compound prompts above this one on the current chain
    if prompt_id in cache:
        depth = cache[prompt_id]
        if ancestors + depth > MAX_NESTING_DEPTH:
            raise _exceeded(ancestors + depth)
        return depth

    prompt = _fetch_or_raise(prompt_id, fetch)
    if not prompt.is_compound:
        cache[prompt_id] = 0
        return 0

    if ancestors + 1 > MAX_NESTING_DEPTH:
        raise _exceeded(ancestors + 1)

    deepest = 0
    for child_id in prompt.referenced_ids():
        deepest = max(deepest, _depth(child_id, fetch, cache, ancestors + 1))

    depth = 1 + deepest
    if ancestors + depth > MAX_NESTING_DEPTH:
        raise _exceeded(ancestors + depth)
    cache[prompt_id] = depth
    return depth


def calculate_max_depth(
    prompt_id: str,
    fetch: PromptFetcher,
    cache: dict[str, int] | None = None,
) -> int:
    """Return the nesting depth of a prompt.

    A plain prompt has depth 0. A compound prompt has depth one more than its
    deepest referenced prompt, or 1 when it only holds custom text.

    ``cache`` maps prompt ids to depths already computed in this run. It may be
    shared between sibling calls of one validation, but not across unrelated
    prompts or edits since depths depend on the graph snapshot.

    Raises MaxDepthExceededError as soon as a chain goes past
    MAX_NESTING_DEPTH, and InvalidComponentError for a missing prompt.
    """
    if cache is None:
        cache = {}
    return _depth(prompt_id, fetch, cache, 0)


def validate_component(
    compound_prompt_id: str,
    component_prompt_id: str,
    fetch: PromptFetcher,
    cache: dict[str, int] | None = None,
) -> bool:
    """Check that ``compound_prompt_id`` may reference ``component_prompt_id``.

    ``cache`` is passed on to calculate_max_depth. After a successful call it
    holds the component's depth, so callers can read it back instead of walking
    the subgraph again.
    """
    if compound_prompt_id == component_prompt_id:
        raise CircularReferenceError(
            "A prompt cannot reference itself",
            [compound_prompt_id, component_prompt_id],
        )

    component = fetch(component_prompt_id)
    if component is None:
        raise InvalidComponentError(
            f"Component prompt not found: {component_prompt_id}",
            {"prompt_id": component_prompt_id},
        )

    if component.is_compound:
        # A cycle would need compound_prompt_id to be reachable from the component
        check_circular_reference(component_prompt_id, fetch, [compound_prompt_id])

    new_depth = 1 + calculate_max_depth(component_prompt_id, fetch, cache)
    if new_depth > MAX_NESTING_DEPTH:
        raise MaxDepthExceededError(
            f"Adding this component would exceed maximum nesting depth of {MAX_NESTING_DEPTH}",
            MAX_NESTING_DEPTH,
            new_depth,
        )
    return True


def validate_component_structure(components: Sequence[ComponentDraft]) -> bool:
    """Check a candidate component list is well-formed on its own.

    Positions must be exactly 0..N-1 for a non-empty list. Every component
    needs a prompt reference or some custom text.
    """
    if not components:
        raise InvalidComponentError(
            "Compound prompt must have at least one component", {"reason": "empty"}
        )

    positions = sorted(c.position for c in components)
    for expected, actual in enumerate(positions):
        if actual != expected:
            raise InvalidComponentError(
                "Component positions must be consecutive starting from 0. "
                f"Expected {expected}, got {actual}",
                {"reason": "positions", "expected": expected, "actual": actual},
            )

    for component in components:
        if not component.has_content:
            raise InvalidComponentError(
                f"Component at position {component.position} has neither a "
                "component prompt nor custom text",
                {"reason": "missing_content", "position": component.position},
            )

    return True
