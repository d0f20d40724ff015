"""Error taxonomy for compound prompt validation and resolution."""

from __future__ import annotations

from typing import Any


class CompoundPromptError(Exception):
    """Base class for compound prompt integrity violations.

    None of these are transient; callers convert them to user-facing
    validation errors or a display placeholder rather than retrying.
    """

    code = "COMPOUND_PROMPT_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidComponentError(CompoundPromptError):
    """A referenced prompt is missing or a component list is malformed."""

    code = "INVALID_COMPONENT"


class CircularReferenceError(CompoundPromptError):
    """Following component references leads back to a prompt already on the path."""

    code = "CIRCULAR_REFERENCE"

    def __init__(self, message: str, path: list[str]) -> None:
        super().__init__(message, {"path": list(path)})
        self.path = list(path)


class MaxDepthExceededError(CompoundPromptError):
    """Compound nesting goes deeper than the allowed limit."""

    code = "MAX_DEPTH_EXCEEDED"

    def __init__(self, message: str, max_depth: int, actual_depth: int) -> None:
        super().__init__(message, {"max_depth": max_depth, "actual_depth": actual_depth})
        self.max_depth = max_depth
        self.actual_depth = actual_depth
