from __future__ import annotations

from enum import Enum


class MoveRejection(str, Enum):
    NOT_ADJACENT = "not_adjacent"
    WRONG_ANCHOR_VALUE = "wrong_anchor_value"
    MUST_START_AT_ONE = "must_start_at_one"
    STALE_SELECTION = "stale_selection"


class NumberPathError(Exception):
    """Base class for all puzzle errors."""


class GenerationExhausted(NumberPathError, RuntimeError):
    """The level generator ran out of attempts (or time) without a usable path."""

    def __init__(self, rows: int, cols: int, target_length: int, attempts: int, best_length: int) -> None:
        self.rows = rows
        self.cols = cols
        self.target_length = target_length
        self.attempts = attempts
        self.best_length = best_length
        super().__init__(
            f"Failed to generate a {rows}x{cols} level with a path of {target_length} "
            f"after {attempts} attempts (best path: {best_length})."
        )


class InvalidMove(NumberPathError):
    """A selection broke the ordering/adjacency rules. The play state is unchanged."""

    def __init__(self, reason: MoveRejection, message: str = "") -> None:
        self.reason = reason
        super().__init__(message or reason.value)


class RewindTargetInvalid(NumberPathError):
    """The requested rewind step is not a prior step on the active stack."""

    def __init__(self, target_step: int, current_step: int, message: str = "") -> None:
        self.target_step = target_step
        self.current_step = current_step
        super().__init__(
            message or f"Cannot rewind to step {target_step} (current step is {current_step})."
        )
