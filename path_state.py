from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from errors import InvalidMove, MoveRejection, RewindTargetInvalid
from game_types import Position
from models import Cell, Grid, MoveOutcome, MoveResult
from utils import is_adjacent

logger = logging.getLogger(__name__)


class PlayPhase(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    WON = "won"


@dataclass(frozen=True)
class StackEntry:
    position: Position
    value: int


@dataclass
class PlayState:
    current_step: int = 0
    active_stack: List[StackEntry] = field(default_factory=list)
    last_position: Optional[Position] = None


class PathStateMachine:
    """Player progress over one grid: advance, rewind and win detection.

    Every move is validated before anything is written, so a rejected move
    leaves both the grid and the play state exactly as they were.
    """

    def __init__(self, grid: Grid, max_number: Optional[int] = None) -> None:
        self.grid = grid
        self.max_number = max_number if max_number is not None else grid.max_number
        if self.max_number < 1:
            raise ValueError("Grid has no numbered path.")
        self.state = PlayState()
        self._active: Dict[Position, int] = {}

    # ----------------------------
    # Queries
    # ----------------------------

    @property
    def current_step(self) -> int:
        return self.state.current_step

    @property
    def last_position(self) -> Optional[Position]:
        return self.state.last_position

    @property
    def phase(self) -> PlayPhase:
        if self.state.current_step == 0:
            return PlayPhase.NOT_STARTED
        if self.state.current_step >= self.max_number:
            return PlayPhase.WON
        return PlayPhase.IN_PROGRESS

    @property
    def won(self) -> bool:
        return self.phase is PlayPhase.WON

    def is_active(self, pos: Position) -> bool:
        return pos in self._active

    def active_value(self, pos: Position) -> Optional[int]:
        return self._active.get(pos)

    def active_positions(self) -> List[Position]:
        return [e.position for e in self.state.active_stack]

    # ----------------------------
    # Advance
    # ----------------------------

    def _validate_advance(self, pos: Position, cell: Cell) -> int:
        """Return the value the cell would take, or raise InvalidMove."""
        next_value = self.state.current_step + 1

        if self.state.current_step == 0:
            if cell.is_anchor and cell.solution_value == 1:
                return 1
            raise InvalidMove(MoveRejection.MUST_START_AT_ONE, "The path must start at 1.")

        last = self.state.last_position
        if last is None or not is_adjacent(pos, last):
            raise InvalidMove(
                MoveRejection.NOT_ADJACENT, "Only cells touching the last number can be joined."
            )

        if cell.is_anchor and cell.solution_value != next_value:
            raise InvalidMove(
                MoveRejection.WRONG_ANCHOR_VALUE,
                f"This cell is {cell.solution_value}, the next number is {next_value}.",
            )
        return next_value

    def select(self, pos: Position) -> MoveResult:
        """Apply a player selection of pos.

        Raises:
            InvalidMove: The selection breaks the rules; nothing was changed.
            ValueError: pos lies outside the grid.
        """
        cell = self.grid.cell(pos)

        if self.won:
            raise InvalidMove(MoveRejection.STALE_SELECTION, "The level is already solved.")

        if cell.is_hole:
            return MoveResult(MoveOutcome.IGNORED, position=pos, step=self.state.current_step)

        if pos in self._active:
            value = self._active[pos]
            if value == self.state.current_step:
                return MoveResult(MoveOutcome.IGNORED, position=pos, step=value)
            if value < self.state.current_step:
                return MoveResult(MoveOutcome.REWIND_PENDING, position=pos, step=value)
            raise InvalidMove(MoveRejection.STALE_SELECTION, "That cell is not on the current path.")

        value = self._validate_advance(pos, cell)

        if not cell.is_anchor:
            cell.user_value = value
            cell.is_hidden = False
        self.state.active_stack.append(StackEntry(pos, value))
        self._active[pos] = value
        self.state.last_position = pos
        self.state.current_step = value
        logger.debug("step %s at %s", value, pos)

        if self.won:
            logger.info("path completed at %s", value)
            return MoveResult(MoveOutcome.WON, position=pos, step=value)
        return MoveResult(MoveOutcome.ACCEPTED, position=pos, step=value)

    # ----------------------------
    # Rewind
    # ----------------------------

    def check_rewind_target(self, target_step: int) -> None:
        if self.won:
            raise RewindTargetInvalid(
                target_step, self.state.current_step, "The level is already solved."
            )
        if target_step < 0 or target_step > self.state.current_step:
            raise RewindTargetInvalid(target_step, self.state.current_step)

    def undo_last_step(self) -> Optional[StackEntry]:
        if not self.state.active_stack:
            return None
        entry = self.state.active_stack.pop()
        del self._active[entry.position]
        cell = self.grid.cell(entry.position)
        if not cell.is_anchor:
            cell.user_value = None
            cell.is_hidden = True

        if self.state.active_stack:
            top = self.state.active_stack[-1]
            self.state.last_position = top.position
            self.state.current_step = top.value
        else:
            self.state.last_position = None
            self.state.current_step = 0
        return entry

    def rewind_to(self, target_step: int) -> int:
        """Pop every step above target_step; returns how many steps were undone.

        Raises:
            RewindTargetInvalid: target_step is negative, ahead of the current
                step, or the level is already won.
        """
        self.check_rewind_target(target_step)
        undone = 0
        while self.state.current_step > target_step:
            self.undo_last_step()
            undone += 1
        if undone:
            logger.debug("rewound %s step(s) to %s", undone, self.state.current_step)
        return undone

    def reset(self) -> None:
        """Undo every step, restoring all player-filled cells."""
        while self.state.active_stack:
            self.undo_last_step()
