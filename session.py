from __future__ import annotations

import logging
import random
from typing import Dict, Optional, Tuple

from errors import InvalidMove, MoveRejection, RewindTargetInvalid
from game_types import Position
from generate_levels import LevelGenerator
from models import (
    DEFAULT_DIFFICULTIES,
    BoardSnapshot,
    CellView,
    Difficulty,
    GenerationLimits,
    Grid,
    MoveOutcome,
    MoveResult,
)
from path_state import PathStateMachine

logger = logging.getLogger(__name__)

START_PROMPT = "Click number 1 to start."
WIN_MESSAGE = "Congratulations, path complete!"


class GameSession:
    """One interactive play session: the current grid, its play state and a pending rewind."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        limits: Optional[GenerationLimits] = None,
        difficulties: Optional[Dict[str, Difficulty]] = None,
    ) -> None:
        self.generator = LevelGenerator(rng, limits)
        self.difficulties = dict(difficulties or DEFAULT_DIFFICULTIES)
        self.difficulty_name = ""
        self.machine: Optional[PathStateMachine] = None
        self.pending_rewind: Optional[int] = None
        self.status = ""

    # ----------------------------
    # Level management
    # ----------------------------

    def new_level(self, rows: int, cols: int, target_length: int) -> Tuple[Grid, int]:
        """Generate and start a fresh level.

        Raises:
            GenerationExhausted: No level could be generated within the limits.
                The previous level (if any) stays in play.
        """
        level = self.generator.generate(rows, cols, target_length)
        self.load_grid(level.grid, level.max_number)
        return level.grid, level.max_number

    def new_level_for(self, difficulty: str) -> Tuple[Grid, int]:
        preset = self.difficulties.get(difficulty)
        if preset is None:
            raise KeyError(f"Unknown difficulty: {difficulty}")
        result = self.new_level(preset.rows, preset.cols, preset.target_length)
        self.difficulty_name = preset.name
        return result

    def load_grid(self, grid: Grid, max_number: Optional[int] = None) -> None:
        """Start play on an existing grid (generated or hand-made)."""
        self.machine = PathStateMachine(grid, max_number)
        self.pending_rewind = None
        self.status = START_PROMPT

    def _require_machine(self) -> PathStateMachine:
        if self.machine is None:
            raise RuntimeError("No level loaded; call new_level() first.")
        return self.machine

    @property
    def grid(self) -> Grid:
        return self._require_machine().grid

    @property
    def current_step(self) -> int:
        return self._require_machine().current_step

    @property
    def max_number(self) -> int:
        return self._require_machine().max_number

    @property
    def last_position(self) -> Optional[Position]:
        return self._require_machine().last_position

    @property
    def won(self) -> bool:
        return self._require_machine().won

    # ----------------------------
    # Moves
    # ----------------------------

    def _progress_status(self, step: int, prefix: str = "Now at") -> str:
        if step == 0:
            return START_PROMPT
        return f"{prefix} {step}, find {step + 1}."

    def submit_move(self, pos: Position) -> MoveResult:
        machine = self._require_machine()

        if self.pending_rewind is not None:
            message = "Confirm or cancel the rewind first."
            self.status = message
            return MoveResult(
                MoveOutcome.REJECTED,
                position=pos,
                step=machine.current_step,
                reason=MoveRejection.STALE_SELECTION,
                message=message,
            )

        try:
            result = machine.select(pos)
        except InvalidMove as e:
            logger.debug("rejected %s at %s: %s", e.reason.value, pos, e)
            self.status = WIN_MESSAGE if machine.won else str(e)
            return MoveResult(
                MoveOutcome.REJECTED,
                position=pos,
                step=machine.current_step,
                reason=e.reason,
                message=str(e),
            )

        if result.outcome is MoveOutcome.REWIND_PENDING:
            return self.request_rewind(result.step)
        if result.outcome is MoveOutcome.WON:
            self.status = WIN_MESSAGE
        elif result.outcome is MoveOutcome.ACCEPTED:
            self.status = self._progress_status(result.step)
        return result

    # ----------------------------
    # Rewind
    # ----------------------------

    def request_rewind(self, target_step: int) -> MoveResult:
        """Ask to rewind to target_step; it only happens after confirm_rewind().

        Raises:
            RewindTargetInvalid: target_step is not a prior step on the path.
        """
        machine = self._require_machine()
        machine.check_rewind_target(target_step)
        if target_step == machine.current_step:
            if self.pending_rewind is not None:
                self.pending_rewind = None
                self.status = self._progress_status(machine.current_step)
            return MoveResult(MoveOutcome.IGNORED, step=target_step)
        self.pending_rewind = target_step
        message = f"Rewind to number {target_step}?"
        self.status = message
        return MoveResult(MoveOutcome.REWIND_PENDING, step=target_step, message=message)

    def confirm_rewind(self) -> MoveResult:
        machine = self._require_machine()
        if self.pending_rewind is None:
            return MoveResult(MoveOutcome.IGNORED, step=machine.current_step)
        target = self.pending_rewind
        self.pending_rewind = None
        try:
            machine.rewind_to(target)
        except RewindTargetInvalid:
            self.status = self._progress_status(machine.current_step)
            raise
        self.status = self._progress_status(machine.current_step, prefix="Rewound to")
        return MoveResult(
            MoveOutcome.ACCEPTED,
            position=machine.last_position,
            step=machine.current_step,
        )

    def cancel_rewind(self) -> MoveResult:
        machine = self._require_machine()
        if self.pending_rewind is not None:
            self.pending_rewind = None
            self.status = self._progress_status(machine.current_step)
        return MoveResult(MoveOutcome.IGNORED, step=machine.current_step)

    # ----------------------------
    # Snapshot
    # ----------------------------

    def snapshot(self) -> BoardSnapshot:
        machine = self._require_machine()
        grid = machine.grid
        cells = tuple(
            tuple(
                CellView(
                    row=cell.row,
                    col=cell.col,
                    is_hole=cell.is_hole,
                    is_anchor=cell.is_anchor,
                    is_hidden=cell.is_hidden,
                    is_active=machine.is_active(cell.position),
                    display_value=cell.display_value(),
                )
                for cell in row
            )
            for row in grid.cells
        )
        return BoardSnapshot(
            rows=grid.rows,
            cols=grid.cols,
            cells=cells,
            current_step=machine.current_step,
            max_number=machine.max_number,
            last_position=machine.last_position,
            won=machine.won,
            rewind_pending=self.pending_rewind,
            status=self.status,
            difficulty=self.difficulty_name,
            active_positions=tuple(machine.active_positions()),
        )
