from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from errors import MoveRejection
from game_types import Color, Position
from utils import as_color, clamp_int


@dataclass
class Cell:
    row: int
    col: int
    is_hole: bool = True
    is_path: bool = False
    solution_value: Optional[int] = None
    is_anchor: bool = False
    is_hidden: bool = False
    user_value: Optional[int] = None

    @property
    def position(self) -> Position:
        return (self.row, self.col)

    def make_hole(self) -> None:
        self.is_hole = True
        self.is_path = False
        self.solution_value = None
        self.is_anchor = False
        self.is_hidden = False
        self.user_value = None

    def open_as_path(self, value: int) -> None:
        self.is_hole = False
        self.is_path = True
        self.solution_value = value
        self.user_value = None

    def display_value(self) -> Optional[int]:
        """Number shown to the player: the anchor's fixed value, the player's value, or None."""
        if self.is_hole:
            return None
        if self.is_anchor:
            return self.solution_value
        return self.user_value


class Grid:
    """Fixed-size rows x cols lattice of cells."""

    def __init__(self, rows: int, cols: int) -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid needs positive dimensions, got {rows}x{cols}.")
        self.rows = rows
        self.cols = cols
        self.cells: List[List[Cell]] = [
            [Cell(r, c) for c in range(cols)] for r in range(rows)
        ]

    def in_bounds(self, pos: Position) -> bool:
        r, c = pos
        return 0 <= r < self.rows and 0 <= c < self.cols

    def cell(self, pos: Position) -> Cell:
        if not self.in_bounds(pos):
            raise ValueError(f"Position {pos} is outside the {self.rows}x{self.cols} grid.")
        return self.cells[pos[0]][pos[1]]

    def __iter__(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def path_cells(self) -> List[Cell]:
        """Path cells ordered by solution value."""
        cells = [c for c in self if c.is_path and c.solution_value is not None]
        cells.sort(key=lambda c: c.solution_value)
        return cells

    @property
    def max_number(self) -> int:
        values = [c.solution_value for c in self if c.is_path and c.solution_value is not None]
        return max(values) if values else 0


@dataclass
class GeneratedLevel:
    grid: Grid
    max_number: int
    target_length: int
    hide_rate: float
    attempts: int


@dataclass(frozen=True)
class Difficulty:
    name: str
    rows: int
    cols: int
    target_length: int

    @staticmethod
    def from_dict(name: str, raw: Any, default: "Difficulty") -> "Difficulty":
        if not isinstance(raw, dict):
            return default
        rows = clamp_int(int(raw.get("rows", default.rows)), 1, 64)
        cols = clamp_int(int(raw.get("cols", default.cols)), 1, 64)
        target = int(raw.get("target_length", raw.get("target", default.target_length)))
        return Difficulty(
            name=name,
            rows=rows,
            cols=cols,
            target_length=clamp_int(target, 1, rows * cols),
        )


DEFAULT_DIFFICULTIES: Dict[str, Difficulty] = {
    "easy": Difficulty("easy", 7, 7, 40),
    "medium": Difficulty("medium", 8, 8, 60),
    "hard": Difficulty("hard", 11, 10, 100),
}


@dataclass(frozen=True)
class GenerationLimits:
    max_shape_attempts: int = 500
    walks_per_shape: int = 3000
    min_length_ratio: float = 0.95
    time_budget: Optional[float] = None  # seconds

    @staticmethod
    def from_dict(raw: Any) -> "GenerationLimits":
        if not isinstance(raw, dict):
            return GenerationLimits()
        budget = raw.get("time_budget")
        return GenerationLimits(
            max_shape_attempts=max(1, int(raw.get("max_shape_attempts", 500))),
            walks_per_shape=max(1, int(raw.get("walks_per_shape", 3000))),
            min_length_ratio=min(1.0, max(0.0, float(raw.get("min_length_ratio", 0.95)))),
            time_budget=float(budget) if budget is not None else None,
        )


@dataclass(frozen=True)
class BoardStyle:
    cell_size: int
    gap: int
    background: Color
    hole: Color
    cell: Color
    anchor: Color
    active: Color
    last_active: Color
    error: Color
    text: Color
    hidden_text: Color

    @staticmethod
    def from_dict(raw: Any) -> "BoardStyle":
        if not isinstance(raw, dict):
            raw = {}
        colors = raw.get("colors", {}) if isinstance(raw.get("colors"), dict) else {}
        return BoardStyle(
            cell_size=clamp_int(int(raw.get("cell_size", 50)), 16, 160),
            gap=clamp_int(int(raw.get("gap", 4)), 0, 32),
            background=as_color(colors.get("background"), (24, 26, 34)),
            hole=as_color(colors.get("hole"), (36, 38, 48)),
            cell=as_color(colors.get("cell"), (236, 240, 241)),
            anchor=as_color(colors.get("anchor"), (189, 195, 199)),
            active=as_color(colors.get("active"), (243, 156, 18)),
            last_active=as_color(colors.get("last_active"), (230, 126, 34)),
            error=as_color(colors.get("error"), (231, 76, 60)),
            text=as_color(colors.get("text"), (44, 62, 80)),
            hidden_text=as_color(colors.get("hidden_text"), (149, 165, 166)),
        )


@dataclass(frozen=True)
class WindowConfig:
    width: int
    height: int
    title: str
    fps: int


@dataclass(frozen=True)
class GameConfig:
    window: WindowConfig
    board: BoardStyle
    difficulties: Dict[str, Difficulty]
    difficulty: str
    generation: GenerationLimits
    seed: Optional[int]
    log_level: str


class MoveOutcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WON = "won"
    REWIND_PENDING = "rewind_pending"
    IGNORED = "ignored"


@dataclass(frozen=True)
class MoveResult:
    outcome: MoveOutcome
    position: Optional[Position] = None
    step: int = 0
    reason: Optional[MoveRejection] = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.outcome in (MoveOutcome.ACCEPTED, MoveOutcome.WON)


@dataclass(frozen=True)
class CellView:
    row: int
    col: int
    is_hole: bool
    is_anchor: bool
    is_hidden: bool
    is_active: bool
    display_value: Optional[int]


@dataclass(frozen=True)
class BoardSnapshot:
    rows: int
    cols: int
    cells: Tuple[Tuple[CellView, ...], ...]
    current_step: int
    max_number: int
    last_position: Optional[Position]
    won: bool
    rewind_pending: Optional[int]
    status: str = ""
    difficulty: str = ""
    active_positions: Tuple[Position, ...] = field(default_factory=tuple)

    def cell(self, pos: Position) -> CellView:
        return self.cells[pos[0]][pos[1]]
