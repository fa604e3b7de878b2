from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from models import Grid

HOLE_TOKEN = "#"
HIDDEN_PREFIX = "?"


def tokenize_board_lines(lines: List[str]) -> Tuple[List[List[str]], int, int]:
    """Split board lines into tokens and pad rows to equal width with holes.

    Args:
        lines: Raw board lines; blank lines are skipped.

    Returns:
        (token_rows, rows, cols)

    Raises:
        ValueError: If no non-blank lines are provided.
    """
    token_rows = [line.split() for line in lines if line.strip()]
    if not token_rows:
        raise ValueError("Board is empty.")
    cols = max(len(row) for row in token_rows)
    normalized = [row + [HOLE_TOKEN] * (cols - len(row)) for row in token_rows]
    return normalized, len(normalized), cols


def _parse_value(token: str, r: int, c: int) -> int:
    try:
        value = int(token)
    except ValueError:
        raise ValueError(f"Bad board token {token!r} at ({r}, {c}).") from None
    if value < 1:
        raise ValueError(f"Board values start at 1, got {value} at ({r}, {c}).")
    return value


def parse_board_lines(lines: List[str]) -> Grid:
    """Build a Grid from whitespace-separated tokens.

    Tokens: ``#`` is a hole, ``N`` an anchor showing N, ``?N`` a hidden cell
    whose solution value is N.

    Raises:
        ValueError: On unknown tokens, duplicate or missing values, or when
            1 or the highest value is not an anchor.
    """
    token_rows, rows, cols = tokenize_board_lines(lines)
    grid = Grid(rows, cols)
    seen: dict[int, Tuple[int, int]] = {}

    for r, row in enumerate(token_rows):
        for c, token in enumerate(row):
            cell = grid.cells[r][c]
            if token == HOLE_TOKEN:
                cell.make_hole()
                continue

            hidden = token.startswith(HIDDEN_PREFIX)
            value = _parse_value(token[1:] if hidden else token, r, c)
            if value in seen:
                raise ValueError(f"Value {value} appears at both {seen[value]} and {(r, c)}.")
            seen[value] = (r, c)

            cell.open_as_path(value)
            cell.is_anchor = not hidden
            cell.is_hidden = hidden

    if not seen:
        raise ValueError("Board has no numbered cells.")
    top = max(seen)
    missing = [v for v in range(1, top + 1) if v not in seen]
    if missing:
        raise ValueError(f"Board is missing values: {missing}")
    for endpoint in (1, top):
        if not grid.cell(seen[endpoint]).is_anchor:
            raise ValueError(f"Value {endpoint} must be an anchor.")
    return grid


def format_board(grid: Grid, reveal: bool = False) -> str:
    """Render a grid in the board text format (hidden cells as ``?`` unless revealed)."""
    width = max(len(str(grid.max_number)) + 1, 2)
    lines: List[str] = []
    for row in grid.cells:
        tokens: List[str] = []
        for cell in row:
            if cell.is_hole:
                tok = HOLE_TOKEN
            elif cell.is_anchor:
                tok = str(cell.solution_value)
            elif reveal:
                tok = f"{HIDDEN_PREFIX}{cell.solution_value}"
            elif cell.user_value is not None:
                tok = str(cell.user_value)
            else:
                tok = HIDDEN_PREFIX
            tokens.append(tok.rjust(width))
        lines.append(" ".join(tokens).rstrip())
    return "\n".join(lines)


def load_board(path: Path) -> Grid:
    """Load a hand-made board from a text file."""
    if not path.exists():
        raise FileNotFoundError(f"Board not found: {path}")
    return parse_board_lines(path.read_text(encoding="utf-8").splitlines())
