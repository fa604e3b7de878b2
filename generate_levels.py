#!/usr/bin/env python3
"""
generate_levels.py

Generates number-path puzzle levels on irregular grids.

Per generated level:
- Carves a rows x cols lattice into open cells and holes
- Walks a long simple path over the open cells (8-directional steps)
- Numbers the path 1..N and closes every cell off the path
- Reveals some numbers as anchors and hides the rest

Key properties:
- 1 and N are always anchors
- Never more than 5 hidden cells in a row along the path
- Path length is at least 95% of the target (truncated to the target if longer)
- Bounded: gives up with GenerationExhausted after the configured attempts/time

Run as a script to preview levels as text.
"""

from __future__ import annotations

import argparse
import logging
import random
import time
from typing import List, Optional, Sequence, Set

from errors import GenerationExhausted
from game_types import Position
from level_loader import format_board
from models import DEFAULT_DIFFICULTIES, GeneratedLevel, GenerationLimits, Grid

logger = logging.getLogger(__name__)

HoleMap = List[List[bool]]

NEIGHBOR_OFFSETS = [
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
]

DENSE_LEVEL_RATIO = 0.85
DENSE_HOLE_PROB = 0.05
SPARSE_HOLE_PROB = 0.15

HIDE_RATE_MIN = 0.6
HIDE_RATE_MAX = 0.8
MAX_HIDDEN_RUN = 5

WALK_JITTER = 0.5


# ----------------------------
# Grid shape
# ----------------------------


def hole_probability(rows: int, cols: int, target_length: int) -> float:
    """Dense levels (path covering >85% of the lattice) get far fewer holes."""
    if target_length / float(rows * cols) > DENSE_LEVEL_RATIO:
        return DENSE_HOLE_PROB
    return SPARSE_HOLE_PROB


class GridShapeBuilder:
    def __init__(self, rng: random.Random) -> None:
        self.rng = rng

    def build(self, rows: int, cols: int, target_length: int) -> HoleMap:
        """Return a rows x cols map where True marks a hole."""
        prob = hole_probability(rows, cols, target_length)
        return [[self.rng.random() < prob for _ in range(cols)] for _ in range(rows)]


def open_cells(holes: HoleMap) -> List[Position]:
    return [
        (r, c)
        for r, row in enumerate(holes)
        for c, is_hole in enumerate(row)
        if not is_hole
    ]


# ----------------------------
# Path walk
# ----------------------------


class PathWalker:
    """Greedy Warnsdorff walk: always step to the neighbour with the fewest free exits.

    A little uniform noise is added to every freedom count so repeated walks
    from the same start explore different shapes instead of hitting the same
    dead end.
    """

    def __init__(self, holes: HoleMap, rng: random.Random) -> None:
        self.holes = holes
        self.rows = len(holes)
        self.cols = len(holes[0]) if holes else 0
        self.rng = rng

    def _free_neighbors(self, pos: Position, seen: Set[Position]) -> List[Position]:
        r, c = pos
        out: List[Position] = []
        for dr, dc in NEIGHBOR_OFFSETS:
            nr, nc = r + dr, c + dc
            if 0 <= nr < self.rows and 0 <= nc < self.cols:
                if not self.holes[nr][nc] and (nr, nc) not in seen:
                    out.append((nr, nc))
        return out

    def walk(self, start: Position) -> List[Position]:
        path = [start]
        seen = {start}
        cur = start
        while True:
            candidates = self._free_neighbors(cur, seen)
            if not candidates:
                break
            cur = min(
                candidates,
                key=lambda p: len(self._free_neighbors(p, seen))
                + self.rng.uniform(-WALK_JITTER, WALK_JITTER),
            )
            path.append(cur)
            seen.add(cur)
        return path


# ----------------------------
# Numbering + anchors
# ----------------------------


class AnchorAssigner:
    """Decides which path numbers are shown (anchors) and which the player fills in."""

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng

    def pick_hide_rate(self) -> float:
        return self.rng.uniform(HIDE_RATE_MIN, HIDE_RATE_MAX)

    def assign(self, grid: Grid, path: Sequence[Position], hide_rate: float) -> None:
        last = len(path)
        consecutive_hidden = 0
        for index, pos in enumerate(path):
            value = index + 1
            cell = grid.cell(pos)
            if value == 1 or value == last:
                hide = False
            elif consecutive_hidden >= MAX_HIDDEN_RUN:
                hide = False
            else:
                hide = self.rng.random() < hide_rate

            if hide:
                cell.is_anchor = False
                cell.is_hidden = True
                cell.user_value = None
                consecutive_hidden += 1
            else:
                cell.is_anchor = True
                cell.is_hidden = False
                consecutive_hidden = 0


def overlay_path(rows: int, cols: int, path: Sequence[Position]) -> Grid:
    """Build a grid where only the path cells are open, numbered in path order."""
    grid = Grid(rows, cols)
    for cell in grid:
        cell.make_hole()
    for index, pos in enumerate(path):
        grid.cell(pos).open_as_path(index + 1)
    return grid


# ----------------------------
# Generator orchestration
# ----------------------------


class LevelGenerator:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        limits: Optional[GenerationLimits] = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.limits = limits if limits is not None else GenerationLimits()
        self.shapes = GridShapeBuilder(self.rng)
        self.anchors = AnchorAssigner(self.rng)

    def find_path(
        self, holes: HoleMap, target_length: int, deadline: Optional[float] = None
    ) -> List[Position]:
        """Longest of up to walks_per_shape greedy walks from random open starts.

        Stops early once a walk reaches target_length or the monotonic deadline passes.
        """
        cells = open_cells(holes)
        if not cells:
            return []
        walker = PathWalker(holes, self.rng)
        best: List[Position] = []
        for walks in range(self.limits.walks_per_shape):
            if deadline is not None and time.monotonic() > deadline:
                logger.debug("time budget spent after %s walk(s)", walks)
                break
            path = walker.walk(self.rng.choice(cells))
            if len(path) > len(best):
                best = path
                if len(best) >= target_length:
                    break
        return best

    def generate(self, rows: int, cols: int, target_length: int) -> GeneratedLevel:
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid needs positive dimensions, got {rows}x{cols}.")
        if not 1 <= target_length <= rows * cols:
            raise ValueError(
                f"target_length must be within 1..{rows * cols} for a {rows}x{cols} grid, "
                f"got {target_length}."
            )

        min_length = target_length * self.limits.min_length_ratio
        deadline = (
            time.monotonic() + self.limits.time_budget
            if self.limits.time_budget is not None
            else None
        )
        best_seen = 0
        attempts = 0

        while attempts < self.limits.max_shape_attempts:
            if deadline is not None and time.monotonic() > deadline:
                break
            attempts += 1

            holes = self.shapes.build(rows, cols, target_length)
            if len(open_cells(holes)) < target_length:
                logger.debug("attempt %s: not enough open cells", attempts)
                continue

            path = self.find_path(holes, target_length, deadline)
            best_seen = max(best_seen, len(path))
            if len(path) < min_length:
                logger.debug(
                    "attempt %s: best path %s < %.1f, reshaping", attempts, len(path), min_length
                )
                continue

            path = path[:target_length]
            grid = overlay_path(rows, cols, path)
            hide_rate = self.anchors.pick_hide_rate()
            self.anchors.assign(grid, path, hide_rate)

            logger.info(
                "generated %sx%s level: %s numbers (target %s) after %s attempt(s)",
                rows,
                cols,
                len(path),
                target_length,
                attempts,
            )
            return GeneratedLevel(
                grid=grid,
                max_number=len(path),
                target_length=target_length,
                hide_rate=hide_rate,
                attempts=attempts,
            )

        logger.warning(
            "generation exhausted for %sx%s target %s (%s attempts, best %s)",
            rows,
            cols,
            target_length,
            attempts,
            best_seen,
        )
        raise GenerationExhausted(rows, cols, target_length, attempts, best_seen)


# ----------------------------
# CLI
# ----------------------------


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Preview generated number-path levels.")
    p.add_argument("count", type=int, nargs="?", default=1, help="How many levels to generate.")
    p.add_argument(
        "--difficulty",
        choices=sorted(DEFAULT_DIFFICULTIES),
        default="medium",
        help="Preset size/length (default: medium).",
    )
    p.add_argument("--rows", type=int, default=None, help="Override preset rows.")
    p.add_argument("--cols", type=int, default=None, help="Override preset cols.")
    p.add_argument("--target", type=int, default=None, help="Override preset path length.")
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Optional RNG seed for reproducible generation.",
    )
    p.add_argument(
        "--max-attempts",
        type=int,
        default=GenerationLimits().max_shape_attempts,
        help="Grid shapes to try before giving up.",
    )
    p.add_argument(
        "--reveal",
        action="store_true",
        help="Show the solution value of hidden cells.",
    )
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    if args.count <= 0:
        raise SystemExit("count must be > 0")

    preset = DEFAULT_DIFFICULTIES[args.difficulty]
    rows = args.rows if args.rows is not None else preset.rows
    cols = args.cols if args.cols is not None else preset.cols
    target = args.target if args.target is not None else preset.target_length

    rng = random.Random(args.seed)
    generator = LevelGenerator(rng, GenerationLimits(max_shape_attempts=max(1, args.max_attempts)))

    for i in range(args.count):
        try:
            level = generator.generate(rows, cols, target)
        except (GenerationExhausted, ValueError) as e:
            raise SystemExit(f"ERROR: {e}")
        hidden = sum(1 for c in level.grid if c.is_path and not c.is_anchor)
        print(
            f"Level {i + 1}: {rows}x{cols} | numbers 1..{level.max_number} "
            f"| hidden {hidden} | attempts {level.attempts}"
        )
        print(format_board(level.grid, reveal=args.reveal))
        print()


if __name__ == "__main__":
    main()
