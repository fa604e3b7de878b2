from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional, Tuple

import pygame

from config_io import load_json_config
from config_parsing import parse_game_config
from errors import GenerationExhausted
from game_types import Position
from models import GameConfig, MoveOutcome, MoveResult
from rendering import BoardRenderer, cell_at_pixel
from session import GameSession

logger = logging.getLogger(__name__)

ERROR_FLASH_MS = 400
DIFFICULTY_KEYS = {pygame.K_1: "easy", pygame.K_2: "medium", pygame.K_3: "hard"}


class Game:
    """Top-level game orchestration (config, loop, input, render)."""

    def __init__(self, cfg_path: Path, config: Optional[GameConfig] = None) -> None:
        self.cfg = config if config is not None else parse_game_config(load_json_config(cfg_path))
        self.session = GameSession(
            rng=random.Random(self.cfg.seed),
            limits=self.cfg.generation,
            difficulties=self.cfg.difficulties,
        )
        self.difficulty = self.cfg.difficulty

        self.flash_pos: Optional[Position] = None
        self.flash_until_ms = 0
        self.status_is_error = False
        self.dialog_buttons: Optional[Tuple[pygame.Rect, pygame.Rect]] = None

        self._init_pygame()
        self.renderer = BoardRenderer(self.window_w, self.window_h, self.cfg.board)

        if not self._start_level(self.difficulty):
            raise SystemExit("ERROR: could not generate a level; try an easier difficulty.")

    # ----------------------------
    # Initialization
    # ----------------------------

    def _init_pygame(self) -> None:
        """Initialize pygame and create window + clock."""
        pygame.init()
        self.screen = pygame.display.set_mode((self.cfg.window.width, self.cfg.window.height))
        self.window_w, self.window_h = self.screen.get_size()
        pygame.display.set_caption(self.cfg.window.title)
        self.clock = pygame.time.Clock()

    # ----------------------------
    # Level management
    # ----------------------------

    def _start_level(self, difficulty: str) -> bool:
        """Generate a level; on failure keep the current one and report it."""
        try:
            self.session.new_level_for(difficulty)
        except GenerationExhausted as e:
            logger.warning("%s", e)
            if self.session.machine is not None:
                self.session.status = "Could not generate that level, kept the current one."
                self.status_is_error = True
            return False
        self.difficulty = difficulty
        self.status_is_error = False
        self.flash_pos = None
        return True

    # ----------------------------
    # Input
    # ----------------------------

    def _flash(self, pos: Optional[Position]) -> None:
        self.flash_pos = pos
        self.flash_until_ms = pygame.time.get_ticks() + ERROR_FLASH_MS

    def _apply_result(self, result: MoveResult) -> None:
        self.status_is_error = result.outcome is MoveOutcome.REJECTED
        if result.outcome is MoveOutcome.REJECTED:
            self._flash(result.position)
        elif result.outcome is MoveOutcome.WON:
            logger.info("level won (%s, %s numbers)", self.difficulty, result.step)

    def _handle_board_click(self, pixel: Tuple[int, int]) -> None:
        if self.session.won:
            return
        snapshot = self.session.snapshot()
        pos = cell_at_pixel(
            self.renderer.board_rect(snapshot),
            self.cfg.board,
            snapshot.rows,
            snapshot.cols,
            pixel,
        )
        if pos is None:
            return
        self._apply_result(self.session.submit_move(pos))

    def _handle_dialog_click(self, pixel: Tuple[int, int]) -> None:
        if self.dialog_buttons is None:
            return
        yes_rect, no_rect = self.dialog_buttons
        if yes_rect.collidepoint(pixel):
            self._apply_result(self.session.confirm_rewind())
        elif no_rect.collidepoint(pixel):
            self._apply_result(self.session.cancel_rewind())

    def _handle_keydown(self, key: int) -> bool:
        """Handle KEYDOWN events.

        Returns:
            False if the game should exit, True otherwise.
        """
        if self.session.pending_rewind is not None:
            if key in (pygame.K_y, pygame.K_RETURN, pygame.K_KP_ENTER):
                self._apply_result(self.session.confirm_rewind())
            elif key in (pygame.K_n, pygame.K_ESCAPE):
                self._apply_result(self.session.cancel_rewind())
            return True

        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_r:
            self._start_level(self.difficulty)
        if key in DIFFICULTY_KEYS:
            self._start_level(DIFFICULTY_KEYS[key])
        return True

    def _handle_events(self) -> bool:
        """Process pygame events.

        Returns:
            False if the game should exit, True otherwise.
        """
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                return False
            if e.type == pygame.KEYDOWN:
                if not self._handle_keydown(e.key):
                    return False
            if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                if self.session.pending_rewind is not None:
                    self._handle_dialog_click(e.pos)
                else:
                    self._handle_board_click(e.pos)
        return True

    # ----------------------------
    # Loop
    # ----------------------------

    def run(self) -> None:
        """Run the main game loop."""
        running = True
        while running:
            self.clock.tick(self.cfg.window.fps)
            running = self._handle_events()

            if self.flash_pos is not None and pygame.time.get_ticks() > self.flash_until_ms:
                self.flash_pos = None

            self.dialog_buttons = self.renderer.render_frame(
                self.screen,
                self.session.snapshot(),
                flash=self.flash_pos,
                status_is_error=self.status_is_error,
            )

        pygame.quit()
