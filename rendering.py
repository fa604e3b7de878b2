from __future__ import annotations

from typing import List, Optional, Tuple

import pygame

from game_types import Color, Position
from models import BoardSnapshot, BoardStyle, CellView

HUD_HEIGHT = 72


def board_rect(
    rows: int, cols: int, style: BoardStyle, window_w: int, window_h: int
) -> pygame.Rect:
    """Return the screen rect of the board, centered below the HUD."""
    step = style.cell_size + style.gap
    w = cols * step - style.gap
    h = rows * step - style.gap
    rect = pygame.Rect(0, 0, w, h)
    rect.centerx = window_w // 2
    rect.centery = HUD_HEIGHT + max(h, window_h - HUD_HEIGHT) // 2
    return rect


def cell_rect(board: pygame.Rect, style: BoardStyle, row: int, col: int) -> pygame.Rect:
    step = style.cell_size + style.gap
    return pygame.Rect(
        board.x + col * step, board.y + row * step, style.cell_size, style.cell_size
    )


def cell_at_pixel(
    board: pygame.Rect, style: BoardStyle, rows: int, cols: int, pixel: Tuple[int, int]
) -> Optional[Position]:
    """Map a screen pixel to a (row, col); None outside cells (including gaps)."""
    if not board.collidepoint(pixel):
        return None
    step = style.cell_size + style.gap
    col, x_off = divmod(pixel[0] - board.x, step)
    row, y_off = divmod(pixel[1] - board.y, step)
    if x_off >= style.cell_size or y_off >= style.cell_size:
        return None
    if 0 <= row < rows and 0 <= col < cols:
        return (row, col)
    return None


def cell_fill(
    view: CellView,
    snapshot: BoardSnapshot,
    style: BoardStyle,
    flash: Optional[Position] = None,
) -> Color:
    """Pick the fill color for one cell."""
    pos = (view.row, view.col)
    if view.is_hole:
        return style.hole
    if flash == pos:
        return style.error
    if snapshot.last_position == pos:
        return style.last_active
    if view.is_active:
        return style.active
    if view.is_anchor:
        return style.anchor
    return style.cell


def draw_board(
    surf: pygame.Surface,
    snapshot: BoardSnapshot,
    style: BoardStyle,
    board: pygame.Rect,
    cell_font: pygame.font.Font,
    flash: Optional[Position] = None,
) -> None:
    """Draw every cell with its number (anchors always, player values once set)."""
    for row in snapshot.cells:
        for view in row:
            r = cell_rect(board, style, view.row, view.col)
            pygame.draw.rect(surf, cell_fill(view, snapshot, style, flash), r, border_radius=6)
            if view.is_hole:
                continue
            if view.display_value is None:
                dot = cell_font.render("·", True, style.hidden_text)
                surf.blit(dot, dot.get_rect(center=r.center))
                continue
            label = cell_font.render(str(view.display_value), True, style.text)
            surf.blit(label, label.get_rect(center=r.center))


def draw_hud(
    surf: pygame.Surface,
    hud_font: pygame.font.Font,
    snapshot: BoardSnapshot,
    status_is_error: bool,
) -> None:
    """Draw the status line plus key help."""
    bar = pygame.Surface((surf.get_width(), HUD_HEIGHT), pygame.SRCALPHA)
    bar.fill((0, 0, 0, 230))
    surf.blit(bar, (0, 0))

    diff = snapshot.difficulty.capitalize() if snapshot.difficulty else "Custom"
    info = (
        f"{diff} | {snapshot.current_step}/{snapshot.max_number} "
        "| 1/2/3: difficulty | R: new level | ESC: quit"
    )
    surf.blit(hud_font.render(info, True, (255, 255, 255)), (12, 8))

    status_color = (231, 76, 60) if status_is_error else (230, 126, 34)
    surf.blit(hud_font.render(snapshot.status, True, status_color), (12, 8 + hud_font.get_height() + 8))


def _wrap_text(text: str, font: pygame.font.Font, max_width: int) -> List[str]:
    """Simple word-wrap helper returning list of wrapped lines."""
    words = text.split()
    lines: List[str] = []
    cur = ""
    for word in words:
        candidate = word if not cur else f"{cur} {word}"
        if font.size(candidate)[0] <= max_width:
            cur = candidate
        else:
            if cur:
                lines.append(cur)
            cur = word
    if cur:
        lines.append(cur)
    return lines


def _draw_button(
    surf: pygame.Surface, font: pygame.font.Font, text: str, rect: pygame.Rect
) -> None:
    pygame.draw.rect(surf, (0, 0, 0), rect)
    pygame.draw.rect(surf, (255, 255, 255), rect, width=2)
    label = font.render(text, True, (255, 255, 255))
    surf.blit(label, label.get_rect(center=rect.center))


def draw_confirm_overlay(
    surf: pygame.Surface,
    message: str,
    title_font: pygame.font.Font,
    body_font: pygame.font.Font,
    window_w: int,
    window_h: int,
) -> Tuple[pygame.Rect, pygame.Rect]:
    """Draw a modal yes/no dialog; returns (yes_rect, no_rect)."""
    dim = pygame.Surface((window_w, window_h), pygame.SRCALPHA)
    dim.fill((0, 0, 0, 190))
    surf.blit(dim, (0, 0))

    panel_w = min(int(window_w * 0.8), 520)
    panel_h = 200
    panel_rect = pygame.Rect(0, 0, panel_w, panel_h)
    panel_rect.center = (window_w // 2, window_h // 2)

    pygame.draw.rect(surf, (0, 0, 0), panel_rect)
    pygame.draw.rect(surf, (255, 255, 255), panel_rect, width=2)

    padding = 22
    cursor_y = panel_rect.y + padding
    for line in _wrap_text(message, title_font, panel_rect.w - padding * 2):
        line_surface = title_font.render(line, True, (255, 255, 255))
        line_rect = line_surface.get_rect()
        line_rect.centerx = panel_rect.centerx
        line_rect.top = cursor_y
        surf.blit(line_surface, line_rect.topleft)
        cursor_y += line_surface.get_height() + 4

    hint = body_font.render("Y / Enter: yes    N / Esc: no", True, (200, 200, 200))
    surf.blit(hint, hint.get_rect(centerx=panel_rect.centerx, top=cursor_y + 6))

    btn_w, btn_h = 140, 44
    yes_rect = pygame.Rect(0, 0, btn_w, btn_h)
    no_rect = pygame.Rect(0, 0, btn_w, btn_h)
    yes_rect.bottom = no_rect.bottom = panel_rect.bottom - padding
    yes_rect.right = panel_rect.centerx - 12
    no_rect.left = panel_rect.centerx + 12
    _draw_button(surf, title_font, "Yes", yes_rect)
    _draw_button(surf, title_font, "No", no_rect)
    return yes_rect, no_rect


class BoardRenderer:
    """Renderer that centralizes fonts and shared styling for the board, HUD and dialog."""

    def __init__(self, window_w: int, window_h: int, style: BoardStyle) -> None:
        self.window_w = window_w
        self.window_h = window_h
        self.style = style
        self.hud_font = pygame.font.SysFont("monospace", 18)
        self.cell_font = pygame.font.Font(None, max(16, int(style.cell_size * 0.6)))
        self.dialog_title_font = pygame.font.SysFont("monospace", 24)
        self.dialog_body_font = pygame.font.SysFont("monospace", 16)

    def board_rect(self, snapshot: BoardSnapshot) -> pygame.Rect:
        return board_rect(snapshot.rows, snapshot.cols, self.style, self.window_w, self.window_h)

    def render_frame(
        self,
        screen: pygame.Surface,
        snapshot: BoardSnapshot,
        flash: Optional[Position] = None,
        status_is_error: bool = False,
    ) -> Optional[Tuple[pygame.Rect, pygame.Rect]]:
        """Render and present a full frame; returns dialog button rects if a rewind is pending."""
        screen.fill(self.style.background)
        board = self.board_rect(snapshot)
        draw_board(screen, snapshot, self.style, board, self.cell_font, flash)
        draw_hud(screen, self.hud_font, snapshot, status_is_error)

        buttons = None
        if snapshot.rewind_pending is not None:
            buttons = draw_confirm_overlay(
                screen,
                snapshot.status,
                self.dialog_title_font,
                self.dialog_body_font,
                self.window_w,
                self.window_h,
            )
        pygame.display.flip()
        return buttons
