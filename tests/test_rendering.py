import pygame

from models import BoardSnapshot, BoardStyle, CellView
from rendering import HUD_HEIGHT, board_rect, cell_at_pixel, cell_fill, cell_rect

STYLE = BoardStyle.from_dict({"cell_size": 40, "gap": 4})


def _snapshot(last=None):
    cells = (
        (
            CellView(0, 0, False, True, False, True, 1),
            CellView(0, 1, True, False, False, False, None),
        ),
        (
            CellView(1, 0, False, False, True, False, None),
            CellView(1, 1, False, False, False, True, 2),
        ),
    )
    return BoardSnapshot(
        rows=2,
        cols=2,
        cells=cells,
        current_step=2,
        max_number=4,
        last_position=last,
        won=False,
        rewind_pending=None,
    )


def test_board_is_centered_below_the_hud():
    rect = board_rect(2, 3, STYLE, 400, 400)
    assert rect.size == (3 * 44 - 4, 2 * 44 - 4)
    assert rect.centerx == 200
    assert rect.top > HUD_HEIGHT


def test_cell_at_pixel_maps_cells_and_skips_gaps():
    board = pygame.Rect(100, 100, 2 * 44 - 4, 2 * 44 - 4)
    assert cell_at_pixel(board, STYLE, 2, 2, (101, 101)) == (0, 0)
    assert cell_at_pixel(board, STYLE, 2, 2, cell_rect(board, STYLE, 1, 1).center) == (1, 1)
    assert cell_at_pixel(board, STYLE, 2, 2, (100 + 41, 110)) is None
    assert cell_at_pixel(board, STYLE, 2, 2, (10, 10)) is None


def test_cell_fill_priorities():
    snap = _snapshot(last=(1, 1))
    assert cell_fill(snap.cell((0, 1)), snap, STYLE) == STYLE.hole
    assert cell_fill(snap.cell((1, 1)), snap, STYLE) == STYLE.last_active
    assert cell_fill(snap.cell((0, 0)), snap, STYLE) == STYLE.active
    assert cell_fill(snap.cell((1, 0)), snap, STYLE) == STYLE.cell
    assert cell_fill(snap.cell((1, 0)), snap, STYLE, flash=(1, 0)) == STYLE.error
