import random

import pytest

from errors import GenerationExhausted, MoveRejection, RewindTargetInvalid
from level_loader import parse_board_lines
from models import Difficulty, MoveOutcome
from session import START_PROMPT, WIN_MESSAGE, GameSession


def session_for(*lines):
    s = GameSession(rng=random.Random(0))
    s.load_grid(parse_board_lines(list(lines)))
    return s


def play_row(session, count):
    for c in range(count):
        session.submit_move((0, c))


def test_session_requires_a_level():
    with pytest.raises(RuntimeError):
        GameSession().snapshot()


def test_new_level_returns_grid_and_max_number(fast_limits):
    s = GameSession(rng=random.Random(5), limits=fast_limits)
    grid, max_number = s.new_level(6, 6, 20)
    assert (grid.rows, grid.cols) == (6, 6)
    assert 19 <= max_number <= 20
    assert s.current_step == 0
    assert s.status == START_PROMPT


def test_generated_solution_is_playable_to_a_win(fast_limits):
    s = GameSession(rng=random.Random(8), limits=fast_limits)
    grid, max_number = s.new_level(6, 6, 20)
    result = None
    for cell in grid.path_cells():
        result = s.submit_move(cell.position)
        assert result.accepted
    assert result.outcome is MoveOutcome.WON
    assert s.won
    assert s.status == WIN_MESSAGE
    snap = s.snapshot()
    assert snap.won and snap.current_step == max_number
    assert all(v.display_value is not None for row in snap.cells for v in row if not v.is_hole)


def test_new_level_for_preset(fast_limits):
    presets = {"tiny": Difficulty("tiny", 5, 5, 10)}
    s = GameSession(rng=random.Random(2), limits=fast_limits, difficulties=presets)
    _, max_number = s.new_level_for("tiny")
    assert s.difficulty_name == "tiny"
    assert max_number == 10
    with pytest.raises(KeyError):
        s.new_level_for("impossible")


def test_failed_generation_keeps_the_current_level():
    s = session_for("1 ?2 3")
    s.submit_move((0, 0))

    def boom(rows, cols, target):
        raise GenerationExhausted(rows, cols, target, 3, 1)

    s.generator.generate = boom
    with pytest.raises(GenerationExhausted):
        s.new_level(9, 9, 80)
    assert s.current_step == 1
    assert s.grid.rows == 1


def test_rejections_are_reported_with_reasons():
    s = session_for("1 ?2 ?3 ?4 5")
    first = s.submit_move((0, 2))
    assert first.outcome is MoveOutcome.REJECTED
    assert first.reason is MoveRejection.MUST_START_AT_ONE
    assert s.status == first.message

    s.submit_move((0, 0))
    far = s.submit_move((0, 4))
    assert far.reason is MoveRejection.NOT_ADJACENT
    assert s.current_step == 1


def test_progress_status():
    s = session_for("1 ?2 ?3 ?4 5")
    s.submit_move((0, 0))
    assert s.status == "Now at 1, find 2."


def test_clicking_an_earlier_cell_asks_for_confirmation():
    s = session_for("1 ?2 ?3 ?4 5")
    play_row(s, 4)

    result = s.submit_move((0, 1))
    assert result.outcome is MoveOutcome.REWIND_PENDING
    assert s.pending_rewind == 2
    assert s.status == "Rewind to number 2?"
    assert s.current_step == 4

    blocked = s.submit_move((0, 4))
    assert blocked.reason is MoveRejection.STALE_SELECTION
    assert s.current_step == 4

    done = s.confirm_rewind()
    assert done.outcome is MoveOutcome.ACCEPTED
    assert s.current_step == 2
    assert s.last_position == (0, 1)
    assert s.pending_rewind is None
    assert s.status == "Rewound to 2, find 3."


def test_cancelled_rewind_changes_nothing():
    s = session_for("1 ?2 ?3 ?4 5")
    play_row(s, 3)
    s.request_rewind(1)
    s.cancel_rewind()
    assert s.pending_rewind is None
    assert s.current_step == 3
    assert s.status == "Now at 3, find 4."
    assert s.confirm_rewind().outcome is MoveOutcome.IGNORED


def test_rewind_requests_are_idempotent():
    s = session_for("1 ?2 ?3 ?4 5")
    play_row(s, 4)
    s.request_rewind(2)
    s.confirm_rewind()
    again = s.request_rewind(2)
    assert again.outcome is MoveOutcome.IGNORED
    assert s.pending_rewind is None
    assert s.current_step == 2


def test_rewind_to_the_current_step_drops_a_pending_rewind():
    s = session_for("1 ?2 ?3 ?4 5")
    play_row(s, 4)
    s.request_rewind(2)
    assert s.pending_rewind == 2

    result = s.request_rewind(4)
    assert result.outcome is MoveOutcome.IGNORED
    assert s.pending_rewind is None
    assert s.status == "Now at 4, find 5."
    assert s.confirm_rewind().outcome is MoveOutcome.IGNORED
    assert s.current_step == 4


def test_clicks_after_a_win_keep_the_win_message():
    s = session_for("1 ?2 3")
    play_row(s, 3)
    assert s.status == WIN_MESSAGE

    late = s.submit_move((0, 1))
    assert late.outcome is MoveOutcome.REJECTED
    assert late.reason is MoveRejection.STALE_SELECTION
    assert s.status == WIN_MESSAGE
    assert s.snapshot().status == WIN_MESSAGE


def test_rewind_to_zero_round_trip():
    s = session_for("1 ?2 ?3 ?4 5")
    fresh = s.snapshot()
    play_row(s, 4)
    s.request_rewind(0)
    s.confirm_rewind()
    snap = s.snapshot()
    assert snap.cells == fresh.cells
    assert snap.current_step == 0
    assert snap.last_position is None
    assert s.status == START_PROMPT


@pytest.mark.parametrize("target", [-2, 9])
def test_invalid_rewind_targets_raise(target):
    s = session_for("1 ?2 ?3 ?4 5")
    play_row(s, 2)
    with pytest.raises(RewindTargetInvalid):
        s.request_rewind(target)
    assert s.pending_rewind is None


def test_snapshot_shows_only_what_the_player_may_see():
    s = session_for("1 ?2 #", "# ?3 4")
    s.submit_move((0, 0))
    s.submit_move((1, 1))
    snap = s.snapshot()

    assert snap.cell((0, 2)).is_hole
    assert snap.cell((0, 0)).display_value == 1 and snap.cell((0, 0)).is_active
    assert snap.cell((1, 1)).display_value == 2
    assert snap.cell((0, 1)).display_value is None and snap.cell((0, 1)).is_hidden
    assert snap.cell((1, 2)).display_value == 4 and not snap.cell((1, 2)).is_active
    assert snap.current_step == 2
    assert snap.max_number == 4
    assert snap.last_position == (1, 1)
    assert snap.active_positions == ((0, 0), (1, 1))
    assert snap.rewind_pending is None
