import pytest

from errors import InvalidMove, MoveRejection, RewindTargetInvalid
from level_loader import format_board, parse_board_lines
from models import MoveOutcome
from path_state import PathStateMachine, PlayPhase


def machine_for(*lines):
    return PathStateMachine(parse_board_lines(list(lines)))


def rejection(machine, pos):
    with pytest.raises(InvalidMove) as excinfo:
        machine.select(pos)
    return excinfo.value.reason


def test_two_anchor_board_plays_to_a_win():
    m = machine_for("1 2", "# #")
    assert m.phase is PlayPhase.NOT_STARTED

    assert rejection(m, (0, 1)) is MoveRejection.MUST_START_AT_ONE
    assert m.current_step == 0

    result = m.select((0, 0))
    assert result.outcome is MoveOutcome.ACCEPTED
    assert m.current_step == 1
    assert m.phase is PlayPhase.IN_PROGRESS

    result = m.select((0, 1))
    assert result.outcome is MoveOutcome.WON
    assert m.current_step == 2 == m.max_number
    assert m.phase is PlayPhase.WON


def test_hidden_cell_takes_the_players_number():
    m = machine_for("1 2 #", "# ?3 4")
    m.select((0, 0))
    result = m.select((1, 1))

    cell = m.grid.cell((1, 1))
    assert result.outcome is MoveOutcome.ACCEPTED
    assert cell.user_value == 2
    assert cell.solution_value == 3
    assert not cell.is_hidden
    assert m.current_step == 2
    assert m.last_position == (1, 1)


def test_player_path_may_differ_from_the_solution():
    # Solution: 1 (0,0) -> 2 (1,0) -> 3 (0,1) -> 4 (0,2) -> 5 (1,2)
    m = machine_for("1 ?3 ?4", "?2 # 5")
    m.select((0, 0))
    m.select((0, 1))
    m.select((1, 0))
    assert m.grid.cell((0, 1)).user_value == 2
    assert m.grid.cell((1, 0)).user_value == 3
    assert rejection(m, (0, 2)) is MoveRejection.NOT_ADJACENT


def test_non_adjacent_move_is_rejected_and_changes_nothing():
    m = machine_for("1 ?2 ?3 ?4 5")
    m.select((0, 0))
    before = format_board(m.grid)

    assert rejection(m, (0, 3)) is MoveRejection.NOT_ADJACENT
    assert m.current_step == 1
    assert m.last_position == (0, 0)
    assert format_board(m.grid) == before
    assert m.grid.cell((0, 3)).is_hidden


def test_wrong_anchor_value_is_rejected():
    m = machine_for("1 2 #", "# ?3 4")
    m.select((0, 0))
    m.select((1, 1))
    assert rejection(m, (1, 2)) is MoveRejection.WRONG_ANCHOR_VALUE
    assert m.current_step == 2


def test_must_start_on_the_one_anchor_not_a_hidden_cell():
    m = machine_for("1 ?2 3")
    assert rejection(m, (0, 1)) is MoveRejection.MUST_START_AT_ONE
    assert m.grid.cell((0, 1)).user_value is None


def test_selecting_active_cells():
    m = machine_for("1 ?2 ?3 4")
    m.select((0, 0))
    m.select((0, 1))

    same = m.select((0, 1))
    assert same.outcome is MoveOutcome.IGNORED

    earlier = m.select((0, 0))
    assert earlier.outcome is MoveOutcome.REWIND_PENDING
    assert earlier.step == 1
    assert m.current_step == 2


def test_holes_are_ignored_and_off_grid_raises():
    m = machine_for("1 #", "# 2")
    assert m.select((0, 1)).outcome is MoveOutcome.IGNORED
    assert m.current_step == 0
    with pytest.raises(ValueError):
        m.select((5, 5))


def test_rewind_restores_hidden_cells():
    m = machine_for("1 ?2 ?3 ?4 5")
    for c in range(4):
        m.select((0, c))
    assert m.current_step == 4

    assert m.rewind_to(2) == 2
    assert m.current_step == 2
    assert m.last_position == (0, 1)
    for c in (2, 3):
        cell = m.grid.cell((0, c))
        assert cell.user_value is None and cell.is_hidden
    assert m.grid.cell((0, 1)).user_value == 2
    assert not m.is_active((0, 2))


def test_rewind_to_same_step_twice_is_a_no_op():
    m = machine_for("1 ?2 ?3 ?4 5")
    for c in range(4):
        m.select((0, c))
    m.rewind_to(2)
    snapshot = (m.current_step, m.last_position, m.active_positions(), format_board(m.grid))
    assert m.rewind_to(2) == 0
    assert (m.current_step, m.last_position, m.active_positions(), format_board(m.grid)) == snapshot


def test_rewind_to_zero_restores_the_fresh_board():
    m = machine_for("1 ?2 ?3 ?4 5")
    fresh = format_board(m.grid)
    for c in range(4):
        m.select((0, c))

    m.rewind_to(0)
    assert m.phase is PlayPhase.NOT_STARTED
    assert m.last_position is None
    assert m.state.active_stack == []
    assert format_board(m.grid) == fresh
    for c in (1, 2, 3):
        cell = m.grid.cell((0, c))
        assert cell.is_hidden and cell.user_value is None
    # anchors stay revealed
    assert m.grid.cell((0, 0)).display_value() == 1


@pytest.mark.parametrize("target", [-1, 3])
def test_rewind_targets_outside_the_stack_are_invalid(target):
    m = machine_for("1 ?2 ?3 ?4 5")
    m.select((0, 0))
    m.select((0, 1))
    with pytest.raises(RewindTargetInvalid):
        m.rewind_to(target)
    assert m.current_step == 2


def test_win_is_terminal():
    m = machine_for("1 ?2 3")
    m.select((0, 0))
    m.select((0, 1))
    assert m.select((0, 2)).outcome is MoveOutcome.WON

    assert rejection(m, (0, 1)) is MoveRejection.STALE_SELECTION
    with pytest.raises(RewindTargetInvalid):
        m.rewind_to(1)
    assert m.current_step == 3


def test_reset_clears_a_won_board():
    m = machine_for("1 ?2 3")
    for c in range(3):
        m.select((0, c))
    m.reset()
    assert m.phase is PlayPhase.NOT_STARTED
    assert m.grid.cell((0, 1)).is_hidden


def test_grid_without_path_is_refused():
    from models import Grid

    with pytest.raises(ValueError):
        PathStateMachine(Grid(2, 2))
