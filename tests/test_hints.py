from conftest import mined_board

from minesweeper_modes.board import reveal_cell, toggle_flag
from minesweeper_modes.hints import HintSystem, HintType, create_hint_system, get_hint_message
from minesweeper_modes.types import BoardConfig, GameState, GameStatus, Position


def _state(board, mines: int, revealed: int, flags: int = 0) -> GameState:
    width, height = len(board[0]), len(board)
    return GameState(
        board=board,
        status=GameStatus.PLAYING,
        config=BoardConfig(width, height, mines),
        game_mode='zen',
        first_click=False,
        revealed_count=revealed,
        flag_count=flags,
    )


def _cornered_mine() -> GameState:
    """3x1 row with the mine at the end and the other two cells open."""
    board = reveal_cell(mined_board(3, 1, [(2, 0)]), 0, 0).board
    return _state(board, mines=1, revealed=2)


def _flagged_mine() -> GameState:
    """5x1 row, mine flagged at (0, 0), only (1, 0) open."""
    board = reveal_cell(mined_board(5, 1, [(0, 0)]), 1, 0, cascade=False).board
    board = toggle_flag(board, 0, 0)
    return _state(board, mines=1, revealed=1, flags=1)


def test_guaranteed_mine_is_the_best_hint() -> None:
    hint = HintSystem(_cornered_mine()).get_best_hint()
    assert hint.type == HintType.MINE_LOCATION
    assert hint.position == Position(2, 0)
    assert hint.priority == 10
    assert get_hint_message(hint).startswith('💣 Cell at (3, 1)')


def test_satisfied_number_marks_neighbours_safe() -> None:
    system = create_hint_system(_flagged_mine())
    hint = system.get_best_hint()
    assert hint.type == HintType.SAFE_CELL
    assert hint.position == Position(2, 0)
    assert system.is_solvable()

    deductions = [h for h in system.get_all_hints() if h.type == HintType.NUMBER_DEDUCTION]
    assert [h.position for h in deductions] == [Position(2, 0)]


def test_hint_for_cell() -> None:
    system = HintSystem(_flagged_mine())
    assert system.get_hint_for_cell(1, 0).priority == 1
    assert system.get_hint_for_cell(2, 0).type == HintType.SAFE_CELL

    far = system.get_hint_for_cell(4, 0)
    assert far.type == HintType.NEXT_BEST_MOVE
    assert far.priority == 5
    # every mine is flagged, so the global density is zero
    assert far.confidence == 1.0


def test_no_hint_when_nothing_is_hidden() -> None:
    state = _cornered_mine()
    state.board = toggle_flag(state.board, 2, 0)
    state.flag_count = 1
    system = HintSystem(state)
    assert system.get_best_hint() is None
    assert not system.is_solvable()


def test_danger_zones() -> None:
    zones = HintSystem(_cornered_mine()).get_danger_zones()
    assert [zone.position for zone in zones] == [Position(2, 0)]
    assert zones[0].type == HintType.DANGER_WARNING


def test_risk_on_fully_opened_board_is_zero() -> None:
    """Global density is guarded when no unrevealed cells remain."""
    board = mined_board(3, 3, [])
    state = _state(board, mines=0, revealed=9)
    hint = HintSystem(state).get_hint_for_cell(0, 0)
    assert hint.confidence == 1.0


def test_hint_statistics() -> None:
    stats = HintSystem(_cornered_mine()).get_hint_statistics()
    assert stats['total_hints'] == 2
    assert stats['guaranteed_mines'] == 1
    assert stats['is_solvable']
    assert stats['average_risk'] == 1.0


def test_pattern_hints_are_empty() -> None:
    assert HintSystem(_cornered_mine()).get_pattern_hints() == []
