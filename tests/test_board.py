import random

from conftest import mined_board

from minesweeper_modes.board import (
    arrange_mines,
    check_win_condition,
    count_flags,
    count_revealed,
    create_empty_board,
    hide_mines,
    place_mines,
    reveal_all_mines,
    reveal_cell,
    safe_zone,
    toggle_flag,
)
from minesweeper_modes.types import BoardConfig, MinePlacementRequest, Position


def test_create_empty_board_is_indexed_by_row() -> None:
    """Boards are indexed board[y][x]."""
    board = create_empty_board(4, 3)
    assert len(board) == 3
    assert len(board[0]) == 4
    assert board[2][3].x == 3
    assert board[2][3].y == 2
    assert not any(cell.is_mine for row in board for cell in row)


def test_place_mines_keeps_safe_zone_clear() -> None:
    config = BoardConfig(width=9, height=9, mines=30)
    board = place_mines(create_empty_board(9, 9), config, Position(4, 4), rng=random.Random(7))

    zone = safe_zone(Position(4, 4), 9, 9)
    assert len(zone) == 9
    assert not any(board[y][x].is_mine for x, y in zone)
    assert sum(cell.is_mine for row in board for cell in row) == 30


def test_place_mines_is_repeatable_with_seed() -> None:
    config = BoardConfig(width=10, height=10, mines=15)
    first = place_mines(create_empty_board(10, 10), config, Position(0, 0), rng=random.Random(42))
    second = place_mines(create_empty_board(10, 10), config, Position(0, 0), rng=random.Random(42))
    assert first == second


def test_place_mines_leaves_input_untouched() -> None:
    board = create_empty_board(5, 5)
    place_mines(board, BoardConfig(5, 5, 5), None, rng=random.Random(1))
    assert not any(cell.is_mine for row in board for cell in row)


def test_adjacent_counts() -> None:
    board = mined_board(3, 3, [(0, 0), (2, 2)])
    assert board[1][1].adjacent_mines == 2
    assert board[0][1].adjacent_mines == 1
    assert board[2][0].adjacent_mines == 0


def test_reveal_cascades_through_empty_cells() -> None:
    board = mined_board(4, 4, [(3, 3)])
    result = reveal_cell(board, 0, 0)
    assert result.revealed_count == 15
    assert not result.board[3][3].is_revealed


def test_reveal_without_cascade_opens_one_cell() -> None:
    board = mined_board(4, 4, [(3, 3)])
    result = reveal_cell(board, 0, 0, cascade=False)
    assert result.revealed_count == 1
    assert count_revealed(result.board) == 1


def test_reveal_stops_at_numbers_and_flags() -> None:
    board = mined_board(5, 1, [(4, 0)])
    board = toggle_flag(board, 1, 0)
    result = reveal_cell(board, 0, 0)
    assert result.revealed_count == 1
    assert not result.board[0][1].is_revealed


def test_large_board_cascade() -> None:
    """Flood fill works on the biggest custom boards."""
    board = create_empty_board(50, 50)
    result = reveal_cell(board, 25, 25)
    assert result.revealed_count == 2500


def test_toggle_flag_ignores_revealed_cells() -> None:
    board = mined_board(3, 3, [(2, 2)])
    board = reveal_cell(board, 0, 0, cascade=False).board
    assert not toggle_flag(board, 0, 0)[0][0].is_flagged

    flagged = toggle_flag(board, 1, 1)
    assert count_flags(flagged) == 1
    assert count_flags(toggle_flag(flagged, 1, 1)) == 0


def test_reveal_and_hide_mines() -> None:
    board = mined_board(3, 3, [(0, 0), (1, 1)])
    shown = reveal_all_mines(board)
    assert count_revealed(shown) == 0
    assert count_revealed(shown, include_mines=True) == 2
    assert count_revealed(hide_mines(shown), include_mines=True) == 0


def test_check_win_condition() -> None:
    board = create_empty_board(3, 3)
    assert check_win_condition(board, 9, 2, 7)
    assert not check_win_condition(board, 9, 2, 6)


def test_arrange_mines_pattern_layout() -> None:
    request = MinePlacementRequest(
        board=create_empty_board(15, 15),
        config=BoardConfig(15, 15, 40),
        safe_cell=None,
        pattern=True,
    )
    board = arrange_mines(request, random.Random(3))
    assert sum(cell.is_mine for row in board for cell in row) == 40
