"""Board rules primitives: construction, mine placement, reveal and flag logic.

Every function returns a new board and leaves its input untouched.
"""
import copy
import logging
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from minesweeper_modes.patterns import PatternGenerator, get_random_pattern_type
from minesweeper_modes.types import Board, BoardConfig, Cell, MinePlacementRequest, Position

logger = logging.getLogger(__name__)

# Moore neighbourhood offsets as (dx, dy)
DIRECTIONS: List[Tuple[int, int]] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]


@dataclass
class RevealResult:
    """Board after a reveal plus the number of newly revealed cells."""
    board: Board
    revealed_count: int


def board_size(board: Board) -> Tuple[int, int]:
    """Return (width, height) of a board."""
    height = len(board)
    width = len(board[0]) if height else 0
    return width, height


def clone_board(board: Board) -> Board:
    """Copy every cell so the result shares nothing with the input."""
    return [[copy.copy(cell) for cell in row] for row in board]


def create_empty_board(width: int, height: int) -> Board:
    """Create a board with all cells hidden and no mines."""
    return [[Cell(x=x, y=y) for x in range(width)] for y in range(height)]


def get_adjacent_positions(x: int, y: int, width: int, height: int) -> List[Position]:
    """Return the in-bounds Moore neighbours of a position."""
    positions = []
    for dx, dy in DIRECTIONS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            positions.append(Position(x=nx, y=ny))
    return positions


def count_neighbor_mines(board: Board, x: int, y: int) -> int:
    """Count the number of mines in neighboring cells."""
    width, height = board_size(board)
    return sum(1 for p in get_adjacent_positions(x, y, width, height) if board[p.y][p.x].is_mine)


def calculate_adjacent_mines(board: Board) -> Board:
    """Recompute the adjacent-mine count of every safe cell."""
    new_board = clone_board(board)
    for row in new_board:
        for cell in row:
            cell.adjacent_mines = 0 if cell.is_mine else count_neighbor_mines(new_board, cell.x, cell.y)
    return new_board


def safe_zone(position: Optional[Position], width: int, height: int) -> Set[Tuple[int, int]]:
    """The first-click cell and its neighbours."""
    if position is None:
        return set()
    zone = {(position.x, position.y)}
    zone.update((p.x, p.y) for p in get_adjacent_positions(position.x, position.y, width, height))
    return zone


def place_mines(board: Board, config: BoardConfig, safe_cell: Optional[Position],
                rng: Optional[random.Random] = None) -> Board:
    """Place mines randomly, keeping the safe cell and its neighbours clear."""
    rng = rng or random.Random()
    width, height = config.width, config.height
    excluded = safe_zone(safe_cell, width, height)

    # Shuffle candidates and take the first N so placement always terminates
    candidates = [(x, y) for y in range(height) for x in range(width) if (x, y) not in excluded]
    rng.shuffle(candidates)

    new_board = clone_board(board)
    for x, y in candidates[:min(config.mines, len(candidates))]:
        new_board[y][x].is_mine = True

    return calculate_adjacent_mines(new_board)


def place_mines_at(board: Board, positions: Iterable[Position]) -> Board:
    """Place mines at explicit positions (pattern layouts, fixtures)."""
    new_board = clone_board(board)
    width, height = board_size(new_board)
    for p in positions:
        if 0 <= p.x < width and 0 <= p.y < height:
            new_board[p.y][p.x].is_mine = True
    return calculate_adjacent_mines(new_board)


def arrange_mines(request: MinePlacementRequest, rng: Optional[random.Random] = None) -> Board:
    """Mine the board of a placement request, as a random or a patterned layout."""
    if not request.pattern:
        return place_mines(request.board, request.config, request.safe_cell, rng=rng)

    generator = PatternGenerator(
        request.config,
        rng=rng,
        excluded=safe_zone(request.safe_cell, request.config.width, request.config.height),
    )
    pattern_type = get_random_pattern_type(generator.rng)
    logger.info(f"Placing mines as pattern {pattern_type.value}")
    return place_mines_at(request.board, generator.generate_pattern(pattern_type))


def _flood_reveal(cells: Board, x: int, y: int, width: int, height: int, cascade: bool) -> int:
    """Reveal cells (cascade logic) and return how many were revealed."""
    revealed = 0
    pending = [(x, y)]
    while pending:
        cx, cy = pending.pop()
        if cx < 0 or cx >= width or cy < 0 or cy >= height:
            continue

        cell = cells[cy][cx]
        if cell.is_revealed or cell.is_flagged or cell.is_mine:
            continue

        cell.is_revealed = True
        revealed += 1

        # If this cell has no neighboring mines, reveal all neighbors
        if cascade and cell.adjacent_mines == 0:
            pending.extend((cx + dx, cy + dy) for dx, dy in DIRECTIONS)
    return revealed


def reveal_cell(board: Board, x: int, y: int, cascade: bool = True) -> RevealResult:
    """Reveal a cell and potentially cascade to neighbors."""
    new_board = clone_board(board)
    width, height = board_size(new_board)
    revealed = _flood_reveal(new_board, x, y, width, height, cascade)
    return RevealResult(board=new_board, revealed_count=revealed)


def toggle_flag(board: Board, x: int, y: int) -> Board:
    """Toggle flag on a cell."""
    new_board = clone_board(board)
    cell = new_board[y][x]
    if not cell.is_revealed:
        cell.is_flagged = not cell.is_flagged
    return new_board


def reveal_all_mines(board: Board) -> Board:
    """Reveal all mines (game over display)."""
    new_board = clone_board(board)
    for row in new_board:
        for cell in row:
            if cell.is_mine:
                cell.is_revealed = True
    return new_board


def hide_mines(board: Board) -> Board:
    """Undo reveal_all_mines, used when a lost game is continued."""
    new_board = clone_board(board)
    for row in new_board:
        for cell in row:
            if cell.is_mine:
                cell.is_revealed = False
    return new_board


def check_win_condition(board: Board, total_cells: int, mines: int, revealed_count: int) -> bool:
    """Win condition: all non-mine cells are revealed."""
    return revealed_count == total_cells - mines


def count_flags(board: Board) -> int:
    """Count the number of flags placed on the board."""
    return sum(1 for row in board for cell in row if cell.is_flagged)


def count_revealed(board: Board, include_mines: bool = False) -> int:
    """Count revealed cells, safe ones only unless include_mines is set."""
    return sum(
        1 for row in board for cell in row
        if cell.is_revealed and (include_mines or not cell.is_mine)
    )
