"""Type definitions for the Minesweeper mode engine."""
from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


@dataclass
class Position:
    """A board coordinate."""
    x: int
    y: int


@dataclass
class Cell:
    """Represents a single cell on the minesweeper board."""
    x: int
    y: int
    is_mine: bool = False
    is_revealed: bool = False
    is_flagged: bool = False
    adjacent_mines: int = 0


# Boards are indexed board[y][x]
Board = List[List[Cell]]


@dataclass
class BoardConfig:
    """Resolved board dimensions and mine count."""
    width: int
    height: int
    mines: int


class GameStatus(str, Enum):
    """Possible game states."""
    IDLE = 'idle'
    PLAYING = 'playing'
    WON = 'won'
    LOST = 'lost'


@dataclass
class GameState:
    """Current state of one game session.

    Timestamps are epoch milliseconds, time_remaining is in seconds.
    revealed_count only counts safe cells; mines uncovered for the
    game-over display are not included.
    """
    board: Board
    status: GameStatus
    config: BoardConfig
    game_mode: str
    difficulty: str = 'custom'
    flag_count: int = 0
    revealed_count: int = 0
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    first_click: bool = True
    score: int = 0
    level: int = 1
    move_count: int = 0
    time_remaining: Optional[int] = None
    continue_count: int = 0
    continue_timestamps: List[float] = field(default_factory=list)
    round_number: int = 1
    streak: int = 0

    def is_over(self) -> bool:
        return self.status in (GameStatus.WON, GameStatus.LOST)


class MoveAction(str, Enum):
    """Player actions on a cell."""
    REVEAL = 'reveal'
    FLAG = 'flag'
    UNFLAG = 'unflag'


@dataclass
class MoveRequest:
    """Request to make a move."""
    x: int
    y: int
    action: MoveAction


@dataclass
class CreateGameRequest:
    """Request to create a new game."""
    mode_id: str
    custom_config: Optional[BoardConfig] = None
    history_size: int = 50


@dataclass
class MinePlacementRequest:
    """Input for the mine placement activity."""
    board: Board
    config: BoardConfig
    safe_cell: Optional[Position] = None
    pattern: bool = False


@dataclass
class GameResponse:
    """Response containing game state plus mode-specific session details."""
    game_state: GameState
    mode_id: str
    can_undo: bool = False
    can_redo: bool = False
    can_continue: bool = False
    continue_cost: int = 0
    memory_phase: Optional[str] = None
    mistake_count: int = 0
    current_round: Optional[int] = None
    total_rounds: Optional[int] = None
    total_score: int = 0
    hint: Optional[str] = None
    message: Optional[str] = None
    # Blind mode only: cells whose numbers may be shown
    visible_cells: Optional[List[Position]] = None
