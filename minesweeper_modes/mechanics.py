"""Special mechanics: memory phases, multi-round series, zen mistakes,
blind visibility and the custom board builder."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from minesweeper_modes.board import DIRECTIONS, board_size, clone_board
from minesweeper_modes.clock import Clock, system_clock
from minesweeper_modes.types import Board, BoardConfig, Position

logger = logging.getLogger(__name__)


class MemoryPhase(str, Enum):
    REVEAL = 'reveal'
    MEMORIZE = 'memorize'
    PLAY = 'play'
    COMPLETE = 'complete'


class MemoryModeManager:
    """Reveal, memorize, then play with every cell hidden again."""

    def __init__(self, reveal_duration: int = 5000, clock: Optional[Clock] = None, log=None):
        self.reveal_duration = reveal_duration
        self.logger = log or logger
        self._clock = clock or system_clock
        self._phase = MemoryPhase.REVEAL
        self._phase_start_time = self._clock()
        self._memorize_end_time: Optional[float] = None
        self._shown: Set[Tuple[int, int]] = set()
        self._correct_recalls = 0
        self._incorrect_recalls = 0

    def start_reveal_phase(self, board: Board) -> Board:
        """Return a copy of the board with every safe cell revealed."""
        self.logger.info("Memory mode: starting reveal phase")
        now = self._clock()
        self._phase = MemoryPhase.REVEAL
        self._phase_start_time = now
        self._memorize_end_time = now + self.reveal_duration

        revealed = clone_board(board)
        for row in revealed:
            for cell in row:
                if not cell.is_mine:
                    self._shown.add((cell.x, cell.y))
                    cell.is_revealed = True
        return revealed

    def start_memorize_phase(self) -> None:
        self.logger.info("Memory mode: starting memorize phase")
        self._phase = MemoryPhase.MEMORIZE
        self._phase_start_time = self._clock()

    def start_play_phase(self, board: Board) -> Board:
        """Hide all cells again."""
        self.logger.info("Memory mode: starting play phase")
        self._phase = MemoryPhase.PLAY
        self._phase_start_time = self._clock()

        hidden = clone_board(board)
        for row in hidden:
            for cell in row:
                cell.is_revealed = False
        return hidden

    def was_cell_shown_in_reveal(self, x: int, y: int) -> bool:
        return (x, y) in self._shown

    def record_recall(self, x: int, y: int, is_correct: bool) -> None:
        if is_correct:
            self._correct_recalls += 1
        else:
            self._incorrect_recalls += 1

    def calculate_accuracy(self) -> float:
        total = self._correct_recalls + self._incorrect_recalls
        if total == 0:
            return 1.0
        return self._correct_recalls / total

    def get_remaining_time(self) -> float:
        """Milliseconds left before the board is hidden."""
        if self._memorize_end_time is None:
            return 0
        return max(0, self._memorize_end_time - self._clock())

    def should_transition_phase(self) -> bool:
        if self._phase == MemoryPhase.MEMORIZE:
            return self.get_remaining_time() <= 0
        return False

    def get_current_phase(self) -> MemoryPhase:
        return self._phase

    def complete(self) -> None:
        self._phase = MemoryPhase.COMPLETE

    def get_statistics(self) -> Dict[str, float]:
        return {
            'correct_recalls': self._correct_recalls,
            'incorrect_recalls': self._incorrect_recalls,
            'accuracy': self.calculate_accuracy(),
            'time_elapsed': self._clock() - self._phase_start_time,
        }


class RoundStatus(str, Enum):
    WON = 'won'
    LOST = 'lost'
    INCOMPLETE = 'incomplete'


@dataclass
class RoundData:
    round_number: int
    start_time: float
    end_time: Optional[float] = None
    score: int = 0
    status: RoundStatus = RoundStatus.INCOMPLETE
    time_elapsed: float = 0
    moves_used: int = 0


@dataclass
class MultiRoundState:
    current_round: int
    total_rounds: int
    rounds: List[RoundData] = field(default_factory=list)
    total_score: int = 0
    consecutive_wins: int = 0
    consecutive_losses: int = 0


class MultiRoundManager:
    """Tracks a series of rounds and the win streak across them."""

    def __init__(self, total_rounds: int = 5, time_limit: int = 60, clock: Optional[Clock] = None):
        self._state = MultiRoundState(current_round=1, total_rounds=total_rounds)
        self._time_limit = time_limit
        self._clock = clock or system_clock
        self._streaks_before_close: Tuple[int, int] = (0, 0)

    def start_round(self) -> None:
        self._state.rounds.append(RoundData(
            round_number=self._state.current_round,
            start_time=self._clock(),
        ))

    def _current_round_data(self) -> Optional[RoundData]:
        index = self._state.current_round - 1
        if index >= len(self._state.rounds):
            return None
        return self._state.rounds[index]

    def complete_round(self, status: RoundStatus, score: int, moves_used: int) -> None:
        """Close the current round and update the streak counters.

        A round that is already closed is left alone.
        """
        round_data = self._current_round_data()
        if round_data is None or round_data.status != RoundStatus.INCOMPLETE:
            return

        self._streaks_before_close = (self._state.consecutive_wins, self._state.consecutive_losses)
        round_data.end_time = self._clock()
        round_data.status = RoundStatus(status)
        round_data.score = score
        round_data.time_elapsed = round_data.end_time - round_data.start_time
        round_data.moves_used = moves_used

        self._state.total_score += score

        if round_data.status == RoundStatus.WON:
            self._state.consecutive_wins += 1
            self._state.consecutive_losses = 0
        else:
            self._state.consecutive_losses += 1
            self._state.consecutive_wins = 0

    def reopen_round(self) -> bool:
        """Take back a lost current round so play can resume in it."""
        round_data = self._current_round_data()
        if round_data is None or round_data.status != RoundStatus.LOST:
            return False

        self._state.total_score -= round_data.score
        self._state.consecutive_wins, self._state.consecutive_losses = self._streaks_before_close
        round_data.end_time = None
        round_data.status = RoundStatus.INCOMPLETE
        round_data.score = 0
        round_data.time_elapsed = 0
        round_data.moves_used = 0
        return True

    def next_round(self) -> bool:
        """Advance the cursor; False once the last round has been reached."""
        if self._state.current_round >= self._state.total_rounds:
            return False
        self._state.current_round += 1
        return True

    def is_complete(self) -> bool:
        return self._state.current_round > self._state.total_rounds

    def get_current_round(self) -> int:
        return self._state.current_round

    def get_total_rounds(self) -> int:
        return self._state.total_rounds

    def get_total_score(self) -> int:
        return self._state.total_score

    def get_combo_multiplier(self) -> float:
        return 1 + self._state.consecutive_wins * 0.25

    def get_round_statistics(self) -> Dict[str, float]:
        rounds = self._state.rounds
        completed = len([r for r in rounds if r.end_time is not None])
        won = len([r for r in rounds if r.status == RoundStatus.WON])
        lost = len([r for r in rounds if r.status == RoundStatus.LOST])
        total_time = sum(r.time_elapsed for r in rounds)
        return {
            'completed': completed,
            'won': won,
            'lost': lost,
            'average_time': total_time / completed if completed > 0 else 0,
            'total_score': self._state.total_score,
            'win_rate': won / completed if completed > 0 else 0,
        }

    def get_time_limit(self) -> int:
        return self._time_limit

    def get_rounds(self) -> List[RoundData]:
        return list(self._state.rounds)

    def reset(self) -> None:
        self._state = MultiRoundState(current_round=1, total_rounds=self._state.total_rounds)


class ZenModeHandler:
    """Counts mine hits as mistakes, once per coordinate."""

    def __init__(self, log=None):
        self._mistakes: Set[Tuple[int, int]] = set()
        self.logger = log or logger

    def handle_mine_click(self, x: int, y: int) -> None:
        if (x, y) not in self._mistakes:
            self.logger.debug(f"Zen mistake at ({x}, {y})")
            self._mistakes.add((x, y))

    def is_mistake(self, x: int, y: int) -> bool:
        return (x, y) in self._mistakes

    def get_mistake_count(self) -> int:
        return len(self._mistakes)

    def get_mistake_positions(self) -> List[Position]:
        return [Position(x=x, y=y) for x, y in sorted(self._mistakes)]

    def reset(self) -> None:
        self._mistakes.clear()


class BlindModeVisibilityManager:
    """Cells are visible only when flagged or next to a flag."""

    def get_visible_cells(self, board: Board) -> Set[Tuple[int, int]]:
        visible = set()
        for row in board:
            for cell in row:
                if cell.is_flagged or self.is_adjacent_to_flag(cell.x, cell.y, board):
                    visible.add((cell.x, cell.y))
        return visible

    def is_adjacent_to_flag(self, x: int, y: int, board: Board) -> bool:
        width, height = board_size(board)
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height and board[ny][nx].is_flagged:
                return True
        return False

    def should_show_number(self, x: int, y: int, board: Board) -> bool:
        return (x, y) in self.get_visible_cells(board)


MIN_DIMENSION = 5
MAX_DIMENSION = 50
MIN_MINES = 1
MAX_MINE_DENSITY = 0.8


class CustomBoardBuilder:
    """Fluent builder for custom boards.

    The mine cap is computed from the dimensions current at the time
    set_mine_count is called, so set the dimensions first.
    """

    def __init__(self):
        self._width = 16
        self._height = 16
        self._mines = 40

    def _max_mines(self) -> int:
        return int(self._width * self._height * MAX_MINE_DENSITY)

    def set_dimensions(self, width: int, height: int) -> 'CustomBoardBuilder':
        self._width = max(MIN_DIMENSION, min(MAX_DIMENSION, width))
        self._height = max(MIN_DIMENSION, min(MAX_DIMENSION, height))
        return self

    def set_mine_count(self, mines: int) -> 'CustomBoardBuilder':
        self._mines = max(MIN_MINES, min(self._max_mines(), mines))
        return self

    def build(self) -> BoardConfig:
        return BoardConfig(width=self._width, height=self._height, mines=self._mines)

    def get_constraints(self) -> Dict[str, int]:
        return {
            'min_width': MIN_DIMENSION,
            'max_width': MAX_DIMENSION,
            'min_height': MIN_DIMENSION,
            'max_height': MAX_DIMENSION,
            'min_mines': MIN_MINES,
            'max_mines': self._max_mines(),
        }


def create_memory_mode_manager(reveal_duration: int = 5000, clock: Optional[Clock] = None) -> MemoryModeManager:
    return MemoryModeManager(reveal_duration, clock=clock)


def create_multi_round_manager(total_rounds: int = 5, time_limit: int = 60,
                               clock: Optional[Clock] = None) -> MultiRoundManager:
    return MultiRoundManager(total_rounds, time_limit, clock=clock)


def create_zen_mode_handler() -> ZenModeHandler:
    return ZenModeHandler()


def create_blind_mode_visibility_manager() -> BlindModeVisibilityManager:
    return BlindModeVisibilityManager()


def create_custom_board_builder() -> CustomBoardBuilder:
    return CustomBoardBuilder()
