"""Mode rules engine: board sizing, win/lose evaluation and continue pricing."""
import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from minesweeper_modes.clock import Clock, system_clock
from minesweeper_modes.mode_types import (
    DYNAMIC,
    BoardSize,
    ExtendedGameState,
    ModeCategory,
    ModeDefinition,
    NumberVisibility,
    ProgressionConfig,
)
from minesweeper_modes.types import Board, BoardConfig, Cell, GameState, GameStatus

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 16
DEFAULT_HEIGHT = 16
DEFAULT_MINES = 40

# First click plus its eight neighbours must stay mine-free
SAFE_ZONE_CELLS = 9

EARLY_CONTINUE_WINDOW_MS = 30000
EARLY_CONTINUE_DISCOUNT = 0.8
REPEAT_CONTINUE_FACTOR = 1.5
LEVEL_CONTINUE_SURCHARGE = 10

_NEIGHBOURS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]


@dataclass
class NextLevelConfig:
    level: int
    config: BoardConfig
    time_limit: Optional[int]


def clamp_mines(width: int, height: int, mines: int) -> BoardConfig:
    """Board config with room left for the first-click safe zone."""
    return BoardConfig(width=width, height=height, mines=min(mines, max(0, width * height - SAFE_ZONE_CELLS)))


class GameModeManager:
    """Applies one mode's rules to game states. Holds no state besides the mode."""

    def __init__(self, mode: ModeDefinition, clock: Optional[Clock] = None, log=None):
        self.mode = mode
        self._clock = clock or system_clock
        self.logger = log or logger

    def initialize_game_state(self, board: Optional[Board] = None, streak: int = 0) -> GameState:
        """Fresh level-1 state; the board itself comes from the board primitives."""
        return GameState(
            board=board if board is not None else [],
            status=GameStatus.IDLE,
            difficulty='custom',
            config=self.get_board_config(1),
            game_mode=self.mode.id,
            time_remaining=self.mode.config.time_limit or None,
            streak=streak,
        )

    def _progression(self, level: int) -> Optional[ProgressionConfig]:
        progression = self.mode.config.difficulty_progression
        if progression is None:
            return None
        return progression.progression(level)

    def get_board_config(self, level: int) -> BoardConfig:
        """Resolve the board for a level, degrading to 16x16 with 40 mines."""
        config = self.mode.config

        if config.board_size == DYNAMIC and config.difficulty_progression is not None:
            resolved = self._progression(level)
            result = clamp_mines(
                resolved.width or DEFAULT_WIDTH,
                resolved.height or DEFAULT_HEIGHT,
                resolved.mines or DEFAULT_MINES,
            )
        elif isinstance(config.board_size, BoardSize):
            if config.mine_count == DYNAMIC:
                resolved = self._progression(level)
                mines = (resolved.mines if resolved is not None else None) or DEFAULT_MINES
            else:
                mines = config.mine_count
            result = clamp_mines(config.board_size.width, config.board_size.height, mines)
        else:
            result = BoardConfig(width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT, mines=DEFAULT_MINES)

        self.logger.debug(f"Mode {self.mode.id} level {level} board: {result}")
        return result

    def _time_elapsed(self, state: GameState) -> float:
        if state.start_time is None:
            return 0
        return self._clock() - state.start_time

    def _extended_view(self, state: GameState, hit_mine: bool, game_over: bool) -> ExtendedGameState:
        move_limit = self.mode.config.move_limit
        return ExtendedGameState(
            status=state.status,
            difficulty=state.difficulty,
            flag_count=state.flag_count,
            revealed_count=state.revealed_count,
            first_click=state.first_click,
            game_mode=state.game_mode,
            level=state.level,
            score=state.score,
            time_elapsed=self._time_elapsed(state),
            time_remaining=state.time_remaining,
            time_limit=self.mode.config.time_limit,
            moves_used=state.move_count,
            moves_remaining=move_limit - state.move_count if move_limit else None,
            move_limit=move_limit,
            hit_mine=hit_mine,
            game_over=game_over,
            continue_count=state.continue_count,
            continue_timestamps=list(state.continue_timestamps),
            config=state.config,
        )

    def check_win_condition(self, state: GameState) -> bool:
        """Check if the player has won based on mode rules."""
        custom = self.mode.rules.custom_win_condition
        if custom is not None:
            return custom(self._extended_view(state, hit_mine=False, game_over=state.is_over()))

        # Default win condition: all non-mine cells revealed
        total_cells = state.config.width * state.config.height
        return state.revealed_count == total_cells - state.config.mines

    def check_lose_condition(self, state: GameState, hit_mine: bool) -> bool:
        """Check if the player has lost based on mode rules."""
        custom = self.mode.rules.custom_lose_condition
        if custom is not None:
            return custom(self._extended_view(state, hit_mine=hit_mine, game_over=False))

        config = self.mode.config
        if config.time_limit and state.time_remaining is not None and state.time_remaining <= 0:
            return True

        if config.move_limit and state.move_count >= config.move_limit:
            return True

        # A mode may keep the game alive on a mine hit (zen)
        return hit_mine and self.mode.rules.reveal_on_mine_click

    def should_reveal_cell(self, cell: Cell, state: GameState) -> bool:
        """Decide whether a cell may be revealed under this mode."""
        if cell.is_flagged or cell.is_revealed:
            return False

        if self.mode.rules.number_visibility == NumberVisibility.CONDITIONAL:
            return self._is_cell_visible(cell, state)

        return True

    def _is_cell_visible(self, cell: Cell, state: GameState) -> bool:
        """In blind mode, cells are only visible near flags."""
        if cell.is_flagged:
            return True
        width, height = state.config.width, state.config.height
        for dx, dy in _NEIGHBOURS:
            nx, ny = cell.x + dx, cell.y + dy
            if 0 <= nx < width and 0 <= ny < height and state.board[ny][nx].is_flagged:
                return True
        return False

    def should_cascade(self) -> bool:
        return self.mode.rules.cascade_reveal

    def is_first_click_safe(self) -> bool:
        return self.mode.rules.first_click_safe

    def are_flags_allowed(self) -> bool:
        return self.mode.rules.allow_flags

    def get_time_limit(self, level: int) -> Optional[int]:
        """Get time limit in seconds for a level."""
        resolved = self._progression(level)
        if resolved is not None:
            return resolved.time_limit or self.mode.config.time_limit or None
        return self.mode.config.time_limit or None

    def get_next_level_config(self, current_level: int) -> NextLevelConfig:
        """Config for the following level, clamped at the max level."""
        next_level = current_level + 1
        progression = self.mode.config.difficulty_progression

        if progression is not None and progression.max_level and next_level > progression.max_level:
            return NextLevelConfig(
                level=current_level,
                config=self.get_board_config(current_level),
                time_limit=self.get_time_limit(current_level),
            )

        return NextLevelConfig(
            level=next_level,
            config=self.get_board_config(next_level),
            time_limit=self.get_time_limit(next_level),
        )

    def can_continue(self) -> bool:
        return self.mode.continue_allowed

    def get_continue_cost(self, state: GameState) -> int:
        """Price of the next continue.

        Order matters: repeat multiplier, then level surcharge, then the
        early-continue discount.
        """
        cost = float(self.mode.continue_cost)

        if state.continue_count > 0:
            cost *= REPEAT_CONTINUE_FACTOR ** state.continue_count

        if self.mode.category == ModeCategory.DIFFICULTY and self.mode.config.difficulty_progression is not None:
            cost += state.level * LEVEL_CONTINUE_SURCHARGE

        if self._time_elapsed(state) < EARLY_CONTINUE_WINDOW_MS:
            cost *= EARLY_CONTINUE_DISCOUNT

        price = math.floor(cost)
        self.logger.debug(f"Continue #{state.continue_count + 1} for {self.mode.id} costs {price}")
        return price

    def apply_continue(self, state: GameState) -> Dict[str, Any]:
        """Field updates granted by a continue."""
        updates: Dict[str, Any] = {
            'continue_count': state.continue_count + 1,
            'continue_timestamps': [*state.continue_timestamps, self._clock()],
            'status': GameStatus.PLAYING,
        }
        if self.mode.continue_benefit is not None:
            updates.update(self.mode.continue_benefit(state, self.mode))
        return updates

    def apply_continue_to(self, state: GameState) -> GameState:
        """Return a new state with the continue applied."""
        return dataclasses.replace(state, **self.apply_continue(state))

    def has_custom_game_flow(self) -> bool:
        return self.mode.rules.custom_game_flow is not None

    def get_game_flow_phases(self) -> List[str]:
        flow = self.mode.rules.custom_game_flow
        return list(flow.phases) if flow is not None else []

    def get_mode_name(self) -> str:
        return self.mode.name

    def get_mode_id(self) -> str:
        return self.mode.id

    def get_mode_category(self) -> str:
        return self.mode.category.value

    def is_progressive_mode(self) -> bool:
        return self.mode.config.difficulty_progression is not None

    def is_timed_mode(self) -> bool:
        return bool(self.mode.config.time_limit)

    def has_move_limit(self) -> bool:
        return bool(self.mode.config.move_limit)

    def get_special_rules(self) -> List[str]:
        return list(self.mode.config.special_rules)


def create_game_mode_manager(mode: ModeDefinition, clock: Optional[Clock] = None) -> GameModeManager:
    """Create a game mode manager instance."""
    return GameModeManager(mode, clock=clock)
