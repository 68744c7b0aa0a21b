"""A single game session: one mode, one board, and the engines that serve it."""
import copy
import logging
import random
from typing import Optional

from minesweeper_modes.board import (
    arrange_mines,
    count_flags,
    create_empty_board,
    hide_mines,
    reveal_all_mines,
    reveal_cell,
    toggle_flag,
)
from minesweeper_modes.clock import Clock, system_clock
from minesweeper_modes.hints import HintSystem, get_hint_message
from minesweeper_modes.history import DEFAULT_MAX_HISTORY_SIZE, UndoRedoManager, create_action_description
from minesweeper_modes.mechanics import (
    BlindModeVisibilityManager,
    MemoryModeManager,
    MemoryPhase,
    MultiRoundManager,
    RoundStatus,
    ZenModeHandler,
)
from minesweeper_modes.mode_manager import GameModeManager, clamp_mines
from minesweeper_modes.mode_types import ModeDefinition, NumberVisibility
from minesweeper_modes.scoring import (
    ScoreCalculationContext,
    calculate_accuracy,
    calculate_action_score,
    calculate_score,
    is_perfect_game,
)
from minesweeper_modes.types import (
    Board,
    BoardConfig,
    GameResponse,
    GameState,
    GameStatus,
    MinePlacementRequest,
    MoveAction,
    MoveRequest,
    Position,
)

logger = logging.getLogger(__name__)

DEFAULT_REVEAL_DURATION = 5000
DEFAULT_TOTAL_ROUNDS = 5
DEFAULT_ROUND_TIME_LIMIT = 60


class GameSession:
    """Drives one game through the rules of its mode.

    Methods that change the game return whether the request was accepted;
    refused requests leave the state untouched.
    """

    def __init__(self, mode: ModeDefinition, custom_config: Optional[BoardConfig] = None,
                 clock: Optional[Clock] = None, rng: Optional[random.Random] = None,
                 history_size: int = DEFAULT_MAX_HISTORY_SIZE, log=None):
        self.mode = mode
        self.logger = log or logger
        if custom_config is not None:
            custom_config = clamp_mines(custom_config.width, custom_config.height, custom_config.mines)
        self.custom_config = custom_config
        self._clock = clock or system_clock
        self.rng = rng or random.Random()
        self.manager = GameModeManager(mode, clock=self._clock, log=self.logger)
        self.history = UndoRedoManager(max_history_size=history_size, clock=self._clock)

        self.memory: Optional[MemoryModeManager] = None
        self.rounds: Optional[MultiRoundManager] = None
        self.zen: Optional[ZenModeHandler] = None
        self.blind: Optional[BlindModeVisibilityManager] = None

        if mode.has_rule('multi-round'):
            self.rounds = MultiRoundManager(
                total_rounds=DEFAULT_TOTAL_ROUNDS,
                time_limit=mode.config.time_limit or DEFAULT_ROUND_TIME_LIMIT,
                clock=self._clock,
            )
            self.rounds.start_round()
        if not mode.rules.reveal_on_mine_click:
            self.zen = ZenModeHandler(log=self.logger)
        if mode.rules.number_visibility == NumberVisibility.CONDITIONAL:
            self.blind = BlindModeVisibilityManager()

        self.state = self._new_state(streak=0)
        self._save('RESET')

    def _new_memory_manager(self) -> Optional[MemoryModeManager]:
        flow = self.mode.rules.custom_game_flow
        if flow is None:
            return None
        return MemoryModeManager(flow.reveal_duration or DEFAULT_REVEAL_DURATION, clock=self._clock, log=self.logger)

    def _new_state(self, streak: int, config: Optional[BoardConfig] = None) -> GameState:
        """Blank board for the given config, level 1 config by default."""
        config = config or self.custom_config or self.manager.get_board_config(1)
        state = self.manager.initialize_game_state(
            board=create_empty_board(config.width, config.height),
            streak=streak,
        )
        state.config = config
        if self.rounds is not None:
            state.round_number = self.rounds.get_current_round()
        self.memory = self._new_memory_manager()
        return state

    def _save(self, action_type: str, position: Optional[Position] = None) -> None:
        self.history.save_state(self.state, create_action_description(action_type, position))

    def in_bounds(self, x: int, y: int) -> bool:
        config = self.state.config
        return 0 <= x < config.width and 0 <= y < config.height

    def _check_bounds(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            config = self.state.config
            raise ValueError(f"Cell ({x}, {y}) is outside the {config.width}x{config.height} board")

    def _undo_enabled(self) -> bool:
        return self.mode.has_rule('undo-moves')

    def needs_mine_placement(self) -> bool:
        """True until the first reveal of a game places the mines."""
        return self.state.first_click and not self.state.is_over()

    def mine_placement_request(self, x: int, y: int) -> MinePlacementRequest:
        """Mine layout inputs for a first click at (x, y)."""
        return MinePlacementRequest(
            board=self.state.board,
            config=self.state.config,
            safe_cell=Position(x, y) if self.manager.is_first_click_safe() else None,
            pattern=self.mode.has_rule('pattern-generation'),
        )

    def _memory_blocks_play(self) -> bool:
        return (self.memory is not None and not self.state.first_click
                and self.memory.get_current_phase() != MemoryPhase.PLAY)

    def reveal(self, x: int, y: int, mined_board: Optional[Board] = None) -> bool:
        """Reveal a cell. mined_board replaces local mine placement on the first click."""
        self._check_bounds(x, y)
        state = self.state
        if state.is_over() or self._memory_blocks_play():
            return False

        cell = state.board[y][x]
        if cell.is_flagged or cell.is_revealed:
            return False
        # The first click is exempt so blind games can start
        if not state.first_click and not self.manager.should_reveal_cell(cell, state):
            return False

        position = Position(x, y)
        if state.first_click:
            if mined_board is None:
                mined_board = arrange_mines(self.mine_placement_request(x, y), self.rng)
            state.board = mined_board
            state.first_click = False
            state.start_time = self._clock()
            state.status = GameStatus.PLAYING

            if self.memory is not None:
                state.board = self.memory.start_reveal_phase(state.board)
                self.memory.start_memorize_phase()
                self._save('FIRST_CLICK', position)
                return True

        state.move_count += 1
        cell = state.board[y][x]

        if cell.is_mine:
            if self.manager.check_lose_condition(state, hit_mine=True):
                self._lose()
            elif self.zen is not None:
                self.zen.handle_mine_click(x, y)
            self._save('REVEAL_CELL', position)
            return True

        result = reveal_cell(state.board, x, y, cascade=self.manager.should_cascade())
        state.board = result.board
        state.revealed_count += result.revealed_count
        state.score += calculate_action_score(
            'reveal', cells_revealed=result.revealed_count, adjacent_mines=cell.adjacent_mines,
        )

        if self.memory is not None:
            self.memory.record_recall(x, y, self.memory.was_cell_shown_in_reveal(x, y))

        if self.manager.check_win_condition(state):
            self._win()
        elif self.manager.check_lose_condition(state, hit_mine=False):
            self._lose()

        self._save('REVEAL_CELL', position)
        return True

    def apply_move(self, move: MoveRequest, mined_board: Optional[Board] = None) -> bool:
        """Dispatch a player move; flag and unflag only act on cells in the other state."""
        action = MoveAction(move.action)
        if action == MoveAction.REVEAL:
            return self.reveal(move.x, move.y, mined_board=mined_board)

        self._check_bounds(move.x, move.y)
        is_flagged = self.state.board[move.y][move.x].is_flagged
        if (action == MoveAction.FLAG) == is_flagged:
            return False
        return self.toggle_flag(move.x, move.y)

    def _win(self) -> None:
        state = self.state
        now = self._clock()
        state.status = GameStatus.WON
        state.end_time = now
        state.score = calculate_score(ScoreCalculationContext(
            game_state=state,
            game_mode=self.mode,
            time_elapsed=now - state.start_time if state.start_time is not None else 0,
            accuracy=calculate_accuracy(state),
            perfect_game=is_perfect_game(state),
        ))
        state.streak += 1
        self.logger.info(f"Game won in mode {self.mode.id} with score {state.score}")

        if self.rounds is not None:
            self.rounds.complete_round(RoundStatus.WON, state.score, state.move_count)
        if self.memory is not None:
            self.memory.complete()

    def _lose(self) -> None:
        state = self.state
        state.board = reveal_all_mines(state.board)
        state.status = GameStatus.LOST
        state.end_time = self._clock()
        state.streak = 0
        self.logger.info(f"Game lost in mode {self.mode.id} after {state.move_count} moves")

        if self.rounds is not None:
            self.rounds.complete_round(RoundStatus.LOST, state.score, state.move_count)

    def toggle_flag(self, x: int, y: int) -> bool:
        self._check_bounds(x, y)
        state = self.state
        if state.is_over() or state.first_click or not self.manager.are_flags_allowed():
            return False
        if self._memory_blocks_play():
            return False

        was_flagged = state.board[y][x].is_flagged
        if state.board[y][x].is_revealed:
            return False

        state.board = toggle_flag(state.board, x, y)
        state.flag_count = count_flags(state.board)
        state.score += calculate_action_score('unflag' if was_flagged else 'flag')
        self._save('UNFLAG_CELL' if was_flagged else 'FLAG_CELL', Position(x, y))
        return True

    def tick(self, seconds: int = 1) -> bool:
        """Advance the session clock; returns True when the state changed."""
        changed = self.advance_memory_phase()
        state = self.state

        if state.status != GameStatus.PLAYING or state.time_remaining is None:
            return changed
        if not self.manager.is_timed_mode():
            return changed

        state.time_remaining = max(0, state.time_remaining - seconds)
        if state.time_remaining == 0 and self.manager.check_lose_condition(state, hit_mine=False):
            self.logger.info(f"Time expired in mode {self.mode.id}")
            self._lose()
        return True

    def advance_memory_phase(self) -> bool:
        """Hide the board once the memorize countdown has elapsed."""
        if self.memory is None or not self.memory.should_transition_phase():
            return False
        self.state.board = self.memory.start_play_phase(self.state.board)
        return True

    def continue_game(self) -> Optional[int]:
        """Resume a lost game. Returns the price charged, or None when refused."""
        if not self.manager.can_continue():
            self.logger.warning(f"Continue not allowed for mode {self.mode.id}")
            return None
        if self.state.status != GameStatus.LOST:
            self.logger.warning(f"Continue refused, game is {self.state.status.value}")
            return None

        cost = self.manager.get_continue_cost(self.state)
        self.state = self.manager.apply_continue_to(self.state)
        self.state.board = hide_mines(self.state.board)
        self.state.end_time = None
        if self.rounds is not None:
            self.rounds.reopen_round()
        self._save('CONTINUE')
        return cost

    def next_level(self) -> bool:
        """Start the next level, keeping score, streak and continue history."""
        if not self.manager.is_progressive_mode():
            self.logger.warning(f"next_level called on non-progressive mode {self.mode.id}")
            return False

        previous = self.state
        next_level = self.manager.get_next_level_config(previous.level)
        state = self._new_state(streak=previous.streak, config=next_level.config)
        state.level = next_level.level
        state.time_remaining = next_level.time_limit
        state.score = previous.score
        state.continue_count = previous.continue_count
        state.continue_timestamps = list(previous.continue_timestamps)
        self.state = state
        self._save('NEXT_LEVEL')
        return True

    def next_round(self) -> bool:
        """Start the next round of a multi-round series; False once the series is over."""
        if self.rounds is None:
            self.logger.warning(f"next_round called on single-round mode {self.mode.id}")
            return False
        if not self.rounds.next_round():
            return False

        self.rounds.start_round()
        self.state = self._new_state(streak=self.state.streak)
        self._save('NEXT_ROUND')
        return True

    def reset(self) -> None:
        """Start over at level 1 with a cleared streak and history."""
        if self.rounds is not None:
            self.rounds.reset()
            self.rounds.start_round()
        if self.zen is not None:
            self.zen.reset()
        self.state = self._new_state(streak=0)
        self.history.clear()
        self._save('RESET')

    def undo(self) -> bool:
        if not self._undo_enabled():
            self.logger.warning(f"Undo not available in mode {self.mode.id}")
            return False
        state = self.history.undo()
        if state is None:
            return False
        self.state = state
        return True

    def redo(self) -> bool:
        if not self._undo_enabled():
            self.logger.warning(f"Redo not available in mode {self.mode.id}")
            return False
        state = self.history.redo()
        if state is None:
            return False
        self.state = state
        return True

    def jump_to(self, index: int) -> bool:
        if not self._undo_enabled():
            return False
        state = self.history.jump_to_state(index)
        if state is None:
            return False
        self.state = state
        return True

    def hint(self) -> Optional[str]:
        """Best hint for the current board, in modes that offer hints."""
        if not self.mode.has_rule('hint-system'):
            return None
        if self.state.first_click or self.state.is_over():
            return None

        best = HintSystem(self.state).get_best_hint()
        if best is None:
            return None
        self._save('HINT_USED', best.position)
        return get_hint_message(best)

    def response(self, message: Optional[str] = None, hint: Optional[str] = None) -> GameResponse:
        state = self.state
        can_continue = self.manager.can_continue() and state.status == GameStatus.LOST
        visible_cells = None
        if self.blind is not None:
            visible_cells = [Position(x, y) for x, y in sorted(self.blind.get_visible_cells(state.board))]

        return GameResponse(
            game_state=copy.deepcopy(state),
            mode_id=self.mode.id,
            can_undo=self._undo_enabled() and self.history.can_undo(),
            can_redo=self._undo_enabled() and self.history.can_redo(),
            can_continue=can_continue,
            continue_cost=self.manager.get_continue_cost(state) if can_continue else 0,
            memory_phase=self.memory.get_current_phase().value if self.memory is not None else None,
            mistake_count=self.zen.get_mistake_count() if self.zen is not None else 0,
            current_round=self.rounds.get_current_round() if self.rounds is not None else None,
            total_rounds=self.rounds.get_total_rounds() if self.rounds is not None else None,
            total_score=self.rounds.get_total_score() if self.rounds is not None else state.score,
            hint=hint,
            message=message,
            visible_cells=visible_cells,
        )

