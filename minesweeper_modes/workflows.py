"""Temporal workflow hosting one Minesweeper mode game."""
import asyncio
from datetime import timedelta
from typing import Optional

from temporalio import workflow
from temporalio.exceptions import ApplicationError

with workflow.unsafe.imports_passed_through():
    from minesweeper_modes.activities import place_mines_activity
    from minesweeper_modes.history import HistoryStatistics
    from minesweeper_modes.mechanics import MemoryPhase
    from minesweeper_modes.registry import get_game_mode_or_default
    from minesweeper_modes.session import GameSession
    from minesweeper_modes.types import CreateGameRequest, GameResponse, GameStatus, MoveAction, MoveRequest

# Auto-close workflow after 24 hours of inactivity
INACTIVITY_TIMEOUT = timedelta(hours=24)
CHECK_INTERVAL = timedelta(minutes=1)
TICK_INTERVAL = timedelta(seconds=1)


def _workflow_clock() -> float:
    return workflow.time() * 1000


@workflow.defn
class ModeGameWorkflow:
    """Workflow that manages a single game in any mode."""

    def __init__(self):
        self.game_id: str = ""
        self.session: Optional[GameSession] = None
        self.last_activity_time: float = 0
        self.should_close: bool = False

    @workflow.run
    async def run(self, game_id: str, request: CreateGameRequest) -> None:
        """Main workflow entry point."""
        self.game_id = game_id
        self.last_activity_time = workflow.time()

        mode = get_game_mode_or_default(request.mode_id)
        self.session = GameSession(
            mode,
            custom_config=request.custom_config,
            clock=_workflow_clock,
            rng=workflow.random(),
            history_size=request.history_size,
            log=workflow.logger,
        )
        workflow.logger.info(f"Game {game_id} started in mode {mode.id}")

        while not self.should_close:
            ticking = self._needs_ticks()
            try:
                await workflow.wait_condition(
                    lambda: self.should_close or self._inactive(),
                    timeout=(TICK_INTERVAL if ticking else CHECK_INTERVAL).total_seconds(),
                )
            except asyncio.TimeoutError:
                pass

            if self.should_close:
                break

            if self._inactive():
                workflow.logger.info(f"Game {game_id} auto-closing due to 24 hours of inactivity")
                break

            if ticking:
                self.session.tick(int(TICK_INTERVAL.total_seconds()))

        workflow.logger.info(f"Minesweeper workflow {game_id} completed")

    def _inactive(self) -> bool:
        return (workflow.time() - self.last_activity_time) >= INACTIVITY_TIMEOUT.total_seconds()

    def _needs_ticks(self) -> bool:
        """Countdowns and memory phases need a once-a-second wake-up."""
        session = self.session
        if session is None or session.state.status != GameStatus.PLAYING:
            return False
        if session.manager.is_timed_mode():
            return True
        return session.memory is not None and session.memory.get_current_phase() == MemoryPhase.MEMORIZE

    def _require_session(self) -> GameSession:
        if self.session is None:
            raise ApplicationError("Game state not initialized")
        self.last_activity_time = workflow.time()
        return self.session

    @workflow.update
    async def make_move_update(self, move: MoveRequest) -> GameResponse:
        """Update to make a move and return the updated game."""
        session = self._require_session()

        try:
            mined_board = None
            if (move.action == MoveAction.REVEAL and session.needs_mine_placement()
                    and session.in_bounds(move.x, move.y)):
                mined_board = await workflow.execute_activity(
                    place_mines_activity,
                    session.mine_placement_request(move.x, move.y),
                    start_to_close_timeout=timedelta(seconds=60),
                )
            accepted = session.apply_move(move, mined_board=mined_board)
        except ValueError as error:
            workflow.logger.error(f"Error processing move: {error}")
            return session.response(message=str(error))

        return session.response(message=None if accepted else "Move ignored")

    @workflow.update
    async def continue_update(self) -> GameResponse:
        session = self._require_session()
        cost = session.continue_game()
        if cost is None:
            return session.response(message="Continue not available")
        return session.response(message=f"Continued for {cost}")

    @workflow.update
    async def undo_update(self) -> GameResponse:
        session = self._require_session()
        return session.response(message=None if session.undo() else "Nothing to undo")

    @workflow.update
    async def redo_update(self) -> GameResponse:
        session = self._require_session()
        return session.response(message=None if session.redo() else "Nothing to redo")

    @workflow.update
    async def next_level_update(self) -> GameResponse:
        session = self._require_session()
        if not session.next_level():
            return session.response(message="Mode has no levels")
        return session.response(message=f"Level {session.state.level}")

    @workflow.update
    async def next_round_update(self) -> GameResponse:
        session = self._require_session()
        if not session.next_round():
            return session.response(message="No more rounds")
        return session.response(message=f"Round {session.state.round_number}")

    @workflow.update
    async def hint_update(self) -> GameResponse:
        session = self._require_session()
        hint = session.hint()
        return session.response(hint=hint, message=None if hint else "No hint available")

    @workflow.update
    async def restart_update(self) -> GameResponse:
        """Update to restart the game and return the new state."""
        session = self._require_session()
        session.reset()
        return session.response()

    @workflow.signal
    def close_game_signal(self) -> None:
        """Signal to close the game."""
        self.should_close = True

    @workflow.query
    def get_game_state_query(self) -> GameResponse:
        """Query to get the current game."""
        if self.session is None:
            raise ValueError("Game state not initialized")
        return self.session.response()

    @workflow.query
    def get_history_statistics_query(self) -> HistoryStatistics:
        if self.session is None:
            raise ValueError("Game state not initialized")
        return self.session.history.get_statistics()
