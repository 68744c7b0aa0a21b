"""Temporal activities for game logic."""
from temporalio import activity

from minesweeper_modes.board import arrange_mines
from minesweeper_modes.types import Board, MinePlacementRequest


@activity.defn
async def place_mines_activity(request: MinePlacementRequest) -> Board:
    """Place mines on a fresh board, randomly or as a pattern."""
    activity.logger.info(
        f"Placing {request.config.mines} mines on a {request.config.width}x{request.config.height} board"
    )
    return arrange_mines(request)
