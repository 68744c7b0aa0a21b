"""Conversion between engine records and camelCase JSON payloads."""
from typing import Any, Dict, List

from minesweeper_modes.mode_types import BoardSize, ModeDefinition
from minesweeper_modes.types import Board, BoardConfig, Cell, GameResponse, GameState, GameStatus


def cell_to_dict(cell: Cell) -> Dict[str, Any]:
    return {
        'x': cell.x,
        'y': cell.y,
        'isMine': cell.is_mine,
        'isRevealed': cell.is_revealed,
        'isFlagged': cell.is_flagged,
        'adjacentMines': cell.adjacent_mines,
    }


def cell_from_dict(data: Dict[str, Any]) -> Cell:
    return Cell(
        x=int(data['x']),
        y=int(data['y']),
        is_mine=bool(data['isMine']),
        is_revealed=bool(data['isRevealed']),
        is_flagged=bool(data['isFlagged']),
        adjacent_mines=int(data['adjacentMines']),
    )


def config_to_dict(config: BoardConfig) -> Dict[str, int]:
    return {'width': config.width, 'height': config.height, 'mines': config.mines}


def config_from_dict(data: Dict[str, Any]) -> BoardConfig:
    return BoardConfig(width=int(data['width']), height=int(data['height']), mines=int(data['mines']))


def serialize_game_state(state: GameState) -> Dict[str, Any]:
    """Convert game state to JSON-serializable format."""
    return {
        'board': [[cell_to_dict(cell) for cell in row] for row in state.board],
        'status': state.status.value,
        'difficulty': state.difficulty,
        'config': config_to_dict(state.config),
        'flagCount': state.flag_count,
        'revealedCount': state.revealed_count,
        'startTime': state.start_time,
        'endTime': state.end_time,
        'firstClick': state.first_click,
        'gameMode': state.game_mode,
        'score': state.score,
        'level': state.level,
        'moveCount': state.move_count,
        'timeRemaining': state.time_remaining,
        'continueCount': state.continue_count,
        'continueTimestamps': list(state.continue_timestamps),
        'roundNumber': state.round_number,
        'streak': state.streak,
    }


def deserialize_game_state(data: Dict[str, Any]) -> GameState:
    """Rebuild a GameState; raises KeyError/TypeError/ValueError on malformed input."""
    board: Board = [[cell_from_dict(cell) for cell in row] for row in data['board']]
    time_remaining = data.get('timeRemaining')
    return GameState(
        board=board,
        status=GameStatus(data['status']),
        difficulty=str(data.get('difficulty', 'custom')),
        config=config_from_dict(data['config']),
        flag_count=int(data['flagCount']),
        revealed_count=int(data['revealedCount']),
        start_time=data.get('startTime'),
        end_time=data.get('endTime'),
        first_click=bool(data['firstClick']),
        game_mode=str(data['gameMode']),
        score=int(data['score']),
        level=int(data['level']),
        move_count=int(data['moveCount']),
        time_remaining=int(time_remaining) if time_remaining is not None else None,
        continue_count=int(data['continueCount']),
        continue_timestamps=[float(ts) for ts in data.get('continueTimestamps', [])],
        round_number=int(data.get('roundNumber', 1)),
        streak=int(data.get('streak', 0)),
    )


def serialize_game_response(response: GameResponse) -> Dict[str, Any]:
    return {
        'gameState': serialize_game_state(response.game_state),
        'modeId': response.mode_id,
        'canUndo': response.can_undo,
        'canRedo': response.can_redo,
        'canContinue': response.can_continue,
        'continueCost': response.continue_cost,
        'memoryPhase': response.memory_phase,
        'mistakeCount': response.mistake_count,
        'currentRound': response.current_round,
        'totalRounds': response.total_rounds,
        'totalScore': response.total_score,
        'hint': response.hint,
        'message': response.message,
        'visibleCells': (
            [{'x': p.x, 'y': p.y} for p in response.visible_cells]
            if response.visible_cells is not None else None
        ),
    }


def serialize_mode(mode: ModeDefinition) -> Dict[str, Any]:
    """Display metadata of a mode; formulas are not exposed."""
    config = mode.config
    board_size: Any = config.board_size
    if isinstance(board_size, BoardSize):
        board_size = {'width': board_size.width, 'height': board_size.height}
    progression = config.difficulty_progression
    return {
        'id': mode.id,
        'name': mode.name,
        'category': mode.category.value,
        'description': mode.description,
        'icon': mode.icon,
        'boardSize': board_size,
        'mineCount': config.mine_count,
        'timeLimit': config.time_limit,
        'moveLimit': config.move_limit,
        'specialRules': list(config.special_rules),
        'maxLevel': progression.max_level if progression is not None else None,
        'progressive': progression is not None,
        'continueAllowed': mode.continue_allowed,
        'continueCost': mode.continue_cost,
    }


def serialize_modes(modes: List[ModeDefinition]) -> List[Dict[str, Any]]:
    return [serialize_mode(mode) for mode in modes]
