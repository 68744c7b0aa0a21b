"""Flask server for Minesweeper mode games."""
import asyncio
import os
import logging
from datetime import datetime
from typing import Optional
import uuid

from flask import Flask, request, jsonify
from flask_cors import CORS
from temporalio.client import Client

from minesweeper_modes.client_provider import get_history_size, get_task_queue, get_temporal_client
from minesweeper_modes.mechanics import CustomBoardBuilder
from minesweeper_modes.registry import game_mode_registry
from minesweeper_modes.serialization import serialize_game_response, serialize_modes
from minesweeper_modes.types import BoardConfig, CreateGameRequest, MoveAction, MoveRequest
from minesweeper_modes.workflows import ModeGameWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

# Global client reference
temporal_client: Optional[Client] = None

# Updates exposed as POST /api/games/<id>/<action>
GAME_ACTIONS = {
    'continue': ModeGameWorkflow.continue_update,
    'undo': ModeGameWorkflow.undo_update,
    'redo': ModeGameWorkflow.redo_update,
    'next-level': ModeGameWorkflow.next_level_update,
    'next-round': ModeGameWorkflow.next_round_update,
    'hint': ModeGameWorkflow.hint_update,
    'restart': ModeGameWorkflow.restart_update,
}


async def query_with_retry(handle, query, max_retries=5):
    """Query with retry logic for workflow initialization."""
    for i in range(max_retries):
        try:
            return await handle.query(query)
        except Exception as error:
            if i < max_retries - 1:
                logger.info(f"Query not ready yet, retrying in {(i + 1) * 100}ms...")
                await asyncio.sleep((i + 1) * 0.1)
                continue
            raise error


def parse_custom_config(data) -> Optional[BoardConfig]:
    """Clamp a requested custom board into the supported ranges."""
    if data is None:
        return None
    if not all(isinstance(data.get(key), int) for key in ('width', 'height', 'mines')):
        raise ValueError('Invalid game configuration')
    return (
        CustomBoardBuilder()
        .set_dimensions(data['width'], data['height'])
        .set_mine_count(data['mines'])
        .build()
    )


@app.route('/api/modes', methods=['GET'])
def list_modes():
    """List the enabled game modes."""
    return jsonify({'modes': serialize_modes(game_mode_registry.get_enabled_modes())})


@app.route('/api/games', methods=['POST'])
def create_game():
    """Create a new game."""
    try:
        data = request.get_json(silent=True) or {}
        mode_id = data.get('modeId')

        if not isinstance(mode_id, str):
            return jsonify({'error': 'modeId is required'}), 400
        if not game_mode_registry.has_mode(mode_id):
            return jsonify({'error': f'Unknown game mode: {mode_id}'}), 404

        try:
            custom_config = parse_custom_config(data.get('config'))
        except ValueError as error:
            return jsonify({'error': str(error)}), 400

        create_request = CreateGameRequest(
            mode_id=mode_id,
            custom_config=custom_config,
            history_size=get_history_size(),
        )
        game_id = str(uuid.uuid4())

        async def start_workflow():
            await temporal_client.start_workflow(
                ModeGameWorkflow.run,
                args=[game_id, create_request],
                id=game_id,
                task_queue=get_task_queue(),
            )

            # Get initial game state with retry
            handle = temporal_client.get_workflow_handle(game_id)
            return await query_with_retry(handle, ModeGameWorkflow.get_game_state_query)

        response = asyncio.run(start_workflow())
        return jsonify({'gameId': game_id, **serialize_game_response(response)})

    except Exception as error:
        logger.error(f"Error creating game: {error}")
        return jsonify({'error': 'Failed to create game'}), 500


@app.route('/api/games/<game_id>', methods=['GET'])
def get_game_state(game_id):
    """Get game state."""
    try:
        async def query_game():
            handle = temporal_client.get_workflow_handle(game_id)
            return await query_with_retry(handle, ModeGameWorkflow.get_game_state_query)

        response = asyncio.run(query_game())
        return jsonify(serialize_game_response(response))

    except Exception as error:
        logger.error(f"Error getting game state: {error}")
        return jsonify({'error': 'Game not found'}), 404


@app.route('/api/games/<game_id>/moves', methods=['POST'])
def make_move(game_id):
    """Make a move."""
    try:
        data = request.get_json(silent=True) or {}
        actions = [action.value for action in MoveAction]

        # Validate move request
        if not isinstance(data.get('x'), int) or \
           not isinstance(data.get('y'), int) or \
           data.get('action') not in actions:
            return jsonify({'error': 'Invalid move request'}), 400

        move_request = MoveRequest(
            x=data['x'],
            y=data['y'],
            action=MoveAction(data['action']),
        )

        async def execute_move():
            handle = temporal_client.get_workflow_handle(game_id)
            return await handle.execute_update(ModeGameWorkflow.make_move_update, move_request)

        response = asyncio.run(execute_move())
        return jsonify(serialize_game_response(response))

    except Exception as error:
        logger.error(f"Error making move: {error}")
        return jsonify({'error': 'Failed to make move'}), 500


@app.route('/api/games/<game_id>/<action>', methods=['POST'])
def game_action(game_id, action):
    """Continue, undo, redo, next level, next round, hint or restart."""
    update = GAME_ACTIONS.get(action)
    if update is None:
        return jsonify({'error': f'Unknown action: {action}'}), 404

    try:
        async def execute_action():
            handle = temporal_client.get_workflow_handle(game_id)
            return await handle.execute_update(update)

        response = asyncio.run(execute_action())
        return jsonify(serialize_game_response(response))

    except Exception as error:
        logger.error(f"Error running {action}: {error}")
        return jsonify({'error': f'Failed to {action.replace("-", " ")}'}), 500


@app.route('/api/games/<game_id>/history', methods=['GET'])
def get_history(game_id):
    """Undo history statistics for a game."""
    try:
        async def query_history():
            handle = temporal_client.get_workflow_handle(game_id)
            return await query_with_retry(handle, ModeGameWorkflow.get_history_statistics_query)

        stats = asyncio.run(query_history())
        return jsonify({
            'totalStates': stats.total_states,
            'currentIndex': stats.current_index,
            'undoAvailable': stats.undo_available,
            'redoAvailable': stats.redo_available,
            'memoryUsage': stats.memory_usage,
        })

    except Exception as error:
        logger.error(f"Error getting history: {error}")
        return jsonify({'error': 'Game not found'}), 404


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now().isoformat()
    })


async def initialize_client():
    """Initialize Temporal client."""
    global temporal_client
    temporal_client = await get_temporal_client()
    logger.info("Connected to Temporal server")


def main():
    """Start the Flask server."""
    try:
        asyncio.run(initialize_client())

        port = int(os.getenv("PORT", 3000))
        logger.info(f"Minesweeper server running on http://localhost:{port}")
        logger.info("Make sure to start the Temporal worker in another terminal: python -m minesweeper_modes.worker")

        app.run(host='0.0.0.0', port=port, debug=False)

    except Exception as error:
        logger.error(f"Failed to start server: {error}")
        exit(1)


if __name__ == "__main__":
    main()
