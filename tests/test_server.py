import random

import pytest

import minesweeper_modes.server as server
from minesweeper_modes.client_provider import get_task_queue
from minesweeper_modes.game_modes import ALL_GAME_MODES, CLASSIC_MODE
from minesweeper_modes.session import GameSession
from minesweeper_modes.types import BoardConfig, MoveAction
from minesweeper_modes.workflows import ModeGameWorkflow


class FakeHandle:
    """Answers queries and updates from a local session instead of a workflow."""

    def __init__(self, client, game_id):
        self.client = client
        self.game_id = game_id

    async def query(self, query):
        if self.game_id in self.client.missing:
            raise RuntimeError(f"workflow {self.game_id} not found")
        session = self.client.session
        if query is ModeGameWorkflow.get_history_statistics_query:
            return session.history.get_statistics()
        return session.response()

    async def execute_update(self, update, arg=None):
        self.client.updates.append((update, arg))
        session = self.client.session
        if update is ModeGameWorkflow.make_move_update:
            session.apply_move(arg)
        return session.response()


class FakeClient:
    def __init__(self):
        self.session = GameSession(CLASSIC_MODE, rng=random.Random(0))
        self.started = []
        self.updates = []
        self.missing = set()

    async def start_workflow(self, workflow, args, id, task_queue):
        self.started.append((workflow, args, id, task_queue))

    def get_workflow_handle(self, game_id):
        return FakeHandle(self, game_id)


@pytest.fixture
def fake_client(monkeypatch) -> FakeClient:
    client = FakeClient()
    monkeypatch.setattr(server, 'temporal_client', client)
    return client


@pytest.fixture
def http():
    return server.app.test_client()


def test_health(http) -> None:
    response = http.get('/api/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'OK'


def test_list_modes(http) -> None:
    modes = http.get('/api/modes').get_json()['modes']
    assert len(modes) == len(ALL_GAME_MODES)
    zen = next(mode for mode in modes if mode['id'] == 'zen')
    assert zen['name'] == 'Training Simulator'
    assert zen['specialRules'] == ['no-game-over', 'hint-system', 'undo-moves']


def test_create_game_validates_input(http, fake_client) -> None:
    assert http.post('/api/games', json={}).status_code == 400
    assert http.post('/api/games', json={'modeId': 7}).status_code == 400
    assert http.post('/api/games', json={'modeId': 'nope'}).status_code == 404

    bad_config = {'modeId': 'custom', 'config': {'width': 'wide', 'height': 10, 'mines': 10}}
    assert http.post('/api/games', json=bad_config).status_code == 400
    assert fake_client.started == []


def test_create_game_starts_workflow(http, fake_client) -> None:
    response = http.post('/api/games', json={'modeId': 'classic'})
    assert response.status_code == 200

    body = response.get_json()
    workflow, args, game_id, task_queue = fake_client.started[0]
    assert workflow is ModeGameWorkflow.run
    assert body['gameId'] == game_id
    assert args[0] == game_id
    assert args[1].mode_id == 'classic'
    assert args[1].custom_config is None
    assert task_queue == get_task_queue()
    assert body['modeId'] == 'classic'
    assert body['gameState']['status'] == 'idle'


def test_create_custom_game_clamps_config(http, fake_client) -> None:
    config = {'width': 100, 'height': 10, 'mines': 30}
    assert http.post('/api/games', json={'modeId': 'custom', 'config': config}).status_code == 200
    assert fake_client.started[0][1][1].custom_config == BoardConfig(50, 10, 30)


def test_move_validation(http, fake_client) -> None:
    assert http.post('/api/games/g1/moves', json={'x': 'a', 'y': 0, 'action': 'reveal'}).status_code == 400
    assert http.post('/api/games/g1/moves', json={'x': 0, 'y': 0, 'action': 'dig'}).status_code == 400
    assert fake_client.updates == []


def test_move_runs_update(http, fake_client) -> None:
    response = http.post('/api/games/g1/moves', json={'x': 3, 'y': 4, 'action': 'reveal'})
    assert response.status_code == 200
    assert not response.get_json()['gameState']['firstClick']

    update, move = fake_client.updates[0]
    assert update is ModeGameWorkflow.make_move_update
    assert (move.x, move.y, move.action) == (3, 4, MoveAction.REVEAL)


def test_game_actions(http, fake_client) -> None:
    assert http.post('/api/games/g1/undo').status_code == 200
    assert fake_client.updates == [(ModeGameWorkflow.undo_update, None)]
    assert http.post('/api/games/g1/explode').status_code == 404


def test_get_game_and_history(http, fake_client) -> None:
    body = http.get('/api/games/g1').get_json()
    assert body['gameState']['config'] == {'width': 16, 'height': 16, 'mines': 40}
    assert body['canUndo'] is False

    stats = http.get('/api/games/g1/history').get_json()
    assert stats['totalStates'] == 1
    assert stats['currentIndex'] == 0


def test_missing_game_is_404(http, fake_client) -> None:
    """Queries are retried before giving up."""
    fake_client.missing.add('gone')
    assert http.get('/api/games/gone').status_code == 404
    assert http.get('/api/games/gone/history').status_code == 404
