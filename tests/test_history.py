import dataclasses
import json

from minesweeper_modes.board import create_empty_board
from minesweeper_modes.history import UndoRedoManager, create_action_description, create_undo_redo_manager
from minesweeper_modes.types import BoardConfig, GameState, GameStatus, Position


def _state(score: int = 0) -> GameState:
    return GameState(
        board=create_empty_board(3, 3),
        status=GameStatus.PLAYING,
        config=BoardConfig(3, 3, 1),
        game_mode='classic',
        score=score,
    )


def _filled(clock, count: int, max_size: int = 50) -> UndoRedoManager:
    manager = UndoRedoManager(max_size, clock=clock)
    for score in range(count):
        manager.save_state(_state(score), f"move {score}")
        clock.advance(10)
    return manager


def test_undo_then_redo_restores_state(clock) -> None:
    manager = _filled(clock, 4)
    newest = manager.get_current_state()

    for expected in (2, 1, 0):
        assert manager.can_undo()
        assert manager.undo().score == expected
    assert not manager.can_undo()
    assert manager.undo() is None
    assert manager.can_redo()

    for expected in (1, 2, 3):
        assert manager.can_redo()
        assert manager.redo().score == expected
    assert not manager.can_redo()
    assert manager.redo() is None
    assert manager.can_undo()
    assert manager.get_current_state() == newest


def test_cannot_undo_past_first_entry(clock) -> None:
    manager = _filled(clock, 1)
    assert not manager.can_undo()
    assert manager.undo() is None
    assert manager.get_current_state().score == 0


def test_saving_after_undo_discards_redo_branch(clock) -> None:
    manager = _filled(clock, 3)
    manager.undo()
    manager.save_state(_state(99), "branch")
    assert not manager.can_redo()
    assert [entry.action for entry in manager.get_timeline()] == ["move 0", "move 1", "branch"]


def test_snapshots_are_copies(clock) -> None:
    manager = UndoRedoManager(clock=clock)
    state = _state()
    manager.save_state(state, "start")
    state.board[0][0].is_revealed = True
    assert not manager.get_current_state().board[0][0].is_revealed

    restored = manager.get_current_state()
    restored.score = 500
    assert manager.get_current_state().score == 0


def test_oldest_entries_are_evicted(clock) -> None:
    manager = _filled(clock, 5, max_size=3)
    history = manager.get_history()
    assert [snapshot.state.score for snapshot in history] == [2, 3, 4]
    assert manager.get_statistics().current_index == 2


def test_action_labels(clock) -> None:
    manager = _filled(clock, 3)
    assert manager.get_last_action() == "move 2"
    assert manager.get_undo_action() == "move 2"
    assert manager.get_redo_action() is None
    manager.undo()
    assert manager.get_redo_action() == "move 2"


def test_statistics(clock) -> None:
    manager = _filled(clock, 4)
    manager.undo()
    stats = manager.get_statistics()
    assert stats.total_states == 4
    assert stats.current_index == 2
    assert stats.undo_available == 2
    assert stats.redo_available == 1
    assert stats.memory_usage > 0


def test_empty_statistics() -> None:
    stats = create_undo_redo_manager().get_statistics()
    assert stats.total_states == 0
    assert stats.current_index == -1
    assert stats.undo_available == 0
    assert stats.redo_available == 0


def test_jump_to_state(clock) -> None:
    manager = _filled(clock, 4)
    assert manager.jump_to_state(1).score == 1
    assert manager.can_redo()
    assert manager.jump_to_state(10) is None
    assert manager.get_current_state().score == 1


def test_timeline_uses_clock(clock) -> None:
    start = clock()
    manager = _filled(clock, 2)
    assert [entry.timestamp for entry in manager.get_timeline()] == [start, start + 10]


def test_shrinking_history_keeps_newest(clock) -> None:
    manager = _filled(clock, 5)
    manager.set_max_history_size(2)
    assert [snapshot.state.score for snapshot in manager.get_history()] == [3, 4]
    assert manager.get_current_state().score == 4

    manager.set_max_history_size(0)
    assert manager.max_history_size == 1


def test_clear(clock) -> None:
    manager = _filled(clock, 3)
    manager.clear()
    assert manager.get_current_state() is None
    assert manager.get_last_action() is None


def test_export_import_round_trip(clock) -> None:
    manager = _filled(clock, 3)
    manager.undo()
    exported = manager.export_history()

    restored = UndoRedoManager(clock=clock)
    assert restored.import_history(exported)
    assert restored.get_current_state() == manager.get_current_state()
    assert restored.can_redo()


def test_import_honours_cursor_at_zero(clock) -> None:
    payload = json.loads(_filled(clock, 3).export_history())
    payload['currentIndex'] = 0

    manager = UndoRedoManager(clock=clock)
    assert manager.import_history(json.dumps(payload))
    assert manager.get_current_state().score == 0


def test_import_without_cursor_points_at_last_entry(clock) -> None:
    payload = json.loads(_filled(clock, 3).export_history())
    del payload['currentIndex']

    manager = UndoRedoManager(clock=clock)
    assert manager.import_history(json.dumps(payload))
    assert manager.get_current_state().score == 2


def test_failed_import_keeps_existing_history(clock) -> None:
    manager = _filled(clock, 2)
    before = manager.get_current_state()

    assert not manager.import_history("not json")
    assert not manager.import_history(json.dumps({'history': [{'state': {}}]}))

    payload = json.loads(manager.export_history())
    payload['currentIndex'] = 7
    assert not manager.import_history(json.dumps(payload))

    assert manager.get_current_state() == before
    assert manager.get_statistics().total_states == 2


def test_import_rejects_bad_status(clock) -> None:
    payload = json.loads(_filled(clock, 1).export_history())
    payload['history'][0]['state']['status'] = 'exploded'
    assert not UndoRedoManager().import_history(json.dumps(payload))


def test_action_description() -> None:
    assert create_action_description('REVEAL_CELL', Position(0, 4)) == "Revealed cell at (1, 5)"
    assert create_action_description('CONTINUE') == "Used continue"


def test_states_sharing_a_board_are_saved_independently(clock) -> None:
    manager = UndoRedoManager(clock=clock)
    state = _state()
    manager.save_state(state, "start")
    manager.save_state(dataclasses.replace(state, score=10), "scored")
    assert manager.undo().score == 0


def test_import_trims_to_imported_cap(clock) -> None:
    payload = json.loads(_filled(clock, 10).export_history())
    payload['maxHistorySize'] = 3

    manager = UndoRedoManager(3, clock=clock)
    assert manager.import_history(json.dumps(payload))
    assert manager.get_statistics().total_states == 3
    assert [entry.action for entry in manager.get_timeline()] == ["move 7", "move 8", "move 9"]
    assert manager.get_current_state().score == 9

    manager.save_state(_state(10), "move 10")
    assert manager.get_statistics().total_states == 3
