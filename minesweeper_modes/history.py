"""Undo/redo history over full game-state snapshots."""
import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from minesweeper_modes.clock import Clock, system_clock
from minesweeper_modes.serialization import deserialize_game_state, serialize_game_state
from minesweeper_modes.types import GameState, Position

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_SIZE = 50

ACTION_TYPES = {
    'REVEAL_CELL': 'Revealed cell',
    'FLAG_CELL': 'Placed flag',
    'UNFLAG_CELL': 'Removed flag',
    'FIRST_CLICK': 'Started game',
    'RESET': 'Reset game',
    'CONTINUE': 'Used continue',
    'NEXT_LEVEL': 'Advanced to next level',
    'NEXT_ROUND': 'Started next round',
    'HINT_USED': 'Used hint',
}


@dataclass
class GameStateSnapshot:
    state: GameState
    timestamp: float
    action: str


@dataclass
class HistoryStatistics:
    total_states: int
    current_index: int
    undo_available: int
    redo_available: int
    memory_usage: float  # approximate KB


@dataclass
class TimelineEntry:
    index: int
    action: str
    timestamp: float


def create_action_description(action_type: str, position: Optional[Position] = None) -> str:
    """Action label, with 1-based coordinates when a position is given."""
    action = ACTION_TYPES[action_type]
    if position is not None:
        return f"{action} at ({position.x + 1}, {position.y + 1})"
    return action


class UndoRedoManager:
    """Linear history with a cursor; saving after an undo discards the redo branch."""

    def __init__(self, max_history_size: int = DEFAULT_MAX_HISTORY_SIZE, clock: Optional[Clock] = None):
        self._history: List[GameStateSnapshot] = []
        self._current_index = -1
        self._max_history_size = max(1, max_history_size)
        self._clock = clock or system_clock

    @property
    def max_history_size(self) -> int:
        return self._max_history_size

    def save_state(self, state: GameState, action: str) -> None:
        """Save a copy of the state to history."""
        # Remove any future states if we're not at the end
        if self._current_index < len(self._history) - 1:
            del self._history[self._current_index + 1:]

        self._history.append(GameStateSnapshot(
            state=copy.deepcopy(state),
            timestamp=self._clock(),
            action=action,
        ))
        self._current_index += 1

        if len(self._history) > self._max_history_size:
            self._history.pop(0)
            self._current_index -= 1

    def undo(self) -> Optional[GameState]:
        if not self.can_undo():
            return None
        self._current_index -= 1
        return copy.deepcopy(self._history[self._current_index].state)

    def redo(self) -> Optional[GameState]:
        if not self.can_redo():
            return None
        self._current_index += 1
        return copy.deepcopy(self._history[self._current_index].state)

    def can_undo(self) -> bool:
        return self._current_index > 0

    def can_redo(self) -> bool:
        return self._current_index < len(self._history) - 1

    def _in_range(self) -> bool:
        return 0 <= self._current_index < len(self._history)

    def get_current_state(self) -> Optional[GameState]:
        if not self._in_range():
            return None
        return copy.deepcopy(self._history[self._current_index].state)

    def get_last_action(self) -> Optional[str]:
        if not self._in_range():
            return None
        return self._history[self._current_index].action

    def get_undo_action(self) -> Optional[str]:
        """Label of the entry an undo would step away from."""
        if not self.can_undo():
            return None
        return self._history[self._current_index].action

    def get_redo_action(self) -> Optional[str]:
        if not self.can_redo():
            return None
        return self._history[self._current_index + 1].action

    def clear(self) -> None:
        self._history = []
        self._current_index = -1

    def get_statistics(self) -> HistoryStatistics:
        """Counts plus the approximate size of the serialized history."""
        memory_usage = round(len(json.dumps(self._history_payload())) / 1024, 2)
        return HistoryStatistics(
            total_states=len(self._history),
            current_index=self._current_index,
            undo_available=max(0, self._current_index),
            redo_available=len(self._history) - 1 - self._current_index,
            memory_usage=memory_usage,
        )

    def get_history(self) -> List[GameStateSnapshot]:
        return [
            GameStateSnapshot(state=copy.deepcopy(s.state), timestamp=s.timestamp, action=s.action)
            for s in self._history
        ]

    def jump_to_state(self, index: int) -> Optional[GameState]:
        if index < 0 or index >= len(self._history):
            return None
        self._current_index = index
        return copy.deepcopy(self._history[index].state)

    def get_timeline(self) -> List[TimelineEntry]:
        return [
            TimelineEntry(index=i, action=s.action, timestamp=s.timestamp)
            for i, s in enumerate(self._history)
        ]

    def set_max_history_size(self, size: int) -> None:
        """Change the cap, evicting the oldest entries if needed."""
        self._max_history_size = max(1, size)
        if len(self._history) > self._max_history_size:
            trim = len(self._history) - self._max_history_size
            self._history = self._history[trim:]
            self._current_index = max(0, self._current_index - trim)

    def _history_payload(self) -> List[Dict[str, Any]]:
        return [
            {'state': serialize_game_state(s.state), 'timestamp': s.timestamp, 'action': s.action}
            for s in self._history
        ]

    def export_history(self) -> str:
        """Export history to JSON for saving."""
        return json.dumps({
            'history': self._history_payload(),
            'currentIndex': self._current_index,
            'maxHistorySize': self._max_history_size,
        })

    def import_history(self, payload: str) -> bool:
        """Restore an exported history. Returns False and keeps the current one on bad input."""
        try:
            data = json.loads(payload)
            history = [
                GameStateSnapshot(
                    state=deserialize_game_state(entry['state']),
                    timestamp=float(entry['timestamp']),
                    action=str(entry['action']),
                )
                for entry in data.get('history', [])
            ]
            current_index = data.get('currentIndex')
            current_index = len(history) - 1 if current_index is None else int(current_index)
            max_size = int(data.get('maxHistorySize') or DEFAULT_MAX_HISTORY_SIZE)
        except (ValueError, KeyError, TypeError, AttributeError) as error:
            logger.error(f"Failed to import history: {error}")
            return False

        if not -1 <= current_index < len(history):
            logger.error(f"Failed to import history: cursor {current_index} outside {len(history)} entries")
            return False

        self._history = history
        self._current_index = current_index
        self.set_max_history_size(max_size)
        return True


def create_undo_redo_manager(max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
                             clock: Optional[Clock] = None) -> UndoRedoManager:
    return UndoRedoManager(max_history_size=max_history_size, clock=clock)
