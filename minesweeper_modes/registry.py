"""Registry of the playable game modes."""
import logging
from typing import Dict, List, Optional

from minesweeper_modes.game_modes import ALL_GAME_MODES, DEFAULT_GAME_MODE
from minesweeper_modes.mode_types import ModeCategory, ModeDefinition

logger = logging.getLogger(__name__)

# Rough difficulty order of categories, easiest first
_CATEGORY_DIFFICULTY = {
    ModeCategory.RELAXED: 1,
    ModeCategory.TIME_BASED: 2,
    ModeCategory.DIFFICULTY: 3,
    ModeCategory.CHALLENGE: 4,
    ModeCategory.CREATIVE: 5,
}


class GameModeRegistry:
    """Modes keyed by id, in registration order."""

    def __init__(self, modes: Optional[List[ModeDefinition]] = None):
        self._defaults = list(ALL_GAME_MODES if modes is None else modes)
        self._modes: Dict[str, ModeDefinition] = {}
        self._register_all()

    def _register_all(self) -> None:
        for mode in self._defaults:
            self.register_mode(mode)

    def register_mode(self, mode: ModeDefinition) -> None:
        if mode.id in self._modes:
            logger.warning(f"Game mode {mode.id} already registered. Overwriting.")
        self._modes[mode.id] = mode

    def get_mode(self, mode_id: str) -> Optional[ModeDefinition]:
        return self._modes.get(mode_id)

    def get_mode_or_default(self, mode_id: str) -> ModeDefinition:
        return self._modes.get(mode_id, DEFAULT_GAME_MODE)

    def get_all_modes(self) -> List[ModeDefinition]:
        return list(self._modes.values())

    def get_enabled_modes(self) -> List[ModeDefinition]:
        return [mode for mode in self._modes.values() if mode.enabled]

    def get_modes_by_category(self, category: ModeCategory) -> List[ModeDefinition]:
        return [mode for mode in self.get_enabled_modes() if mode.category == category]

    def get_categories(self) -> List[ModeCategory]:
        categories: List[ModeCategory] = []
        for mode in self.get_enabled_modes():
            if mode.category not in categories:
                categories.append(mode.category)
        return categories

    def can_continue(self, mode_id: str) -> bool:
        mode = self._modes.get(mode_id)
        return mode.continue_allowed if mode is not None else False

    def get_continue_cost(self, mode_id: str) -> int:
        """Base continue cost of a mode, 0 when unknown."""
        mode = self._modes.get(mode_id)
        return mode.continue_cost if mode is not None else 0

    def get_continuable_modes(self) -> List[ModeDefinition]:
        return [mode for mode in self.get_enabled_modes() if mode.continue_allowed]

    def search_modes(self, query: str) -> List[ModeDefinition]:
        """Case-insensitive match on name or description."""
        query = query.lower()
        return [
            mode for mode in self.get_enabled_modes()
            if query in mode.name.lower() or query in mode.description.lower()
        ]

    def has_mode(self, mode_id: str) -> bool:
        return mode_id in self._modes

    def get_modes_count(self) -> int:
        return len(self._modes)

    def get_sorted_modes(self, sort_by: str = 'name') -> List[ModeDefinition]:
        modes = self.get_enabled_modes()
        if sort_by == 'name':
            return sorted(modes, key=lambda mode: mode.name.lower())
        if sort_by == 'difficulty':
            return sorted(modes, key=lambda mode: _CATEGORY_DIFFICULTY[mode.category])
        if sort_by == 'cost':
            return sorted(modes, key=lambda mode: mode.continue_cost)
        return modes

    def unregister_mode(self, mode_id: str) -> bool:
        return self._modes.pop(mode_id, None) is not None

    def clear_all(self) -> None:
        self._modes.clear()

    def reload(self) -> None:
        self.clear_all()
        self._register_all()


game_mode_registry = GameModeRegistry()


def get_game_mode(mode_id: str) -> Optional[ModeDefinition]:
    return game_mode_registry.get_mode(mode_id)


def get_game_mode_or_default(mode_id: str) -> ModeDefinition:
    return game_mode_registry.get_mode_or_default(mode_id)


def get_all_game_modes() -> List[ModeDefinition]:
    return game_mode_registry.get_all_modes()


def get_game_modes_by_category(category: ModeCategory) -> List[ModeDefinition]:
    return game_mode_registry.get_modes_by_category(category)


def get_default_game_mode() -> ModeDefinition:
    return DEFAULT_GAME_MODE
