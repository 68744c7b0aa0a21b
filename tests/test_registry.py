import dataclasses

from minesweeper_modes.game_modes import ALL_GAME_MODES, CLASSIC_MODE, ZEN_MODE
from minesweeper_modes.mode_types import ModeCategory
from minesweeper_modes.registry import (
    GameModeRegistry,
    get_default_game_mode,
    get_game_mode,
    get_game_mode_or_default,
)


def test_registry_holds_every_mode() -> None:
    registry = GameModeRegistry()
    assert registry.get_modes_count() == len(ALL_GAME_MODES)
    assert registry.get_mode('zen') is ZEN_MODE
    assert registry.get_mode('nope') is None
    assert registry.has_mode('classic-hard')


def test_unknown_mode_falls_back_to_classic() -> None:
    assert get_game_mode_or_default('nope') is CLASSIC_MODE
    assert get_default_game_mode() is CLASSIC_MODE
    assert get_game_mode('time-attack').name == 'Mission: Time Attack'


def test_categories_keep_first_seen_order() -> None:
    assert GameModeRegistry().get_categories() == [
        ModeCategory.RELAXED,
        ModeCategory.TIME_BASED,
        ModeCategory.DIFFICULTY,
        ModeCategory.CHALLENGE,
        ModeCategory.CREATIVE,
    ]


def test_modes_by_category() -> None:
    ids = [mode.id for mode in GameModeRegistry().get_modes_by_category(ModeCategory.CHALLENGE)]
    assert ids == ['limited-moves', 'hardcore', 'blind']


def test_continue_lookup() -> None:
    registry = GameModeRegistry()
    assert registry.can_continue('time-attack')
    assert not registry.can_continue('hardcore')
    assert not registry.can_continue('nope')
    assert registry.get_continue_cost('survival') == 200
    assert registry.get_continue_cost('nope') == 0
    assert all(mode.continue_allowed for mode in registry.get_continuable_modes())


def test_search_is_case_insensitive() -> None:
    registry = GameModeRegistry()
    assert [mode.id for mode in registry.search_modes('PRECISION')] == ['limited-moves']
    assert [mode.id for mode in registry.search_modes('near flags')] == ['blind']
    assert len(registry.search_modes('classic')) == 4


def test_sorting() -> None:
    registry = GameModeRegistry()
    names = [mode.name.lower() for mode in registry.get_sorted_modes('name')]
    assert names == sorted(names)

    costs = [mode.continue_cost for mode in registry.get_sorted_modes('cost')]
    assert costs == sorted(costs)

    by_difficulty = registry.get_sorted_modes('difficulty')
    assert by_difficulty[0].category == ModeCategory.RELAXED
    assert by_difficulty[-1].category == ModeCategory.CREATIVE


def test_disabled_modes_are_hidden_from_listings() -> None:
    hidden = dataclasses.replace(ZEN_MODE, id='hidden-zen', enabled=False)
    registry = GameModeRegistry([ZEN_MODE, hidden])
    assert registry.get_modes_count() == 2
    assert [mode.id for mode in registry.get_enabled_modes()] == ['zen']
    assert registry.search_modes('practice') == [ZEN_MODE]


def test_register_overwrites_and_reload_restores() -> None:
    registry = GameModeRegistry([CLASSIC_MODE])
    registry.register_mode(dataclasses.replace(CLASSIC_MODE, continue_cost=999))
    assert registry.get_modes_count() == 1
    assert registry.get_continue_cost('classic') == 999

    assert registry.unregister_mode('classic')
    assert not registry.unregister_mode('classic')

    registry.reload()
    assert registry.get_continue_cost('classic') == 50

    registry.clear_all()
    assert registry.get_all_modes() == []
