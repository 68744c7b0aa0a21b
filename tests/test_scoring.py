import dataclasses

from conftest import mined_board

from minesweeper_modes.board import toggle_flag
from minesweeper_modes.game_modes import CLASSIC_MODE, HARDCORE_MODE, PATTERN_MODE, SPEED_RUN_MODE
from minesweeper_modes.mode_types import ScoringFormulas
from minesweeper_modes.scoring import (
    ScoreCalculationContext,
    calculate_accuracy,
    calculate_action_score,
    calculate_early_flag_accuracy,
    calculate_level_completion_bonus,
    calculate_score,
    format_score,
    get_score_rank,
    is_perfect_game,
)
from minesweeper_modes.types import BoardConfig, GameState, GameStatus


def _state(**changes) -> GameState:
    board = mined_board(4, 4, [(0, 0), (3, 3)])
    state = GameState(board=board, status=GameStatus.WON, config=BoardConfig(4, 4, 2), game_mode='test')
    return dataclasses.replace(state, **changes)


def _context(mode, state, time_elapsed=0.0, accuracy=1.0, perfect=False) -> ScoreCalculationContext:
    return ScoreCalculationContext(
        game_state=state, game_mode=mode, time_elapsed=time_elapsed, accuracy=accuracy, perfect_game=perfect,
    )


def test_combo_multiplier_applies_to_base_points() -> None:
    mode = dataclasses.replace(
        CLASSIC_MODE,
        scoring=ScoringFormulas(base_points=100, combo_multiplier=lambda n: 1 + 0.1 * n),
    )
    assert calculate_score(_context(mode, _state(streak=3))) == 130


def test_score_is_deterministic() -> None:
    context = _context(CLASSIC_MODE, _state(time_remaining=42, streak=2), time_elapsed=12345)
    assert len({calculate_score(context) for _ in range(5)}) == 1


def test_time_bonus_needs_time_remaining() -> None:
    assert calculate_score(_context(CLASSIC_MODE, _state())) == 1000
    assert calculate_score(_context(CLASSIC_MODE, _state(time_remaining=10))) == 1050


def test_speed_run_scores_whole_seconds() -> None:
    assert calculate_score(_context(SPEED_RUN_MODE, _state(), time_elapsed=12999)) == 100000 - 1200


def test_hardcore_multiplier_and_flawless_bonus() -> None:
    state = _state()
    assert calculate_score(_context(HARDCORE_MODE, state, perfect=True)) == 10000
    assert calculate_score(_context(HARDCORE_MODE, state, perfect=False)) == 0


def test_multipliers_compound_in_order() -> None:
    """round bonus, then speed multiplier, then combo multiplier."""
    mode = dataclasses.replace(
        CLASSIC_MODE,
        scoring=ScoringFormulas(
            round_bonus=500,
            speed_multiplier=lambda r: 1 + r * 0.5,
            combo_multiplier=lambda s: 1 + s * 0.25,
        ),
    )
    assert calculate_score(_context(mode, _state(round_number=2, streak=2))) == 3000


def test_early_flag_accuracy_equals_flag_accuracy() -> None:
    """Documented behaviour: flag timing is not tracked, so every flag counts."""
    board = toggle_flag(toggle_flag(_state().board, 0, 0), 1, 1)
    state = _state(board=board, flag_count=2)
    assert calculate_early_flag_accuracy(state) == 0.5
    assert calculate_early_flag_accuracy(state) == calculate_accuracy(state)
    assert calculate_early_flag_accuracy(_state()) == 0


def test_pattern_recognition_uses_flag_accuracy() -> None:
    board = toggle_flag(_state().board, 0, 0)
    state = _state(board=board, flag_count=1)
    assert calculate_score(_context(PATTERN_MODE, state)) == 1000 + 2000


def test_accuracy_without_flags_is_perfect() -> None:
    assert calculate_accuracy(_state()) == 1.0


def test_perfect_game_requires_no_continues() -> None:
    assert is_perfect_game(_state())
    assert not is_perfect_game(_state(continue_count=1))
    assert not is_perfect_game(_state(status=GameStatus.LOST))

    wrong_flag = toggle_flag(_state().board, 1, 1)
    assert not is_perfect_game(_state(board=wrong_flag, flag_count=1))


def test_action_scores() -> None:
    assert calculate_action_score('reveal', cells_revealed=1, adjacent_mines=0) == 10
    assert calculate_action_score('reveal', cells_revealed=6, adjacent_mines=0) == 40
    assert calculate_action_score('reveal', cells_revealed=1, adjacent_mines=3) == 16
    assert calculate_action_score('flag') == 15
    assert calculate_action_score('unflag') == 0
    assert calculate_action_score('combo', combo_count=2) == 100


def test_level_completion_bonus() -> None:
    assert calculate_level_completion_bonus(2, 45000, False) == 4000
    assert calculate_level_completion_bonus(2, 90000, False) == 3000
    assert calculate_level_completion_bonus(2, 200000, True) == 4000


def test_format_and_rank() -> None:
    assert format_score(950) == '950'
    assert format_score(12345) == '12.3K'
    assert format_score(2500000) == '2.5M'
    assert get_score_rank(100000).rank == 'LEGENDARY'
    assert get_score_rank(7000).rank == 'INTERMEDIATE'
    assert get_score_rank(10).rank == 'NOVICE'
