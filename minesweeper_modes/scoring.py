"""Scoring engine.

calculate_score folds every formula a mode declares into one integer.
The order of the steps is part of the contract: multipliers compound on
whatever has been accumulated before them.
"""
import math
from dataclasses import dataclass
from typing import Optional

from minesweeper_modes.mode_types import ModeDefinition
from minesweeper_modes.types import GameState, GameStatus


@dataclass
class ScoreCalculationContext:
    game_state: GameState
    game_mode: ModeDefinition
    time_elapsed: float  # milliseconds
    accuracy: float  # 0-1
    perfect_game: bool


@dataclass(frozen=True)
class ScoreRank:
    rank: str
    color: str
    icon: str


def count_correct_flags(state: GameState) -> int:
    """Count the number of correctly placed flags."""
    return sum(1 for row in state.board for cell in row if cell.is_flagged and cell.is_mine)


def calculate_early_flag_accuracy(state: GameState) -> float:
    """Share of flags that are correct.

    Meant to weigh flags placed in the first 30% of moves, but flag timing
    is not tracked, so every flag counts.
    """
    correct_flags = count_correct_flags(state)
    if correct_flags == 0:
        return 0
    return correct_flags / state.flag_count


def calculate_score(context: ScoreCalculationContext) -> int:
    """Calculate the total score for a game session."""
    state = context.game_state
    mode = context.game_mode
    scoring = mode.scoring
    total = 0.0

    if scoring.base_points is not None:
        total += scoring.base_points

    if scoring.time_bonus and state.time_remaining is not None:
        total += scoring.time_bonus(state.time_remaining)

    if scoring.accuracy_bonus and context.accuracy > 0:
        total += scoring.accuracy_bonus(context.accuracy)

    # Speed-run modes score the completion time in whole seconds
    if scoring.time_score:
        total += scoring.time_score(math.floor(context.time_elapsed / 1000))

    if scoring.round_bonus and state.round_number > 0:
        total += scoring.round_bonus * state.round_number

    if scoring.speed_multiplier and state.round_number > 0:
        total *= scoring.speed_multiplier(state.round_number)

    if scoring.combo_multiplier and state.streak > 0:
        total *= scoring.combo_multiplier(state.streak)

    if scoring.level_multiplier and state.level > 0:
        total += scoring.level_multiplier(state.level)

    if scoring.streak_bonus and state.streak > 0:
        total += scoring.streak_bonus(state.streak)

    if scoring.survival_bonus and state.level > 0 and state.time_remaining is not None:
        total += scoring.survival_bonus(state.level, state.time_remaining)

    if scoring.efficiency_bonus and mode.config.move_limit:
        moves_remaining = mode.config.move_limit - state.move_count
        if moves_remaining > 0:
            total += scoring.efficiency_bonus(moves_remaining)

    if scoring.perfect_bonus and context.perfect_game:
        total += scoring.perfect_bonus

    if scoring.hardcore_multiplier:
        total *= scoring.hardcore_multiplier

    if scoring.flawless_bonus and state.continue_count == 0 and context.perfect_game:
        total += scoring.flawless_bonus

    if scoring.blind_bonus:
        total += scoring.blind_bonus

    if scoring.deduction_points:
        total += scoring.deduction_points(count_correct_flags(state))

    # Revealed cells stand in for correct recalls
    if scoring.memory_accuracy:
        total += scoring.memory_accuracy(state.revealed_count)

    if scoring.speed_recall_bonus:
        total += scoring.speed_recall_bonus(math.floor(context.time_elapsed / 1000))

    if scoring.pattern_recognition:
        total += scoring.pattern_recognition(calculate_early_flag_accuracy(state))

    if scoring.symmetry_bonus:
        total += scoring.symmetry_bonus

    if scoring.custom_formula:
        total += scoring.custom_formula({
            'level': state.level,
            'score': total,
            'time': context.time_elapsed,
            'accuracy': context.accuracy,
        })

    return math.floor(total)


def calculate_accuracy(state: GameState) -> float:
    """Calculate accuracy based on correct vs incorrect flags."""
    if state.flag_count == 0:
        return 1.0
    return count_correct_flags(state) / state.flag_count


def is_perfect_game(state: GameState) -> bool:
    """A win with no continues and no misplaced flags."""
    if state.continue_count > 0:
        return False
    if count_correct_flags(state) != state.flag_count:
        return False
    return state.status == GameStatus.WON


def calculate_action_score(action: str, cells_revealed: Optional[int] = None,
                           adjacent_mines: Optional[int] = None, combo_count: Optional[int] = None) -> int:
    """Score increment for a single action, independent of the mode formulas."""
    score = 0

    if action == 'reveal':
        score += 10
        # Cascade bonus
        if cells_revealed and cells_revealed > 1:
            score += cells_revealed * 5
        # Danger bonus for revealing near mines
        if adjacent_mines and adjacent_mines > 0:
            score += adjacent_mines * 2
    elif action == 'flag':
        score += 15
    elif action == 'combo':
        if combo_count:
            score += combo_count * 50

    return score


def format_score(score: int) -> str:
    """Format score for display."""
    if score >= 1000000:
        return f"{score / 1000000:.1f}M"
    if score >= 1000:
        return f"{score / 1000:.1f}K"
    return str(score)


_RANKS = [
    (100000, ScoreRank('LEGENDARY', '#FFD700', '👑')),
    (50000, ScoreRank('MASTER', '#E5E4E2', '💎')),
    (25000, ScoreRank('EXPERT', '#CD7F32', '🏆')),
    (10000, ScoreRank('ADVANCED', '#10f970', '⭐')),
    (5000, ScoreRank('INTERMEDIATE', '#00d4ff', '🎯')),
]

_NOVICE = ScoreRank('NOVICE', '#808080', '🎮')


def get_score_rank(score: int) -> ScoreRank:
    """Map a score onto its rank band."""
    for threshold, rank in _RANKS:
        if score >= threshold:
            return rank
    return _NOVICE


def calculate_level_completion_bonus(level: int, time_elapsed: float, perfect_game: bool) -> int:
    """Bonus for completing a level; time_elapsed in milliseconds."""
    bonus = level * 1000

    seconds = math.floor(time_elapsed / 1000)
    if seconds < 60:
        bonus += 2000
    elif seconds < 120:
        bonus += 1000

    if perfect_game:
        bonus *= 2

    return bonus
