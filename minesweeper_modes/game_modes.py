"""Game mode catalog.

Every playable mode is declared here as an immutable ModeDefinition.
"""
import math
from typing import Any, Dict, List

from minesweeper_modes.mode_types import (
    DYNAMIC,
    BoardSize,
    ContinueBenefit,
    CustomGameFlow,
    DifficultyProgression,
    ExtendedGameState,
    ModeCategory,
    ModeConfig,
    ModeDefinition,
    ModeRules,
    NumberVisibility,
    ProgressionConfig,
    ScoringFormulas,
)
from minesweeper_modes.types import GameState


# ============================================================================
# CONTINUE BENEFITS
# ============================================================================

def refund_moves(moves: int) -> ContinueBenefit:
    """Give back spent moves on continue (move-limited modes)."""
    def benefit(state: GameState, mode: ModeDefinition) -> Dict[str, Any]:
        if not mode.config.move_limit:
            return {}
        return {'move_count': max(0, state.move_count - moves)}
    return benefit


def add_time(seconds: int) -> ContinueBenefit:
    """Extend the countdown on continue."""
    def benefit(state: GameState, mode: ModeDefinition) -> Dict[str, Any]:
        if state.time_remaining is None:
            return {}
        return {'time_remaining': state.time_remaining + seconds}
    return benefit


def reset_timer(default_seconds: int) -> ContinueBenefit:
    """Restart the round countdown from the mode's time limit."""
    def benefit(state: GameState, mode: ModeDefinition) -> Dict[str, Any]:
        return {'time_remaining': mode.config.time_limit or default_seconds}
    return benefit


# ============================================================================
# CUSTOM LOSE CONDITIONS
# ============================================================================

def _out_of_time_or_mine(state: ExtendedGameState) -> bool:
    return (state.time_remaining is not None and state.time_remaining <= 0) or state.hit_mine


def _out_of_moves_or_mine(state: ExtendedGameState) -> bool:
    return (state.move_limit is not None and state.moves_used >= state.move_limit) or state.hit_mine


def _endless_progression(level: int) -> ProgressionConfig:
    return ProgressionConfig(
        width=min(8 + level * 2, 30),
        height=min(8 + level * 2, 20),
        mines=math.floor(10 + level * 5 * math.pow(1.2, level)),
    )


def _survival_progression(level: int) -> ProgressionConfig:
    return ProgressionConfig(
        time_limit=max(30, 180 - level * 10),
        mines=30 + level * 3,
        required_accuracy=0.7 + level * 0.02,
    )


_STANDARD_RULES = ModeRules()


# ============================================================================
# TIME-BASED MODES
# ============================================================================

TIME_ATTACK_MODE = ModeDefinition(
    id='time-attack',
    name='Mission: Time Attack',
    category=ModeCategory.TIME_BASED,
    description='Defuse all bombs before time runs out!',
    icon='⏱️💣',
    config=ModeConfig(
        board_size=BoardSize(16, 16),
        mine_count=40,
        time_limit=300,
        special_rules=['timer-countdown', 'time-pressure-visuals'],
    ),
    rules=ModeRules(custom_lose_condition=_out_of_time_or_mine),
    scoring=ScoringFormulas(
        base_points=1000,
        time_bonus=lambda time_remaining: time_remaining * 10,
        accuracy_bonus=lambda accuracy: accuracy * 500,
    ),
    continue_allowed=True,
    continue_cost=100,
    continue_benefit=add_time(60),
)

SPEED_RUN_MODE = ModeDefinition(
    id='speed-run',
    name='Operation: Speed Run',
    category=ModeCategory.TIME_BASED,
    description='Complete standard missions as fast as possible!',
    icon='🏃💨',
    config=ModeConfig(
        board_size=BoardSize(16, 16),
        mine_count=40,
        special_rules=['global-leaderboard', 'replay-recording'],
    ),
    rules=_STANDARD_RULES,
    scoring=ScoringFormulas(
        base_points=0,
        time_score=lambda completion_time: max(0, 100000 - completion_time * 100),
    ),
    continue_allowed=False,
    continue_cost=0,
)

TIMED_ROUNDS_MODE = ModeDefinition(
    id='timed-rounds',
    name='Rapid Deployment',
    category=ModeCategory.TIME_BASED,
    description='Multiple quick missions in succession!',
    icon='🔄⚡',
    config=ModeConfig(
        board_size=BoardSize(8, 8),
        mine_count=10,
        time_limit=60,
        special_rules=['multi-round', 'score-accumulation'],
    ),
    rules=_STANDARD_RULES,
    scoring=ScoringFormulas(
        round_bonus=500,
        speed_multiplier=lambda round_number: 1 + round_number * 0.5,
        combo_multiplier=lambda streak: 1 + streak * 0.25,
    ),
    continue_allowed=True,
    continue_cost=50,
    continue_benefit=reset_timer(60),
)

# ============================================================================
# DIFFICULTY PROGRESSION MODES
# ============================================================================

ENDLESS_MODE = ModeDefinition(
    id='endless',
    name='Infinite Protocol',
    category=ModeCategory.DIFFICULTY,
    description='Missions get harder with each success!',
    icon='♾️📈',
    config=ModeConfig(
        board_size=DYNAMIC,
        mine_count=DYNAMIC,
        special_rules=['progressive-difficulty', 'endless-gameplay'],
        difficulty_progression=DifficultyProgression(
            start_level=1,
            max_level=None,
            progression=_endless_progression,
        ),
    ),
    rules=_STANDARD_RULES,
    scoring=ScoringFormulas(
        level_multiplier=lambda level: level * 1000,
        streak_bonus=lambda consecutive_wins: consecutive_wins * 500,
    ),
    continue_allowed=True,
    continue_cost=150,
)

SURVIVAL_MODE = ModeDefinition(
    id='survival',
    name='Pressure Chamber',
    category=ModeCategory.DIFFICULTY,
    description='Time decreases, pressure increases!',
    icon='🎯💀',
    config=ModeConfig(
        board_size=BoardSize(16, 16),
        mine_count=DYNAMIC,
        time_limit=180,
        special_rules=['decreasing-time', 'increasing-difficulty'],
        difficulty_progression=DifficultyProgression(
            start_level=1,
            max_level=20,
            progression=_survival_progression,
        ),
    ),
    rules=_STANDARD_RULES,
    scoring=ScoringFormulas(
        survival_bonus=lambda level, time_left: level * 1000 + time_left * 10,
    ),
    continue_allowed=True,
    continue_cost=200,
    continue_benefit=add_time(60),
)

# ============================================================================
# RELAXED/LEARNING MODES
# ============================================================================

ZEN_MODE = ModeDefinition(
    id='zen',
    name='Training Simulator',
    category=ModeCategory.RELAXED,
    description='Practice without consequences',
    icon='🧘☮️',
    config=ModeConfig(
        board_size=BoardSize(16, 16),
        mine_count=40,
        special_rules=['no-game-over', 'hint-system', 'undo-moves'],
    ),
    rules=ModeRules(reveal_on_mine_click=False),
    scoring=ScoringFormulas(practice_points=0),
    continue_allowed=False,
    continue_cost=0,
)

CUSTOM_MODE = ModeDefinition(
    id='custom',
    name='Custom Protocol',
    category=ModeCategory.RELAXED,
    description='Configure your own mission parameters',
    icon='⚙️🎮',
    config=ModeConfig(
        board_size=DYNAMIC,
        mine_count=DYNAMIC,
        special_rules=['user-configurable'],
    ),
    rules=_STANDARD_RULES,
    scoring=ScoringFormulas(custom_formula=lambda params: sum(params.values())),
    continue_allowed=True,
    continue_cost=75,
)

# ============================================================================
# CHALLENGE MODES
# ============================================================================

LIMITED_MOVES_MODE = ModeDefinition(
    id='limited-moves',
    name='Tactical Precision',
    category=ModeCategory.CHALLENGE,
    description='Every click counts!',
    icon='🎯🔢',
    config=ModeConfig(
        board_size=BoardSize(12, 12),
        mine_count=25,
        move_limit=50,
        special_rules=['move-counter', 'efficiency-tracking'],
    ),
    rules=ModeRules(custom_lose_condition=_out_of_moves_or_mine),
    scoring=ScoringFormulas(
        efficiency_bonus=lambda moves_remaining: moves_remaining * 100,
        perfect_bonus=5000,
    ),
    continue_allowed=True,
    continue_cost=125,
    continue_benefit=refund_moves(10),
)

HARDCORE_MODE = ModeDefinition(
    id='hardcore',
    name='No Margin for Error',
    category=ModeCategory.CHALLENGE,
    description='One mistake = Mission Failed',
    icon='💀⚠️',
    config=ModeConfig(
        board_size=BoardSize(20, 20),
        mine_count=80,
        special_rules=['no-mistakes', 'tension-audio', 'dramatic-visuals'],
    ),
    rules=_STANDARD_RULES,
    scoring=ScoringFormulas(hardcore_multiplier=5, flawless_bonus=10000),
    continue_allowed=False,
    continue_cost=0,
)

BLIND_MODE = ModeDefinition(
    id='blind',
    name='Dark Operations',
    category=ModeCategory.CHALLENGE,
    description='Numbers only visible near flags',
    icon='🕶️❓',
    config=ModeConfig(
        board_size=BoardSize(10, 10),
        mine_count=15,
        special_rules=['limited-visibility', 'flag-reveals-numbers'],
    ),
    rules=ModeRules(number_visibility=NumberVisibility.CONDITIONAL, cascade_reveal=False),
    scoring=ScoringFormulas(
        blind_bonus=3000,
        deduction_points=lambda correct_flags: correct_flags * 200,
    ),
    continue_allowed=True,
    continue_cost=150,
)

# ============================================================================
# CREATIVE MODES
# ============================================================================

MEMORY_MODE = ModeDefinition(
    id='memory',
    name='Photographic Memory',
    category=ModeCategory.CREATIVE,
    description='Remember before it disappears!',
    icon='🧠💭',
    config=ModeConfig(
        board_size=BoardSize(8, 8),
        mine_count=12,
        special_rules=['temporary-reveal', 'memory-phase', 'recall-phase'],
    ),
    rules=ModeRules(
        cascade_reveal=False,
        custom_game_flow=CustomGameFlow(
            phases=['reveal', 'memorize', 'play'],
            reveal_duration=5000,
            fade_out_animation=True,
        ),
    ),
    scoring=ScoringFormulas(
        memory_accuracy=lambda correct_recalls: correct_recalls * 300,
        speed_recall_bonus=lambda time_to_complete: max(0, 5000 - time_to_complete * 10),
    ),
    continue_allowed=True,
    continue_cost=100,
)

PATTERN_MODE = ModeDefinition(
    id='pattern',
    name='Geometric Protocol',
    category=ModeCategory.CREATIVE,
    description='Mines follow patterns!',
    icon='🔷📐',
    config=ModeConfig(
        board_size=BoardSize(15, 15),
        mine_count=DYNAMIC,
        special_rules=['pattern-generation', 'symmetry-hints'],
    ),
    rules=ModeRules(first_click_safe=False),
    scoring=ScoringFormulas(
        pattern_recognition=lambda early_flag_accuracy: early_flag_accuracy * 1000,
        symmetry_bonus=2000,
    ),
    continue_allowed=True,
    continue_cost=100,
)

# ============================================================================
# CLASSIC MODES
# ============================================================================


def _classic(mode_id: str, name: str, description: str, width: int, height: int, mines: int,
             base_points: int, time_factor: int, continue_cost: int) -> ModeDefinition:
    return ModeDefinition(
        id=mode_id,
        name=name,
        category=ModeCategory.RELAXED,
        description=description,
        icon='🎮💎',
        config=ModeConfig(board_size=BoardSize(width, height), mine_count=mines),
        rules=_STANDARD_RULES,
        scoring=ScoringFormulas(
            base_points=base_points,
            time_bonus=lambda time_remaining: time_remaining * time_factor,
        ),
        continue_allowed=True,
        continue_cost=continue_cost,
    )


CLASSIC_MODE_EASY = _classic(
    'classic-easy', 'Classic Mission (Easy)', 'Original minesweeper experience - Easy difficulty',
    8, 8, 10, base_points=500, time_factor=3, continue_cost=25,
)
CLASSIC_MODE_MEDIUM = _classic(
    'classic-medium', 'Classic Mission (Medium)', 'Original minesweeper experience - Medium difficulty',
    16, 16, 40, base_points=1000, time_factor=5, continue_cost=50,
)
CLASSIC_MODE_HARD = _classic(
    'classic-hard', 'Classic Mission (Hard)', 'Original minesweeper experience - Hard difficulty',
    30, 16, 99, base_points=2000, time_factor=10, continue_cost=100,
)
CLASSIC_MODE = _classic(
    'classic', 'Classic Mission', 'Original minesweeper experience',
    16, 16, 40, base_points=1000, time_factor=5, continue_cost=50,
)

# ============================================================================
# ALL GAME MODES
# ============================================================================

ALL_GAME_MODES: List[ModeDefinition] = [
    CLASSIC_MODE,
    CLASSIC_MODE_EASY,
    CLASSIC_MODE_MEDIUM,
    CLASSIC_MODE_HARD,
    TIME_ATTACK_MODE,
    SPEED_RUN_MODE,
    TIMED_ROUNDS_MODE,
    ENDLESS_MODE,
    SURVIVAL_MODE,
    ZEN_MODE,
    CUSTOM_MODE,
    LIMITED_MOVES_MODE,
    HARDCORE_MODE,
    BLIND_MODE,
    MEMORY_MODE,
    PATTERN_MODE,
]

DEFAULT_GAME_MODE = CLASSIC_MODE
