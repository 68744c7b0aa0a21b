"""Declarative mode definitions.

A mode is immutable data plus optional strategy callables. Every scoring
formula, custom win/lose predicate and continue benefit is an optional
field; absent fields fall back to the engine defaults.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from minesweeper_modes.types import BoardConfig, GameState, GameStatus

DYNAMIC = 'dynamic'


class ModeCategory(str, Enum):
    """Mode groupings used for listing and pricing."""
    TIME_BASED = 'time-based'
    DIFFICULTY = 'difficulty'
    RELAXED = 'relaxed'
    CHALLENGE = 'challenge'
    CREATIVE = 'creative'


class NumberVisibility(str, Enum):
    """When adjacent-mine numbers are shown."""
    ALWAYS = 'always'
    CONDITIONAL = 'conditional'
    HIDDEN = 'hidden'


@dataclass(frozen=True)
class BoardSize:
    width: int
    height: int


@dataclass(frozen=True)
class ProgressionConfig:
    """Per-level overrides; omitted fields fall back to defaults."""
    width: Optional[int] = None
    height: Optional[int] = None
    mines: Optional[int] = None
    time_limit: Optional[int] = None
    required_accuracy: Optional[float] = None


@dataclass(frozen=True)
class DifficultyProgression:
    start_level: int
    max_level: Optional[int]
    progression: Callable[[int], ProgressionConfig]


@dataclass(frozen=True)
class ModeConfig:
    """Board sizing policy and limits. time_limit is in seconds."""
    board_size: Union[BoardSize, str]
    mine_count: Union[int, str]
    special_rules: List[str] = field(default_factory=list)
    time_limit: Optional[int] = None
    move_limit: Optional[int] = None
    difficulty_progression: Optional[DifficultyProgression] = None


@dataclass(frozen=True)
class CustomGameFlow:
    phases: List[str]
    reveal_duration: Optional[int] = None
    fade_out_animation: bool = False


@dataclass(frozen=True)
class ExtendedGameState:
    """Read-only view of a game handed to custom win/lose predicates."""
    status: GameStatus
    difficulty: str
    flag_count: int
    revealed_count: int
    first_click: bool
    game_mode: str
    level: int
    score: int
    time_elapsed: float
    time_remaining: Optional[int]
    time_limit: Optional[int]
    moves_used: int
    moves_remaining: Optional[int]
    move_limit: Optional[int]
    hit_mine: bool
    game_over: bool
    continue_count: int
    continue_timestamps: List[float]
    config: BoardConfig


Predicate = Callable[[ExtendedGameState], bool]


@dataclass(frozen=True)
class ModeRules:
    allow_flags: bool = True
    reveal_on_mine_click: bool = True
    number_visibility: NumberVisibility = NumberVisibility.ALWAYS
    first_click_safe: bool = True
    cascade_reveal: bool = True
    custom_win_condition: Optional[Predicate] = None
    custom_lose_condition: Optional[Predicate] = None
    custom_game_flow: Optional[CustomGameFlow] = None


@dataclass(frozen=True)
class ScoringFormulas:
    """Optional scoring hooks, folded in a fixed order by calculate_score."""
    base_points: Optional[float] = None
    time_bonus: Optional[Callable[[int], float]] = None
    accuracy_bonus: Optional[Callable[[float], float]] = None
    time_score: Optional[Callable[[int], float]] = None
    round_bonus: Optional[float] = None
    speed_multiplier: Optional[Callable[[int], float]] = None
    combo_multiplier: Optional[Callable[[int], float]] = None
    level_multiplier: Optional[Callable[[int], float]] = None
    streak_bonus: Optional[Callable[[int], float]] = None
    survival_bonus: Optional[Callable[[int, int], float]] = None
    practice_points: Optional[float] = None
    custom_formula: Optional[Callable[[Dict[str, float]], float]] = None
    efficiency_bonus: Optional[Callable[[int], float]] = None
    perfect_bonus: Optional[float] = None
    hardcore_multiplier: Optional[float] = None
    flawless_bonus: Optional[float] = None
    blind_bonus: Optional[float] = None
    deduction_points: Optional[Callable[[int], float]] = None
    memory_accuracy: Optional[Callable[[int], float]] = None
    speed_recall_bonus: Optional[Callable[[int], float]] = None
    pattern_recognition: Optional[Callable[[float], float]] = None
    symmetry_bonus: Optional[float] = None


# Returns the GameState field updates a continue grants for a mode
ContinueBenefit = Callable[[GameState, 'ModeDefinition'], Dict[str, Any]]


@dataclass(frozen=True)
class ModeDefinition:
    id: str
    name: str
    category: ModeCategory
    description: str
    icon: str
    config: ModeConfig
    rules: ModeRules
    scoring: ScoringFormulas
    continue_allowed: bool
    continue_cost: int
    continue_benefit: Optional[ContinueBenefit] = None
    enabled: bool = True

    def has_rule(self, rule: str) -> bool:
        return rule in self.config.special_rules
