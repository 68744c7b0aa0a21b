import random

import pytest

from minesweeper_modes.board import safe_zone
from minesweeper_modes.patterns import (
    PatternGenerator,
    PatternType,
    create_pattern_generator,
    get_random_pattern_type,
)
from minesweeper_modes.types import BoardConfig, Position


@pytest.mark.parametrize('pattern_type', list(PatternType), ids=lambda p: p.value)
def test_every_pattern_hits_the_mine_count(pattern_type) -> None:
    excluded = safe_zone(Position(8, 8), 16, 16)
    generator = PatternGenerator(BoardConfig(16, 16, 40), rng=random.Random(5), excluded=excluded)
    positions = generator.generate_pattern(pattern_type)

    coords = {(p.x, p.y) for p in positions}
    assert len(positions) == 40
    assert len(coords) == 40
    assert not coords & excluded
    assert all(0 <= x < 16 and 0 <= y < 16 for x, y in coords)


def test_crowded_board_returns_every_free_cell() -> None:
    excluded = safe_zone(Position(2, 2), 5, 5)
    generator = create_pattern_generator(BoardConfig(5, 5, 24), rng=random.Random(1), excluded=excluded)
    assert len(generator.generate_pattern(PatternType.PERIMETER)) == 16


def test_seeded_generator_is_repeatable() -> None:
    first = PatternGenerator(BoardConfig(12, 12, 20), rng=random.Random(9)).generate_random_pattern()
    second = PatternGenerator(BoardConfig(12, 12, 20), rng=random.Random(9)).generate_random_pattern()
    assert first == second


def test_checkerboard_is_trimmed_to_target() -> None:
    positions = PatternGenerator(BoardConfig(8, 8, 10), rng=random.Random(2)).generate_pattern(
        PatternType.CHECKERBOARD,
    )
    assert len(positions) == 10
    assert all((p.x + p.y) % 2 == 0 for p in positions)


def test_random_pattern_type_and_description() -> None:
    pattern_type = get_random_pattern_type(random.Random(4))
    assert pattern_type not in (PatternType.CHECKERBOARD, PatternType.PERIMETER, PatternType.RANDOM_CLUSTERS)
    assert PatternGenerator.get_pattern_description(PatternType.PERIMETER) == 'Mines around the edges'
