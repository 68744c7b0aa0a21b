"""Mine layouts with recognizable shapes for pattern mode."""
import logging
import math
import random
from enum import Enum
from typing import List, Optional, Set, Tuple

from minesweeper_modes.types import BoardConfig, Position

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]


class PatternType(str, Enum):
    HORIZONTAL_LINE = 'horizontal_line'
    VERTICAL_LINE = 'vertical_line'
    DIAGONAL_LINE = 'diagonal_line'
    SQUARE = 'square'
    DIAMOND = 'diamond'
    CROSS = 'cross'
    CIRCLE = 'circle'
    CHECKERBOARD = 'checkerboard'
    SYMMETRY_HORIZONTAL = 'symmetry_horizontal'
    SYMMETRY_VERTICAL = 'symmetry_vertical'
    SYMMETRY_DIAGONAL = 'symmetry_diagonal'
    SPIRAL = 'spiral'
    PERIMETER = 'perimeter'
    RANDOM_CLUSTERS = 'random_clusters'


_DESCRIPTIONS = {
    PatternType.HORIZONTAL_LINE: 'Mines arranged in horizontal lines',
    PatternType.VERTICAL_LINE: 'Mines arranged in vertical lines',
    PatternType.DIAGONAL_LINE: 'Mines arranged diagonally',
    PatternType.SQUARE: 'Mines forming square patterns',
    PatternType.DIAMOND: 'Mines forming diamond patterns',
    PatternType.CROSS: 'Mines forming cross patterns',
    PatternType.CIRCLE: 'Mines forming circular patterns',
    PatternType.CHECKERBOARD: 'Mines in checkerboard pattern',
    PatternType.SYMMETRY_HORIZONTAL: 'Mines with horizontal symmetry',
    PatternType.SYMMETRY_VERTICAL: 'Mines with vertical symmetry',
    PatternType.SYMMETRY_DIAGONAL: 'Mines with diagonal symmetry',
    PatternType.SPIRAL: 'Mines in spiral pattern',
    PatternType.PERIMETER: 'Mines around the edges',
    PatternType.RANDOM_CLUSTERS: 'Mines in random clusters',
}

# Shapes picked by generate_random_pattern
_BASIC_PATTERNS = [
    PatternType.HORIZONTAL_LINE,
    PatternType.VERTICAL_LINE,
    PatternType.DIAGONAL_LINE,
    PatternType.SQUARE,
    PatternType.DIAMOND,
    PatternType.CROSS,
]

# Shapes picked by get_random_pattern_type
_RANDOM_PATTERNS = _BASIC_PATTERNS + [
    PatternType.CIRCLE,
    PatternType.SYMMETRY_HORIZONTAL,
    PatternType.SYMMETRY_VERTICAL,
    PatternType.SYMMETRY_DIAGONAL,
    PatternType.SPIRAL,
]


class PatternGenerator:
    """Builds mine positions for a board config.

    Every layout is trimmed or topped up to exactly config.mines positions
    (fewer only when the board has no room left).
    """

    def __init__(self, config: BoardConfig, rng: Optional[random.Random] = None,
                 excluded: Optional[Set[Coord]] = None):
        self.width = config.width
        self.height = config.height
        self.target_mine_count = config.mines
        self.rng = rng or random.Random()
        self.excluded = set(excluded or ())

    def generate_pattern(self, pattern_type: PatternType) -> List[Position]:
        generators = {
            PatternType.HORIZONTAL_LINE: self._horizontal_lines,
            PatternType.VERTICAL_LINE: self._vertical_lines,
            PatternType.DIAGONAL_LINE: self._diagonal_lines,
            PatternType.SQUARE: self._squares,
            PatternType.DIAMOND: self._diamonds,
            PatternType.CROSS: self._crosses,
            PatternType.CIRCLE: self._circles,
            PatternType.CHECKERBOARD: self._checkerboard,
            PatternType.SYMMETRY_HORIZONTAL: self._horizontal_symmetry,
            PatternType.SYMMETRY_VERTICAL: self._vertical_symmetry,
            PatternType.SYMMETRY_DIAGONAL: self._diagonal_symmetry,
            PatternType.SPIRAL: self._spiral,
            PatternType.PERIMETER: self._perimeter,
            PatternType.RANDOM_CLUSTERS: self._random_clusters,
        }
        positions = generators[PatternType(pattern_type)]()
        logger.debug(f"Pattern {pattern_type} produced {len(positions)} candidate mines")
        return self._adjust_mine_count(positions)

    def generate_random_pattern(self) -> List[Position]:
        return self.generate_pattern(self.rng.choice(_BASIC_PATTERNS))

    def _horizontal_lines(self) -> List[Coord]:
        spacing = max(2, self.height // 5)
        return [(x, y) for y in range(spacing, self.height, spacing) for x in range(self.width)]

    def _vertical_lines(self) -> List[Coord]:
        spacing = max(2, self.width // 5)
        return [(x, y) for x in range(spacing, self.width, spacing) for y in range(self.height)]

    def _diagonal_lines(self) -> List[Coord]:
        side = min(self.width, self.height)
        positions = [(i, i) for i in range(side)]
        positions.extend((i, self.height - 1 - i) for i in range(side))

        # Parallel diagonals every third cell
        for offset in range(3, max(self.width, self.height), 3):
            for i in range(side):
                if i + offset < self.width:
                    positions.append((i + offset, i))
                if i + offset < self.height:
                    positions.append((i, i + offset))
        return positions

    def _squares(self) -> List[Coord]:
        positions = []
        size = max(3, min(self.width, self.height) // 4)
        spacing = size + 2
        for start_y in range(1, self.height - size, spacing):
            for start_x in range(1, self.width - size, spacing):
                for x in range(start_x, start_x + size):
                    positions.append((x, start_y))
                    positions.append((x, start_y + size - 1))
                for y in range(start_y, start_y + size):
                    positions.append((start_x, y))
                    positions.append((start_x + size - 1, y))
        return positions

    def _rings(self, on_ring) -> List[Coord]:
        center_x, center_y = self.width // 2, self.height // 2
        max_radius = min(self.width, self.height) // 3
        positions = []
        for radius in range(2, max_radius + 1, 3):
            for x in range(self.width):
                for y in range(self.height):
                    if on_ring(x - center_x, y - center_y, radius):
                        positions.append((x, y))
        return positions

    def _diamonds(self) -> List[Coord]:
        return self._rings(lambda dx, dy, r: abs(dx) + abs(dy) == r)

    def _circles(self) -> List[Coord]:
        return self._rings(lambda dx, dy, r: abs(math.sqrt(dx * dx + dy * dy) - r) < 0.6)

    def _crosses(self) -> List[Coord]:
        center_x, center_y = self.width // 2, self.height // 2
        quarter_x = self.width // 4
        positions = [(center_x, y) for y in range(self.height)]
        positions.extend((x, center_y) for x in range(self.width))
        for y in range(self.height):
            positions.append((quarter_x, y))
            positions.append((self.width - quarter_x - 1, y))
        return positions

    def _checkerboard(self) -> List[Coord]:
        return [(x, y) for y in range(self.height) for x in range(self.width) if (x + y) % 2 == 0]

    def _horizontal_symmetry(self) -> List[Coord]:
        positions = []
        half_height = max(1, self.height // 2)
        for _ in range(self.target_mine_count // 2):
            x = self.rng.randrange(self.width)
            y = self.rng.randrange(half_height)
            positions.append((x, y))
            positions.append((x, self.height - 1 - y))
        return positions

    def _vertical_symmetry(self) -> List[Coord]:
        positions = []
        half_width = max(1, self.width // 2)
        for _ in range(self.target_mine_count // 2):
            x = self.rng.randrange(half_width)
            y = self.rng.randrange(self.height)
            positions.append((x, y))
            positions.append((self.width - 1 - x, y))
        return positions

    def _diagonal_symmetry(self) -> List[Coord]:
        positions = []
        for _ in range(self.target_mine_count // 2):
            x = self.rng.randrange(self.width)
            y = self.rng.randrange(self.height)
            positions.append((x, y))
            # Mirror across the main diagonal when it lands on the board
            if x < self.height and y < self.width:
                positions.append((y, x))
        return positions

    def _spiral(self) -> List[Coord]:
        positions = []
        center_x, center_y = self.width // 2, self.height // 2
        x, y = center_x, center_y
        dx, dy = 0, -1
        steps, step_count, change_count = 1, 0, 0

        for i in range(self.width * self.height):
            if 0 <= x < self.width and 0 <= y < self.height and i % 2 == 0:
                positions.append((x, y))

            x += dx
            y += dy
            step_count += 1

            if step_count == steps:
                step_count = 0
                change_count += 1
                dx, dy = -dy, dx
                if change_count == 2:
                    change_count = 0
                    steps += 1

            if abs(x - center_x) > self.width or abs(y - center_y) > self.height:
                break
        return positions

    def _perimeter(self) -> List[Coord]:
        positions = []
        for x in range(self.width):
            positions.append((x, 0))
            positions.append((x, self.height - 1))
        for y in range(1, self.height - 1):
            positions.append((0, y))
            positions.append((self.width - 1, y))
        return positions

    def _random_clusters(self) -> List[Coord]:
        positions = []
        cluster_count = max(3, self.target_mine_count // 8)
        mines_per_cluster = self.target_mine_count // cluster_count
        for _ in range(cluster_count):
            center_x = self.rng.randrange(self.width)
            center_y = self.rng.randrange(self.height)
            for _ in range(mines_per_cluster):
                x = max(0, min(self.width - 1, center_x + self.rng.randint(-2, 2)))
                y = max(0, min(self.height - 1, center_y + self.rng.randint(-2, 2)))
                positions.append((x, y))
        return positions

    def _adjust_mine_count(self, positions: List[Coord]) -> List[Position]:
        """De-duplicate, drop excluded or off-board cells, then match the target count."""
        unique: List[Coord] = []
        seen: Set[Coord] = set()
        for x, y in positions:
            if (x, y) in seen or (x, y) in self.excluded:
                continue
            if 0 <= x < self.width and 0 <= y < self.height:
                seen.add((x, y))
                unique.append((x, y))

        if len(unique) < self.target_mine_count:
            free = [
                (x, y) for y in range(self.height) for x in range(self.width)
                if (x, y) not in seen and (x, y) not in self.excluded
            ]
            self.rng.shuffle(free)
            unique.extend(free[:self.target_mine_count - len(unique)])
        else:
            while len(unique) > self.target_mine_count:
                unique.pop(self.rng.randrange(len(unique)))

        return [Position(x=x, y=y) for x, y in unique]

    @staticmethod
    def get_pattern_description(pattern_type: PatternType) -> str:
        return _DESCRIPTIONS.get(pattern_type, 'Unknown pattern')


def create_pattern_generator(config: BoardConfig, rng: Optional[random.Random] = None,
                             excluded: Optional[Set[Coord]] = None) -> PatternGenerator:
    return PatternGenerator(config, rng=rng, excluded=excluded)


def get_random_pattern_type(rng: Optional[random.Random] = None) -> PatternType:
    return (rng or random.Random()).choice(_RANDOM_PATTERNS)
