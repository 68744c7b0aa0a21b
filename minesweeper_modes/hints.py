"""Hint system for learning modes."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from minesweeper_modes.board import get_adjacent_positions
from minesweeper_modes.types import Cell, GameState, Position

DANGER_THRESHOLD = 0.7


class HintType(str, Enum):
    SAFE_CELL = 'safe_cell'
    MINE_LOCATION = 'mine_location'
    NUMBER_DEDUCTION = 'number_deduction'
    PATTERN_HINT = 'pattern_hint'
    NEXT_BEST_MOVE = 'next_best_move'
    FLAG_SUGGESTION = 'flag_suggestion'
    DANGER_WARNING = 'danger_warning'


@dataclass
class Hint:
    type: HintType
    position: Position
    confidence: float  # 0-1
    reasoning: str
    priority: int  # 1-10


class HintSystem:
    """Deduces hints from the visible part of a board."""

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    def _cells(self):
        for row in self.game_state.board:
            for cell in row:
                yield cell

    def _hidden_cells(self):
        return [cell for cell in self._cells() if not cell.is_revealed and not cell.is_flagged]

    def _adjacent_cells(self, x: int, y: int) -> List[Cell]:
        config = self.game_state.config
        board = self.game_state.board
        return [board[p.y][p.x] for p in get_adjacent_positions(x, y, config.width, config.height)]

    def get_best_hint(self) -> Optional[Hint]:
        """Highest priority hint, ties broken by confidence."""
        hints = self.get_all_hints()
        if not hints:
            return None
        return sorted(hints, key=lambda h: (-h.priority, -h.confidence))[0]

    def get_all_hints(self) -> List[Hint]:
        hints = []
        hints.extend(self._find_safe_cells())
        hints.extend(self._find_guaranteed_mines())
        hints.extend(self._find_number_deductions())
        best_move = self._find_best_move()
        if best_move is not None:
            hints.append(best_move)
        return hints

    def _find_safe_cells(self) -> List[Hint]:
        return [
            Hint(
                type=HintType.SAFE_CELL,
                position=Position(cell.x, cell.y),
                confidence=1.0,
                reasoning='This cell is guaranteed safe based on adjacent numbers',
                priority=9,
            )
            for cell in self._hidden_cells() if self._is_guaranteed_safe(cell.x, cell.y)
        ]

    def _find_guaranteed_mines(self) -> List[Hint]:
        return [
            Hint(
                type=HintType.MINE_LOCATION,
                position=Position(cell.x, cell.y),
                confidence=1.0,
                reasoning='This cell must contain a mine based on adjacent numbers',
                priority=10,
            )
            for cell in self._hidden_cells() if self._is_guaranteed_mine(cell.x, cell.y)
        ]

    def _find_number_deductions(self) -> List[Hint]:
        hints = []
        for cell in self._cells():
            if not cell.is_revealed or cell.adjacent_mines == 0:
                continue

            adjacent = self._adjacent_cells(cell.x, cell.y)
            hidden = [c for c in adjacent if not c.is_revealed and not c.is_flagged]
            flagged = len([c for c in adjacent if c.is_flagged])
            if not hidden:
                continue

            # All remaining hidden neighbours must be mines
            if len(hidden) + flagged == cell.adjacent_mines:
                for c in hidden:
                    hints.append(Hint(
                        type=HintType.NUMBER_DEDUCTION,
                        position=Position(c.x, c.y),
                        confidence=1.0,
                        reasoning=f"Cell at ({cell.x}, {cell.y}) has {cell.adjacent_mines} adjacent mines, "
                                  f"and this is one of them",
                        priority=9,
                    ))

            # Every mine is already flagged
            if flagged == cell.adjacent_mines:
                for c in hidden:
                    hints.append(Hint(
                        type=HintType.NUMBER_DEDUCTION,
                        position=Position(c.x, c.y),
                        confidence=1.0,
                        reasoning=f"Cell at ({cell.x}, {cell.y}) has all {cell.adjacent_mines} mines flagged, "
                                  f"so this is safe",
                        priority=9,
                    ))
        return hints

    def _find_best_move(self) -> Optional[Hint]:
        best_move = None
        lowest_risk = 1.0
        for cell in self._hidden_cells():
            risk = self._calculate_cell_risk(cell.x, cell.y)
            if risk < lowest_risk:
                lowest_risk = risk
                best_move = Hint(
                    type=HintType.NEXT_BEST_MOVE,
                    position=Position(cell.x, cell.y),
                    confidence=1 - risk,
                    reasoning=f"This cell has the lowest risk ({round(risk * 100)}%) based on current board state",
                    priority=7,
                )
        return best_move

    def _is_guaranteed_safe(self, x: int, y: int) -> bool:
        for neighbour in self._adjacent_cells(x, y):
            if not neighbour.is_revealed:
                continue
            flagged = len([c for c in self._adjacent_cells(neighbour.x, neighbour.y) if c.is_flagged])
            if flagged == neighbour.adjacent_mines:
                return True
        return False

    def _is_guaranteed_mine(self, x: int, y: int) -> bool:
        for neighbour in self._adjacent_cells(x, y):
            if not neighbour.is_revealed:
                continue
            around = self._adjacent_cells(neighbour.x, neighbour.y)
            hidden = [c for c in around if not c.is_revealed and not c.is_flagged]
            flagged = len([c for c in around if c.is_flagged])
            if len(hidden) + flagged == neighbour.adjacent_mines:
                if any(c.x == x and c.y == y for c in hidden):
                    return True
        return False

    def _calculate_cell_risk(self, x: int, y: int) -> float:
        """Mine probability estimate for a cell, 0 safe to 1 mine."""
        revealed = [c for c in self._adjacent_cells(x, y) if c.is_revealed]

        if not revealed:
            # No information, use global mine density
            state = self.game_state
            remaining_cells = state.config.width * state.config.height - state.revealed_count
            remaining_mines = state.config.mines - state.flag_count
            if remaining_cells <= 0:
                return 0.0
            return remaining_mines / remaining_cells

        total_risk = 0.0
        risk_count = 0
        for neighbour in revealed:
            around = self._adjacent_cells(neighbour.x, neighbour.y)
            hidden = len([c for c in around if not c.is_revealed and not c.is_flagged])
            flagged = len([c for c in around if c.is_flagged])
            if hidden > 0:
                total_risk += (neighbour.adjacent_mines - flagged) / hidden
                risk_count += 1

        return total_risk / risk_count if risk_count > 0 else 0.5

    def get_hint_for_cell(self, x: int, y: int) -> Hint:
        cell = self.game_state.board[y][x]
        position = Position(x, y)

        if cell.is_revealed:
            return Hint(HintType.SAFE_CELL, position, 1.0, 'This cell is already revealed', 1)
        if self._is_guaranteed_safe(x, y):
            return Hint(HintType.SAFE_CELL, position, 1.0, 'This cell is guaranteed safe', 9)
        if self._is_guaranteed_mine(x, y):
            return Hint(HintType.MINE_LOCATION, position, 1.0, 'This cell contains a mine', 10)

        risk = self._calculate_cell_risk(x, y)
        return Hint(HintType.NEXT_BEST_MOVE, position, 1 - risk, f"Risk level: {round(risk * 100)}%", 5)

    def get_pattern_hints(self) -> List[Hint]:
        # TODO: detect symmetric and geometric mine layouts for pattern mode
        return []

    def is_solvable(self) -> bool:
        """True when at least one cell can be deduced without guessing."""
        return bool(self._find_safe_cells()) or bool(self._find_guaranteed_mines())

    def get_danger_zones(self) -> List[Hint]:
        hints = []
        for cell in self._hidden_cells():
            risk = self._calculate_cell_risk(cell.x, cell.y)
            if risk > DANGER_THRESHOLD:
                hints.append(Hint(
                    type=HintType.DANGER_WARNING,
                    position=Position(cell.x, cell.y),
                    confidence=risk,
                    reasoning=f"High risk area: {round(risk * 100)}% chance of mine",
                    priority=6,
                ))
        return hints

    def get_hint_statistics(self) -> Dict[str, float]:
        all_hints = self.get_all_hints()
        hidden = self._hidden_cells()
        total_risk = sum(self._calculate_cell_risk(cell.x, cell.y) for cell in hidden)
        return {
            'total_hints': len(all_hints),
            'safe_cells': len([h for h in all_hints if h.type in (HintType.SAFE_CELL, HintType.NUMBER_DEDUCTION)]),
            'guaranteed_mines': len([h for h in all_hints if h.type == HintType.MINE_LOCATION]),
            'is_solvable': self.is_solvable(),
            'average_risk': total_risk / len(hidden) if hidden else 0,
        }


def create_hint_system(game_state: GameState) -> HintSystem:
    return HintSystem(game_state)


_HINT_PREFIXES = {
    HintType.SAFE_CELL: '✅ Cell at {pos} is safe to reveal.',
    HintType.MINE_LOCATION: '💣 Cell at {pos} contains a mine.',
    HintType.NUMBER_DEDUCTION: '🔍 Cell at {pos} can be deduced.',
    HintType.NEXT_BEST_MOVE: '🎯 Best move: {pos}.',
    HintType.FLAG_SUGGESTION: '🚩 Suggest flagging {pos}.',
    HintType.DANGER_WARNING: '⚠️ Danger zone at {pos}.',
    HintType.PATTERN_HINT: '🔷 Pattern detected at {pos}.',
}


def get_hint_message(hint: Hint) -> str:
    """Player-facing hint text with 1-based coordinates."""
    pos = f"({hint.position.x + 1}, {hint.position.y + 1})"
    prefix = _HINT_PREFIXES.get(hint.type)
    if prefix is None:
        return hint.reasoning
    return f"{prefix.format(pos=pos)} {hint.reasoning}"
