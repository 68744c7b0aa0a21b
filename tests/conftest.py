import pytest

from minesweeper_modes.board import create_empty_board, place_mines_at
from minesweeper_modes.types import Position


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def mined_board(width: int, height: int, mines):
    """Board with mines at the given (x, y) pairs."""
    return place_mines_at(create_empty_board(width, height), [Position(x, y) for x, y in mines])
