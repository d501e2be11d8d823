"""Edge directions between grid-adjacent pieces."""

from enum import Enum
from typing import Tuple


class Direction(Enum):
    """
    Relation of a neighbour to an anchor piece.

    Direction.RIGHT means "the neighbour sits to the right of the anchor",
    i.e. the anchor's right edge touches the neighbour's left edge.
    """
    UP = 'up'
    DOWN = 'down'
    LEFT = 'left'
    RIGHT = 'right'

    @property
    def inverse(self) -> 'Direction':
        return _INVERSE[self]

    @property
    def offset(self) -> Tuple[int, int]:
        """(d_row, d_col) step from the anchor to the neighbour."""
        return _OFFSET[self]


_INVERSE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_OFFSET = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}

ALL_DIRECTIONS = (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT)
