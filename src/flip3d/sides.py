"""Face and rotation direction identifiers."""

from __future__ import annotations

from enum import Enum


class Side(Enum):
    """Face of a flip card."""
    FRONT = 0
    BACK = 1

    def other(self) -> Side:
        """Get the opposite face."""
        return Side.BACK if self is Side.FRONT else Side.FRONT

    @property
    def label(self) -> str:
        return self.name


class Direction(Enum):
    """Rotation direction of a flip."""
    LEFT = 0
    RIGHT = 1

    @property
    def multiplier(self) -> int:
        """Sign applied to rotation angles (LEFT = -1, RIGHT = +1)."""
        return -1 if self is Direction.LEFT else 1

    def reversed(self) -> Direction:
        return Direction.RIGHT if self is Direction.LEFT else Direction.LEFT


def parse_direction(value) -> Direction:
    """Accept a Direction, its name ("LEFT"/"right") or its index (0/1)."""
    if isinstance(value, Direction):
        return value
    if isinstance(value, str):
        try:
            return Direction[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown rotation direction: {value!r}") from None
    return Direction(value)
