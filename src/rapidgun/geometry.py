"""Grid geometry for the rig -- angles, quarters, base directions, orientations.

Coordinate convention (right-handed, same as the part grid):
    +X = Right, +Y = Up, -Z = Forward

Angles are radians.  A rotor's raw angle may wind past 2*pi in either
direction, so everything that compares angles goes through
``normalize_angle`` first.

Quarters number the four planar base directions counter-clockwise from
Forward (the rotor physically turns clockwise):

    0 = Forward, 1 = Left, 2 = Backward, 3 = Right
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import numpy as np

TWO_PI = 2.0 * math.pi
HALF_PI = math.pi / 2.0

QUARTERS_TOTAL = 4

# Sentinel for "no quarter / no level" -- shared with addressing.NOWHERE
NOWHERE = -1

GridPosition = tuple[int, int, int]


class Direction(Enum):
    """The six base directions of the part grid, valued by unit vector."""
    FORWARD = (0, 0, -1)
    BACKWARD = (0, 0, 1)
    LEFT = (-1, 0, 0)
    RIGHT = (1, 0, 0)
    UP = (0, 1, 0)
    DOWN = (0, -1, 0)

    @property
    def vector(self) -> np.ndarray:
        return np.array(self.value, dtype=float)

    @classmethod
    def from_vector(cls, vector, tolerance: float = 1e-6) -> Direction | None:
        """Map a vector onto a base direction, or None if it is not axis aligned."""
        v = np.asarray(vector, dtype=float)
        for direction in cls:
            if np.allclose(v, direction.vector, atol=tolerance):
                return direction
        return None


_QUARTER_OF_DIRECTION = {
    Direction.FORWARD: 0,
    Direction.LEFT: 1,
    Direction.BACKWARD: 2,
    Direction.RIGHT: 3,
}


def normalize_angle(radians: float) -> float:
    """Reduce *radians* into [0, 2*pi).

    ``math.fmod`` keeps the sign of the dividend, so a negative remainder
    gets one full turn added.  A tiny negative remainder can round up to
    exactly 2*pi; that collapses to 0.
    """
    arc = math.fmod(radians, TWO_PI)
    if arc < 0:
        arc += TWO_PI
    if arc >= TWO_PI:
        return 0.0
    return arc


def quarter_of(angle: float) -> int:
    """Quarter index 0..3 of a rotor angle (floor of angle / (pi/2))."""
    quarter = int(math.floor(normalize_angle(angle) / HALF_PI))
    return min(quarter, QUARTERS_TOTAL - 1)


def direction_to_quarter(direction: Direction | None) -> int:
    """Forward -> 0, Left -> 1, Backward -> 2, Right -> 3, anything else -> -1."""
    return _QUARTER_OF_DIRECTION.get(direction, NOWHERE)


def offset(position: GridPosition, direction: Direction) -> GridPosition:
    dx, dy, dz = direction.value
    return (position[0] + dx, position[1] + dy, position[2] + dz)


def cross_positions(center: GridPosition) -> list[GridPosition]:
    """The four cells one unit from *center* in the planar base directions."""
    return [
        offset(center, Direction.FORWARD),
        offset(center, Direction.RIGHT),
        offset(center, Direction.BACKWARD),
        offset(center, Direction.LEFT),
    ]


def ascending_positions() -> Iterator[GridPosition]:
    """Endless (0, 1, 0), (0, 2, 0), ...  The origin itself is never yielded.

    Every call returns a fresh generator; the consumer decides when to stop.
    """
    position = (0, 0, 0)
    while True:
        position = offset(position, Direction.UP)
        yield position


@dataclass(frozen=True)
class Orientation:
    """A rotation from a part's local frame into its parent grid's frame.

    Stored as a 3x3 matrix (rows as tuples so the value stays hashable).
    ``a * b`` composes left to right: the result applies ``b`` first, then
    ``a`` -- the same order as chaining mount orientations from the outer
    grid inward.
    """

    matrix: tuple[tuple[float, float, float], ...]

    @classmethod
    def from_directions(cls, forward: Direction, up: Direction) -> Orientation:
        """Orientation whose local Forward/Up land on *forward*/*up*."""
        f = forward.vector
        u = up.vector
        if abs(float(np.dot(f, u))) > 1e-9:
            raise ValueError(f"forward {forward.name} and up {up.name} are not perpendicular")
        right = np.cross(f, u)
        # Columns are the images of local +X (Right), +Y (Up), +Z (Backward)
        return cls._from_array(np.column_stack([right, u, -f]))

    @classmethod
    def from_yaw(cls, radians: float) -> Orientation:
        """Rotation about the Up axis; positive turns Forward toward Left."""
        c, s = math.cos(radians), math.sin(radians)
        return cls._from_array(np.array([
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ]))

    @classmethod
    def _from_array(cls, array: np.ndarray) -> Orientation:
        return cls(tuple(tuple(float(x) for x in row) for row in array.tolist()))

    def as_array(self) -> np.ndarray:
        return np.array(self.matrix, dtype=float)

    def __mul__(self, other: Orientation) -> Orientation:
        if not isinstance(other, Orientation):
            return NotImplemented
        return Orientation._from_array(self.as_array() @ other.as_array())

    def apply(self, vector) -> np.ndarray:
        return self.as_array() @ np.asarray(vector, dtype=float)

    @property
    def forward(self) -> Direction | None:
        """Base direction the local Forward points at, None when off-axis."""
        return Direction.from_vector(self.apply(Direction.FORWARD.vector))

    @property
    def up(self) -> Direction | None:
        return Direction.from_vector(self.apply(Direction.UP.vector))


IDENTITY = Orientation.from_directions(Direction.FORWARD, Direction.UP)
