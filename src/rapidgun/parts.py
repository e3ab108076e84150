"""Part registry -- the mechanical parts the controller can see and command.

PartKind     -- what a part is (slide, rotor, weapon, anything else)
SlideState   -- linear actuator sensors and command fields
RotorState   -- rotary actuator sensors and command fields
WeaponState  -- weapon flags; the controller only writes ``enabled``
Part         -- one placed part: kind, grid cell, orientation, state, top grid
Grid         -- cells of one rigid grid, keyed by grid position
PartRegistry -- every grid reachable from the host, in registration order

Parts are live handles: a part can stop existing at any time (destroyed,
ground down).  ``Part.exists`` is the existence check every per-tick read
must go through.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Union

from .geometry import IDENTITY, GridPosition, Orientation

# Cube edge length in metres
LARGE_GRID_SIZE = 2.5
SMALL_GRID_SIZE = 0.5


class PartKind(Enum):
    SLIDE = "slide"
    ROTOR = "rotor"
    WEAPON = "weapon"
    OTHER = "other"


@dataclass
class SlideState:
    """Linear actuator.  Positions and limits in metres, velocity in m/s."""
    current_position: float = 0.0
    min_limit: float = 0.0
    max_limit: float = 0.0
    velocity: float = 0.0
    max_velocity: float = 5.0
    max_impulse: float = 0.0  # N


@dataclass
class RotorState:
    """Rotary actuator.  Angles in radians, torques in N*m.

    ``velocity`` is the observed magnitude only; the direction of rotation
    comes from the sign of ``torque``.
    """
    angle: float = 0.0
    lower_limit: float = 0.0
    upper_limit: float = 0.0
    locked: bool = False
    torque: float = 0.0
    braking_torque: float = 0.0
    target_velocity: float = 0.0
    velocity: float = 0.0
    displacement: float = 0.0  # m


@dataclass
class WeaponState:
    enabled: bool = False
    is_firing: bool = False
    is_functional: bool = True

    @property
    def available(self) -> bool:
        """Functional and not busy firing (or reloading)."""
        return self.is_functional and not self.is_firing

    @property
    def ready(self) -> bool:
        return self.available and self.enabled


PartState = Union[SlideState, RotorState, WeaponState, None]

_STATE_TYPES = {
    PartKind.SLIDE: SlideState,
    PartKind.ROTOR: RotorState,
    PartKind.WEAPON: WeaponState,
}


@dataclass(eq=False)
class Part:
    """A placed part.  Identity semantics: two parts are never equal by value."""

    part_id: str
    kind: PartKind
    position: GridPosition = (0, 0, 0)
    orientation: Orientation = IDENTITY
    state: PartState = None
    top_grid: Grid | None = None  # grid carried by an actuator head
    exists: bool = True

    def __post_init__(self) -> None:
        state_type = _STATE_TYPES.get(self.kind)
        if self.state is None and state_type is not None:
            self.state = state_type()

    def destroy(self) -> None:
        self.exists = False

    def __repr__(self) -> str:
        gone = "" if self.exists else " (gone)"
        return f"<Part {self.part_id} {self.kind.value} @{self.position}{gone}>"


def weapon_available(part: Part | None) -> bool:
    """A weapon handle that still exists, is functional and is not firing."""
    return (
        part is not None
        and part.exists
        and isinstance(part.state, WeaponState)
        and part.state.available
    )


def weapon_ready(part: Part | None) -> bool:
    return weapon_available(part) and part.state.enabled


class Grid:
    """One rigid grid: at most one part per cell."""

    def __init__(self, grid_id: str, grid_size: float = LARGE_GRID_SIZE) -> None:
        self.grid_id = grid_id
        self.grid_size = grid_size
        self._cells: dict[GridPosition, Part] = {}

    def add(self, part: Part) -> Part:
        if part.position in self._cells:
            raise ValueError(
                f"cell {part.position} of grid {self.grid_id} already holds "
                f"{self._cells[part.position].part_id}"
            )
        self._cells[part.position] = part
        return part

    def part_at(self, position: GridPosition) -> Part | None:
        """The part occupying *position*, or None if empty or destroyed."""
        part = self._cells.get(tuple(position))
        if part is None or not part.exists:
            return None
        return part

    def parts_at(self, positions: Iterable[GridPosition]) -> list[Part]:
        found = (self.part_at(p) for p in positions)
        return [p for p in found if p is not None]

    def parts(self) -> Iterator[Part]:
        return iter(self._cells.values())

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"<Grid {self.grid_id} parts={len(self._cells)}>"


@dataclass
class PartRegistry:
    """Every grid the host can query, the host grid first.

    ``grid_size`` is the host grid's cube size; it sets the slide's metres
    per barrel level.
    """

    grids: list[Grid] = field(default_factory=list)

    @property
    def grid_size(self) -> float:
        return self.grids[0].grid_size if self.grids else LARGE_GRID_SIZE

    def add_grid(self, grid: Grid) -> Grid:
        self.grids.append(grid)
        return grid

    def parts(self) -> Iterator[Part]:
        for grid in self.grids:
            yield from grid.parts()

    def parts_of_kind(self, kind: PartKind) -> list[Part]:
        return [p for p in self.parts() if p.kind is kind]

    def find(self, part_id: str) -> Part | None:
        for part in self.parts():
            if part.part_id == part_id:
                return part
        return None
