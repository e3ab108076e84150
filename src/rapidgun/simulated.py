"""Simulated rig -- no real actuators required.

``build_registry()`` lays out a slide, its rotor and a barrel of weapons on
three grids the way the real rig is built.  ``SimulatedRig.step(dt)``
moves the actuators toward their commanded limits:

- Slide: travels toward ``max_limit`` at ``|velocity|`` when the velocity
  sign points at it, and stops exactly on it.
- Rotor: while unlocked with torque, turns at ``target_velocity`` in the
  torque's direction and stops exactly on ``upper_limit``; it keeps
  reporting that speed until locked.  A locked rotor reads zero velocity.

Useful for exercising the full controller loop without hardware.
"""

from __future__ import annotations

from typing import Sequence

from .geometry import (
    IDENTITY,
    QUARTERS_TOTAL,
    Direction,
    Orientation,
    cross_positions,
    normalize_angle,
)
from .parts import (
    LARGE_GRID_SIZE,
    Grid,
    Part,
    PartKind,
    PartRegistry,
    RotorState,
    SlideState,
)

# Cross positions are listed Forward, Right, Backward, Left
_CROSS_FACING = (Direction.FORWARD, Direction.RIGHT, Direction.BACKWARD, Direction.LEFT)

DEFAULT_SLIDE_VELOCITY = 5.0  # m/s


def weapon_id(level: int, facing: Direction) -> str:
    return f"weapon-{level}-{facing.name.lower()}"


def build_registry(
    level_weapon_counts: Sequence[int] = (4, 4, 4),
    grid_size: float = LARGE_GRID_SIZE,
    slide_orientation: Orientation = IDENTITY,
    rotor_orientation: Orientation = IDENTITY,
    max_slide_velocity: float = DEFAULT_SLIDE_VELOCITY,
) -> PartRegistry:
    """Registry for one rig.

    ``level_weapon_counts[k]`` weapons are mounted around level k, taken
    from the cross positions in order and facing outward.  A count of 0
    leaves the level empty (only its conveyor).
    """
    host = Grid("host", grid_size)
    slide_top = Grid("slide-top", grid_size)
    barrel = Grid("barrel", grid_size)

    host.add(Part("programmable-block", PartKind.OTHER, (0, 0, 1)))
    host.add(Part(
        "slide", PartKind.SLIDE, (0, 0, 0),
        orientation=slide_orientation,
        state=SlideState(max_velocity=max_slide_velocity),
        top_grid=slide_top,
    ))
    slide_top.add(Part(
        "rotor", PartKind.ROTOR, (0, 1, 0),
        orientation=rotor_orientation,
        state=RotorState(),
        top_grid=barrel,
    ))

    for level, count in enumerate(level_weapon_counts):
        if not 0 <= count <= QUARTERS_TOTAL:
            raise ValueError(f"level {level}: weapon count {count} outside 0..{QUARTERS_TOTAL}")
        center = (0, level + 1, 0)
        barrel.add(Part(f"conveyor-{level}", PartKind.OTHER, center))
        for position, facing in list(zip(cross_positions(center), _CROSS_FACING))[:count]:
            barrel.add(Part(
                weapon_id(level, facing), PartKind.WEAPON, position,
                orientation=Orientation.from_directions(facing, Direction.UP),
            ))

    registry = PartRegistry()
    registry.add_grid(host)
    registry.add_grid(slide_top)
    registry.add_grid(barrel)
    return registry


def step_slide(slide: SlideState, dt: float) -> None:
    target = slide.max_limit
    position = slide.current_position
    if slide.velocity > 0 and position < target:
        position = min(position + slide.velocity * dt, target)
    elif slide.velocity < 0 and position > target:
        position = max(position + slide.velocity * dt, target)
    slide.current_position = max(position, slide.min_limit)


def step_rotor(rotor: RotorState, dt: float) -> None:
    if rotor.locked or rotor.torque == 0 or rotor.target_velocity <= 0:
        rotor.velocity = 0.0
        return

    direction = 1.0 if rotor.torque > 0 else -1.0
    target = rotor.upper_limit
    remaining = normalize_angle(direction * (target - normalize_angle(rotor.angle)))
    travel = rotor.target_velocity * dt
    if travel >= remaining:
        rotor.angle = target
    else:
        rotor.angle += direction * travel
    rotor.velocity = rotor.target_velocity


class SimulatedRig:
    """Steps every slide and rotor in a registry."""

    def __init__(self, registry: PartRegistry) -> None:
        self.registry = registry
        self.elapsed = 0.0

    def step(self, dt: float) -> None:
        for part in self.registry.parts():
            if not part.exists:
                continue
            if part.kind is PartKind.SLIDE:
                step_slide(part.state, dt)
            elif part.kind is PartKind.ROTOR:
                step_rotor(part.state, dt)
        self.elapsed += dt

    def weapon(self, part_id: str) -> Part | None:
        part = self.registry.find(part_id)
        if part is None or part.kind is not PartKind.WEAPON:
            return None
        return part

    def set_weapon(
        self,
        part_id: str,
        is_firing: bool | None = None,
        is_functional: bool | None = None,
    ) -> Part | None:
        """Change a weapon's observed flags, as firing or damage would."""
        part = self.weapon(part_id)
        if part is None:
            return None
        if is_firing is not None:
            part.state.is_firing = is_firing
        if is_functional is not None:
            part.state.is_functional = is_functional
        return part
