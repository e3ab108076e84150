"""Layout discovery -- find the slide, its rotor, and the barrel of weapons.

The rig as built::

        <-W[C]W->   --- barrel level 1
        <-W[C]W->   --- barrel level 0
            ^
           |R|       rotor, at (0, 1, 0) of the slide's top grid
           | |
            S        slide

Weapons W sit criss-cross around the conveyor C of each level, one per
planar base direction.  Levels stack upward from the rotor head: level k
is centred on (0, k + 1, 0) of the rotor's top grid.

``discover()`` is a pure function of the registry.  It never raises for a
missing or malformed rig; it returns a ``DiscoveryFailure`` value instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from .geometry import (
    NOWHERE,
    QUARTERS_TOTAL,
    Direction,
    Orientation,
    ascending_positions,
    cross_positions,
    direction_to_quarter,
)
from .parts import Part, PartKind, PartRegistry

logger = logging.getLogger("rapidgun.discovery")

# Fire direction of an active weapon relative to the host grid
FIRE_REFERENCE = Orientation.from_directions(Direction.FORWARD, Direction.UP)

# Where the rotor sits on the slide head
ROTOR_MOUNT = (0, 1, 0)


@dataclass(frozen=True)
class Barrel:
    """Ordered levels of weapons, level 0 next to the rotor.

    Each level is a 4-tuple indexed by quarter (Forward, Left, Backward,
    Right).  Immutable once discovered; the weapon parts inside it are
    still live handles.
    """

    levels: tuple[tuple[Part, ...], ...] = ()

    def __len__(self) -> int:
        return len(self.levels)

    def __iter__(self) -> Iterator[tuple[Part, ...]]:
        return iter(self.levels)

    def __getitem__(self, level: int) -> tuple[Part, ...]:
        return self.levels[level]

    def weapon_at(self, level: int, quarter: int) -> Part | None:
        if not (0 <= level < len(self.levels) and 0 <= quarter < QUARTERS_TOTAL):
            return None
        return self.levels[level][quarter]

    def weapons(self) -> Iterator[Part]:
        for level in self.levels:
            yield from level

    def layout(self) -> tuple[tuple[str, ...], ...]:
        """Part ids per level and quarter; structural fingerprint of the barrel."""
        return tuple(tuple(w.part_id for w in level) for level in self.levels)


@dataclass(frozen=True)
class Rig:
    """A discovered rig: slide and rotor handles plus the barrel."""

    slide: Part
    rotor: Part
    barrel: Barrel
    grid_size: float

    @property
    def is_grid_large(self) -> bool:
        return self.grid_size > 1

    @property
    def exists(self) -> bool:
        return self.slide.exists and self.rotor.exists


@dataclass(frozen=True)
class DiscoveryFailure:
    """No slide/rotor/weapon arrangement satisfied the structural rules."""

    reason: str
    slides_checked: int = 0

    def __str__(self) -> str:
        return f"{self.reason} ({self.slides_checked} slide(s) checked)"


def find_rotor(slide: Part) -> Part | None:
    """The rotor mounted directly above the slide head, if any."""
    if slide.top_grid is None:
        return None
    part = slide.top_grid.part_at(ROTOR_MOUNT)
    if part is None or part.kind is not PartKind.ROTOR:
        return None
    return part


def weapon_orientation(weapon: Part, slide: Part, rotor: Part) -> Orientation:
    """Weapon orientation carried through rotor and slide into the host frame."""
    return FIRE_REFERENCE * slide.orientation * rotor.orientation * weapon.orientation


def weapon_quarter(weapon: Part, slide: Part, rotor: Part) -> int:
    """Quarter the weapon fires toward, or NOWHERE when it is not planar."""
    return direction_to_quarter(weapon_orientation(weapon, slide, rotor).forward)


def find_barrel(slide: Part, rotor: Part) -> Barrel:
    """Scan levels upward from the rotor head until one is incomplete.

    A level with no weapons ends the barrel.  So does a level that cannot
    fill all four quarters, whether a weapon is missing, mounted off-axis,
    or doubled up on a quarter.
    """
    grid = rotor.top_grid
    if grid is None:
        return Barrel()

    levels: list[tuple[Part, ...]] = []
    for center in ascending_positions():
        weapons = [
            p for p in grid.parts_at(cross_positions(center))
            if p.kind is PartKind.WEAPON
        ]
        if not weapons:
            break

        slots: list[Part | None] = [None] * QUARTERS_TOTAL
        for weapon in weapons:
            quarter = weapon_quarter(weapon, slide, rotor)
            if quarter == NOWHERE:
                logger.warning(
                    "Weapon %s at %s does not face a planar direction; excluded",
                    weapon.part_id, weapon.position,
                )
                continue
            if slots[quarter] is not None:
                logger.warning(
                    "Weapons %s and %s both face quarter %d; %s excluded",
                    slots[quarter].part_id, weapon.part_id, quarter, weapon.part_id,
                )
                continue
            slots[quarter] = weapon

        filled = sum(1 for s in slots if s is not None)
        if filled < QUARTERS_TOTAL:
            logger.warning(
                "Level %d has %d/%d quarters filled; barrel truncated to %d level(s)",
                len(levels), filled, QUARTERS_TOTAL, len(levels),
            )
            break
        levels.append(tuple(slots))

    return Barrel(tuple(levels))


def discover(registry: PartRegistry) -> Rig | DiscoveryFailure:
    """Find the first slide (registry order) carrying a rotor and a barrel."""
    checked = 0
    for slide in registry.parts_of_kind(PartKind.SLIDE):
        if not slide.exists:
            continue
        checked += 1

        rotor = find_rotor(slide)
        if rotor is None:
            logger.debug("Slide %s: no rotor at %s", slide.part_id, ROTOR_MOUNT)
            continue

        barrel = find_barrel(slide, rotor)
        if len(barrel) == 0:
            logger.debug("Slide %s: rotor %s carries no full level", slide.part_id, rotor.part_id)
            continue

        logger.info(
            "Rig found: slide=%s rotor=%s levels=%d grid_size=%.1f",
            slide.part_id, rotor.part_id, len(barrel), registry.grid_size,
        )
        return Rig(slide=slide, rotor=rotor, barrel=barrel, grid_size=registry.grid_size)

    if checked == 0:
        return DiscoveryFailure("no slide found", slides_checked=0)
    return DiscoveryFailure("no slide carries a rotor with a full barrel level", checked)
