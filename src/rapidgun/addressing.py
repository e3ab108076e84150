"""Weapon addresses and the nearest-available-weapon search."""

from __future__ import annotations

from typing import NamedTuple

from .discovery import Barrel
from .geometry import NOWHERE as _NO_INDEX
from .geometry import QUARTERS_TOTAL, Direction, direction_to_quarter
from .parts import weapon_available


class Address(NamedTuple):
    """(level, quarter) of one weapon in the barrel."""
    level: int
    quarter: int

    @property
    def found(self) -> bool:
        return self.level > _NO_INDEX and self.quarter > _NO_INDEX


NOWHERE = Address(_NO_INDEX, _NO_INDEX)


def quarter_distance(current_quarter: int, quarter: int) -> int:
    """Rotation cost from *current_quarter* to *quarter*.

    Left and Right neighbours cost the same, so the order is: same quarter
    (0), either side (1), opposite (2).  A raw offset of 3 is a single step
    the other way round.
    """
    right = direction_to_quarter(Direction.RIGHT)
    left = direction_to_quarter(Direction.LEFT)
    raw = abs(current_quarter - quarter)
    return raw if raw < right else left


def level_distance(current_level: int, level: int) -> int:
    return abs(current_level - level)


def closest_available(current_level: int, current_quarter: int, barrel: Barrel) -> Address:
    """Nearest Available weapon, level-major, or NOWHERE.

    Levels are tried nearest first, and within a level quarters are tried
    by rotation cost.  Both sorts are stable, so ties fall back to index
    order and the current address always wins when it is available.
    """
    quarters = sorted(range(QUARTERS_TOTAL), key=lambda q: quarter_distance(current_quarter, q))
    levels = sorted(range(len(barrel)), key=lambda lvl: level_distance(current_level, lvl))

    for level in levels:
        for quarter in quarters:
            if weapon_available(barrel.weapon_at(level, quarter)):
                return Address(level, quarter)
    return NOWHERE
