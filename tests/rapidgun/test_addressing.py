"""Unit tests for rapidgun.addressing -- quarter priority and closest_available."""

from __future__ import annotations

import pytest

from rapidgun.addressing import (
    NOWHERE,
    Address,
    closest_available,
    level_distance,
    quarter_distance,
)
from rapidgun.discovery import Rig, discover
from rapidgun.simulated import build_registry


pytestmark = pytest.mark.unit


def _barrel(levels: int = 3):
    rig = discover(build_registry((4,) * levels))
    assert isinstance(rig, Rig)
    return rig.barrel


def _make_only_available(barrel, *addresses):
    """Mark every weapon non-functional except the listed addresses."""
    keep = {tuple(a) for a in addresses}
    for level_idx, level in enumerate(barrel):
        for quarter, weapon in enumerate(level):
            weapon.state.is_functional = (level_idx, quarter) in keep


# --------------------------------------------------------------------------
# quarter_distance
# --------------------------------------------------------------------------

class TestQuarterDistance:
    @pytest.mark.parametrize("current", [0, 1, 2, 3])
    def test_same_quarter_is_zero(self, current):
        assert quarter_distance(current, current) == 0

    @pytest.mark.parametrize("current", [0, 1, 2, 3])
    def test_opposite_quarter_is_farthest(self, current):
        opposite = (current + 2) % 4
        assert quarter_distance(current, opposite) == 2

    @pytest.mark.parametrize("current", [0, 1, 2, 3])
    def test_lateral_quarters_tie(self, current):
        left = (current + 1) % 4
        right = (current + 3) % 4
        assert quarter_distance(current, left) == quarter_distance(current, right) == 1

    def test_level_distance(self):
        assert level_distance(1, 3) == 2
        assert level_distance(3, 1) == 2
        assert level_distance(2, 2) == 0


# --------------------------------------------------------------------------
# Address
# --------------------------------------------------------------------------

class TestAddress:
    def test_nowhere(self):
        assert NOWHERE == (-1, -1)
        assert not NOWHERE.found

    def test_found(self):
        assert Address(0, 0).found


# --------------------------------------------------------------------------
# closest_available
# --------------------------------------------------------------------------

class TestClosestAvailable:
    def test_current_address_first(self):
        barrel = _barrel()
        assert closest_available(1, 0, barrel) == Address(1, 0)

    def test_only_current_available(self):
        barrel = _barrel()
        _make_only_available(barrel, (1, 0))
        assert closest_available(1, 0, barrel) == Address(1, 0)

    def test_lateral_quarters_before_opposite(self):
        barrel = _barrel()
        _make_only_available(barrel, (1, 1), (1, 2), (1, 3))
        assert closest_available(1, 0, barrel) in (Address(1, 1), Address(1, 3))

    def test_opposite_when_laterals_busy(self):
        barrel = _barrel()
        _make_only_available(barrel, (1, 2))
        assert closest_available(1, 0, barrel) == Address(1, 2)

    def test_level_major(self):
        # Same level, opposite quarter beats the adjacent level, same quarter
        barrel = _barrel()
        _make_only_available(barrel, (1, 2), (0, 0), (2, 0))
        assert closest_available(1, 0, barrel) == Address(1, 2)

    def test_nearest_level(self):
        barrel = _barrel(4)
        _make_only_available(barrel, (0, 0), (2, 1))
        assert closest_available(3, 0, barrel) == Address(2, 1)

    def test_level_tie_keeps_index_order(self):
        barrel = _barrel()
        _make_only_available(barrel, (0, 0), (2, 0))
        assert closest_available(1, 0, barrel) == Address(0, 0)

    def test_firing_is_unavailable(self):
        barrel = _barrel(1)
        barrel[0][0].state.is_firing = True
        assert closest_available(0, 0, barrel) in (Address(0, 1), Address(0, 3))

    def test_destroyed_is_unavailable(self):
        barrel = _barrel(1)
        _make_only_available(barrel, (0, 0), (0, 2))
        barrel[0][0].destroy()
        assert closest_available(0, 0, barrel) == Address(0, 2)

    def test_enabled_flag_ignored(self):
        barrel = _barrel(1)
        for weapon in barrel[0]:
            weapon.state.enabled = False
        assert closest_available(0, 0, barrel) == Address(0, 0)

    def test_nowhere_when_all_unavailable(self):
        barrel = _barrel()
        _make_only_available(barrel)
        assert closest_available(1, 0, barrel) == NOWHERE

    def test_nowhere_when_all_firing(self):
        barrel = _barrel(2)
        for weapon in barrel.weapons():
            weapon.state.is_firing = True
        assert closest_available(0, 2, barrel) is NOWHERE
