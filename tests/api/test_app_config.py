"""Unit tests for app.config.Settings."""
from __future__ import annotations

import pytest

from app.config import Settings
from rapidgun.host import DEFAULT_TICK_INTERVAL
from rapidgun.parts import LARGE_GRID_SIZE


pytestmark = pytest.mark.unit


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.app_name == "RAPIDGUN"
        assert s.tick_interval == pytest.approx(1 / 6)
        assert s.simulation_enabled is True
        assert s.simulation_grid_size == 2.5
        assert s.level_weapon_counts() == [4, 4, 4]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SIMULATION_LEVELS", "4, 2")
        monkeypatch.setenv("TICK_INTERVAL", "0.5")
        s = Settings(_env_file=None)
        assert s.level_weapon_counts() == [4, 2]
        assert s.tick_interval == 0.5

    def test_empty_levels(self):
        assert Settings(_env_file=None, simulation_levels="").level_weapon_counts() == []

    def test_non_numeric_levels(self):
        s = Settings(_env_file=None, simulation_levels="4,x")
        with pytest.raises(ValueError):
            s.level_weapon_counts()

    def test_defaults_follow_controller_constants(self):
        s = Settings(_env_file=None)
        assert s.tick_interval == DEFAULT_TICK_INTERVAL
        assert s.simulation_grid_size == LARGE_GRID_SIZE
