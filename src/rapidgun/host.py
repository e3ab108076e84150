"""RigHost -- drives a controller and a simulated rig on a fixed tick.

The controller itself is single-threaded and never waits.  The host owns
the scheduler: one daemon thread (``rig-tick``) that every
``tick_interval`` seconds runs, under one lock,

    controller.tick()   -- observe, decide, command
    simulation.step(dt) -- actuators move

HTTP handlers read snapshots and change weapon flags through the same
lock, so the controller never sees a half-applied change.  ``do_tick()``
runs one step inline for tests.
"""

from __future__ import annotations

import logging
import threading
import time

from .addressing import Address
from .display import StatusBoard
from .geometry import normalize_angle
from .parts import PartRegistry, weapon_available, weapon_ready
from .selection import RapidGunController, Status
from .simulated import SimulatedRig

logger = logging.getLogger("rapidgun.host")

# Update every 10 frames at 60 Hz
DEFAULT_TICK_INTERVAL = 10 / 60


class RigHost:
    """Tick scheduler plus a thread-safe read/write surface for the API."""

    def __init__(
        self,
        registry: PartRegistry,
        controller: RapidGunController | None = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        self.registry = registry
        self.simulation = SimulatedRig(registry)
        self.controller = controller or RapidGunController()
        self.board = StatusBoard()
        self.controller.on_status = self.board
        self.tick_interval = tick_interval
        self.ticks = 0
        self._lock = threading.Lock()
        self._running = False
        self._thread: threading.Thread | None = None

    # -- Lifecycle ----------------------------------------------------------

    def restart(self) -> Status:
        """Run discovery again (the only way out of an error status)."""
        with self._lock:
            return self.controller.start(self.registry)

    def start(self) -> Status:
        status = self.restart()
        if self._running:
            return status
        self._running = True
        self._thread = threading.Thread(target=self._tick_loop, name="rig-tick", daemon=True)
        self._thread.start()
        logger.info("Rig host started (tick every %.3fs, status %s)", self.tick_interval, status.value)
        return status

    def stop(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._running

    # -- Tick loop ----------------------------------------------------------

    def _tick_loop(self) -> None:
        while self._running:
            time.sleep(self.tick_interval)
            self.do_tick(self.tick_interval)

    def do_tick(self, dt: float | None = None) -> Status:
        """One controller tick followed by one physics step."""
        dt = self.tick_interval if dt is None else dt
        with self._lock:
            status = self.controller.tick()
            self.simulation.step(dt)
            self.ticks += 1
        return status

    # -- Queries / commands -------------------------------------------------

    def snapshot(self) -> dict:
        with self._lock:
            controller = self.controller
            state = controller.state
            rig = controller.rig
            data = {
                "status": controller.status.value,
                "image": self.board.image,
                "ticks": self.ticks,
                "mode": state.mode.value if state and state.mode else None,
                "current_level": state.current_level if state else None,
                "active_weapon": list(state.active_weapon) if state and state.active_weapon else None,
                "error": str(controller.failure) if controller.failure else None,
            }
            if rig is not None:
                data["slide"] = {
                    "position": rig.slide.state.current_position,
                    "target": rig.slide.state.max_limit,
                    "velocity": rig.slide.state.velocity,
                }
                data["rotor"] = {
                    "angle": normalize_angle(rig.rotor.state.angle),
                    "target": rig.rotor.state.upper_limit,
                    "locked": rig.rotor.state.locked,
                    "velocity": rig.rotor.state.velocity,
                }
            return data

    def barrel(self) -> list[list[dict]] | None:
        """Per level, per quarter: weapon id and flags."""
        with self._lock:
            rig = self.controller.rig
            if rig is None:
                return None
            return [
                [
                    {
                        "id": weapon.part_id,
                        "available": weapon_available(weapon),
                        "ready": weapon_ready(weapon),
                        "enabled": weapon.state.enabled,
                        "firing": weapon.state.is_firing,
                        "functional": weapon.state.is_functional,
                    }
                    for weapon in level
                ]
                for level in rig.barrel
            ]

    def set_weapon(
        self,
        address: Address,
        is_firing: bool | None = None,
        is_functional: bool | None = None,
    ) -> dict | None:
        """Change the observed flags of the weapon at *address*; None if no such weapon."""
        with self._lock:
            rig = self.controller.rig
            if rig is None:
                return None
            weapon = rig.barrel.weapon_at(address.level, address.quarter)
            if weapon is None:
                return None
            self.simulation.set_weapon(weapon.part_id, is_firing=is_firing, is_functional=is_functional)
            logger.info(
                "Weapon %s: firing=%s functional=%s",
                weapon.part_id, weapon.state.is_firing, weapon.state.is_functional,
            )
            return {
                "id": weapon.part_id,
                "firing": weapon.state.is_firing,
                "functional": weapon.state.is_functional,
                "available": weapon_available(weapon),
            }
