"""Weapon selection state machine -- the per-tick control loop.

Each tick reads one RigObservation and picks exactly one mode:

    sliding        slide not at its target       -> drive slide
    rotating       rotor not at its target       -> drive rotor
    braking        both in position, rotor still
                   turning or unlocked           -> brake
    weapon_active  settled                       -> enable the weapon under
                                                    the firing position, or
                                                    retarget to the closest
                                                    available one

Outside weapon_active the active weapon is switched off and released, so a
weapon is never enabled while the barrel moves.  There is no terminal
state; the host keeps calling ``tick()`` for the life of the program.

ControllerState is an immutable record replaced on every tick, so
``advance()`` can be driven step by step in tests without a host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from .addressing import NOWHERE, Address, closest_available
from .discovery import DiscoveryFailure, Rig, discover
from .motion import MotionController, MotionTuning, RigObservation
from .parts import PartRegistry, weapon_available, weapon_ready

logger = logging.getLogger("rapidgun.selection")


class SelectionMode(Enum):
    SLIDING = "sliding"
    ROTATING = "rotating"
    BRAKING = "braking"
    WEAPON_ACTIVE = "weapon_active"


class Status(Enum):
    """What the indicator surfaces show."""
    ERROR = "error"          # no rig
    READY = "ready"          # active weapon enabled and available
    NOT_READY = "not-ready"  # moving, or nothing available


@dataclass(frozen=True)
class ControllerState:
    current_level: int
    active_weapon: Address | None = None
    mode: SelectionMode | None = None


def select_mode(observation: RigObservation) -> SelectionMode:
    if not observation.slide_in_position:
        return SelectionMode.SLIDING
    if not observation.rotor_in_position:
        return SelectionMode.ROTATING
    if not observation.rotor_stopped:
        return SelectionMode.BRAKING
    return SelectionMode.WEAPON_ACTIVE


class RapidGunController:
    """Owns the discovered rig and runs the selection loop.

    ``start()`` must be called (and succeed) before ``tick()`` does
    anything; until then every tick reports Status.ERROR.
    """

    def __init__(self, tuning: MotionTuning | None = None) -> None:
        self._tuning = tuning or MotionTuning()
        self._rig: Rig | None = None
        self._motion: MotionController | None = None
        self.state: ControllerState | None = None
        self.failure: DiscoveryFailure | None = None
        self.on_status: Callable[[Status], None] | None = None
        self._last_status: Status | None = None

    @property
    def rig(self) -> Rig | None:
        return self._rig

    @property
    def running(self) -> bool:
        return self._rig is not None

    @property
    def status(self) -> Status:
        if self._rig is None or self.state is None:
            return Status.ERROR
        active = self.state.active_weapon
        if active is not None and weapon_ready(self._weapon_at(active)):
            return Status.READY
        return Status.NOT_READY

    # -- entry points --

    def start(self, registry: PartRegistry) -> Status:
        """Discover the rig and park it at the outermost level."""
        result = discover(registry)
        if isinstance(result, DiscoveryFailure):
            logger.error("Rig discovery failed: %s", result)
            self._rig = None
            self._motion = None
            self.state = None
            self.failure = result
            return self._publish()

        self._rig = result
        self.failure = None
        self._motion = MotionController(result, self._tuning)
        outermost = len(result.barrel) - 1
        self._motion.initialize(outermost)
        self.state = ControllerState(current_level=outermost)
        return self._publish()

    def tick(self) -> Status:
        """One control step.  Never blocks."""
        if self._rig is None:
            return self._publish()

        observation = self._motion.observe()
        if observation is None:
            logger.error("Slide or rotor of the rig no longer exists; restart required")
            self.failure = DiscoveryFailure("rig lost: slide or rotor no longer exists")
            self._rig = None
            self._motion = None
            self.state = None
            return self._publish()

        self.state = self.advance(self.state, observation)
        return self._publish()

    # -- state machine --

    def advance(self, state: ControllerState, observation: RigObservation) -> ControllerState:
        """Decide and issue this tick's single command; return the next state."""
        mode = select_mode(observation)
        if mode is not state.mode:
            logger.debug("Mode %s -> %s", state.mode and state.mode.value, mode.value)

        if mode is SelectionMode.WEAPON_ACTIVE:
            return self._prepare_weapon(replace(state, mode=mode), observation)

        state = self._release(replace(state, mode=mode))
        if mode is SelectionMode.SLIDING:
            self._motion.drive_slide(observation)
        elif mode is SelectionMode.ROTATING:
            self._motion.drive_rotor(observation)
        else:
            self._motion.brake()
        return state

    def _prepare_weapon(self, state: ControllerState, observation: RigObservation) -> ControllerState:
        """Enable the weapon in the firing position, or go find another one."""
        address = Address(state.current_level, observation.quarter)
        if state.active_weapon is not None and state.active_weapon != address:
            state = self._release(state)

        weapon = self._weapon_at(address)
        if weapon_available(weapon):
            if not weapon.state.enabled:
                logger.debug("Weapon %s active at %s", weapon.part_id, tuple(address))
            weapon.state.enabled = True
            return replace(state, active_weapon=address)

        state = self._release(state)
        target = closest_available(state.current_level, observation.quarter, self._rig.barrel)
        if target == NOWHERE:
            return state

        logger.debug(
            "Weapon at %s unavailable; switching to %s", tuple(address), tuple(target),
        )
        self._motion.retarget(target)
        return replace(state, current_level=target.level)

    def _release(self, state: ControllerState) -> ControllerState:
        if state.active_weapon is None:
            return state
        weapon = self._weapon_at(state.active_weapon)
        if weapon is not None and weapon.exists:
            weapon.state.enabled = False
        return replace(state, active_weapon=None)

    def _weapon_at(self, address: Address):
        return self._rig.barrel.weapon_at(address.level, address.quarter)

    def _publish(self) -> Status:
        status = self.status
        if status is not self._last_status:
            logger.info("Status %s", status.value)
            self._last_status = status
        if self.on_status is not None:
            self.on_status(status)
        return status
