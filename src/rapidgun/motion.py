"""MotionController -- drives the slide and rotor toward a (level, quarter) target.

Targets are written into the actuators' own limit fields; the actuators do
the travelling.  Each tick the controller reads one ``RigObservation`` and
then issues one of:

    drive_slide()  -- velocity at max, signed toward the slide limit
    drive_rotor()  -- unlock, torque along the shorter arc
    brake()        -- lock, full braking torque

Slide:
    target limit = (barrel length - level - 1) * grid size
    in position  = max_limit == current_position, exactly.  Limits are exact
                   multiples of the grid size and the slide stops on them.

Rotor:
    target angle = quarter * pi/2, written to both limits
    in position  = normalized angle == upper_limit, exactly
    stopped      = locked and observed velocity == 0

The rotor's direction of travel is the sign of its torque; the velocity
field is always positive.  Reverse rotation needs the torque cut by an
empirical factor of 85 or it overshoots and oscillates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .geometry import HALF_PI, normalize_angle, quarter_of

if TYPE_CHECKING:
    from .addressing import Address
    from .discovery import Rig

logger = logging.getLogger("rapidgun.motion")


@dataclass(frozen=True)
class MotionTuning:
    """Actuator constants.  Defaults match a large-grid rig."""
    max_rotor_torque: float = 1_000_000_000.0  # N*m
    reverse_torque_divisor: float = 85.0
    rotor_velocity: float = math.pi            # rad/s, actuator maximum
    slide_max_impulse: float = 100_000.0       # N
    rotor_displacement_large: float = -0.3     # m
    rotor_displacement_small: float = 0.05     # m


@dataclass(frozen=True)
class RigObservation:
    """Sensor snapshot taken once at the start of a tick.

    Fields:
        slide_position:    slide current position (m)
        slide_target:      slide max limit, i.e. the commanded target (m)
        rotor_angle:       rotor angle normalized into [0, 2*pi)
        rotor_upper_limit: rotor upper limit, i.e. the commanded target (rad)
        rotor_locked:      rotor lock engaged
        rotor_velocity:    observed rotor speed (rad/s, magnitude)
    """
    slide_position: float
    slide_target: float
    rotor_angle: float
    rotor_upper_limit: float
    rotor_locked: bool
    rotor_velocity: float

    @property
    def slide_in_position(self) -> bool:
        return self.slide_target == self.slide_position

    @property
    def rotor_in_position(self) -> bool:
        return self.rotor_angle == self.rotor_upper_limit

    @property
    def rotor_stopped(self) -> bool:
        return self.rotor_locked and self.rotor_velocity == 0

    @property
    def quarter(self) -> int:
        return quarter_of(self.rotor_angle)


def rotation_is_reverse(delta: float) -> bool:
    """Whether turning by *delta* radians is shorter the negative way round."""
    return (-math.pi < delta < 0) or delta > math.pi


class MotionController:
    """Commands one rig's slide and rotor."""

    def __init__(self, rig: Rig, tuning: MotionTuning | None = None) -> None:
        self._rig = rig
        self.tuning = tuning or MotionTuning()

    @property
    def slide(self):
        return self._rig.slide.state

    @property
    def rotor(self):
        return self._rig.rotor.state

    # -- sensing --

    def observe(self) -> RigObservation | None:
        """Snapshot the actuators, or None if either no longer exists."""
        if not self._rig.exists:
            return None
        slide, rotor = self.slide, self.rotor
        return RigObservation(
            slide_position=slide.current_position,
            slide_target=slide.max_limit,
            rotor_angle=normalize_angle(rotor.angle),
            rotor_upper_limit=rotor.upper_limit,
            rotor_locked=rotor.locked,
            rotor_velocity=rotor.velocity,
        )

    # -- startup --

    def initialize(self, level: int) -> None:
        """Park everything: weapons off, rotor braked at quarter 0, slide at *level*."""
        for weapon in self._rig.barrel.weapons():
            weapon.state.enabled = False

        rotor = self.rotor
        rotor.displacement = (
            self.tuning.rotor_displacement_large if self._rig.is_grid_large
            else self.tuning.rotor_displacement_small
        )
        self.set_rotor_target(0)
        self.brake()

        slide = self.slide
        slide.max_impulse = self.tuning.slide_max_impulse
        slide.min_limit = 0.0
        self.set_slide_target(level)
        self.drive_slide()

    # -- slide --

    def slide_target_for(self, level: int) -> float:
        """Slide extension (m) that puts *level* in the firing position."""
        return (len(self._rig.barrel) - level - 1) * self._rig.grid_size

    def set_slide_target(self, level: int) -> None:
        self.slide.max_limit = self.slide_target_for(level)

    def drive_slide(self, observation: RigObservation | None = None) -> None:
        """Full speed toward the slide target."""
        slide = self.slide
        if observation is None:
            target, position = slide.max_limit, slide.current_position
        else:
            target, position = observation.slide_target, observation.slide_position
        slide.velocity = slide.max_velocity if target > position else -slide.max_velocity

    # -- rotor --

    def set_rotor_target(self, quarter: int) -> None:
        """Pin both rotor limits at the quarter's angle.

        The limits must never cross: when moving down, lower goes first;
        otherwise upper goes first.
        """
        angle = quarter * HALF_PI
        rotor = self.rotor
        if angle < rotor.lower_limit:
            rotor.lower_limit = angle
            rotor.upper_limit = angle
        else:
            rotor.upper_limit = angle
            rotor.lower_limit = angle

    def drive_rotor(self, observation: RigObservation | None = None) -> None:
        """Release the lock and turn along the shorter arc."""
        rotor = self.rotor
        if observation is None:
            delta = rotor.upper_limit - normalize_angle(rotor.angle)
        else:
            delta = observation.rotor_upper_limit - observation.rotor_angle
        if rotation_is_reverse(delta):
            rotor.torque = self.tuning.max_rotor_torque / -self.tuning.reverse_torque_divisor
        else:
            rotor.torque = self.tuning.max_rotor_torque
        rotor.braking_torque = 0.0
        rotor.target_velocity = self.tuning.rotor_velocity
        rotor.locked = False

    def brake(self) -> None:
        rotor = self.rotor
        rotor.locked = True
        rotor.torque = 0.0
        rotor.braking_torque = self.tuning.max_rotor_torque
        rotor.target_velocity = 0.0

    # -- targeting --

    def retarget(self, address: Address) -> None:
        """Aim both axes at *address*; movement starts on the next tick."""
        logger.debug("Retarget to level=%d quarter=%d", address.level, address.quarter)
        self.set_slide_target(address.level)
        self.set_rotor_target(address.quarter)
