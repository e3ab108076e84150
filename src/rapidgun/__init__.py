"""RapidGun -- weapon-switching rig controller: discovery, motion, selection."""
from .addressing import NOWHERE, Address, closest_available, quarter_distance
from .discovery import Barrel, DiscoveryFailure, Rig, discover
from .display import STATUS_IMAGES, StatusBoard, TextSurface
from .geometry import (
    Direction,
    Orientation,
    ascending_positions,
    cross_positions,
    direction_to_quarter,
    normalize_angle,
    quarter_of,
)
from .host import RigHost
from .motion import MotionController, MotionTuning, RigObservation
from .parts import Grid, Part, PartKind, PartRegistry, RotorState, SlideState, WeaponState
from .selection import ControllerState, RapidGunController, SelectionMode, Status, select_mode
from .simulated import SimulatedRig, build_registry

__all__ = [
    "Address",
    "Barrel",
    "ControllerState",
    "Direction",
    "DiscoveryFailure",
    "Grid",
    "MotionController",
    "MotionTuning",
    "NOWHERE",
    "Orientation",
    "Part",
    "PartKind",
    "PartRegistry",
    "RapidGunController",
    "Rig",
    "RigHost",
    "RigObservation",
    "RotorState",
    "STATUS_IMAGES",
    "SelectionMode",
    "SimulatedRig",
    "SlideState",
    "Status",
    "StatusBoard",
    "TextSurface",
    "WeaponState",
    "ascending_positions",
    "build_registry",
    "closest_available",
    "cross_positions",
    "direction_to_quarter",
    "discover",
    "normalize_angle",
    "quarter_distance",
    "quarter_of",
    "select_mode",
]
