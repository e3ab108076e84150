#!/usr/bin/env python3
"""Run the rig controller against a simulated rig, headless.

Builds a rig, runs discovery, then ticks the controller while weapons are
marked firing one after another, logging every weapon switch.

Usage:
    python3 scripts/run_rig.py --levels 4,4,4 --ticks 300
    python3 scripts/run_rig.py --levels 4,4 --fire 1:0 --fire 1:1 --small
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(message)s")
logger = logging.getLogger("run_rig")

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rapidgun.addressing import Address
from rapidgun.host import DEFAULT_TICK_INTERVAL, RigHost
from rapidgun.parts import LARGE_GRID_SIZE, SMALL_GRID_SIZE
from rapidgun.selection import Status
from rapidgun.simulated import build_registry


def _parse_address(text: str) -> Address:
    level, _, quarter = text.partition(":")
    return Address(int(level), int(quarter))


def main():
    parser = argparse.ArgumentParser(description="Headless simulated rig run")
    parser.add_argument("--levels", type=str, default="4,4,4", help="Weapons per level, rotor outward")
    parser.add_argument("--ticks", type=int, default=300, help="Number of controller ticks")
    parser.add_argument("--fire", type=_parse_address, action="append", default=[],
                        help="level:quarter of a weapon to start firing once ready (repeatable)")
    parser.add_argument("--small", action="store_true", help="Small grid (0.5 m cubes)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    counts = [int(c) for c in args.levels.split(",") if c.strip()]
    grid_size = SMALL_GRID_SIZE if args.small else LARGE_GRID_SIZE
    host = RigHost(build_registry(counts, grid_size=grid_size))

    status = host.restart()
    if status is Status.ERROR:
        logger.error("Discovery failed: %s", host.controller.failure)
        sys.exit(1)

    pending = list(args.fire)
    for _ in range(args.ticks):
        status = host.do_tick(DEFAULT_TICK_INTERVAL)
        # Each weapon on the list starts firing once it is the ready one
        if status is Status.READY and pending:
            address = pending.pop(0)
            host.set_weapon(address, is_firing=True)

    snap = host.snapshot()
    logger.info(
        "Done after %d ticks: status=%s level=%s active=%s",
        snap["ticks"], snap["status"], snap["current_level"], snap["active_weapon"],
    )


if __name__ == "__main__":
    main()
