"""Rig API -- controller status, barrel layout, simulated weapon events."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from loguru import logger
from pydantic import BaseModel

from rapidgun.addressing import Address

router = APIRouter(prefix="/api/rig", tags=["rig"])


class WeaponUpdate(BaseModel):
    """Observed weapon flags to change; omitted fields are left alone."""
    firing: Optional[bool] = None
    functional: Optional[bool] = None


def _get_host(request: Request):
    """Retrieve the RigHost from app state."""
    host = getattr(request.app.state, "rig_host", None)
    if host is None:
        raise HTTPException(503, "Rig host not available")
    return host


@router.get("/status")
async def get_status(request: Request):
    """Controller status, mode, and actuator readings."""
    return _get_host(request).snapshot()


@router.get("/barrel")
async def get_barrel(request: Request):
    """Weapon availability per level and quarter."""
    levels = _get_host(request).barrel()
    if levels is None:
        raise HTTPException(409, "No rig discovered")
    return {"levels": levels}


@router.post("/weapons/{level}/{quarter}")
async def update_weapon(level: int, quarter: int, update: WeaponUpdate, request: Request):
    """Mark a simulated weapon firing/idle or damaged/repaired."""
    host = _get_host(request)
    result = host.set_weapon(
        Address(level, quarter), is_firing=update.firing, is_functional=update.functional,
    )
    if result is None:
        raise HTTPException(404, f"No weapon at level {level} quarter {quarter}")
    return result


@router.post("/restart")
async def restart(request: Request):
    """Re-run discovery (clears an error status once the rig is whole)."""
    host = _get_host(request)
    status = host.restart()
    logger.info(f"Rig restart requested: status {status.value}")
    return {"status": status.value}
