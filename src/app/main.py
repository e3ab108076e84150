"""RAPIDGUN - weapon-switching rig controller.

Main FastAPI application.  The lifespan builds the simulated rig from
settings, runs discovery, and starts the tick thread; routers read and
poke the running host through ``app.state.rig_host``.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers.rig import router as rig_router
from rapidgun.host import RigHost
from rapidgun.selection import Status
from rapidgun.simulated import build_registry

VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Subsystem startup helpers
# ---------------------------------------------------------------------------

def _create_rig_host() -> RigHost | None:
    """Build the simulated rig and start its tick loop."""
    try:
        counts = settings.level_weapon_counts()
        registry = build_registry(counts, grid_size=settings.simulation_grid_size)
    except ValueError as e:
        logger.warning(f"Simulated rig layout rejected ({settings.simulation_levels!r}): {e}")
        return None

    host = RigHost(registry, tick_interval=settings.tick_interval)
    status = host.start()
    if status is Status.ERROR:
        logger.warning(f"Rig discovery failed: {host.controller.failure}")
    else:
        rig = host.controller.rig
        logger.info(f"Rig: {len(rig.barrel)} level(s), grid size {rig.grid_size} m")
    return host


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v{VERSION} - INITIALIZING")
    logger.info("=" * 60)

    logging.getLogger("rapidgun").setLevel(settings.log_level.upper())

    rig_host = None
    if settings.simulation_enabled:
        rig_host = _create_rig_host()
    else:
        logger.info("Simulation disabled; no rig host")
    app.state.rig_host = rig_host

    yield

    if rig_host is not None:
        logger.info("Stopping rig host...")
        rig_host.stop()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title="RAPIDGUN",
    description="Weapon-switching rig controller",
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(rig_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": VERSION,
        "system": settings.app_name,
    }


def run():
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
