from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from impostofacil import config
from impostofacil.api.routes_simulator import router as simulator_router
from impostofacil.caching.redis_client import get_redis_client
from impostofacil.observability import redact_secret
from impostofacil.simulator.snapshots import SnapshotCache
from impostofacil.simulator.tax_data import REGISTRY_LAST_UPDATED
from impostofacil.version import __version__

# -----------------------------------------------------------------------------
# App setup
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


def build_snapshot_cache() -> SnapshotCache:
    """Redis-backed when ``REDIS_URL`` is set, in-process otherwise."""

    redis_client = get_redis_client() if config.redis_url() else None
    if redis_client is not None and not redis_client.ping():
        logger.warning("Redis at %s is unreachable; snapshot reads will fail", redact_secret(redis_client.url))
    logger.info("Simulator snapshots stored in %s", "redis" if redis_client else "memory")
    return SnapshotCache(redis_client=redis_client)


@asynccontextmanager
async def lifespan(app: FastAPI):
    built = app.state.snapshots is None
    if built:
        app.state.snapshots = build_snapshot_cache()
    yield
    if built:
        app.state.snapshots = None


def create_app(snapshots: Optional[SnapshotCache] = None) -> FastAPI:
    """Build the API; without ``snapshots`` the cache is created at startup."""

    application = FastAPI(title="impostofacil API", version="v1", lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.state.snapshots = snapshots
    application.include_router(simulator_router)

    # -------------------------------------------------------------------------
    # Health + Info Endpoints
    # -------------------------------------------------------------------------
    @application.get("/v1/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "status": "ok"}

    @application.get("/v1/info")
    def info() -> Dict[str, Any]:
        return {"version": __version__, "tax_data_last_updated": REGISTRY_LAST_UPDATED}

    return application


app = create_app()
