"""Health check endpoint."""
from __future__ import annotations

import hashlib
import logging

from fastapi import APIRouter
from sqlalchemy import text

from propbook.config import GatewayConfig, get_settings
from propbook.db import get_engine

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _db_status() -> str:
    """Return 'ok' if the DB is reachable, 'error' otherwise."""

    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok"
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"


def _fingerprint(value: str | None) -> str | None:
    if not value:
        return None
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:8]


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    """Return database reachability and gateway configuration."""

    settings = get_settings()
    gateway = GatewayConfig.from_settings(settings)
    db_status = _db_status()
    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "env": settings.app_env,
        "db_status": db_status,
        "db_ok": db_status == "ok",
        "razorpay": {
            "configured": gateway.configured,
            "key_id": gateway.key_id,
            "secret_fingerprint": _fingerprint(gateway.key_secret),
        },
    }
