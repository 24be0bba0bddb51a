import logging
import time

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import FRONTEND_LOGGER_NAME, format_frontend_message
from app.core.migrations import CurrentRevision
from app.db import GetEngine

router = APIRouter(prefix="/api", tags=["health"])
logger = logging.getLogger("core.health")
frontend_logger = logging.getLogger(FRONTEND_LOGGER_NAME)

FRONTEND_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


@router.get("/health")
async def api_health() -> dict:
    return {"status": "ok"}


@router.get("/health/db")
def api_health_db() -> dict:
    try:
        with GetEngine().connect() as connection:
            connection.execute(text("SELECT 1"))
            revision = CurrentRevision(connection)
    except SQLAlchemyError:
        logger.exception("db check failed")
        return {"status": "error", "detail": "database unavailable"}
    return {"status": "ok", "revision": revision}


class FrontendLogPayload(BaseModel):
    level: str = Field(default="info", max_length=16)
    message: str = Field(..., max_length=2000)
    context: dict | None = None


@router.post("/logs")
async def api_logs(payload: FrontendLogPayload, request: Request) -> dict:
    level = FRONTEND_LEVELS.get(payload.level.strip().lower(), logging.INFO)
    context = {
        "ip": request.client.host if request.client else "unknown",
        "ua": request.headers.get("user-agent", "unknown"),
        **(payload.context or {}),
    }
    frontend_logger.log(level, format_frontend_message(payload.message, context))
    return {"status": "ok", "timestamp": time.time()}
