"""FastAPI dependencies for the schedule endpoints.

Authentication happens upstream; the gateway forwards the authenticated user
id in ``X-User-Id``. Every route is scoped by that id.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, Request, status
from loguru import logger

from workout_calendar.schedule.service import ScheduleService


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller's owner id or reject the request with 401."""
    if not x_user_id or not x_user_id.strip():
        logger.warning("Rejected schedule request without X-User-Id header")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user id")
    return x_user_id.strip()


def get_schedule_service(request: Request) -> ScheduleService:
    service = getattr(request.app.state, "schedule_service", None)
    if service is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Schedule service not ready")
    return service
