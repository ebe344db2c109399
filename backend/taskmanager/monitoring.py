"""
Health and metrics endpoints.

Both are public and excluded from request logging so that health checks do not
flood the log.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from . import __version__
from .db import get_session
from .models import Task, User


logger = logging.getLogger("taskmanager.monitoring")

router = APIRouter(tags=["monitoring"])


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    database: str


class MetricsResponse(BaseModel):
    timestamp: str
    users_total: int
    tasks_total: int
    tasks_open: int
    tasks_completed: int
    tasks_overdue: int


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_database_health(session: Session) -> str:
    try:
        session.exec(select(func.count()).select_from(User)).first()
        return "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return "unhealthy"


def _count(session: Session, *criteria) -> int:
    query = select(func.count()).select_from(Task)
    if criteria:
        query = query.where(*criteria)
    return session.exec(query).first() or 0


@router.get("/health", response_model=HealthResponse)
def health_check(session: Session = Depends(get_session)) -> HealthResponse:
    db_status = _check_database_health(session)
    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=_now(),
        version=__version__,
        database=db_status,
    )


@router.get("/metrics", response_model=MetricsResponse)
def get_metrics(session: Session = Depends(get_session)) -> MetricsResponse:
    """Row counts across all users; overdue means open with a due date before today."""
    users_total = session.exec(select(func.count()).select_from(User)).first() or 0
    tasks_completed = _count(session, Task.completed == True)  # noqa: E712
    tasks_open = _count(session, Task.completed == False)  # noqa: E712
    tasks_overdue = _count(
        session,
        Task.completed == False,  # noqa: E712
        Task.due_date != None,  # noqa: E711
        Task.due_date < date.today(),
    )

    return MetricsResponse(
        timestamp=_now(),
        users_total=users_total,
        tasks_total=tasks_completed + tasks_open,
        tasks_open=tasks_open,
        tasks_completed=tasks_completed,
        tasks_overdue=tasks_overdue,
    )
