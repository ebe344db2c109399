from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from .db import get_session
from .deps import get_current_user
from .logging_config import log_crud_event
from .models import Task, User, utcnow
from .schemas import MessageResponse, TaskCreate, TaskListResponse, TaskOut, TaskResponse, TaskUpdate


router = APIRouter(prefix="/tasks", tags=["tasks"])

PAST_DUE_MESSAGE = "Due date cannot be in the past"


def _task_out(task: Task) -> TaskOut:
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
        completed=task.completed,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _check_due_date(due_date: date) -> None:
    if due_date < date.today():
        raise HTTPException(status_code=422, detail=PAST_DUE_MESSAGE)


def _get_task_or_404(task_id: int, me: User, session: Session) -> Task:
    task = session.get(Task, task_id)
    if not task or task.owner_id != me.id:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("", response_model=TaskListResponse)
def list_tasks(
    me: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskListResponse:
    tasks = session.exec(select(Task).where(Task.owner_id == me.id).order_by(Task.created_at.desc())).all()
    return TaskListResponse(tasks=[_task_out(t) for t in tasks])


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(
    task_in: TaskCreate,
    me: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskResponse:
    _check_due_date(task_in.due_date)
    task = Task(
        title=task_in.title,
        description=task_in.description,
        priority=task_in.priority,
        due_date=task_in.due_date,
        completed=task_in.completed,
        owner_id=me.id,
    )
    session.add(task)
    session.commit()
    session.refresh(task)
    log_crud_event("create", "task", task.id, me.email, f"title={task.title}")
    return TaskResponse(task=_task_out(task))


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    me: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskResponse:
    return TaskResponse(task=_task_out(_get_task_or_404(task_id, me, session)))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_in: TaskUpdate,
    me: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskResponse:
    task = _get_task_or_404(task_id, me, session)
    changes = task_in.model_dump(exclude_unset=True)

    # an unchanged due date may already be in the past; only a new one is checked
    new_due = changes.get("due_date")
    if new_due is not None and new_due != task.due_date:
        _check_due_date(new_due)
    elif "due_date" in changes and new_due is None:
        raise HTTPException(status_code=422, detail="Due date is required")

    for field, value in changes.items():
        if value is None:
            continue
        setattr(task, field, value)
    task.updated_at = utcnow()
    session.add(task)
    session.commit()
    session.refresh(task)
    log_crud_event("update", "task", task.id, me.email, ",".join(sorted(changes)))
    return TaskResponse(task=_task_out(task))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: int,
    me: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> MessageResponse:
    task = _get_task_or_404(task_id, me, session)
    session.delete(task)
    session.commit()
    log_crud_event("delete", "task", task_id, me.email)
    return MessageResponse(message="Task deleted")
