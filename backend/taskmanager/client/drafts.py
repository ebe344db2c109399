"""
Typed draft of a task while it is being edited.

A draft is either a `NewTask` (never saved, no id) or an `ExistingTask`
(has a server id). Submitting a `NewTask` creates; submitting an
`ExistingTask` updates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields as dataclass_fields, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union


logger = logging.getLogger("taskmanager.client.drafts")

PRIORITIES = ("Low", "Medium", "High")
COMPLETED_VALUES = ("Yes", "No")


@dataclass(frozen=True)
class TaskFields:
    title: str = ""
    description: str = ""
    priority: str = "Low"
    due_date: Optional[date] = None
    completed: str = "No"

    def set(self, name: str, value: Any) -> "TaskFields":
        """Return a copy with one field changed; unknown names raise KeyError."""
        if name not in _FIELD_NAMES:
            raise KeyError(name)
        if name == "priority" and value not in PRIORITIES:
            raise ValueError(f"priority must be one of {', '.join(PRIORITIES)}")
        if name == "completed":
            if not isinstance(value, bool) and value not in COMPLETED_VALUES:
                raise ValueError("completed must be Yes or No")
            value = normalize_completed(value)
        if name == "due_date":
            value = parse_due_date(value)
        if name in ("title", "description"):
            value = "" if value is None else str(value)
        return replace(self, **{name: value})

    def to_payload(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "completed": self.completed,
        }


_FIELD_NAMES = frozenset(f.name for f in dataclass_fields(TaskFields))


@dataclass(frozen=True)
class NewTask:
    fields: TaskFields = field(default_factory=TaskFields)

    @property
    def id(self) -> None:
        return None

    def set(self, name: str, value: Any) -> "NewTask":
        return NewTask(self.fields.set(name, value))


@dataclass(frozen=True)
class ExistingTask:
    id: str
    fields: TaskFields = field(default_factory=TaskFields)

    def set(self, name: str, value: Any) -> "ExistingTask":
        return ExistingTask(self.id, self.fields.set(name, value))


TaskDraft = Union[NewTask, ExistingTask]


def normalize_completed(value: Any) -> str:
    return "Yes" if value is True or value == "Yes" else "No"


def parse_due_date(value: Any) -> Optional[date]:
    """Accept a date or an ISO string; anything after "T" is dropped."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).split("T")[0])


def draft_from_task(task: Optional[Mapping[str, Any]]) -> TaskDraft:
    """
    Seed a draft from a task as the API returns it, or defaults when None.

    Values go through `TaskFields.set` like user edits do. A priority or due
    date that `set` rejects is logged and left at its default, so the form
    still opens and the bad value surfaces when the user submits.
    """
    if not task:
        return NewTask()

    seeded = {
        "title": task.get("title"),
        "description": task.get("description"),
        "priority": task.get("priority") or "Low",
        "due_date": task.get("dueDate"),
        "completed": normalize_completed(task.get("completed")),
    }
    task_fields = TaskFields()
    for name, value in seeded.items():
        try:
            task_fields = task_fields.set(name, value)
        except ValueError as e:
            logger.warning("Ignoring %s=%r from task %r: %s", name, value, task.get("id"), e)

    task_id = task.get("id") or task.get("_id")
    if task_id is None or task_id == "":
        return NewTask(task_fields)
    return ExistingTask(str(task_id), task_fields)
