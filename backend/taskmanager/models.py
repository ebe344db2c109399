from datetime import datetime, date, timezone
from typing import Optional, List

from sqlmodel import SQLModel, Field, Relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    tasks: List["Task"] = Relationship(back_populates="owner", sa_relationship_kwargs={"lazy": "select"})


class Task(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str = ""
    priority: str = "Low"  # Low | Medium | High
    due_date: Optional[date] = None
    completed: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    owner_id: int = Field(foreign_key="user.id", index=True)
    owner: Optional["User"] = Relationship(back_populates="tasks", sa_relationship_kwargs={"lazy": "select"})
