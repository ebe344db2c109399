from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


Priority = Literal["Low", "Medium", "High"]


def _non_blank(value: Optional[str], message: str) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(message)
    return value


def _yes_no(value):
    # the task form posts "Yes"/"No"; JSON clients may post booleans
    if isinstance(value, str) and value in ("Yes", "No"):
        return value == "Yes"
    return value


# ------------------ Users ------------------


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        return _non_blank(v, "Name is required")


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _non_blank(v, "Name cannot be empty")


class PasswordUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")


class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    name: str
    email: str
    created_at: datetime = Field(alias="createdAt")


class UserResponse(BaseModel):
    success: bool = True
    user: UserOut


class TokenResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: UserOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ------------------ Tasks ------------------


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: Optional[str] = ""
    priority: Priority = "Low"
    due_date: date = Field(alias="dueDate")
    completed: bool = False

    @field_validator("title")
    @classmethod
    def _title_required(cls, v: str) -> str:
        return _non_blank(v, "Title is required")

    @field_validator("description")
    @classmethod
    def _description_default(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("completed", mode="before")
    @classmethod
    def _completed_flag(cls, v):
        return _yes_no(v)


class TaskUpdate(BaseModel):
    """Partial update; only the fields present in the body are applied."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = Field(default=None, alias="dueDate")
    completed: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _non_blank(v, "Title is required")

    @field_validator("completed", mode="before")
    @classmethod
    def _completed_flag(cls, v):
        return _yes_no(v)


class TaskOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    description: str
    priority: str
    due_date: Optional[date] = Field(alias="dueDate")
    completed: bool
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class TaskResponse(BaseModel):
    success: bool = True
    task: TaskOut


class TaskListResponse(BaseModel):
    success: bool = True
    tasks: List[TaskOut]
