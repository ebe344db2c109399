"""
Create/edit task form logic, without the widgets.

`TaskSubmissionFlow` owns the draft being edited, checks it, sends exactly
one create or update request per submit, and reports the outcome through
the callbacks the caller passes in. A UI renders `draft`, `error`,
`is_edit` and `loading`, and disables its submit button when
`can_submit` is false.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from .drafts import ExistingTask, NewTask, TaskDraft, draft_from_task
from .errors import ClientError, Unauthorized, ValidationError
from .http import ApiClient, ApiResponse, message_from


logger = logging.getLogger("taskmanager.client.submission")

PAST_DUE_MESSAGE = "Due date cannot be in the past"
GENERIC_ERROR = "An unexpected error occurred"


class FlowState(str, Enum):
    CLOSED = "closed"
    IDLE = "idle"
    SUBMITTING = "submitting"
    SETTLED = "settled"


class TaskSubmissionFlow:
    def __init__(
        self,
        client: ApiClient,
        on_save: Callable[[Optional[dict]], Any],
        on_close: Callable[[], Any],
        on_logout: Optional[Callable[[], Any]] = None,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self.on_save = on_save
        self.on_close = on_close
        self.on_logout = on_logout
        self.today = today

        self.state = FlowState.CLOSED
        self.draft: TaskDraft = NewTask()
        self.error: Optional[str] = None

    # ------------------ State ------------------

    @property
    def is_open(self) -> bool:
        return self.state is not FlowState.CLOSED

    @property
    def is_edit(self) -> bool:
        return isinstance(self.draft, ExistingTask)

    @property
    def loading(self) -> bool:
        return self.state is FlowState.SUBMITTING

    @property
    def can_submit(self) -> bool:
        return self.state is FlowState.IDLE

    def open(self, task: Optional[Mapping[str, Any]] = None) -> TaskDraft:
        """Start editing `task`, or a blank task when None."""
        self.draft = draft_from_task(task)
        self.error = None
        self.state = FlowState.IDLE
        return self.draft

    def close(self) -> None:
        self.state = FlowState.CLOSED
        self.draft = NewTask()
        self.error = None
        self.on_close()

    def set(self, name: str, value: Any) -> None:
        self.draft = self.draft.set(name, value)

    # ------------------ Submit ------------------

    def validate(self) -> None:
        fields = self.draft.fields
        if not fields.title.strip():
            raise ValidationError("Title is required")
        if fields.due_date is None:
            raise ValidationError("Due date is required")
        if fields.due_date < self.today():
            raise ValidationError(PAST_DUE_MESSAGE)

    def submit(self) -> Optional[dict]:
        """
        Validate and send the draft.

        Returns the saved task on success and None otherwise. A call made
        while a request is already in flight does nothing.
        """
        if self.state is FlowState.SUBMITTING:
            logger.debug("Submit ignored, request already in flight")
            return None
        if self.state is not FlowState.IDLE:
            raise RuntimeError("task form is not open")

        self.error = None
        try:
            self.validate()
        except ValidationError as e:
            self.error = e.message
            return None

        self.state = FlowState.SUBMITTING
        try:
            resp = self._dispatch(self.draft)
        except Unauthorized as e:
            return self._logout(e.message)
        except ClientError as e:
            return self._fail(e.message)
        except Exception as e:
            logger.exception("Unexpected error while saving task")
            return self._fail(str(e))

        if resp.status == 401:
            return self._logout(message_from(resp.data))

        saved = resp.data.get("task") if isinstance(resp.data, dict) else None
        self.state = FlowState.SETTLED
        self.on_save(saved)
        self.close()
        return saved

    def _dispatch(self, draft: TaskDraft) -> ApiResponse:
        payload = draft.fields.to_payload()
        if isinstance(draft, ExistingTask):
            return self.client.put(f"/tasks/{draft.id}", payload)
        return self.client.post("/tasks", payload)

    def _fail(self, message: Optional[str]) -> None:
        self.error = message or GENERIC_ERROR
        self.state = FlowState.IDLE
        return None

    def _logout(self, message: Optional[str]) -> None:
        # without a logout handler the rejection is shown like any other failure
        if self.on_logout is None:
            return self._fail(message)
        logger.info("Session rejected while saving task, logging out")
        self.state = FlowState.IDLE
        self.on_logout()
        return None
