from .drafts import ExistingTask, NewTask, TaskDraft, TaskFields, draft_from_task
from .errors import ApiError, ClientError, Conflict, MissingToken, TransportError, Unauthorized, ValidationError
from .http import ApiClient, ApiResponse, TaskApi, UserApi
from .session import FileTokenStore, TokenStore
from .submission import FlowState, TaskSubmissionFlow

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiResponse",
    "ClientError",
    "Conflict",
    "ExistingTask",
    "FileTokenStore",
    "FlowState",
    "MissingToken",
    "NewTask",
    "TaskApi",
    "TaskDraft",
    "TaskFields",
    "TaskSubmissionFlow",
    "TokenStore",
    "TransportError",
    "Unauthorized",
    "UserApi",
    "ValidationError",
    "draft_from_task",
]
