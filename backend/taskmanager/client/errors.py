from __future__ import annotations

from typing import Optional


class ClientError(Exception):
    """Base class for everything the client raises."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class MissingToken(ClientError):
    pass


class ValidationError(ClientError):
    """Draft rejected before it reached the network."""


class TransportError(ClientError):
    """The request never produced an HTTP response."""


class ApiError(ClientError):
    """Non-2xx response; `message` comes from the body when the server sent one."""

    def __init__(self, message: str, status: int, data: object = None):
        super().__init__(message, status)
        self.data = data


class Unauthorized(ApiError):
    pass


class Conflict(ApiError):
    pass


def error_for_status(status: int, message: str, data: object = None) -> ApiError:
    if status == 401:
        return Unauthorized(message, status, data)
    if status == 409:
        return Conflict(message, status, data)
    return ApiError(message, status, data)
