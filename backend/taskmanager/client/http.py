from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ..config import ClientSettings
from .errors import TransportError, error_for_status
from .session import FileTokenStore, TokenStore


logger = logging.getLogger("taskmanager.client.http")


@dataclass
class ApiResponse:
    status: int
    data: Any


def message_from(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        for key in ("message", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class ApiClient:
    """
    Thin JSON wrapper over a `requests.Session`.

    The token store is injected; when it holds a token every request carries
    `Authorization: Bearer <token>`. 2xx answers come back as `ApiResponse`,
    anything else raises an `ApiError` subclass, and connection failures
    raise `TransportError`.
    """

    def __init__(
        self,
        base_url: str,
        token_store: Optional[TokenStore] = None,
        session: Any = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store if token_store is not None else TokenStore()
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, client_settings: Optional[ClientSettings] = None) -> "ApiClient":
        client_settings = client_settings or ClientSettings()
        return cls(
            client_settings.api_base_url,
            FileTokenStore(client_settings.token_file),
            timeout=client_settings.request_timeout,
        )

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token_store.get_token():
            headers.update(self.token_store.build_auth_header())
        return headers

    def request(self, method: str, path: str, json: Any = None) -> ApiResponse:
        kwargs: Dict[str, Any] = {"headers": self.headers()}
        if json is not None:
            kwargs["json"] = json
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        url = self.url(path)
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(str(e) or "Network Error") from e

        try:
            data = resp.json() if resp.content else None
        except ValueError:
            data = None

        if 200 <= resp.status_code < 300:
            return ApiResponse(status=resp.status_code, data=data)

        message = message_from(data) or f"Request failed with status code {resp.status_code}"
        logger.info("%s %s -> %s: %s", method, url, resp.status_code, message)
        raise error_for_status(resp.status_code, message, data)

    def get(self, path: str) -> ApiResponse:
        return self.request("GET", path)

    def post(self, path: str, json: Any = None) -> ApiResponse:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> ApiResponse:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> ApiResponse:
        return self.request("DELETE", path)


class UserApi:
    """Account endpoints; `login` and `logout` maintain the token store."""

    def __init__(self, client: ApiClient):
        self.client = client

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        resp = self.client.post("/register", {"name": name, "email": email, "password": password})
        return resp.data["user"]

    def login(self, email: str, password: str) -> str:
        resp = self.client.post("/login", {"email": email, "password": password})
        token = resp.data["token"]
        self.client.token_store.set_token(token)
        return token

    def logout(self) -> None:
        self.client.token_store.clear()

    def me(self) -> Dict[str, Any]:
        return self.client.get("/me").data["user"]

    def update_profile(self, **fields: Any) -> Dict[str, Any]:
        return self.client.put("/profile", fields).data["user"]

    def update_password(self, current_password: str, new_password: str) -> str:
        resp = self.client.put(
            "/password",
            {"currentPassword": current_password, "newPassword": new_password},
        )
        return resp.data["message"]


class TaskApi:
    def __init__(self, client: ApiClient):
        self.client = client

    def list(self) -> List[Dict[str, Any]]:
        return self.client.get("/tasks").data["tasks"]

    def get(self, task_id: Any) -> Dict[str, Any]:
        return self.client.get(f"/tasks/{task_id}").data["task"]

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.post("/tasks", payload).data["task"]

    def update(self, task_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.put(f"/tasks/{task_id}", payload).data["task"]

    def delete(self, task_id: Any) -> None:
        self.client.delete(f"/tasks/{task_id}")
