from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from .errors import MissingToken


logger = logging.getLogger("taskmanager.client.session")


class TokenStore:
    """Holds the bearer token of the current session, in memory."""

    def __init__(self, token: Optional[str] = None):
        self._token = token or None

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None

    def build_auth_header(self) -> Dict[str, str]:
        token = self.get_token()
        if not token:
            raise MissingToken("No auth token found")
        return {"Authorization": f"Bearer {token}"}


class FileTokenStore(TokenStore):
    """
    Token store persisted to a file so a session survives restarts.

    The file is read lazily and rewritten on every change; a missing file
    means "logged out".
    """

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path).expanduser()

    def get_token(self) -> Optional[str]:
        if not self.path.exists():
            return None
        token = self.path.read_text(encoding="utf-8").strip()
        return token or None

    def set_token(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        self.path.chmod(0o600)
        logger.debug("Stored session token in %s", self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.debug("Cleared session token at %s", self.path)
