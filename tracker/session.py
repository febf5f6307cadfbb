import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TokenHolder:
    """In-memory credential for the active session.

    Starts empty; `set` is called once per successful login. There is no
    local expiry check, an invalid token just makes the next request fail.
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def is_authenticated(self) -> bool:
        return bool(self._token)

    def auth_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._token}",
        }


class TokenStorage:
    """Durable copy of the token so a reload keeps the user logged in."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"authToken": token}, f)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return None
        token = data.get("authToken") if isinstance(data, dict) else None
        return token or None
