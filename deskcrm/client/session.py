# deskcrm/client/session.py
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from deskcrm import config

log = logging.getLogger(__name__)

CURRENT_USER_KEY = "ems_current_user"


@dataclass(frozen=True)
class Session:
    """Who is logged in. Returned by login and passed into every mutation."""
    token: str
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> str:
        return self.user.get("id", "")

    @property
    def username(self) -> str:
        return self.user.get("username", "")

    @property
    def role(self) -> str:
        return self.user.get("role", "user")

    def is_admin(self) -> bool:
        return self.role == "admin"

    def can_delete(self) -> bool:
        return self.role == "admin"

    def can_edit(self) -> bool:
        return bool(self.token)

    def expires_at(self) -> Optional[float]:
        try:
            exp = jwt.get_unverified_claims(self.token).get("exp")
        except JWTError:
            return None
        return float(exp) if exp is not None else None

    def is_expired(self, now: Optional[float] = None) -> bool:
        exp = self.expires_at()
        if exp is None:
            return True
        return (now if now is not None else time.time()) >= exp

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "user": dict(self.user)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(token=str(data["token"]), user=dict(data.get("user") or {}))


class SessionCache:
    """
    Keeps the current session between runs in a small JSON file, separate from
    the data file, under a fixed key.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or config.settings.SESSION_FILE)

    def load(self) -> Optional[Session]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            session = Session.from_dict(data[CURRENT_USER_KEY])
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.error("Error parsing stored session: %s", e)
            self.clear()
            return None
        if session.is_expired():
            log.info("Stored session for '%s' has expired", session.username)
            self.clear()
            return None
        return session

    def save(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({CURRENT_USER_KEY: session.to_dict()}, indent=2), encoding="utf-8")

    def update_user(self, user: Dict[str, Any]) -> None:
        """Refresh the cached profile after the logged-in user edits their own account."""
        session = self.load()
        if session and session.user_id == user.get("id"):
            self.save(Session(token=session.token, user={**session.user, **user}))

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            log.error("Could not remove session file %s: %s", self.path, e)
