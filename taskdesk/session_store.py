"""
Session Store: the only client state that outlives a page.

Three string entries, written together at login and removed together at
logout:
    token      opaque bearer token
    userRole   "admin" | "user"
    userData   JSON-serialized UserSummary

`current()` re-reads storage on every call and returns None unless all three
entries are present and parse.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from taskdesk import config
from taskdesk.models import Role, Session, UserSummary

logger = logging.getLogger("session_store")

TOKEN_KEY = "token"
ROLE_KEY = "userRole"
PROFILE_KEY = "userData"
SESSION_KEYS = (TOKEN_KEY, ROLE_KEY, PROFILE_KEY)


class SessionStore:
    """Base store. Subclasses provide whole-mapping read / replace."""

    def _load(self) -> dict[str, str]:
        raise NotImplementedError

    def _replace(self, entries: dict[str, str]) -> None:
        raise NotImplementedError

    def establish(self, token: str, role: Role | str, profile: UserSummary) -> Session:
        session = Session(token=token, role=Role(role), profile=profile)
        entries = {k: v for k, v in self._load().items() if k not in SESSION_KEYS}
        entries.update({
            TOKEN_KEY: session.token,
            ROLE_KEY: session.role.value,
            PROFILE_KEY: session.profile.model_dump_json(),
        })
        self._replace(entries)
        logger.info("Session established for %s (%s)", profile.email or profile.id, session.role.value)
        return session

    def clear(self) -> None:
        entries = {k: v for k, v in self._load().items() if k not in SESSION_KEYS}
        self._replace(entries)
        logger.info("Session cleared")

    def current(self) -> Session | None:
        entries = self._load()
        token = entries.get(TOKEN_KEY)
        role = entries.get(ROLE_KEY)
        raw_profile = entries.get(PROFILE_KEY)
        if not token or not role or not raw_profile:
            return None
        try:
            return Session(
                token=token,
                role=Role(role),
                profile=UserSummary.model_validate_json(raw_profile),
            )
        except ValueError as exc:
            logger.warning("Ignoring unreadable session: %s", exc)
            return None

    @property
    def token(self) -> str | None:
        session = self.current()
        return session.token if session else None


class MemorySessionStore(SessionStore):
    """Process-local store, used by tests and embedded hosts."""

    def __init__(self, entries: dict[str, str] | None = None):
        self._entries: dict[str, str] = dict(entries or {})

    def _load(self) -> dict[str, str]:
        return dict(self._entries)

    def _replace(self, entries: dict[str, str]) -> None:
        self._entries = dict(entries)


class FileSessionStore(SessionStore):
    """Durable store backed by a small JSON file.

    Writes go to a temp file in the same directory and are moved into place
    with os.replace, so readers see either the old or the new mapping.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else config.SESSION_FILE

    def _load(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except ValueError as exc:
            logger.warning("Session file %s is corrupt: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _replace(self, entries: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".session-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(entries, fh)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise
