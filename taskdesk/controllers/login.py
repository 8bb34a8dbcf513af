"""
Login controller: signs a user in through POST /auth/login.

    idle → submitting → success | failed

The role picked on the form is a client-side hint only: it is not sent to
the server, and a mismatch with the server-reported role is rejected here
before any session is stored.
"""

import asyncio
import logging
from enum import Enum

from taskdesk.api_client import ApiClient
from taskdesk.errors import RoleMismatch, TaskDeskError
from taskdesk.forms import LoginForm
from taskdesk.models import Role
from taskdesk.route_guard import Navigator, Route, dashboard_for
from taskdesk.session_store import SessionStore

logger = logging.getLogger("login")


class LoginPhase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class LoginController:
    def __init__(self, api: ApiClient, store: SessionStore, navigator: Navigator):
        self.api = api
        self.store = store
        self.navigator = navigator
        self.phase = LoginPhase.IDLE
        self.submitting = False
        self.error = ""

    async def submit(self, email: str, password: str, role: Role | str | None) -> Route | None:
        """Authenticate and land on the dashboard for the user's role.

        Returns the route reached, or None when login failed (see `error`).
        """
        self.phase = LoginPhase.SUBMITTING
        self.submitting = True
        self.error = ""
        try:
            selected = Role(role) if role in list(Role) else None
            form = LoginForm(email=(email or "").strip(), password=password or "", role=selected)
            form.validate()
            result = await asyncio.to_thread(self.api.login, form.email, form.password)
            if result.user.role is not selected:
                raise RoleMismatch(selected.value, result.user.role.value)
            self.store.establish(result.token, result.user.role, result.user)
        except TaskDeskError as exc:
            logger.info("Login failed for %s: %s", email, exc)
            self.phase = LoginPhase.FAILED
            self.error = str(exc)
            return None
        except OSError as exc:
            logger.error("Could not save session for %s: %s", email, exc)
            self.phase = LoginPhase.FAILED
            self.error = "Could not save your session. Please try again."
            return None
        finally:
            self.submitting = False

        self.phase = LoginPhase.SUCCESS
        return self.navigator.navigate(dashboard_for(result.user.role))

    def reset(self) -> None:
        self.phase = LoginPhase.IDLE
        self.submitting = False
        self.error = ""
