"""
Application root. Wires the session store, API client, guard and the role
dashboards together, and owns which dashboard is currently mounted.

Navigation flow:
  1. No session            → login
  2. Session               → dashboard for the session's role
  3. Logout / lost session → dashboard torn down, session cleared, login
"""

import asyncio
import logging

import requests

from taskdesk import config
from taskdesk.api_client import ApiClient
from taskdesk.controllers.admin import AdminDashboardController
from taskdesk.controllers.base import DashboardController
from taskdesk.controllers.login import LoginController
from taskdesk.controllers.user import UserDashboardController
from taskdesk.models import Role, Session
from taskdesk.route_guard import Navigator, Route, RouteGuard, dashboard_for
from taskdesk.session_store import FileSessionStore, SessionStore

logger = logging.getLogger("app")


class TaskDeskApp:
    def __init__(
        self,
        store: SessionStore | None = None,
        *,
        base_url: str | None = None,
        http: requests.Session | None = None,
        admin_poll_seconds: float | None = None,
        user_poll_seconds: float | None = None,
        banner_seconds: float | None = None,
    ):
        self.store = store if store is not None else FileSessionStore()
        self.api = ApiClient(self.store, base_url=base_url, http=http)
        self.guard = RouteGuard(self.store)
        self.navigator = Navigator(self.guard)
        self.login = LoginController(self.api, self.store, self.navigator)
        self.dashboard: DashboardController | None = None
        self.admin_poll_seconds = admin_poll_seconds or config.ADMIN_POLL_SECONDS
        self.user_poll_seconds = user_poll_seconds or config.USER_POLL_SECONDS
        self.banner_seconds = banner_seconds if banner_seconds is not None else config.BANNER_SECONDS
        self._pending: set[asyncio.Task] = set()

    @property
    def route(self) -> Route:
        return self.navigator.current

    def home(self) -> Route:
        """Where a fresh page load should land for the stored session."""
        session = self.store.current()
        return dashboard_for(session.role) if session else Route.LOGIN

    def _build(self, route: Route) -> DashboardController | None:
        if route is Route.ADMIN_DASHBOARD:
            return AdminDashboardController(
                self.api,
                poll_interval=self.admin_poll_seconds,
                banner_seconds=self.banner_seconds,
                on_auth_error=self._session_lost,
            )
        if route is Route.USER_DASHBOARD:
            return UserDashboardController(
                self.api,
                poll_interval=self.user_poll_seconds,
                on_auth_error=self._session_lost,
            )
        return None

    async def open(self, route: Route, *, poll: bool = True) -> Route:
        """Navigate through the guard and mount the matching dashboard."""
        if self.dashboard is not None:
            await self.dashboard.teardown()
            self.dashboard = None
        reached = self.navigator.navigate(route)
        self.dashboard = self._build(reached)
        if self.dashboard is not None:
            await self.dashboard.mount(poll=poll)
        logger.info("Opened %s", reached.value)
        return reached

    async def resume(self, *, poll: bool = True) -> Session | None:
        """Line the mounted dashboard up with the stored session, read once.

        Returns that session, or None after landing on login.
        """
        session = self.store.current()
        if session is None:
            if self.route is not Route.LOGIN or self.dashboard is not None:
                await self.logout()
            return None
        target = dashboard_for(session.role)
        if self.route is not target or self.dashboard is None:
            await self.open(target, poll=poll)
        if self.route is Route.LOGIN:
            return None
        return session

    async def sign_in(self, email: str, password: str, role: Role | str | None, *, poll: bool = True) -> Route | None:
        route = await self.login.submit(email, password, role)
        if route is None:
            return None
        return await self.open(route, poll=poll)

    async def refresh(self) -> None:
        """Manual "Refresh Data"."""
        if self.dashboard is not None:
            await self.dashboard.reload()

    async def logout(self) -> None:
        if self.dashboard is not None:
            await self.dashboard.teardown()
            self.dashboard = None
        self.store.clear()
        self.login.reset()
        self.navigator.navigate(Route.LOGIN)

    async def close(self) -> None:
        if self.dashboard is not None:
            await self.dashboard.teardown()
            self.dashboard = None
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _session_lost(self) -> None:
        """A dashboard hit AuthError: schedule a logout outside the failing call."""
        logger.info("Session lost, returning to login")
        task = asyncio.get_running_loop().create_task(self.logout())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
