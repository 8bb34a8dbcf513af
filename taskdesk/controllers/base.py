"""
Shared lifecycle for the role dashboards.

A dashboard is alive between `mount()` and `teardown()`. While alive it
polls `reload()` on a fixed interval; after teardown every pending timer is
cancelled and any response still in flight is dropped instead of being
written into the discarded view.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from taskdesk.api_client import ApiClient
from taskdesk.errors import AuthError, TaskDeskError
from taskdesk.scheduler import TimerGroup

logger = logging.getLogger("dashboard")


@dataclass
class ViewState:
    loading: bool = False
    error: str = ""
    success: str = ""


class DashboardController:
    poll_interval: float = 30.0

    def __init__(
        self,
        api: ApiClient,
        *,
        poll_interval: float | None = None,
        on_auth_error: Callable[[], None] | None = None,
    ):
        self.api = api
        if poll_interval is not None:
            self.poll_interval = poll_interval
        self.on_auth_error = on_auth_error
        self.state = self._initial_state()
        self.timers = TimerGroup(type(self).__name__)
        self._alive = False

    def _initial_state(self) -> ViewState:
        return ViewState()

    @property
    def alive(self) -> bool:
        return self._alive

    # ── Lifecycle ─────────────────────

    async def mount(self, poll: bool = True) -> None:
        """Load once, then keep polling unless `poll` is False.

        Hosts that drive their own refresh cadence (the Streamlit shell)
        mount with poll=False.
        """
        self._alive = True
        self.timers = TimerGroup(type(self).__name__)
        await self.reload()
        if poll and self._alive:
            self.timers.every(self.poll_interval, self.reload)

    async def teardown(self) -> None:
        self._alive = False
        await self.timers.cancel_all()

    async def reload(self) -> None:
        raise NotImplementedError

    # ── Helpers ───────────────────────

    async def _call(self, fn, *args, **kwargs):
        """Run a blocking API call without blocking the event loop."""
        return await asyncio.to_thread(fn, *args, **kwargs)

    def _begin(self) -> None:
        self.state.loading = True
        self.state.error = ""

    def _end(self) -> None:
        if self._alive:
            self.state.loading = False

    def _fail(self, exc: TaskDeskError, fallback: str) -> None:
        """Surface an action's error on the view; AuthError also logs out."""
        if not self._alive:
            return
        logger.warning("%s: %s", fallback, exc)
        self.state.error = str(exc) or fallback
        self.state.success = ""
        if isinstance(exc, AuthError) and self.on_auth_error is not None:
            self.on_auth_error()
