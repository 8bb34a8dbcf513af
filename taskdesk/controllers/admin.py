"""
Admin dashboard controller.

Tabs: user management, task management, attendance reports. Every write
ends in a refetch; `reload()` always replaces the whole snapshot, so a poll
tick racing a manual action cannot leave a half-merged view behind.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date

from taskdesk import config
from taskdesk.controllers.base import DashboardController, ViewState
from taskdesk.errors import TaskDeskError
from taskdesk.forms import TaskForm, UserForm
from taskdesk.models import AttendanceRecord, Role, Task, TaskStatus, User

logger = logging.getLogger("admin_dashboard")


@dataclass
class AdminViewState(ViewState):
    users: list[User] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    attendance: list[AttendanceRecord] = field(default_factory=list)
    selected_date: date = field(default_factory=date.today)
    new_user: UserForm = field(default_factory=UserForm)
    new_task: TaskForm = field(default_factory=TaskForm)
    # user-tasks overlay
    overlay_user_id: str | None = None
    overlay_tasks: list[Task] = field(default_factory=list)
    delete_loading: bool = False


class AdminDashboardController(DashboardController):
    poll_interval = config.ADMIN_POLL_SECONDS
    state: AdminViewState

    def __init__(self, api, *, banner_seconds: float | None = None, **kwargs):
        super().__init__(api, **kwargs)
        self.banner_seconds = config.BANNER_SECONDS if banner_seconds is None else banner_seconds
        self._banner_timer: asyncio.Task | None = None

    def _initial_state(self) -> AdminViewState:
        return AdminViewState()

    @property
    def visible_users(self) -> list[User]:
        """Rows of the user table: standard users only."""
        return [u for u in self.state.users if u.role is Role.USER]

    @property
    def overlay_open(self) -> bool:
        return self.state.overlay_user_id is not None

    def select_date(self, day: date) -> None:
        self.state.selected_date = day

    # ── Sync ──────────────────────────

    async def reload(self) -> None:
        """Users, then tasks, then attendance for the selected date."""
        self._begin()
        day = self.state.selected_date
        try:
            users = await self._call(self.api.get_all_users)
            tasks = await self._call(self.api.get_all_tasks)
            attendance = await self._call(self.api.get_attendance, day)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to load data. Please try again.")
        else:
            if self.alive:
                self.state.users = users
                self.state.tasks = tasks
                self.state.attendance = attendance
        finally:
            self._end()

    # ── Users ─────────────────────────

    async def register_user(self) -> bool:
        form = self.state.new_user
        self._begin()
        self.state.success = ""
        try:
            form.validate()
            await self._call(self.api.register_user, form.name.strip(), form.email.strip(), form.password, form.role)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to register user")
            return False
        finally:
            self._end()
        if not self.alive:
            return False
        self.state.success = "User registered successfully"
        self.state.new_user = UserForm()
        await self.reload()
        return True

    async def delete_user(self, user_id: str) -> bool:
        self.state.delete_loading = True
        self.state.error = ""
        try:
            await self._call(self.api.delete_user, user_id)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to delete user. Please try again.")
            return False
        finally:
            if self.alive:
                self.state.delete_loading = False
        if not self.alive:
            return False
        logger.info("Deleted user %s", user_id)
        self.state.success = "User and associated tasks deleted successfully"
        if self.state.overlay_user_id == user_id:
            self.close_user_tasks()
        await self.reload()
        return True

    # ── Tasks ─────────────────────────

    async def create_task(self) -> bool:
        form = self.state.new_task
        self._begin()
        self.state.success = ""
        try:
            form.validate()
            await self._call(
                self.api.create_task,
                form.title.strip(),
                form.description.strip(),
                form.assigned_to,
                TaskStatus.PENDING,
            )
        except TaskDeskError as exc:
            self._fail(exc, "Failed to create task")
            return False
        finally:
            self._end()
        if not self.alive:
            return False
        self.state.success = "Task created and assigned successfully"
        self.state.new_task = TaskForm()
        await self.reload()
        return True

    async def view_user_tasks(self, user_id: str) -> None:
        """Fetch one user's tasks on demand and open the overlay."""
        self._begin()
        try:
            tasks = await self._call(self.api.get_user_tasks, user_id)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to load user tasks")
            return
        finally:
            self._end()
        if self.alive:
            self.state.overlay_user_id = user_id
            self.state.overlay_tasks = tasks

    def close_user_tasks(self) -> None:
        self.state.overlay_user_id = None
        self.state.overlay_tasks = []

    async def delete_task(self, user_id: str, task_id: str) -> bool:
        """Delete, then refetch: only the overlay's user while it is open."""
        overlay_user = self.state.overlay_user_id
        self._begin()
        try:
            await self._call(self.api.delete_task, user_id, task_id)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to delete task. Please try again.")
            self._end()
            return False
        if not self.alive:
            return False
        self.state.success = "Task deleted successfully"
        if overlay_user is None:
            self._end()
            await self.reload()
            return True

        try:
            tasks = await self._call(self.api.get_user_tasks, overlay_user)
        except TaskDeskError as exc:
            # the delete went through; only the overlay is stale
            self._fail(exc, "Failed to refresh user tasks")
            if self.alive:
                self.state.success = "Task deleted successfully"
        else:
            if self.alive and self.state.overlay_user_id == overlay_user:
                self.state.overlay_tasks = tasks
        finally:
            self._end()
        return True

    # ── Attendance ────────────────────

    def _flash(self, *, success: str = "", error: str = "") -> None:
        """Show an attendance banner that clears itself after a few seconds."""
        if self._banner_timer is not None:
            self._banner_timer.cancel()
        self.state.success = success
        self.state.error = error

        def _clear():
            if self.state.success == success and self.state.error == error:
                self.state.success = ""
                self.state.error = ""

        self._banner_timer = self.timers.after(self.banner_seconds, _clear)

    async def generate_attendance(self) -> None:
        """Refetch attendance for the selected date."""
        self._begin()
        try:
            attendance = await self._call(self.api.get_attendance, self.state.selected_date)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to load attendance data")
            return
        finally:
            self._end()
        if self.alive:
            self.state.attendance = attendance

    async def mark_attendance(self) -> bool:
        """Record the admin's own attendance for the selected date."""
        self._begin()
        try:
            await self._call(self.api.mark_attendance, self.state.selected_date)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to mark attendance")
            if self.alive:
                self._flash(error=self.state.error)
            return False
        finally:
            self._end()
        if not self.alive:
            return False
        self._flash(success="Attendance marked successfully")
        await self.generate_attendance()
        return True

    async def clear_attendance(self) -> bool:
        self._begin()
        try:
            await self._call(self.api.clear_all_attendance)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to clear attendance records")
            if self.alive:
                self._flash(error=self.state.error)
            return False
        finally:
            self._end()
        if not self.alive:
            return False
        self._flash(success="Attendance records cleared")
        await self.generate_attendance()
        return True
