"""
Standard-user dashboard controller.

Overview counts, own task list (accept / complete) and own attendance.
Task actions are checked against the current snapshot first: the lifecycle
only moves forward, so accepting is allowed from `pending` only and
completing from `accepted` only.
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from taskdesk import config
from taskdesk.controllers.base import DashboardController, ViewState
from taskdesk.errors import TaskDeskError, ValidationError
from taskdesk.models import AttendanceRecord, Task, TaskStatus, can_transition

logger = logging.getLogger("user_dashboard")


@dataclass
class UserViewState(ViewState):
    tasks: list[Task] = field(default_factory=list)
    attendance: list[AttendanceRecord] = field(default_factory=list)
    selected_date: date = field(default_factory=date.today)
    # completion modal
    selected_task_id: str | None = None
    completion_notes: str = ""


class UserDashboardController(DashboardController):
    poll_interval = config.USER_POLL_SECONDS
    state: UserViewState

    def _initial_state(self) -> UserViewState:
        return UserViewState()

    @property
    def task_counts(self) -> dict[TaskStatus, int]:
        """Per-status counts over the current snapshot."""
        counts = Counter(task.status for task in self.state.tasks)
        return {status: counts.get(status, 0) for status in TaskStatus}

    def select_date(self, day: date) -> None:
        self.state.selected_date = day

    def _find(self, task_id: str) -> Task:
        for task in self.state.tasks:
            if task.id == task_id:
                return task
        raise ValidationError("Task not found. Please refresh and try again.")

    def _check_transition(self, task_id: str, target: TaskStatus, required: TaskStatus, message: str) -> None:
        task = self._find(task_id)
        if task.status is not required or not can_transition(task.status, target):
            raise ValidationError(message)

    # ── Sync ──────────────────────────

    async def reload(self) -> None:
        """Own tasks and own attendance, fetched concurrently."""
        self._begin()
        try:
            tasks, attendance = await asyncio.gather(
                self._call(self.api.get_my_tasks),
                self._call(self.api.get_my_attendance),
            )
        except TaskDeskError as exc:
            self._fail(exc, "Failed to load data. Please try again.")
        else:
            if self.alive:
                self.state.tasks = tasks
                self.state.attendance = attendance
        finally:
            self._end()

    # ── Tasks ─────────────────────────

    async def accept_task(self, task_id: str) -> bool:
        self._begin()
        try:
            self._check_transition(
                task_id, TaskStatus.ACCEPTED, TaskStatus.PENDING, "Only pending tasks can be accepted"
            )
            await self._call(self.api.accept_task, task_id)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to accept task")
            return False
        finally:
            self._end()
        if not self.alive:
            return False
        self.state.success = "Task accepted successfully"
        await self.reload()
        return True

    def begin_completion(self, task_id: str) -> None:
        self.state.selected_task_id = task_id
        self.state.completion_notes = ""

    def cancel_completion(self) -> None:
        self.state.selected_task_id = None

    async def complete_task(self, task_id: str | None = None, notes: str | None = None) -> bool:
        task_id = task_id or self.state.selected_task_id
        if notes is not None:
            self.state.completion_notes = notes
        notes = self.state.completion_notes
        self._begin()
        try:
            if task_id is None:
                raise ValidationError("No task selected")
            self._check_transition(
                task_id, TaskStatus.COMPLETED, TaskStatus.ACCEPTED, "Only accepted tasks can be completed"
            )
            if not notes.strip():
                raise ValidationError("Please provide completion notes")
            await self._call(self.api.update_task_status, task_id, TaskStatus.COMPLETED, notes)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to complete task")
            return False
        finally:
            self._end()
        if not self.alive:
            return False
        logger.info("Completed task %s", task_id)
        self.state.success = "Task completed successfully"
        self.state.completion_notes = ""
        self.state.selected_task_id = None
        await self.reload()
        return True

    # ── Attendance ────────────────────

    async def mark_attendance(self, day: date | None = None) -> bool:
        if day is not None:
            self.state.selected_date = day
        self._begin()
        self.state.success = ""
        try:
            await self._call(self.api.mark_attendance, self.state.selected_date)
        except TaskDeskError as exc:
            self._fail(exc, "Failed to mark attendance")
            return False
        finally:
            self._end()
        if not self.alive:
            return False
        self.state.success = "Attendance marked successfully"
        await self.reload()
        return True
