"""
Gateway to the TaskDesk REST API.
Controllers never talk HTTP themselves; every remote call lives here.

Every call except `login` carries `Authorization: Bearer <token>` taken from
the Session Store, and fails with AuthError before touching the network when
there is no session. Responses are parsed into the models in taskdesk.models.
"""

import logging
from datetime import date

import requests
from pydantic import TypeAdapter

from taskdesk import config
from taskdesk.errors import ApiError, AuthError, NetworkError
from taskdesk.models import (
    AttendanceRecord,
    LoginResult,
    Role,
    Task,
    TaskStatus,
    User,
    UserRef,
    UserSummary,
    to_calendar_date,
)
from taskdesk.session_store import SessionStore

logger = logging.getLogger("api_client")

_TASKS = TypeAdapter(list[Task])
_USERS = TypeAdapter(list[User])
_ATTENDANCE = TypeAdapter(list[AttendanceRecord])


def _iso_day(day: date | str) -> str:
    return to_calendar_date(day).isoformat()


class ApiClient:
    def __init__(
        self,
        store: SessionStore,
        base_url: str | None = None,
        timeout: float | None = None,
        http: requests.Session | None = None,
    ):
        self.store = store
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.TIMEOUT
        self.http = http or requests.Session()

    # ── Transport ─────────────────────

    def _headers(self, auth: bool) -> dict:
        headers = {"Accept": "application/json"}
        if auth:
            token = self.store.token
            if not token:
                raise AuthError()
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, path: str, *, auth: bool = True, payload=None, params=None):
        """Send one request and return the parsed JSON body."""
        headers = self._headers(auth)
        try:
            resp = self.http.request(
                method,
                f"{self.base_url}{path}",
                json=payload,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("%s %s unreachable: %s", method, path, exc)
            raise NetworkError() from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            message = None
            if isinstance(data, dict):
                message = data.get("error")
            message = message or f"HTTP error! status: {resp.status_code}"
            logger.warning("%s %s failed (%d): %s", method, path, resp.status_code, message)
            raise ApiError(message, resp.status_code)
        return data

    def _parse(self, adapter_or_model, data, path: str, status: int = 200):
        try:
            if isinstance(adapter_or_model, TypeAdapter):
                return adapter_or_model.validate_python(data)
            return adapter_or_model.model_validate(data)
        except ValueError as exc:
            logger.error("Unexpected response shape from %s: %s", path, exc)
            raise ApiError(f"Unexpected response from {path}", status) from exc

    # ── Auth ──────────────────────────

    def login(self, email: str, password: str) -> LoginResult:
        """POST /auth/login → {token, user}"""
        data = self._request("POST", "/auth/login", auth=False, payload={
            "email": email,
            "password": password,
        })
        return self._parse(LoginResult, data, "/auth/login")

    def register_user(self, name: str, email: str, password: str, role: Role | str = Role.USER) -> dict:
        """POST /auth/register (admin only)"""
        return self._request("POST", "/auth/register", payload={
            "name": name,
            "email": email,
            "password": password,
            "role": Role(role).value,
        })

    def get_current_user(self) -> UserSummary:
        """GET /auth/me"""
        return self._parse(UserSummary, self._request("GET", "/auth/me"), "/auth/me")

    # ── Users ─────────────────────────

    def get_all_users(self) -> list[User]:
        """GET /auth/users → users with embedded tasks"""
        return self._parse(_USERS, self._request("GET", "/auth/users"), "/auth/users")

    def delete_user(self, user_id: str) -> dict:
        """DELETE /auth/users/:id (server cascades the user's tasks)"""
        return self._request("DELETE", f"/auth/users/{user_id}")

    # ── Tasks ─────────────────────────

    def get_all_tasks(self) -> list[Task]:
        """Every task of every user.

        There is no "all tasks" endpoint: the user list is fetched and its
        embedded task lists are flattened here, each task stamped with the
        owning user's id and name.
        """
        tasks = []
        for user in self.get_all_users():
            owner = UserRef(id=user.id, name=user.name, email=user.email)
            tasks.extend(task.model_copy(update={"assigned_to": owner}) for task in user.tasks)
        return tasks

    def get_my_tasks(self) -> list[Task]:
        """GET /auth/me/tasks"""
        return self._parse(_TASKS, self._request("GET", "/auth/me/tasks"), "/auth/me/tasks")

    def get_user_tasks(self, user_id: str) -> list[Task]:
        """GET /auth/users/:id/tasks"""
        path = f"/auth/users/{user_id}/tasks"
        return self._parse(_TASKS, self._request("GET", path), path)

    def create_task(
        self,
        title: str,
        description: str,
        assigned_to: str,
        status: TaskStatus | str = TaskStatus.PENDING,
    ) -> dict:
        """POST /auth/users/:id/tasks"""
        return self._request("POST", f"/auth/users/{assigned_to}/tasks", payload={
            "title": title,
            "description": description,
            "assignedTo": assigned_to,
            "status": TaskStatus(status).value,
        })

    def update_task_status(self, task_id: str, status: TaskStatus | str, completion_notes: str = "") -> Task:
        """PATCH /auth/me/tasks/:id"""
        path = f"/auth/me/tasks/{task_id}"
        data = self._request("PATCH", path, payload={
            "status": TaskStatus(status).value,
            "completionNotes": completion_notes,
        })
        return self._parse(Task, data, path)

    def accept_task(self, task_id: str) -> Task:
        """POST /auth/me/tasks/:id/accept"""
        path = f"/auth/me/tasks/{task_id}/accept"
        return self._parse(Task, self._request("POST", path), path)

    def delete_task(self, user_id: str, task_id: str) -> dict:
        """DELETE /auth/users/:id/tasks/:taskId"""
        return self._request("DELETE", f"/auth/users/{user_id}/tasks/{task_id}")

    # ── Attendance ────────────────────

    def mark_attendance(self, day: date | str) -> AttendanceRecord:
        """POST /auth/me/attendance. The server upserts on (user, date)."""
        data = self._request("POST", "/auth/me/attendance", payload={"date": _iso_day(day)})
        return self._parse(AttendanceRecord, data, "/auth/me/attendance")

    def get_attendance(self, day: date | str) -> list[AttendanceRecord]:
        """GET /auth/attendance?date=YYYY-MM-DD (admin)"""
        data = self._request("GET", "/auth/attendance", params={"date": _iso_day(day)})
        return self._parse(_ATTENDANCE, data, "/auth/attendance")

    def get_my_attendance(self) -> list[AttendanceRecord]:
        """GET /auth/me/attendance"""
        data = self._request("GET", "/auth/me/attendance")
        return self._parse(_ATTENDANCE, data, "/auth/me/attendance")

    def clear_all_attendance(self) -> dict:
        """DELETE /auth/attendance/clear (admin)"""
        return self._request("DELETE", "/auth/attendance/clear")
