from __future__ import annotations

import itertools
import json
import re
import threading
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter

from taskdesk.api_client import ApiClient
from taskdesk.app import TaskDeskApp
from taskdesk.models import Role, UserSummary
from taskdesk.session_store import MemorySessionStore

BASE_URL = "http://taskdesk.test/api"


class FakeApi:
    """In-memory stand-in for the TaskDesk API contract.

    Mirrors the server's shapes, including its inconsistencies: embedded
    tasks carry `assignedTo` as a bare id, the per-user task endpoint embeds
    the full user object, and attendance dates come back as timestamps.
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.ids = itertools.count(1)
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self.attendance: list[dict] = []
        self.calls: list[tuple[str, str]] = []
        self.offline = False
        # when set, requests block until the event is set
        self.gate: threading.Event | None = None

    # ── seeding ─────────────────────

    def add_user(self, name: str, email: str, password: str = "secret", role: str = "user") -> str:
        user_id = f"u{next(self.ids)}"
        self.users[user_id] = {
            "_id": user_id,
            "name": name,
            "email": email,
            "password": password,
            "role": role,
            "tasks": [],
        }
        return user_id

    def add_task(self, user_id: str, title: str, status: str = "pending", by: str | None = None) -> str:
        task_id = f"t{next(self.ids)}"
        assigner = self.users.get(by) if by else None
        self.users[user_id]["tasks"].append({
            "_id": task_id,
            "title": title,
            "description": f"{title} description",
            "assignedTo": user_id,
            "assignedBy": {"_id": assigner["_id"], "name": assigner["name"]} if assigner else None,
            "status": status,
            "completionNotes": "",
            "createdAt": "2024-01-05T10:30:00.000Z",
        })
        return task_id

    def token_for(self, user_id: str) -> str:
        token = f"tok-{user_id}"
        self.tokens[token] = user_id
        return token

    def task(self, task_id: str) -> dict | None:
        for user in self.users.values():
            for task in user["tasks"]:
                if task["_id"] == task_id:
                    return task
        return None

    # ── shapes ──────────────────────

    @staticmethod
    def _public(user: dict) -> dict:
        return {k: user[k] for k in ("_id", "name", "email", "role")}

    def _user_task(self, task: dict) -> dict:
        owner = self.users[task["assignedTo"]]
        return {**task, "assignedTo": self._public(owner)}

    def _record(self, record: dict) -> dict:
        user = self.users.get(record["userId"])
        return {
            "userId": record["userId"],
            "name": user["name"] if user else None,
            "date": f"{record['date']}T00:00:00.000Z",
            "status": record["status"],
        }

    # ── dispatch ────────────────────

    def handle(self, method: str, path: str, query: dict, headers, body) -> tuple[int, object]:
        with self.lock:
            self.calls.append((method, path))
            if path == "/auth/login" and method == "POST":
                return self._login(body or {})

            auth = headers.get("Authorization", "")
            caller_id = self.tokens.get(auth.removeprefix("Bearer "))
            caller = self.users.get(caller_id) if caller_id else None
            if caller is None:
                return 401, {"error": "Unauthorized"}

            for pattern, verb, handler in self._routes():
                match = re.fullmatch(pattern, path)
                if match and verb == method:
                    return handler(caller, *match.groups(), query=query, body=body or {})
            return 404, {"error": f"No route for {method} {path}"}

    def _routes(self):
        return [
            (r"/auth/register", "POST", self._register),
            (r"/auth/me", "GET", lambda caller, **_: (200, self._public(caller))),
            (r"/auth/users", "GET", self._list_users),
            (r"/auth/users/([^/]+)", "DELETE", self._delete_user),
            (r"/auth/users/([^/]+)/tasks", "POST", self._create_task),
            (r"/auth/users/([^/]+)/tasks", "GET", self._user_tasks),
            (r"/auth/users/([^/]+)/tasks/([^/]+)", "DELETE", self._delete_task),
            (r"/auth/me/tasks", "GET", lambda caller, **_: (200, list(caller["tasks"]))),
            (r"/auth/me/tasks/([^/]+)", "PATCH", self._update_task),
            (r"/auth/me/tasks/([^/]+)/accept", "POST", self._accept_task),
            (r"/auth/me/attendance", "POST", self._mark_attendance),
            (r"/auth/me/attendance", "GET", self._my_attendance),
            (r"/auth/attendance", "GET", self._attendance_for_date),
            (r"/auth/attendance/clear", "DELETE", self._clear_attendance),
        ]

    def _login(self, body: dict):
        for user in self.users.values():
            if user["email"] == body.get("email") and user["password"] == body.get("password"):
                return 200, {"token": self.token_for(user["_id"]), "user": self._public(user)}
        return 401, {"error": "Invalid credentials"}

    def _register(self, caller, *, body, **_):
        if caller["role"] != "admin":
            return 403, {"error": "Admin access required"}
        if any(u["email"] == body.get("email") for u in self.users.values()):
            return 400, {"error": "User already exists"}
        user_id = self.add_user(body["name"], body["email"], body["password"], body.get("role", "user"))
        return 201, {"message": "User registered", "user": self._public(self.users[user_id])}

    def _list_users(self, caller, **_):
        return 200, [
            {**self._public(u), "tasks": list(u["tasks"])} for u in self.users.values()
        ]

    def _delete_user(self, caller, user_id, **_):
        if self.users.pop(user_id, None) is None:
            return 404, {"error": "User not found"}
        return 200, {"message": "User deleted"}

    def _create_task(self, caller, user_id, *, body, **_):
        if user_id not in self.users:
            return 404, {"error": "User not found"}
        task_id = self.add_task(user_id, body["title"], body.get("status", "pending"), by=caller["_id"])
        task = self.task(task_id)
        task["description"] = body.get("description", "")
        return 201, self._user_task(task)

    def _user_tasks(self, caller, user_id, **_):
        if user_id not in self.users:
            return 404, {"error": "User not found"}
        return 200, [self._user_task(t) for t in self.users[user_id]["tasks"]]

    def _delete_task(self, caller, user_id, task_id, **_):
        tasks = self.users.get(user_id, {}).get("tasks", [])
        remaining = [t for t in tasks if t["_id"] != task_id]
        if len(remaining) == len(tasks):
            return 404, {"error": "Task not found"}
        self.users[user_id]["tasks"] = remaining
        return 200, {"message": "Task deleted"}

    def _update_task(self, caller, task_id, *, body, **_):
        task = next((t for t in caller["tasks"] if t["_id"] == task_id), None)
        if task is None:
            return 404, {"error": "Task not found"}
        task["status"] = body["status"]
        task["completionNotes"] = body.get("completionNotes", "")
        return 200, task

    def _accept_task(self, caller, task_id, **_):
        task = next((t for t in caller["tasks"] if t["_id"] == task_id), None)
        if task is None:
            return 404, {"error": "Task not found"}
        if task["status"] != "pending":
            return 400, {"error": "Task is not pending"}
        task["status"] = "accepted"
        return 200, task

    def _mark_attendance(self, caller, *, body, **_):
        day = body["date"][:10]
        for record in self.attendance:
            if record["userId"] == caller["_id"] and record["date"] == day:
                record["status"] = "present"
                return 200, self._record(record)
        record = {"userId": caller["_id"], "date": day, "status": "present"}
        self.attendance.append(record)
        return 201, self._record(record)

    def _my_attendance(self, caller, **_):
        return 200, [self._record(r) for r in self.attendance if r["userId"] == caller["_id"]]

    def _attendance_for_date(self, caller, *, query, **_):
        day = query.get("date", [""])[0]
        return 200, [self._record(r) for r in self.attendance if r["date"] == day]

    def _clear_attendance(self, caller, **_):
        if caller["role"] != "admin":
            return 403, {"error": "Admin access required"}
        count = len(self.attendance)
        self.attendance.clear()
        return 200, {"message": "Attendance cleared", "deletedCount": count}


class FakeApiAdapter(BaseAdapter):
    """Serves a FakeApi through the regular requests transport interface."""

    def __init__(self, api: FakeApi):
        super().__init__()
        self.api = api

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        if self.api.gate is not None:
            self.api.gate.wait(timeout=5)
        if self.api.offline:
            raise requests.exceptions.ConnectionError("connection refused")

        parts = urlsplit(request.url)
        path = parts.path.removeprefix(urlsplit(BASE_URL).path)
        body = None
        if request.body:
            raw = request.body.decode() if isinstance(request.body, bytes) else request.body
            body = json.loads(raw)
        status, payload = self.api.handle(request.method, path, parse_qs(parts.query), request.headers, body)

        resp = requests.Response()
        resp.status_code = status
        resp._content = json.dumps(payload).encode()
        resp.headers["Content-Type"] = "application/json"
        resp.encoding = "utf-8"
        resp.url = request.url
        resp.request = request
        return resp

    def close(self):
        pass


@pytest.fixture()
def fake_api() -> FakeApi:
    api = FakeApi()
    api.admin_id = api.add_user("Ada Admin", "ada@example.com", "adminpass", role="admin")
    api.alice_id = api.add_user("Alice", "alice@example.com", "alicepass")
    api.bob_id = api.add_user("Bob", "bob@example.com", "bobpass")
    return api


@pytest.fixture()
def http(fake_api: FakeApi) -> requests.Session:
    session = requests.Session()
    session.mount("http://taskdesk.test", FakeApiAdapter(fake_api))
    return session


@pytest.fixture()
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture()
def api(store: MemorySessionStore, http: requests.Session) -> ApiClient:
    return ApiClient(store, base_url=BASE_URL, timeout=1, http=http)


def sign_in_as(store: MemorySessionStore, fake_api: FakeApi, user_id: str) -> None:
    user = fake_api.users[user_id]
    store.establish(
        fake_api.token_for(user_id),
        user["role"],
        UserSummary(id=user_id, name=user["name"], email=user["email"], role=Role(user["role"])),
    )


@pytest.fixture()
def admin_api(api: ApiClient, store: MemorySessionStore, fake_api: FakeApi) -> ApiClient:
    sign_in_as(store, fake_api, fake_api.admin_id)
    return api


@pytest.fixture()
def alice_api(api: ApiClient, store: MemorySessionStore, fake_api: FakeApi) -> ApiClient:
    sign_in_as(store, fake_api, fake_api.alice_id)
    return api


@pytest.fixture()
def app(store: MemorySessionStore, http: requests.Session) -> TaskDeskApp:
    return TaskDeskApp(
        store,
        base_url=BASE_URL,
        http=http,
        admin_poll_seconds=0.05,
        user_poll_seconds=0.05,
        banner_seconds=0.05,
    )
