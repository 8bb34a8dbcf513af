"""
Pydantic models for everything the client reads from the API.

No business logic beyond wire normalization:
  - camelCase wire names map onto snake_case fields
  - `_id` and `id` are both accepted for identifiers
  - `assignedTo` / `assignedBy` arrive as a bare id or an embedded user,
    both become a UserRef
  - `createdAt` becomes an aware datetime, attendance `date` a calendar date
"""

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# AttendanceRecord has a field named `date`.
CalendarDate = date


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class TaskStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


# Forward-only task lifecycle.
ALLOWED_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.ACCEPTED},
    TaskStatus.ACCEPTED: {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED},
    TaskStatus.COMPLETED: set(),
}


def can_transition(source: TaskStatus, target: TaskStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(source, set())


def to_calendar_date(value) -> date:
    """'2024-01-05T00:00:00.000Z' → date(2024, 1, 5), using the UTC day."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" not in text and " " not in text:
        return date.fromisoformat(text[:10])
    return to_calendar_date(datetime.fromisoformat(text.replace("Z", "+00:00")))


# ── Base ──────────────────────────────

class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ── Users ─────────────────────────────

class UserRef(WireModel):
    """A reference to a user as embedded in a task."""
    id: str = Field(alias="_id")
    name: str = ""
    email: str = ""


class UserSummary(WireModel):
    id: str = Field(alias="_id")
    name: str = ""
    email: str = ""
    role: Role = Role.USER


def _coerce_user_ref(value):
    if isinstance(value, str):
        return {"_id": value}
    return value


# ── Tasks ─────────────────────────────

class Task(WireModel):
    id: str = Field(alias="_id")
    title: str
    description: str = ""
    assigned_to: UserRef | None = None
    assigned_by: UserRef | None = None
    status: TaskStatus = TaskStatus.PENDING
    completion_notes: str | None = None
    created_at: datetime | None = None

    @field_validator("assigned_to", "assigned_by", mode="before")
    @classmethod
    def _user_ref(cls, value):
        return _coerce_user_ref(value)

    @field_validator("created_at")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class User(UserSummary):
    """A user row from GET /auth/users, tasks embedded."""
    tasks: list[Task] = []

    def summary(self) -> UserSummary:
        return UserSummary(id=self.id, name=self.name, email=self.email, role=self.role)


# ── Attendance ────────────────────────

class AttendanceRecord(WireModel):
    # null once the user has been deleted
    user_id: str | None = None
    name: str | None = None
    date: CalendarDate
    status: AttendanceStatus = AttendanceStatus.PRESENT

    @model_validator(mode="before")
    @classmethod
    def _flatten_user(cls, data):
        if isinstance(data, dict) and isinstance(data.get("userId"), dict):
            user = data["userId"]
            data = {
                **data,
                "userId": user.get("_id") or user.get("id"),
                "name": data.get("name") or user.get("name"),
            }
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, value):
        return to_calendar_date(value)

    @property
    def key(self) -> tuple[str | None, CalendarDate]:
        return (self.user_id, self.date)

    @property
    def display_name(self) -> str:
        return self.name or "Deleted User"


# ── Session ───────────────────────────

class Session(BaseModel):
    token: str
    role: Role
    profile: UserSummary


class LoginResult(WireModel):
    """Response of POST /auth/login."""
    token: str
    user: UserSummary
