"""
Client-side form state for the dashboards.

Each form validates itself before anything is sent; a failing check raises
ValidationError and the submission never reaches the network.
"""

from dataclasses import dataclass

from taskdesk.errors import ValidationError
from taskdesk.models import Role


def _require(fields: dict[str, str]) -> None:
    missing = [label for label, value in fields.items() if not (value or "").strip()]
    if missing:
        raise ValidationError(f"Please fill in: {', '.join(missing)}")


@dataclass
class UserForm:
    name: str = ""
    email: str = ""
    password: str = ""
    role: Role = Role.USER

    def validate(self) -> None:
        _require({"name": self.name, "email": self.email, "password": self.password})


@dataclass
class TaskForm:
    title: str = ""
    description: str = ""
    assigned_to: str = ""

    def validate(self) -> None:
        _require({"title": self.title, "description": self.description})
        if not (self.assigned_to or "").strip():
            raise ValidationError("Please select a user to assign the task to")


@dataclass
class LoginForm:
    email: str = ""
    password: str = ""
    role: Role | None = None

    def validate(self) -> None:
        _require({"email": self.email, "password": self.password})
        if self.role is None:
            raise ValidationError("Please select a role")
