"""
Client error taxonomy.

    AuthError: no usable local session
    ApiError: the server rejected the request (carries status)
    NetworkError: the server could not be reached at all
    ValidationError: client-side field checks failed before submission
    RoleMismatch: server role differs from the role picked at login
"""


class TaskDeskError(Exception):
    """Base class for every error surfaced to the dashboards."""


class AuthError(TaskDeskError):
    def __init__(self, message: str = "No authentication token found. Please log in."):
        super().__init__(message)


class ApiError(TaskDeskError):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(TaskDeskError):
    def __init__(self, message: str = "Network error! Please check your connection and try again."):
        super().__init__(message)


class ValidationError(TaskDeskError):
    pass


class RoleMismatch(TaskDeskError):
    def __init__(self, selected: str, actual: str):
        super().__init__(f"Invalid role. Please login as {actual}")
        self.selected = selected
        self.actual = actual
