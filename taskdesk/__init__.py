"""TaskDesk: role-based task and attendance client."""

__version__ = "0.1.0"
