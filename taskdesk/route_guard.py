"""
Role-gated navigation.

The guard is a UX convenience only. The API re-checks authorization on
every request; nothing here is a trust boundary.
"""

import logging
from enum import Enum

from taskdesk.models import Role
from taskdesk.session_store import SessionStore

logger = logging.getLogger("route_guard")


class Route(str, Enum):
    LOGIN = "/"
    ADMIN_DASHBOARD = "/admin-dashboard"
    USER_DASHBOARD = "/user-dashboard"


# None → any logged-in session
ROUTE_ROLES: dict[Route, Role | None] = {
    Route.ADMIN_DASHBOARD: Role.ADMIN,
    Route.USER_DASHBOARD: Role.USER,
}


def dashboard_for(role: Role | str) -> Route:
    return Route.ADMIN_DASHBOARD if Role(role) is Role.ADMIN else Route.USER_DASHBOARD


class RouteGuard:
    def __init__(self, store: SessionStore):
        self.store = store

    def can_access(self, required_role: Role | str | None = None) -> bool:
        """Evaluated against the store on every call."""
        session = self.store.current()
        if session is None:
            return False
        if required_role is None:
            return True
        return required_role in list(Role) and session.role is Role(required_role)


class Navigator:
    """Tracks the current route; denied routes land on the login page."""

    def __init__(self, guard: RouteGuard):
        self.guard = guard
        self.current = Route.LOGIN

    def navigate(self, route: Route) -> Route:
        if route is not Route.LOGIN and not self.guard.can_access(ROUTE_ROLES.get(route)):
            logger.info("Access to %s denied, redirecting to login", route.value)
            route = Route.LOGIN
        self.current = route
        return route
