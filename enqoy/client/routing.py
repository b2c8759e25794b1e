"""
enqoy.client.routing — Route Table and Guards
==============================================

Every client route is public, needs a signed-in user, or needs an admin.
:func:`resolve` turns a path plus the auth state into a decision:

- still loading → wait (render a spinner);
- protected and signed out → ``/admin/login`` for admin routes, else ``/auth``;
- admin route and not an admin → ``/dashboard``;
- otherwise allowed.

Unknown paths resolve to the public not-found page.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from enqoy.client.auth import AuthContext


class Access(enum.StrEnum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


ADMIN_LOGIN_ROUTE = "/admin/login"
LOGIN_ROUTE = "/auth"
HOME_ROUTE = "/dashboard"
NOT_FOUND = "*"

ROUTES: dict[str, Access] = {
    "/": Access.PUBLIC,
    "/auth": Access.PUBLIC,
    "/auth/callback": Access.PUBLIC,
    "/forgot-password": Access.PUBLIC,
    "/reset-password": Access.PUBLIC,
    "/terms": Access.PUBLIC,
    "/faq": Access.PUBLIC,
    "/guidelines": Access.PUBLIC,
    "/invite/:token": Access.PUBLIC,
    ADMIN_LOGIN_ROUTE: Access.PUBLIC,
    "/assessment": Access.AUTHENTICATED,
    "/dashboard": Access.AUTHENTICATED,
    "/profile": Access.AUTHENTICATED,
    "/my-credits": Access.AUTHENTICATED,
    "/events": Access.AUTHENTICATED,
    "/events/:id": Access.AUTHENTICATED,
    "/events/:id/conversation-starters": Access.AUTHENTICATED,
    "/admin": Access.ADMIN,
    "/admin/users": Access.ADMIN,
    "/admin/events": Access.ADMIN,
    "/admin/bookings": Access.ADMIN,
    "/admin/payments": Access.ADMIN,
    "/admin/venues": Access.ADMIN,
    "/admin/assessments": Access.ADMIN,
    "/admin/icebreakers": Access.ADMIN,
    "/admin/announcements": Access.ADMIN,
    "/admin/countries": Access.ADMIN,
    "/admin/analytics": Access.ADMIN,
    "/admin/settings": Access.ADMIN,
    "/admin/sandbox": Access.ADMIN,
    "/admin/pairing": Access.ADMIN,
    "/admin/pairing/:eventId": Access.ADMIN,
}


def _compile(pattern: str) -> re.Pattern[str]:
    parts = [("[^/]+" if part.startswith(":") else re.escape(part)) for part in pattern.split("/")]
    return re.compile("^" + "/".join(parts) + "$")


_COMPILED = [(pattern, _compile(pattern), access) for pattern, access in ROUTES.items()]


def match(path: str) -> tuple[str, Access]:
    """Route pattern and access level for *path* (query string ignored)."""
    path = path.split("?", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    for pattern, regex, access in _COMPILED:
        if regex.match(path):
            return pattern, access
    # Anything else under /admin is still admin-only.
    if path == "/admin" or path.startswith("/admin/"):
        return NOT_FOUND, Access.ADMIN
    return NOT_FOUND, Access.PUBLIC


@dataclass(frozen=True, slots=True)
class RouteDecision:
    path: str
    route: str
    allowed: bool
    loading: bool = False
    redirect: str | None = None


def resolve(path: str, auth: AuthContext) -> RouteDecision:
    route, access = match(path)
    if access is Access.PUBLIC:
        return RouteDecision(path, route, allowed=True)
    if auth.is_loading:
        return RouteDecision(path, route, allowed=False, loading=True)
    if not auth.is_authenticated:
        target = ADMIN_LOGIN_ROUTE if access is Access.ADMIN else LOGIN_ROUTE
        return RouteDecision(path, route, allowed=False, redirect=target)
    if access is Access.ADMIN and not auth.is_admin:
        return RouteDecision(path, route, allowed=False, redirect=HOME_ROUTE)
    return RouteDecision(path, route, allowed=True)
