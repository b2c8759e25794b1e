"""
tests/test_auth_context.py — Session State & Route Guards
===========================================================
"""

from __future__ import annotations

import asyncio

import pytest

from enqoy.client.auth import AuthContext
from enqoy.client.http import ApiError
from enqoy.client.routing import Access, match, resolve
from enqoy.constants import AUTH_TOKEN_KEY, USER_KEY


def run_async(coro):
    return asyncio.get_event_loop_policy().new_event_loop().run_until_complete(coro)


MEMBER = {"id": "u1", "email": "sara@example.com", "roles": ["member"]}
ADMIN = {"id": "a1", "email": "ops@example.com", "roles": [{"role": "admin"}]}


# ===========================================================================
# AuthContext
# ===========================================================================
class TestInitialize:
    def test_no_token(self, api, backend):
        auth = AuthContext(api)
        assert auth.is_loading is True
        run_async(auth.initialize())
        assert auth.is_loading is False
        assert auth.user is None
        assert backend.calls == []

    def test_restores_user(self, api, backend):
        api.storage.set_item(AUTH_TOKEN_KEY, "tok")
        backend.on("GET", "/auth/me", json=MEMBER)
        auth = AuthContext(api)
        run_async(auth.initialize())
        assert auth.is_authenticated
        assert auth.user.email == "sara@example.com"
        assert not auth.is_admin

    def test_rejected_token_clears_session(self, api, backend):
        api.storage.set_item(AUTH_TOKEN_KEY, "expired")
        api.storage.set_json(USER_KEY, MEMBER)
        backend.on("GET", "/auth/me", status=401, json={"message": "Unauthorized"})
        auth = AuthContext(api)
        run_async(auth.initialize())
        assert auth.user is None
        assert auth.is_loading is False
        assert api.storage.get_item(AUTH_TOKEN_KEY) is None
        assert api.storage.get_item(USER_KEY) is None


class TestSession:
    def test_login_stores_token_and_user(self, api, backend):
        backend.on("POST", "/auth/login", json={"token": "new-tok", "user": ADMIN})
        auth = AuthContext(api)
        user = run_async(auth.login("ops@example.com", "pw"))
        assert user.id == "a1"
        assert auth.is_admin
        assert api.storage.get_item(AUTH_TOKEN_KEY) == "new-tok"
        assert api.storage.get_json(USER_KEY)["email"] == "ops@example.com"

    def test_failed_login_raises(self, api, backend):
        backend.on("POST", "/auth/login", status=401, json={"message": "Invalid credentials"})
        auth = AuthContext(api)
        with pytest.raises(ApiError):
            run_async(auth.login("x@y.z", "bad"))
        assert auth.user is None

    def test_register(self, api, backend):
        backend.on("POST", "/auth/register", status=201, json={"token": "t", "user": MEMBER})
        auth = AuthContext(api)
        response = run_async(auth.register("sara@example.com", "pw", "Sara", "T"))
        assert response.token == "t"
        assert auth.is_authenticated
        (body,) = backend.called("POST", "/auth/register")
        assert body["firstName"] == "Sara"

    def test_logout(self, api, backend):
        backend.on("POST", "/auth/login", json={"token": "tok", "user": MEMBER})
        auth = AuthContext(api)
        run_async(auth.login("sara@example.com", "pw"))
        auth.logout()
        assert auth.user is None
        assert api.storage.get_item(AUTH_TOKEN_KEY) is None

    def test_refresh_user_keeps_old_on_error(self, api, backend):
        backend.on("POST", "/auth/login", json={"token": "tok", "user": MEMBER})
        backend.on("GET", "/users/me", status=500, json={"message": "boom"})
        auth = AuthContext(api)
        run_async(auth.login("sara@example.com", "pw"))
        assert run_async(auth.refresh_user()).id == "u1"

    def test_refresh_user_updates_storage(self, api, backend):
        backend.on("POST", "/auth/login", json={"token": "tok", "user": MEMBER})
        backend.on("GET", "/users/me", json={**MEMBER, "profile": {"assessmentCompleted": True}})
        auth = AuthContext(api)
        run_async(auth.login("sara@example.com", "pw"))
        user = run_async(auth.refresh_user())
        assert user.assessment_completed
        assert api.storage.get_json(USER_KEY)["profile"]["assessmentCompleted"] is True

    def test_unauthorized_response_signs_out(self, api, backend):
        routes = []
        backend.on("POST", "/auth/login", json={"token": "tok", "user": MEMBER})
        backend.on("GET", "/bookings/my", status=401, json={"message": "expired"})
        auth = AuthContext(api, navigate=routes.append)
        run_async(auth.login("sara@example.com", "pw"))

        with pytest.raises(ApiError):
            run_async(api.bookings.get_my())
        assert auth.user is None
        assert auth.redirect_to == "/auth"
        assert routes == ["/auth"]


# ===========================================================================
# Route guards
# ===========================================================================
class _State:
    """Stand-in exposing the attributes route guards read."""

    def __init__(self, *, loading=False, user=False, admin=False):
        self.is_loading = loading
        self.is_authenticated = user
        self.is_admin = admin


class TestRouting:
    @pytest.mark.parametrize(
        "path, route, access",
        [
            ("/", "/", Access.PUBLIC),
            ("/invite/abc123", "/invite/:token", Access.PUBLIC),
            ("/events/e1", "/events/:id", Access.AUTHENTICATED),
            ("/events/e1/conversation-starters", "/events/:id/conversation-starters", Access.AUTHENTICATED),
            ("/dashboard/", "/dashboard", Access.AUTHENTICATED),
            ("/my-credits?tab=history", "/my-credits", Access.AUTHENTICATED),
            ("/admin/pairing/e9", "/admin/pairing/:eventId", Access.ADMIN),
            ("/admin/login", "/admin/login", Access.PUBLIC),
            ("/admin/unknown", "*", Access.ADMIN),
            ("/nowhere", "*", Access.PUBLIC),
        ],
    )
    def test_match(self, path, route, access):
        assert match(path) == (route, access)

    def test_public_always_allowed(self):
        assert resolve("/faq", _State(loading=True)).allowed

    def test_waits_while_loading(self):
        decision = resolve("/dashboard", _State(loading=True))
        assert decision.loading
        assert not decision.allowed

    def test_signed_out_member_route(self):
        assert resolve("/profile", _State()).redirect == "/auth"

    def test_signed_out_admin_route(self):
        assert resolve("/admin/users", _State()).redirect == "/admin/login"

    def test_member_on_admin_route(self):
        assert resolve("/admin", _State(user=True)).redirect == "/dashboard"

    def test_admin_allowed(self):
        decision = resolve("/admin/pairing/e1", _State(user=True, admin=True))
        assert decision.allowed
        assert decision.redirect is None

    def test_member_allowed(self):
        assert resolve("/events/e2", _State(user=True)).allowed

    def test_with_real_context(self, api):
        auth = AuthContext(api)
        run_async(auth.initialize())
        assert resolve("/assessment", auth).redirect == "/auth"
