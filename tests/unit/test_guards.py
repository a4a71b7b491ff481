"""
Unit tests for the route guards.
"""

import pytest

from aspirant_network.session import (
    HOME_PATH,
    LOGIN_PATH,
    AuthSession,
    RouteDecision,
    is_public_path,
    protected_route,
    public_route,
    resolve_route,
)


class TestProtectedRoute:

    def test_waits_while_hydrating(self, store):
        decision = protected_route(AuthSession(store))
        assert decision == RouteDecision(allowed=False, loading=True)

    def test_anonymous_goes_to_login(self, auth):
        decision = protected_route(auth)
        assert decision.allowed is False
        assert decision.redirect_to == LOGIN_PATH
        assert decision.replace is True

    def test_authenticated_passes(self, logged_in):
        assert protected_route(logged_in).allowed is True


class TestPublicRoute:

    def test_authenticated_goes_home(self, logged_in):
        decision = public_route(logged_in)
        assert decision.redirect_to == HOME_PATH
        assert decision.replace is True

    def test_anonymous_passes(self, auth):
        assert public_route(auth) == RouteDecision.allow()

    def test_waits_while_hydrating(self, store):
        assert public_route(AuthSession(store)).loading is True


class TestResolveRoute:

    @pytest.mark.parametrize("path", ["/login", "/signup", "/forgot-password", "/reset-password/abc123"])
    def test_public_paths(self, path):
        assert is_public_path(path)

    @pytest.mark.parametrize("path", ["/home", "/questions/1", "/reset-password/", "/activities"])
    def test_protected_paths(self, path):
        assert not is_public_path(path)

    def test_root_redirects_home(self, auth):
        assert resolve_route("/", auth).redirect_to == HOME_PATH

    def test_protected_path_for_anonymous(self, auth):
        assert resolve_route("/questions/42", auth).redirect_to == LOGIN_PATH

    def test_login_for_authenticated(self, logged_in):
        assert resolve_route("/login", logged_in).redirect_to == HOME_PATH
