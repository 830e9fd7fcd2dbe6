"""Access policy tests: admin check, auth/admin guards, page matrix."""

import pytest

from habitladder.auth.policy import (
    check_page_access,
    is_admin,
    is_protected_path,
    require_admin,
    require_auth,
)
from habitladder.auth.session import Identity

ADMINS = ["admin@example.com"]
ADMIN = Identity(id=1, name="Admin", email="admin@example.com")
MEMBER = Identity(id=2, name="Member", email="member@example.com")


class TestIsAdmin:
    def test_exact_match(self):
        assert is_admin(ADMIN, ADMINS) is True

    def test_other_email(self):
        assert is_admin(MEMBER, ADMINS) is False

    def test_anonymous(self):
        assert is_admin(None, ADMINS) is False

    def test_match_is_case_sensitive(self):
        shouting = Identity(id=1, name="Admin", email="ADMIN@example.com")
        assert is_admin(shouting, ADMINS) is False

    def test_empty_email_never_admin(self):
        assert is_admin(Identity(id=3, name="x", email=""), ["", *ADMINS]) is False

    def test_no_admins_configured(self):
        assert is_admin(ADMIN, []) is False


class TestGuards:
    def test_require_auth_denies_anonymous_to_login(self):
        decision = require_auth(None)
        assert decision.allowed is False
        assert decision.redirect_to == "/login"

    def test_require_auth_allows_member(self):
        assert require_auth(MEMBER).allowed is True

    def test_require_admin_sends_member_to_dashboard(self):
        decision = require_admin(MEMBER, ADMINS)
        assert decision.allowed is False
        assert decision.redirect_to == "/dashboard"

    def test_require_admin_sends_anonymous_to_login(self):
        assert require_admin(None, ADMINS).redirect_to == "/login"

    def test_require_admin_allows_admin(self):
        assert require_admin(ADMIN, ADMINS).allowed is True


class TestPageMatrix:
    @pytest.mark.parametrize("path", ["/dashboard", "/tasks", "/ladder", "/ladder/week1"])
    def test_member_pages(self, path):
        assert check_page_access(None, path, ADMINS).redirect_to == "/login"
        assert check_page_access(MEMBER, path, ADMINS).allowed is True
        assert check_page_access(ADMIN, path, ADMINS).allowed is True

    @pytest.mark.parametrize("path", ["/admin", "/admin/dashboard", "/admin/applications", "/admin/ladder"])
    def test_admin_pages(self, path):
        assert check_page_access(None, path, ADMINS).redirect_to == "/login"
        assert check_page_access(MEMBER, path, ADMINS).redirect_to == "/dashboard"
        assert check_page_access(ADMIN, path, ADMINS).allowed is True

    @pytest.mark.parametrize("path", ["/", "/login", "/register", "/apply", "/health", "/api/goals/progress"])
    def test_unrelated_paths_are_public(self, path):
        assert is_protected_path(path) is False
        assert check_page_access(None, path, ADMINS).allowed is True

    @pytest.mark.parametrize("path", ["/ladders", "/dashboards", "/administrator", "/tasks-archive"])
    def test_prefix_matches_whole_segment(self, path):
        assert is_protected_path(path) is False
        assert check_page_access(None, path, ADMINS).allowed is True
