"""
Tests for post-authentication outcome handlers.
"""

import logging

import pytest
from starlette.requests import Request

from cartify.auth import (
    AccessDeniedHandler,
    AuthenticatedSubject,
    InMemoryCredentialStore,
    LoginEntryPoint,
    Requirement,
    Role,
    Rule,
    RuleConfigError,
    RuleMatcher,
    Security,
    SuccessHandler,
    default_rules,
)
from cartify.config import SecurityConfig
from conftest import TEST_KEY

ADMIN = AuthenticatedSubject(email="a@x", authorities=frozenset({"ROLE_ADMIN"}))
CUSTOMER = AuthenticatedSubject(email="c@x", authorities=frozenset({"ROLE_CUSTOMER"}))


def make_request(cookies: dict[str, str] | None = None) -> Request:
    cookie_header = "; ".join(f"{k}={v}" for k, v in (cookies or {}).items())
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/logout",
        "headers": [(b"cookie", cookie_header.encode())] if cookie_header else [],
        "query_string": b"",
    }
    return Request(scope)


def set_cookie_headers(response) -> list[str]:
    return [v.decode() for k, v in response.raw_headers if k == b"set-cookie"]


# =============================================================================
# Success
# =============================================================================


class TestSuccessHandler:
    def test_admin_lands_on_dashboard(self, config):
        response = SuccessHandler(config).on_success(ADMIN)
        assert response.status_code == 303
        assert response.headers["location"] == "/admin/dashboard"

    def test_customer_lands_on_home(self, config):
        assert SuccessHandler(config).destination(CUSTOMER) == "/home"

    def test_admin_authority_wins_over_customer(self, config):
        both = AuthenticatedSubject(email="b@x", authorities=frozenset({"ROLE_ADMIN", "ROLE_CUSTOMER"}))
        assert SuccessHandler(config).destination(both) == "/admin/dashboard"

    def test_no_authorities(self, config):
        nobody = AuthenticatedSubject(email="n@x")
        assert SuccessHandler(config).destination(nobody) == "/home"


# =============================================================================
# Entry Point / Denied
# =============================================================================


class TestLoginEntryPoint:
    def test_redirects_to_login(self, config):
        response = LoginEntryPoint(config).commence("/orders")
        assert response.headers["location"] == "/login"


class TestAccessDeniedHandler:
    def test_logs_and_redirects(self, config, caplog):
        handler = AccessDeniedHandler(config, RuleMatcher(default_rules()))

        with caplog.at_level(logging.WARNING, logger="cartify.auth.handlers"):
            response = handler.handle(CUSTOMER, "/admin/products/5")

        assert response.headers["location"] == "/error/403"
        assert "user='c@x'" in caplog.text
        assert "'/admin/products/5'" in caplog.text

    def test_anonymous_named_in_log(self, config, caplog):
        with caplog.at_level(logging.WARNING, logger="cartify.auth.handlers"):
            AccessDeniedHandler(config).handle(None, "/admin")
        assert "user='anonymous'" in caplog.text

    def test_refuses_non_public_denied_page(self, config):
        matcher = RuleMatcher([Rule("/**", Requirement.has_role(Role.ADMIN))])
        with pytest.raises(RuleConfigError):
            AccessDeniedHandler(config, matcher)

    @pytest.mark.parametrize("rules", [
        default_rules(),
        [],
        [Rule("/**", Requirement.has_role(Role.ADMIN))],
        [Rule("/error/**", Requirement.has_role(Role.CUSTOMER))],
        [Rule("/login", Requirement.authenticated()), Rule("/error/403", Requirement.has_role(Role.ADMIN))],
    ])
    def test_denied_page_public_for_every_rule_set(self, store, rules):
        config = SecurityConfig(remember_me_key=TEST_KEY)
        security = Security(store, config, rules)

        assert security.matcher.is_public(config.denied_path)
        assert security.matcher.is_public(config.login_path)

        response = security.denied_handler.handle(CUSTOMER, "/anything")
        target = response.headers["location"]
        assert security.matcher.is_public(target)

    def test_custom_denied_path_is_pinned(self):
        config = SecurityConfig(remember_me_key=TEST_KEY, denied_path="/oops")
        security = Security(InMemoryCredentialStore(), config, [])
        assert security.matcher.is_public("/oops")


# =============================================================================
# Logout
# =============================================================================


class TestLogoutHandler:
    def test_invalidates_session_and_clears_cookies(self, security, config):
        session_id = security.sessions.create(CUSTOMER)
        request = make_request({config.session_cookie_name: session_id})

        response = security.logout_handler.logout(request)

        assert security.sessions.get(session_id) is None
        assert response.headers["location"] == "/login?logout"

        cleared = set_cookie_headers(response)
        assert any(h.startswith(f"{config.session_cookie_name}=") and "Max-Age=0" in h for h in cleared)
        assert any(h.startswith(f"{config.remember_me_cookie_name}=") and "Max-Age=0" in h for h in cleared)
        assert any(h.startswith(f"{config.csrf_cookie_name}=") and "Max-Age" not in h for h in cleared)

    def test_without_session(self, security):
        response = security.logout_handler.logout(make_request())
        assert response.headers["location"] == "/login?logout"


# =============================================================================
# Wiring
# =============================================================================


class TestSecurity:
    def test_warns_about_dead_rules(self, config, caplog):
        admin = Requirement.has_role(Role.ADMIN)
        with caplog.at_level(logging.WARNING, logger="cartify.auth.security"):
            Security(InMemoryCredentialStore(), config, [Rule("/admin/**", admin), Rule("/admin/users/**", admin)])
        assert "unreachable" in caplog.text
        assert "/admin/users/**" in caplog.text

    def test_default_table_is_quiet(self, config, caplog):
        with caplog.at_level(logging.WARNING, logger="cartify.auth.security"):
            Security(InMemoryCredentialStore(), config)
        assert caplog.text == ""
