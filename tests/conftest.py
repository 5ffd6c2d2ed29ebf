"""
Shared fixtures.

Password hashing runs with a low iteration count here to keep the
suite fast; the algorithm is the same as in production.
"""

import pytest
from fastapi.testclient import TestClient

from cartify.api.app import create_app
from cartify.auth import (
    InMemoryCredentialStore,
    Principal,
    PrincipalResolver,
    Role,
    Security,
    hash_password,
)
from cartify.config import SecurityConfig, Settings

TEST_KEY = "test-remember-me-key-0123456789abcdef"
TEST_ITERATIONS = 1_000

ADMIN_EMAIL = "admin@cartify.test"
CUSTOMER_EMAIL = "customer@cartify.test"
DISABLED_EMAIL = "disabled@cartify.test"
PASSWORD = "s3cret-pass"
CSRF_COOKIE = "CARTIFY_CSRF"
CSRF_FIELD = "csrf_token"


@pytest.fixture
def config():
    return SecurityConfig(remember_me_key=TEST_KEY, password_hash_iterations=TEST_ITERATIONS)


@pytest.fixture
def store():
    """Admin, customer and a deactivated customer, all with PASSWORD."""
    store = InMemoryCredentialStore()
    for name, email, role, active in [
        ("Ada Admin", ADMIN_EMAIL, Role.ADMIN, True),
        ("Carl Customer", CUSTOMER_EMAIL, Role.CUSTOMER, True),
        ("Dora Disabled", DISABLED_EMAIL, Role.CUSTOMER, False),
    ]:
        store.add(Principal(
            full_name=name,
            email=email,
            password_hash=hash_password(PASSWORD, iterations=TEST_ITERATIONS),
            role=role,
            active=active,
        ))
    return store


@pytest.fixture
def resolver(store):
    return PrincipalResolver(store)


@pytest.fixture
def security(store, config):
    return Security(store, config)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="test",
        remember_me_key=TEST_KEY,
        password_hash_iterations=TEST_ITERATIONS,
    )


@pytest.fixture
def app(settings, store):
    return create_app(settings, store)


@pytest.fixture
def client(app):
    return TestClient(app)


def csrf_token(client):
    """The client's CSRF cookie, fetched from the login page on first use."""
    token = client.cookies.get(CSRF_COOKIE)
    if token is None:
        client.get("/login")
        token = client.cookies.get(CSRF_COOKIE)
    return token


def post(client, url, data=None, **kwargs):
    """Submit a form the way the rendered pages do, CSRF field included."""
    data = dict(data or {})
    data.setdefault(CSRF_FIELD, csrf_token(client))
    return client.post(url, data=data, **kwargs)


def login(client, email, password=PASSWORD, remember_me=False):
    """Post the login form without following the redirect."""
    data = {"username": email, "password": password}
    if remember_me:
        data["remember-me"] = "on"
    return post(client, "/login", data, follow_redirects=False)
