"""
Tests for principal resolution and password login.
"""

import pytest

from cartify.auth import (
    AccountDisabled,
    AuthenticationError,
    AuthenticationProvider,
    BadCredentials,
    InMemoryCredentialStore,
    Principal,
    PrincipalNotFound,
    PrincipalResolver,
    Role,
    hash_password,
)
from conftest import ADMIN_EMAIL, CUSTOMER_EMAIL, DISABLED_EMAIL, PASSWORD, TEST_ITERATIONS


@pytest.fixture
def provider(resolver, config):
    return AuthenticationProvider(resolver, config)


# =============================================================================
# Credential Store
# =============================================================================


class TestInMemoryCredentialStore:
    def test_emails_unique_case_insensitively(self, store):
        with pytest.raises(ValueError):
            store.add(Principal(full_name="Dup", email=ADMIN_EMAIL.upper(), password_hash="x"))

    def test_lookup_is_exact(self, store):
        assert store.find_by_email(ADMIN_EMAIL) is not None
        assert store.find_by_email(ADMIN_EMAIL.upper()) is None

    def test_admin_edits(self, store):
        assert store.set_active(CUSTOMER_EMAIL, False)
        assert store.find_by_email(CUSTOMER_EMAIL).active is False
        assert store.set_role(CUSTOMER_EMAIL, Role.ADMIN)
        assert store.find_by_email(CUSTOMER_EMAIL).role == Role.ADMIN
        assert not store.set_active("nobody@cartify.test", True)


# =============================================================================
# Principal Resolver
# =============================================================================


class TestPrincipalResolver:
    def test_maps_role_to_authority(self, resolver):
        candidate = resolver.resolve(ADMIN_EMAIL)
        assert candidate.email == ADMIN_EMAIL
        assert candidate.authorities == frozenset({"ROLE_ADMIN"})
        assert candidate.enabled is True

    def test_inactive_maps_to_disabled(self, resolver):
        assert resolver.resolve(DISABLED_EMAIL).enabled is False

    def test_not_found(self, resolver):
        with pytest.raises(PrincipalNotFound) as exc:
            resolver.resolve("ghost@cartify.test")
        # Internal detail only; the provider never lets it out
        assert "ghost@cartify.test" in str(exc.value)

    def test_candidate_repr_hides_hash(self, resolver):
        candidate = resolver.resolve(ADMIN_EMAIL)
        assert candidate.password_hash not in repr(candidate)


# =============================================================================
# Authentication Provider
# =============================================================================


class TestAuthenticationProvider:
    def test_success(self, provider):
        subject = provider.authenticate(CUSTOMER_EMAIL, PASSWORD)
        assert subject.email == CUSTOMER_EMAIL
        assert subject.authorities == frozenset({"ROLE_CUSTOMER"})
        assert subject.remembered is False

    def test_wrong_password(self, provider):
        with pytest.raises(BadCredentials):
            provider.authenticate(CUSTOMER_EMAIL, "wrong")

    def test_disabled_account(self, provider):
        with pytest.raises(AccountDisabled):
            provider.authenticate(DISABLED_EMAIL, PASSWORD)

    def test_unknown_email_looks_like_wrong_password(self, provider):
        with pytest.raises(BadCredentials) as unknown:
            provider.authenticate("ghost@cartify.test", PASSWORD)
        with pytest.raises(BadCredentials) as wrong:
            provider.authenticate(CUSTOMER_EMAIL, "wrong")

        assert type(unknown.value) is type(wrong.value)
        assert str(unknown.value) == str(wrong.value)
        assert "ghost" not in str(unknown.value)
        assert unknown.value.__cause__ is None

    def test_all_failures_share_a_base(self):
        for error in (BadCredentials, AccountDisabled, PrincipalNotFound):
            assert issubclass(error, AuthenticationError)

    @pytest.mark.parametrize("active", [True, False])
    @pytest.mark.parametrize("submitted", [PASSWORD, "other-password"])
    def test_succeeds_iff_hash_verifies_and_active(self, config, active, submitted):
        store = InMemoryCredentialStore()
        store.add(Principal(
            full_name="P",
            email="p@cartify.test",
            password_hash=hash_password(PASSWORD, iterations=TEST_ITERATIONS),
            active=active,
        ))
        provider = AuthenticationProvider(PrincipalResolver(store), config)

        should_pass = active and submitted == PASSWORD
        try:
            provider.authenticate("p@cartify.test", submitted)
            passed = True
        except AuthenticationError:
            passed = False

        assert passed is should_pass

    def test_sees_admin_edits_on_next_attempt(self, store, provider):
        provider.authenticate(CUSTOMER_EMAIL, PASSWORD)
        store.set_active(CUSTOMER_EMAIL, False)
        with pytest.raises(AccountDisabled):
            provider.authenticate(CUSTOMER_EMAIL, PASSWORD)
