"""
Cartify - Main entry point.

Starts the web server with a demo admin and customer so the login,
remember-me and role redirects can be tried by hand.
"""

from __future__ import annotations

import uvicorn

from cartify.api.app import create_app
from cartify.auth import InMemoryCredentialStore, Principal, Role, hash_password
from cartify.config import get_settings

DEMO_ACCOUNTS = [
    ("Ada Admin", "admin@cartify.local", "admin123", Role.ADMIN),
    ("Carl Customer", "customer@cartify.local", "customer123", Role.CUSTOMER),
]


def seed_demo_store(iterations: int) -> InMemoryCredentialStore:
    """In-memory store holding the demo accounts."""
    store = InMemoryCredentialStore()
    for full_name, email, password, role in DEMO_ACCOUNTS:
        store.add(Principal(
            full_name=full_name,
            email=email,
            password_hash=hash_password(password, iterations=iterations),
            role=role,
        ))
    return store


def main():
    """Main entry point."""
    settings = get_settings()
    if settings.is_production:
        raise SystemExit("Demo accounts are for development only; serve cartify.api.app:app instead")

    store = seed_demo_store(settings.password_hash_iterations)

    print("=" * 60)
    print("CARTIFY")
    print("=" * 60)
    for _, email, password, role in DEMO_ACCOUNTS:
        print(f"  • {role.value:<8} {email} / {password}")
    print("=" * 60)

    uvicorn.run(create_app(settings, store), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
