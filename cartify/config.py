"""
Application configuration.

Loads settings from environment variables with sensible defaults.
The security core never reads these directly: `Settings.security_config()`
freezes the relevant values into a `SecurityConfig` that is handed to
each component at construction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Security configuration (immutable, passed explicitly)
# =============================================================================


@dataclass(frozen=True)
class SecurityConfig:
    """Everything the access-control core needs to know about its deployment."""

    remember_me_key: str
    remember_me_cookie_name: str = "cartify-remember-me"
    remember_me_parameter: str = "remember-me"
    remember_me_validity_seconds: int = 7 * 24 * 60 * 60
    remember_me_algorithm: str = "HS256"

    session_cookie_name: str = "CARTIFY_SESSION"
    session_timeout_seconds: int = 30 * 60
    password_hash_iterations: int = 100_000

    csrf_cookie_name: str = "CARTIFY_CSRF"
    csrf_field_name: str = "csrf_token"
    csrf_header_name: str = "X-CSRF-Token"

    # Marks every auth cookie Secure (HTTPS only)
    secure_cookies: bool = False

    # Navigation targets
    login_path: str = "/login"
    login_error_path: str = "/login?error"
    logout_path: str = "/logout"
    logout_success_path: str = "/login?logout"
    denied_path: str = "/error/403"
    admin_home_path: str = "/admin/dashboard"
    customer_home_path: str = "/home"


# =============================================================================
# Settings
# =============================================================================


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="CARTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # ==========================================================================
    # Authentication
    # ==========================================================================

    remember_me_key: str = "dev-remember-me-key-change-in-production"
    remember_me_cookie_name: str = "cartify-remember-me"
    remember_me_parameter: str = "remember-me"
    remember_me_validity_seconds: int = 7 * 24 * 60 * 60

    session_cookie_name: str = "CARTIFY_SESSION"
    session_timeout_seconds: int = 30 * 60
    password_hash_iterations: int = 100_000

    csrf_cookie_name: str = "CARTIFY_CSRF"
    secure_cookies: bool = False

    # YAML file with the URL authorization table (built-in table if empty)
    security_rules_file: str = ""

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def security_config(self) -> SecurityConfig:
        """Freeze the security-relevant settings."""
        return SecurityConfig(
            remember_me_key=self.remember_me_key,
            remember_me_cookie_name=self.remember_me_cookie_name,
            remember_me_parameter=self.remember_me_parameter,
            remember_me_validity_seconds=self.remember_me_validity_seconds,
            session_cookie_name=self.session_cookie_name,
            session_timeout_seconds=self.session_timeout_seconds,
            csrf_cookie_name=self.csrf_cookie_name,
            secure_cookies=self.secure_cookies,
            password_hash_iterations=self.password_hash_iterations,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
