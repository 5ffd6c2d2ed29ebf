# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   Copy the project DSN to .env: CARTIFY_SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry(settings) runs at app startup (cartify/api/app.py)
#
# Session ids, remember-me tokens and submitted passwords are scrubbed
# before anything leaves the process.
#
# =============================================================================

from __future__ import annotations

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from cartify.config import Settings

logger = logging.getLogger(__name__)

FILTERED = "[Filtered]"
SENSITIVE_HEADERS = ("authorization", "cookie", "set-cookie")
SENSITIVE_FIELDS = ("password", "username")


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    if not settings.sentry_dsn:
        logger.info("CARTIFY_SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        # Don't send PII by default
        send_default_pii=False,
        before_send=filter_event,
    )

    logger.info("Sentry initialized for %s", settings.environment)
    return True


def filter_event(event: dict, hint: dict) -> dict | None:
    """Scrub credentials from outgoing events."""
    request = event.get("request")
    if not isinstance(request, dict):
        return event

    headers = request.get("headers")
    if isinstance(headers, dict):
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = FILTERED

    if "cookies" in request:
        request["cookies"] = FILTERED

    data = request.get("data")
    if isinstance(data, dict):
        for key in list(data.keys()):
            if key.lower() in SENSITIVE_FIELDS:
                data[key] = FILTERED

    return event
