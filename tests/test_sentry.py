"""
Tests for error-report scrubbing.
"""

from cartify.config import Settings
from cartify.integrations.sentry import FILTERED, filter_event, init_sentry


class TestFilterEvent:
    def test_scrubs_cookies_and_credentials(self):
        event = {
            "request": {
                "headers": {"Cookie": "CARTIFY_SESSION=abc; cartify-remember-me=xyz", "Accept": "text/html"},
                "cookies": {"cartify-remember-me": "xyz"},
                "data": {"username": "a@b.c", "password": "pw", "remember-me": "on"},
            }
        }
        result = filter_event(event, {})

        request = result["request"]
        assert request["headers"]["Cookie"] == FILTERED
        assert request["headers"]["Accept"] == "text/html"
        assert request["cookies"] == FILTERED
        assert request["data"]["password"] == FILTERED
        assert request["data"]["username"] == FILTERED
        assert request["data"]["remember-me"] == "on"

    def test_event_without_request(self):
        event = {"message": "boom"}
        assert filter_event(event, {}) == {"message": "boom"}


class TestInitSentry:
    def test_disabled_without_dsn(self):
        assert init_sentry(Settings(_env_file=None, sentry_dsn="")) is False
