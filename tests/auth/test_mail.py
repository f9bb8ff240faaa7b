"""Tests for the logging mailer."""

import logging

from camp_core.auth.mail import LogMailer


class TestLogMailer:
    """LogMailer records deliveries without exposing tokens."""

    def test_invite_logged_without_token(self, caplog):
        with caplog.at_level(logging.INFO, logger="camp_core.auth.mail"):
            LogMailer().send_invite("alice@x.com", "Alice", "secret.invite.token")

        assert "alice@x.com" in caplog.text
        assert "secret.invite.token" not in caplog.text

    def test_reset_logged_without_token(self, caplog):
        with caplog.at_level(logging.INFO, logger="camp_core.auth.mail"):
            LogMailer().send_password_reset("bob@x.com", "secret.reset.token")

        assert "bob@x.com" in caplog.text
        assert "secret.reset.token" not in caplog.text
