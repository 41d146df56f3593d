"""
Tests for password-reset email rendering and delivery hooks
"""

from unittest.mock import MagicMock, patch

import qaboard.users
from qaboard.services import mailer

from conftest import PASSWORD


class TestResetEmail:
    """Tests for the reset email content."""

    def test_render_includes_link_and_name(self):
        subject, text, html = mailer.render_password_reset_email("Ada", "tok123")
        assert "Reset" in subject
        assert "Hi Ada" in text
        assert "reset-password?token=tok123" in text
        assert "reset-password?token=tok123" in html

    def test_dummy_transport_does_not_touch_smtp(self):
        """The dummy transport logs instead of connecting."""
        with patch.object(mailer.settings, "EMAIL_TRANSPORT", "dummy"), \
                patch("qaboard.services.mailer.smtplib.SMTP") as smtp:
            assert mailer.send_email("a@example.com", "s", "body") is True
            smtp.assert_not_called()

    def test_smtp_failure_returns_false(self):
        with patch.object(mailer.settings, "EMAIL_TRANSPORT", "smtp"), \
                patch.object(mailer.settings, "SMTP_USE_SSL", False), \
                patch("qaboard.services.mailer.smtplib.SMTP", side_effect=OSError("refused")):
            assert mailer.send_email("a@example.com", "s", "body") is False

    def test_smtp_sends_reset_message_from_configured_sender(self):
        """Over SMTP the message goes out from SMTP_FROM after STARTTLS and login."""
        with patch.object(mailer.settings, "EMAIL_TRANSPORT", "smtp"), \
                patch.object(mailer.settings, "SMTP_USE_SSL", False), \
                patch.object(mailer.settings, "SMTP_USE_TLS", True), \
                patch.object(mailer.settings, "SMTP_USERNAME", "mailer@example.com"), \
                patch.object(mailer.settings, "SMTP_PASSWORD", "pw"), \
                patch.object(mailer.settings, "SMTP_FROM", "QA Board <noreply@example.com>"), \
                patch("qaboard.services.mailer.smtplib.SMTP") as smtp:
            user = MagicMock(email="ada@example.com")
            user.name = "Ada"
            assert mailer.send_password_reset_email(user, "tok123") is True

        smtp.return_value.starttls.assert_called_once()
        server = smtp.return_value.__enter__.return_value
        server.login.assert_called_once_with("mailer@example.com", "pw")
        from_addr, recipients, raw = server.sendmail.call_args.args
        assert from_addr == "QA Board <noreply@example.com>"
        assert recipients == ["ada@example.com"]
        assert "Reply-To" not in raw
        assert "Subject: Reset your QA Board password" in raw


class TestPasswordResetFlow:
    """Tests for forgot-password and reset-password routes."""

    async def test_forgot_then_reset(self, client, owner, monkeypatch):
        """The emailed token resets the password; the old one stops working."""
        sent = MagicMock(return_value=True)
        monkeypatch.setattr(qaboard.users, "send_password_reset_email", sent)

        resp = await client.post("/api/auth/forgot-password", json={"email": owner.email})
        assert resp.status_code == 202
        sent.assert_called_once()
        user_arg, token = sent.call_args.args
        assert user_arg.email == owner.email

        resp = await client.post(
            "/api/auth/reset-password", json={"token": token, "password": "brand-new-password"}
        )
        assert resp.status_code == 200

        old = await client.post("/api/auth/login", data={"username": owner.email, "password": PASSWORD})
        assert old.status_code == 400
        new = await client.post(
            "/api/auth/login", data={"username": owner.email, "password": "brand-new-password"}
        )
        assert new.status_code == 200

    async def test_forgot_unknown_email_is_silent(self, client, monkeypatch):
        sent = MagicMock(return_value=True)
        monkeypatch.setattr(qaboard.users, "send_password_reset_email", sent)
        resp = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
        assert resp.status_code == 202
        sent.assert_not_called()
