# services/mailer.py
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Optional

from fastapi.templating import Jinja2Templates

from qaboard.settings.config import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _open_smtp() -> smtplib.SMTP:
    host, port = settings.SMTP_HOST, int(settings.SMTP_PORT or 587)
    if settings.SMTP_USE_SSL:
        return smtplib.SMTP_SSL(host, port, context=ssl.create_default_context(), timeout=30)
    server = smtplib.SMTP(host, port, timeout=30)
    if settings.SMTP_USE_TLS:
        server.starttls(context=ssl.create_default_context())
    return server


def send_email(to_email: str, subject: str, text_body: str, html_body: Optional[str] = None) -> bool:
    """Deliver one message; the 'dummy' transport only logs it. Returns False on SMTP failure."""
    if (settings.EMAIL_TRANSPORT or "smtp").lower() == "dummy":
        logger.info("Dummy email (not sent) to=%s subject=%r\n%s", to_email, subject, text_body)
        return True

    from_addr = (settings.SMTP_FROM or settings.SMTP_USERNAME or "").strip()
    msg = MIMEMultipart("alternative")
    msg["From"] = from_addr
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.attach(MIMEText(text_body, "plain", "utf-8"))
    if html_body:
        msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        with _open_smtp() as server:
            if settings.SMTP_USERNAME:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD or "")
            server.sendmail(from_addr, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError):
        logger.exception("SMTP delivery to %s failed", to_email)
        return False
    return True


def render_password_reset_email(display_name: str, token: str) -> tuple[str, str, str]:
    base_url = settings.BASE_URL.rstrip("/")
    ctx = {
        "display_name": display_name,
        "reset_link": f"{base_url}/reset-password?token={token}",
        "token": token,
    }
    subject = "Reset your QA Board password"
    text = templates.get_template("email/reset_password.txt").render(ctx)
    html = templates.get_template("email/reset_password.html").render(ctx)
    return subject, text, html


def send_password_reset_email(user, token: str) -> bool:
    subject, text, html = render_password_reset_email(user.name or user.email, token)
    return send_email(user.email, subject=subject, text_body=text, html_body=html)
