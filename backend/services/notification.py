"""
Reminder emails for upcoming appointments, delivered over SMTP.
"""

import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from backend.core import config

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when a reminder could not be handed to the mail server."""


def format_start_time(start_time: datetime) -> str:
    return f"{start_time:%A, %B} {start_time.day}, {start_time:%Y at %I:%M %p} UTC"


def render_reminder(title: str, start_time: datetime, lookahead_minutes: int) -> tuple[str, str]:
    formatted_time = format_start_time(start_time)
    subject = f"Reminder: {title} in {lookahead_minutes} minutes"
    html = f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background-color: #1976D2; color: white; padding: 20px; border-radius: 8px 8px 0 0;">
          <h1 style="margin: 0; font-size: 24px;">Appointment Reminder</h1>
        </div>
        <div style="background-color: #f8f9fa; padding: 20px; border-radius: 0 0 8px 8px; border: 1px solid #e9ecef;">
          <h2 style="color: #1976D2; margin-top: 0;">{escape(title)}</h2>
          <p style="font-size: 16px; color: #333;"><strong>Time:</strong> {formatted_time}</p>
          <p style="font-size: 14px; color: #666;">
            Your appointment starts within {lookahead_minutes} minutes.
            You can manage your appointments in the Weekly Agenda app.
          </p>
        </div>
        <div style="text-align: center; margin-top: 20px; color: #666; font-size: 12px;">
          <p>This is an automated reminder from Weekly Agenda</p>
        </div>
      </div>
    """
    return subject, html


class EmailClient(ABC):
    @abstractmethod
    def send_reminder(self, to: str, title: str, start_time: datetime) -> None:
        """Deliver one reminder; raise ``EmailDeliveryError`` on failure."""


class SmtpEmailClient(EmailClient):
    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        from_address: str = "noreply@weeklyagenda.com",
        lookahead_minutes: int = 30,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.lookahead_minutes = lookahead_minutes

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, context=ssl.create_default_context())

        server = smtplib.SMTP(self.host, self.port)
        if self.use_tls:
            try:
                server.starttls(context=ssl.create_default_context())
            except Exception:
                server.close()
                raise
        return server

    def send_reminder(self, to: str, title: str, start_time: datetime) -> None:
        subject, html = render_reminder(title, start_time, self.lookahead_minutes)

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg.attach(MIMEText(html, "html"))

        try:
            server = self._connect()
            try:
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.from_address, [to], msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"SMTP delivery to {to} failed: {exc}") from exc

        logger.info("Reminder email sent to %s for appointment: %s", to, title)


def build_email_client() -> EmailClient:
    return SmtpEmailClient(
        host=config.SMTP_HOST,
        port=config.SMTP_PORT,
        username=config.SMTP_USER,
        password=config.SMTP_PASS,
        use_tls=config.SMTP_USE_TLS,
        from_address=config.EMAIL_FROM,
        lookahead_minutes=config.NOTIFICATION_LOOKAHEAD_MINUTES,
    )
