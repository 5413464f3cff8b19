"""
Email Service for Capstone Hub
==============================
Transactional email is a best-effort side channel:
- Password reset links
- Announcement broadcasts

Route handlers depend on the `EmailNotifier` interface through
`get_email_notifier`, so tests swap in a recording notifier. Delivery runs as
a background task after the response; failures are logged, never raised.
"""

import html
import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, List, Protocol
from datetime import datetime

from app.core.config import settings
from app.core.logging_config import logger


class EmailNotifier(Protocol):
    """Anything able to deliver one email"""

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        ...


class SmtpEmailNotifier:
    """Async SMTP delivery via aiosmtplib"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        return bool(self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise.
        """
        if not self.is_configured:
            logger.log_notification(to_email, subject, success=False, reason="SMTP not configured")
            return False

        try:
            message = MIMEMultipart("alternative")
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email
            message["Subject"] = subject

            # Plain text first so clients prefer the HTML part
            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True
            )

            logger.log_notification(to_email, subject, success=True)
            return True

        except (aiosmtplib.SMTPException, OSError) as e:
            logger.log_notification(to_email, subject, success=False, reason=str(e))
            return False


# Singleton instance
email_notifier = SmtpEmailNotifier()


def get_email_notifier() -> EmailNotifier:
    """FastAPI dependency; overridden in tests"""
    return email_notifier


async def deliver(notifier: EmailNotifier, to_email: str, subject: str,
                  html_content: str, text_content: Optional[str] = None) -> None:
    """Fire-and-forget wrapper: any failure ends up in the log"""
    try:
        await notifier.send_email(to_email, subject, html_content, text_content)
    except Exception as e:
        logger.log_notification(to_email, subject, success=False, reason=f"{type(e).__name__}: {e}")


async def deliver_many(notifier: EmailNotifier, recipients: List[str], subject: str,
                       html_content: str, text_content: Optional[str] = None) -> None:
    for recipient in recipients:
        await deliver(notifier, recipient, subject, html_content, text_content)
    logger.info(f"[Email] Broadcast '{subject}' dispatched to {len(recipients)} recipients")


# ==================== Templates ====================

def password_reset_email(user_name: str, reset_link: str) -> tuple:
    subject = f"Reset your password - {settings.APP_NAME}"
    html_content = f"""
    <html>
    <body style="font-family: sans-serif; line-height: 1.6; color: #333;">
        <p>Hi {html.escape(user_name or "there")},</p>
        <p>We received a request to reset your password. Use the link below to choose a new one:</p>
        <p><a href="{html.escape(reset_link)}">Reset Password</a></p>
        <p>This link expires in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes. If you did not ask for a
        reset, ignore this email and your password stays unchanged.</p>
        <p style="font-size: 12px; color: #6b7280;">&copy; {datetime.utcnow().year} {settings.APP_NAME}</p>
    </body>
    </html>
    """
    text_content = (
        f"Hi {user_name or 'there'},\n\n"
        f"Reset your password here: {reset_link}\n\n"
        f"This link expires in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes."
    )
    return subject, html_content, text_content


def announcement_email(title: str, content: str, author_name: str) -> tuple:
    """Title, content and author are user-supplied and are escaped in the HTML part"""
    subject = f"[{settings.APP_NAME}] {title}"
    html_content = f"""
    <html>
    <body style="font-family: sans-serif; line-height: 1.6; color: #333;">
        <h2>{html.escape(title)}</h2>
        <div style="white-space: pre-wrap;">{html.escape(content)}</div>
        <p style="font-size: 12px; color: #6b7280;">Posted by {html.escape(author_name or "")}.
        Read it on <a href="{settings.FRONTEND_URL}/announcements">{settings.APP_NAME}</a>.</p>
    </body>
    </html>
    """
    return subject, html_content, f"{title}\n\n{content}\n\n- {author_name}"
