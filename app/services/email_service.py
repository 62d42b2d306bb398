"""
app/services/email_service.py

Purpose: SMTP delivery of admin notifications

- Sends plain-text mail via aiosmtplib
- STARTTLS + login when credentials are configured
"""

from email.message import EmailMessage
from typing import Any, Dict, Optional

import aiosmtplib

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class EmailService:
    """Service for sending admin notification emails"""

    def __init__(
        self,
        hostname: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_tls: Optional[bool] = None,
        timeout: Optional[float] = None,
    ):
        self.hostname = hostname or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else (settings.SMTP_USERNAME or settings.ADMIN_EMAIL)
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.sender = sender or settings.ADMIN_EMAIL
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.timeout = timeout or settings.SMTP_TIMEOUT

    def build_message(self, to_email: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)
        return message

    async def send_email(self, to_email: str, subject: str, body: str) -> Dict[str, Any]:
        """
        Sends one email.

        Args:
            to_email: Recipient address
            subject: Subject line
            body: Plain text body

        Returns:
            {"success": True/False, "error": "Optional error message"}
        """
        message = self.build_message(to_email, subject, body)

        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username if self.password else None,
                password=self.password or None,
                start_tls=self.use_tls,
                timeout=self.timeout,
            )
            logger.info(f"📧 Email sent to {to_email}: {subject}")
            return {"success": True}

        except aiosmtplib.SMTPException as e:
            logger.error(f"SMTP error sending to {to_email}: {e}")
            return {"success": False, "error": str(e)}

    def is_configured(self) -> bool:
        return bool(self.hostname and self.sender)


# Singleton instance
email_service = EmailService()
