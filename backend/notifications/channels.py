"""Notification channel implementations.

Each channel handles delivery for one transport. The
NotificationManager dispatches to the appropriate channel.
"""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from enum import Enum
from html import escape
from typing import Any, Optional

logger = logging.getLogger(__name__)


# ─── Data Types ────────────────────────────────────────────────

class NotificationChannel(str, Enum):
    EMAIL = "email"


@dataclass
class Notification:
    """A notification to be delivered."""
    title: str
    message: str
    channel: NotificationChannel
    recipient: str = ""  # email address for the email channel
    metadata: dict[str, Any] = field(default_factory=dict)
    organization_id: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class DeliveryResult:
    """Result of a notification delivery attempt."""
    success: bool
    channel: NotificationChannel
    recipient: str
    message: str = ""
    error: Optional[str] = None
    delivered_at: Optional[str] = None


# ─── Base Channel ──────────────────────────────────────────────

class BaseChannel(ABC):
    """Abstract base for notification channels."""

    channel_type: NotificationChannel

    @abstractmethod
    async def send(self, notification: Notification) -> DeliveryResult:
        """Send a notification through this channel.

        Delivery problems are reported in the result, never raised.
        """
        ...


# ─── Email Channel ─────────────────────────────────────────────

class EmailChannel(BaseChannel):
    """Send notifications via SMTP email.

    Config:
        smtp_host, smtp_port, smtp_user, smtp_password,
        from_address, use_tls
    """

    channel_type = NotificationChannel.EMAIL

    def __init__(self, config: dict = None):
        self.config = config or {}

    def build_message(self, notification: Notification) -> MIMEMultipart:
        from_addr = self.config.get("from_address", "workflows@localhost")

        msg = MIMEMultipart("alternative")
        msg["Subject"] = notification.title
        msg["From"] = from_addr
        msg["To"] = notification.recipient

        msg.attach(MIMEText(notification.message, "plain"))

        html = f"""
        <div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #333;">{escape(notification.title)}</h2>
            <div style="color: #555; line-height: 1.6;">
                {escape(notification.message).replace(chr(10), '<br>')}
            </div>
            <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
            <p style="color: #999; font-size: 12px;">Sent by Agent Workspace</p>
        </div>
        """
        msg.attach(MIMEText(html, "html"))
        return msg

    async def send(self, notification: Notification) -> DeliveryResult:
        """Send email notification."""
        if not notification.recipient:
            return DeliveryResult(
                success=False,
                channel=self.channel_type,
                recipient="",
                error="No recipient",
            )

        try:
            msg = self.build_message(notification)

            # smtplib blocks; run it in the default executor
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._send_smtp, notification.recipient, msg)

            return DeliveryResult(
                success=True,
                channel=self.channel_type,
                recipient=notification.recipient,
                message="Email sent",
                delivered_at=datetime.now(timezone.utc).isoformat(),
            )

        except (smtplib.SMTPException, OSError, MessageError, ValueError) as e:
            logger.error(f"Email send failed: {e}")
            return DeliveryResult(
                success=False,
                channel=self.channel_type,
                recipient=notification.recipient,
                error=str(e),
            )

    def _send_smtp(self, to_addr: str, msg: MIMEMultipart) -> None:
        """Synchronous SMTP send."""
        host = self.config.get("smtp_host", "localhost")
        port = self.config.get("smtp_port", 587)
        user = self.config.get("smtp_user", "")
        password = self.config.get("smtp_password", "")

        with smtplib.SMTP(host, port, timeout=30) as server:
            if self.config.get("use_tls", True):
                server.starttls()
            if user and password:
                server.login(user, password)
            server.sendmail(msg["From"], [to_addr], msg.as_string())
