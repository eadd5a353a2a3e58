"""Notification Manager: central dispatcher for notification channels."""

import logging
from typing import Optional

from notifications.channels import (
    BaseChannel,
    DeliveryResult,
    EmailChannel,
    Notification,
    NotificationChannel,
)

logger = logging.getLogger(__name__)


class NotificationManager:
    """Central notification dispatcher.

    Singleton, use get_notification_manager().
    """

    def __init__(self):
        self._channels: dict[NotificationChannel, BaseChannel] = {}
        self._initialized = False

    def register_channel(self, channel: BaseChannel) -> None:
        """Register a notification channel."""
        self._channels[channel.channel_type] = channel
        logger.info(f"Notification channel registered: {channel.channel_type.value}")

    def configure_channels(self, config: dict) -> None:
        """Configure channels from app settings.

        Args:
            config: {"email": {"smtp_host": ..., "smtp_port": ...}}; channels
                with an empty config stay unregistered.
        """
        if config.get("email"):
            self.register_channel(EmailChannel(config["email"]))
        self._initialized = True

    async def send(self, notification: Notification) -> DeliveryResult:
        """Send a notification through the specified channel."""
        channel = self._channels.get(notification.channel)
        if not channel:
            return DeliveryResult(
                success=False,
                channel=notification.channel,
                recipient=notification.recipient,
                error=f"Channel not configured: {notification.channel.value}",
            )

        result = await channel.send(notification)

        if result.success:
            logger.info(
                f"Notification sent via {notification.channel.value} to {notification.recipient}"
            )
        else:
            logger.warning(
                f"Notification failed via {notification.channel.value}: {result.error}"
            )

        return result

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        organization_id: str = None,
        metadata: dict = None,
    ) -> DeliveryResult:
        """Convenience wrapper used by workflow ``email_action`` steps."""
        return await self.send(Notification(
            title=subject,
            message=body,
            channel=NotificationChannel.EMAIL,
            recipient=to,
            metadata=metadata or {},
            organization_id=organization_id,
        ))

    def get_status(self) -> dict:
        """Get notification manager status."""
        return {
            "initialized": self._initialized,
            "channels": [ch.value for ch in self._channels.keys()],
        }


# ─── Singleton ─────────────────────────────────────────────────

_manager: Optional[NotificationManager] = None


def get_notification_manager() -> NotificationManager:
    """Get or create the singleton NotificationManager."""
    global _manager
    if _manager is None:
        _manager = NotificationManager()
    return _manager
