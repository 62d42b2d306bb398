"""
app/services/notification_service.py

Purpose: Admin notification sink

- Onboarding handlers publish events; they never wait on delivery
- Events are queued and delivered by a background worker
- Channel chosen by settings: log, email or whatsapp
- Delivery failures are logged and never reach the request that caused them
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from app.core.config import settings
from app.core.logging import get_logger
from utils.time_utils import format_timestamp, utcnow
from utils.constants import (
    NOTIFY_IDCARD_REQUESTED_BODY,
    NOTIFY_IDCARD_REQUESTED_SUBJECT,
    NOTIFY_LOGIN_BODY,
    NOTIFY_LOGIN_SUBJECT,
    NOTIFY_PIN_VERIFIED_BODY,
    NOTIFY_PIN_VERIFIED_SUBJECT,
    NOTIFY_PLAN_REQUESTED_BODY,
    NOTIFY_PLAN_REQUESTED_SUBJECT,
    NOTIFY_REGISTERED_BODY,
    NOTIFY_REGISTERED_SUBJECT,
)

logger = get_logger(__name__)


class EventKind(str, Enum):
    REGISTERED = "registered"
    LOGIN = "login"
    PIN_VERIFIED = "pin_verified"
    PLAN_REQUESTED = "plan_requested"
    IDCARD_REQUESTED = "idcard_requested"


TEMPLATES = {
    EventKind.REGISTERED: (NOTIFY_REGISTERED_SUBJECT, NOTIFY_REGISTERED_BODY),
    EventKind.LOGIN: (NOTIFY_LOGIN_SUBJECT, NOTIFY_LOGIN_BODY),
    EventKind.PIN_VERIFIED: (NOTIFY_PIN_VERIFIED_SUBJECT, NOTIFY_PIN_VERIFIED_BODY),
    EventKind.PLAN_REQUESTED: (NOTIFY_PLAN_REQUESTED_SUBJECT, NOTIFY_PLAN_REQUESTED_BODY),
    EventKind.IDCARD_REQUESTED: (NOTIFY_IDCARD_REQUESTED_SUBJECT, NOTIFY_IDCARD_REQUESTED_BODY),
}


@dataclass(frozen=True)
class NotificationEvent:
    kind: EventKind
    user_id: str
    email: str
    fields: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)

    def render(self) -> tuple:
        """Returns (subject, body) for this event."""
        subject, body = TEMPLATES[self.kind]
        values = {
            "user_id": self.user_id,
            "email": self.email,
            "time": format_timestamp(self.occurred_at),
            **self.fields,
        }
        return subject, body.format_map(_Defaulting(values))


class _Defaulting(dict):
    def __missing__(self, key):
        return "N/A"


class NotificationChannel(Protocol):
    name: str

    async def deliver(self, subject: str, body: str) -> bool:
        ...


class LogChannel:
    """Writes notifications to the application log."""

    name = "log"

    async def deliver(self, subject: str, body: str) -> bool:
        logger.info(f"🔔 {subject}\n{body}")
        return True


class EmailChannel:
    name = "email"

    def __init__(self, recipient: str, service=None):
        from app.services.email_service import email_service

        self.recipient = recipient
        self.service = service or email_service

    async def deliver(self, subject: str, body: str) -> bool:
        result = await self.service.send_email(self.recipient, subject, body)
        return bool(result.get("success"))


class WhatsAppChannel:
    name = "whatsapp"

    def __init__(self, recipient: str, service=None):
        from app.services.twilio_service import twilio_service

        self.recipient = recipient
        self.service = service or twilio_service

    async def deliver(self, subject: str, body: str) -> bool:
        result = await self.service.send_message(self.recipient, f"{subject}\n\n{body}")
        return bool(result.get("success"))


def build_channel() -> NotificationChannel:
    """
    Builds the channel named by NOTIFICATION_CHANNEL.
    """
    if settings.NOTIFICATION_CHANNEL == "email":
        return EmailChannel(settings.ADMIN_EMAIL)
    if settings.NOTIFICATION_CHANNEL == "whatsapp":
        return WhatsAppChannel(settings.ADMIN_WHATSAPP_NUMBER)
    return LogChannel()


class NotificationService:
    """
    Queue-backed dispatcher for admin notifications.

    publish() is synchronous and never raises. The worker task started by
    start() drains the queue and hands each event to the channel.
    """

    def __init__(self, channel: Optional[NotificationChannel] = None, maxsize: Optional[int] = None):
        self.channel = channel
        self.maxsize = maxsize if maxsize is not None else settings.NOTIFICATION_QUEUE_SIZE
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None
        self.delivered = 0
        self.failed = 0
        self.dropped = 0

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self):
        if self.running:
            logger.warning("Notification worker already running")
            return
        if self.channel is None:
            self.channel = build_channel()
        self._queue = asyncio.Queue(maxsize=self.maxsize)
        self._worker = asyncio.create_task(self._run(), name="notification-worker")
        logger.info(f"Notification worker started (channel={self.channel.name})")

    async def stop(self, timeout: float = 5.0):
        """
        Stops the worker after giving queued events ``timeout`` seconds to drain.
        """
        if not self.running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Dropping {self._queue.qsize()} undelivered notifications on shutdown")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._queue = None
        logger.info("Notification worker stopped")

    def publish(self, event: NotificationEvent) -> bool:
        """
        Enqueues an event for delivery.

        Returns:
            True if queued, False if dropped (worker not running or queue full)
        """
        if not self.running:
            self.dropped += 1
            logger.warning(
                "Notification worker not running, event dropped",
                extra={"event": event.kind.value, "user_id": event.user_id}
            )
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Notification queue full, event dropped",
                extra={"event": event.kind.value, "user_id": event.user_id}
            )
            return False
        return True

    async def _run(self):
        while True:
            event = await self._queue.get()
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()

    async def _deliver(self, event: NotificationEvent):
        subject, body = event.render()
        try:
            ok = await self.channel.deliver(subject, body)
        except Exception as e:
            ok = False
            logger.error(
                f"Notification delivery raised: {e}",
                extra={"event": event.kind.value, "user_id": event.user_id},
                exc_info=True
            )
        if ok:
            self.delivered += 1
        else:
            self.failed += 1
            logger.warning(
                "Notification not delivered",
                extra={"event": event.kind.value, "user_id": event.user_id}
            )


# Singleton instance
notification_service = NotificationService()


def notify(kind: EventKind, user, **fields) -> bool:
    """
    Publishes an admin notification about ``user``.
    """
    return notification_service.publish(
        NotificationEvent(kind=kind, user_id=user.id, email=user.email, fields=fields)
    )
