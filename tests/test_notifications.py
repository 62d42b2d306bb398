import asyncio

import pytest

from app.flow.handlers.pin import handle_pin_submission
from app.flow.states import OnboardingStatus
from app.services import notification_service as notifications
from app.services import user_service
from app.services.notification_service import (
    EventKind,
    NotificationEvent,
    NotificationService,
)


class RecordingChannel:
    name = "recording"

    def __init__(self):
        self.sent = []

    async def deliver(self, subject, body):
        self.sent.append((subject, body))
        return True


class BrokenChannel:
    name = "broken"

    async def deliver(self, subject, body):
        raise ConnectionError("smtp.gmail.com:587 refused")


def test_event_render_fills_template():
    event = NotificationEvent(EventKind.PLAN_REQUESTED, user_id="u1", email="a@x.com", fields={"plan": "gold"})
    subject, body = event.render()
    assert "Plan Selection Request" in subject
    assert "Plan: gold" in body
    assert "Email: a@x.com" in body


def test_event_render_tolerates_missing_fields():
    event = NotificationEvent(EventKind.REGISTERED, user_id="u1", email="a@x.com")
    _, body = event.render()
    assert "Phone: N/A" in body


def test_publish_without_worker_drops():
    service = NotificationService(channel=RecordingChannel())
    event = NotificationEvent(EventKind.LOGIN, user_id="u1", email="a@x.com")
    assert service.publish(event) is False
    assert service.dropped == 1


@pytest.mark.asyncio
async def test_worker_delivers_queued_events():
    channel = RecordingChannel()
    service = NotificationService(channel=channel)
    await service.start()
    try:
        assert service.publish(NotificationEvent(EventKind.LOGIN, user_id="u1", email="a@x.com"))
        assert service.publish(NotificationEvent(EventKind.PIN_VERIFIED, user_id="u1", email="a@x.com"))
    finally:
        await service.stop()

    assert [subject for subject, _ in channel.sent] == ["🔑 User Login", "✅ PIN Verified"]
    assert service.delivered == 2
    assert not service.running


@pytest.mark.asyncio
async def test_full_queue_drops_instead_of_blocking():
    gate = asyncio.Event()

    class SlowChannel:
        name = "slow"

        async def deliver(self, subject, body):
            await gate.wait()
            return True

    service = NotificationService(channel=SlowChannel(), maxsize=1)
    await service.start()
    try:
        event = NotificationEvent(EventKind.LOGIN, user_id="u1", email="a@x.com")
        results = [service.publish(event) for _ in range(5)]
        assert results.count(False) >= 3
        assert service.dropped == results.count(False)
    finally:
        gate.set()
        await service.stop()


@pytest.mark.asyncio
async def test_failed_delivery_keeps_pin_transition(monkeypatch):
    service = NotificationService(channel=BrokenChannel())
    monkeypatch.setattr(notifications, "notification_service", service)
    await service.start()

    user = await user_service.create_user(
        name="a", email="a@x.com", phone="+15551234567", country="US", raw_password="secret123"
    )
    await user_service.set_pin(user.id, "12345")
    try:
        response = await handle_pin_submission(user.id, "12345")
    finally:
        await service.stop()

    assert response["status"] == "step2"
    assert service.failed == 1
    stored = await user_service.get_user_by_id(user.id)
    assert stored.status is OnboardingStatus.STEP2


@pytest.mark.asyncio
async def test_whatsapp_channel_posts_to_twilio():
    import httpx

    from app.services.notification_service import WhatsAppChannel
    from app.services.twilio_service import TwilioService

    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(201, json={"sid": "SM123", "status": "queued"})

    service = TwilioService(
        account_sid="AC123",
        auth_token="token",
        whatsapp_number="whatsapp:+14155238886",
        transport=httpx.MockTransport(handler),
    )
    channel = WhatsAppChannel("+15550001111", service=service)

    assert await channel.deliver("✅ PIN Verified", "User verified PIN")
    assert requests[0].url.path == "/2010-04-01/Accounts/AC123/Messages.json"
    assert b"whatsapp%3A%2B15550001111" in requests[0].content


@pytest.mark.asyncio
async def test_whatsapp_channel_reports_api_error():
    import httpx

    from app.services.notification_service import WhatsAppChannel
    from app.services.twilio_service import TwilioService

    service = TwilioService(
        account_sid="AC123",
        auth_token="token",
        whatsapp_number="whatsapp:+14155238886",
        transport=httpx.MockTransport(lambda request: httpx.Response(401, text="bad auth")),
    )
    assert not await WhatsAppChannel("+15550001111", service=service).deliver("s", "b")


@pytest.mark.asyncio
async def test_email_channel_sends_message(monkeypatch):
    from app.services import email_service as email_module
    from app.services.email_service import EmailService
    from app.services.notification_service import EmailChannel

    sent = []

    async def fake_send(message, **kwargs):
        sent.append((message, kwargs))

    monkeypatch.setattr(email_module.aiosmtplib, "send", fake_send)
    service = EmailService(hostname="smtp.test", port=2525, sender="admin@olympic.test", password="")
    channel = EmailChannel("admin@olympic.test", service=service)

    assert await channel.deliver("📥 New User Registration", "Name: a")
    message, kwargs = sent[0]
    assert message["To"] == "admin@olympic.test"
    assert message["Subject"] == "📥 New User Registration"
    assert kwargs["hostname"] == "smtp.test"
    assert kwargs["username"] is None


def test_event_render_includes_timestamp():
    from datetime import datetime, timezone

    event = NotificationEvent(
        EventKind.IDCARD_REQUESTED,
        user_id="u1",
        email="a@x.com",
        occurred_at=datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
    )
    _, body = event.render()
    assert "Time: 2024-03-01 09:30:00 UTC" in body
