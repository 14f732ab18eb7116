"""Tests for the intake pipeline and the newsletter subscription lifecycle."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from app.core.intake import ClientInfo, IntakePipeline, get_client_info
from app.models.application import Application, ApplicationSubmission
from app.models.inquiry import Inquiry, InquirySubmission
from app.models.subscription import NewsletterRequest, Subscription
from conftest import ADMIN_EMAIL, FakeEmailSink


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self):
        self.current = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.current += timedelta(minutes=1)
        return self.current


def _request(headers=None, host="10.0.0.7"):
    return SimpleNamespace(
        headers=headers or {},
        client=SimpleNamespace(host=host) if host else None,
    )


def test_client_info_prefers_forwarded_address():
    info = get_client_info(_request({"x-forwarded-for": "203.0.113.9, 10.0.0.1", "user-agent": "Mozilla/5.0"}))

    assert info == ClientInfo(ipAddress="203.0.113.9", userAgent="Mozilla/5.0")


def test_client_info_falls_back_to_peer_then_unknown():
    assert get_client_info(_request()).ipAddress == "10.0.0.7"
    assert get_client_info(_request(host=None)) == ClientInfo(ipAddress="unknown", userAgent="unknown")


@pytest.mark.asyncio
async def test_submit_inquiry_persists_then_notifies_both(pipeline, store, sink, contact_payload):
    inquiry = await pipeline.submit_inquiry(
        InquirySubmission(**contact_payload),
        ClientInfo(ipAddress="203.0.113.9", userAgent="pytest"),
    )

    stored = await store.get(Inquiry, inquiry.id)
    assert stored.email == "john.doe@example.com"
    assert stored.ipAddress == "203.0.113.9"
    assert stored.userAgent == "pytest"
    assert sorted(message.to_email for message in sink.sent) == [ADMIN_EMAIL, "john.doe@example.com"]


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_submission(store, notifier, contact_payload):
    notifier.sink = FakeEmailSink(fail=True)
    pipeline = IntakePipeline(store, notifier)

    inquiry = await pipeline.submit_inquiry(InquirySubmission(**contact_payload))

    assert await store.get(Inquiry, inquiry.id) is not None
    assert len(notifier.sink.attempts) == 2


@pytest.mark.asyncio
async def test_store_failure_skips_notification(notifier, sink, application_payload):
    failing_store = AsyncMock()
    failing_store.save.side_effect = DuplicateKeyError("Duplicate key in application_forms")
    pipeline = IntakePipeline(failing_store, notifier)

    with pytest.raises(DuplicateKeyError):
        await pipeline.submit_application(ApplicationSubmission(**application_payload))

    assert sink.attempts == []


@pytest.mark.asyncio
async def test_submit_application_returns_stored_record(pipeline, store, sink, application_payload):
    application = await pipeline.submit_application(ApplicationSubmission(**application_payload))

    stored = await store.get(Application, application.id)
    assert stored.fullName == "Jane Smith"
    assert stored.status == "submitted"
    assert len(sink.sent) == 2


def test_build_maps_pydantic_errors_to_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        IntakePipeline._build(Subscription, None, email="nope")

    assert [error["field"] for error in exc_info.value.errors] == ["email"]


@pytest.mark.asyncio
async def test_subscribe_new_email_creates_active_record(store, notifier, sink):
    clock = StepClock()
    pipeline = IntakePipeline(store, notifier, clock=clock)

    outcome = await pipeline.subscribe(NewsletterRequest(email="New@Example.com", source="contact_page"))

    assert outcome.status == "subscribed"
    assert outcome.created is True
    stored = await store.find_by_normalized_email("new@example.com")
    assert stored.status == "active"
    assert stored.source == "contact_page"
    assert stored.lastEmailSent == clock.current
    assert len(sink.sent) == 2
    assert {message.subject for message in sink.sent} == {
        "Welcome to Next Stop China Newsletter!",
        "New Newsletter Subscription - new@example.com",
    }


@pytest.mark.asyncio
async def test_subscribe_when_active_changes_nothing(pipeline, store, sink, fake_db):
    await pipeline.subscribe(NewsletterRequest(email="reader@example.com"))
    before = await store.find_by_normalized_email("reader@example.com")
    writes = fake_db["newsletter_subscriptions"].write_count
    sink.sent.clear()

    outcome = await pipeline.subscribe(NewsletterRequest(email="reader@example.com", source="other"))

    assert outcome.status == "already_subscribed"
    assert await store.find_by_normalized_email("reader@example.com") == before
    assert fake_db["newsletter_subscriptions"].write_count == writes
    assert sink.sent == []


@pytest.mark.asyncio
async def test_subscribe_after_unsubscribe_reactivates(store, notifier, sink):
    pipeline = IntakePipeline(store, notifier, clock=StepClock())
    await pipeline.subscribe(NewsletterRequest(email="reader@example.com", source="homepage"))
    await pipeline.unsubscribe("reader@example.com")
    sink.sent.clear()

    outcome = await pipeline.subscribe(NewsletterRequest(email="reader@example.com", source="apply_page"))

    assert outcome.status == "resubscribed"
    stored = await store.find_by_normalized_email("reader@example.com")
    assert stored.status == "active"
    assert stored.unsubscribedAt is None
    assert stored.source == "apply_page"
    assert len(sink.sent) == 2
    admin_notice = next(message for message in sink.sent if message.to_email == ADMIN_EMAIL)
    assert admin_notice.subject == "Newsletter Resubscription - reader@example.com"


@pytest.mark.asyncio
async def test_subscribe_refuses_bounced_record(pipeline, store, sink):
    bounced = await store.save(Subscription(email="bounced@example.com", status="bounced"))

    with pytest.raises(DuplicateKeyError):
        await pipeline.subscribe(NewsletterRequest(email="bounced@example.com"))

    stored = await store.find_by_normalized_email("bounced@example.com")
    assert stored.status == "bounced"
    assert stored.updatedAt == bounced.updatedAt
    assert sink.attempts == []


@pytest.mark.asyncio
async def test_unsubscribe_unknown_email_is_not_found(pipeline, fake_db):
    with pytest.raises(NotFoundError):
        await pipeline.unsubscribe("ghost@example.com")

    assert fake_db["newsletter_subscriptions"].write_count == 0


@pytest.mark.asyncio
async def test_unsubscribe_twice_keeps_first_timestamp(store, notifier, sink, fake_db):
    pipeline = IntakePipeline(store, notifier, clock=StepClock())
    await pipeline.subscribe(NewsletterRequest(email="reader@example.com"))
    sink.attempts.clear()

    first = await pipeline.unsubscribe("reader@example.com")
    writes = fake_db["newsletter_subscriptions"].write_count
    second = await pipeline.unsubscribe(" Reader@Example.com ")

    assert first.status == "unsubscribed"
    assert second.status == "already_unsubscribed"
    stored = await store.find_by_normalized_email("reader@example.com")
    assert stored.unsubscribedAt == first.subscription.unsubscribedAt
    assert fake_db["newsletter_subscriptions"].write_count == writes
    assert sink.attempts == []


@pytest.mark.asyncio
async def test_unsubscribe_bounced_record(pipeline, store):
    await store.save(Subscription(email="bounced@example.com", status="bounced"))

    outcome = await pipeline.unsubscribe("bounced@example.com")

    assert outcome.status == "unsubscribed"
    assert outcome.subscription.unsubscribedAt is not None
