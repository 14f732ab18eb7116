"""
Form intake pipeline: validate -> persist -> best-effort notify.

The record is always committed before any email is attempted, and the
outcome of the emails never changes what the caller gets back. The
newsletter subscribe/unsubscribe lifecycle lives here too.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from app.core.notifier import NotificationKind, Notifier
from app.db.store import RecordStore
from app.models.application import Application, ApplicationSubmission
from app.models.common import UNKNOWN, utcnow
from app.models.inquiry import Inquiry, InquirySubmission
from app.models.subscription import NewsletterRequest, Subscription

logger = logging.getLogger(__name__)

SUBSCRIBED = "subscribed"
ALREADY_SUBSCRIBED = "already_subscribed"
RESUBSCRIBED = "resubscribed"
UNSUBSCRIBED = "unsubscribed"
ALREADY_UNSUBSCRIBED = "already_unsubscribed"


@dataclass
class ClientInfo:
    """Capture metadata recorded with every submission."""

    ipAddress: str = UNKNOWN
    userAgent: str = UNKNOWN


def get_client_info(request) -> ClientInfo:
    """Origin address (forwarded header, then peer address) and agent string."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and forwarded.split(",")[0].strip():
        ip_address = forwarded.split(",")[0].strip()
    elif request.client and request.client.host:
        ip_address = request.client.host
    else:
        ip_address = UNKNOWN

    return ClientInfo(
        ipAddress=ip_address,
        userAgent=request.headers.get("user-agent") or UNKNOWN,
    )


@dataclass
class SubscriptionOutcome:
    status: str
    subscription: Subscription

    @property
    def created(self) -> bool:
        return self.status == SUBSCRIBED


class IntakePipeline:
    def __init__(self, store: RecordStore, notifier: Notifier, clock: Callable = utcnow):
        self.store = store
        self.notifier = notifier
        self.clock = clock

    @staticmethod
    def _build(model, client_info: Optional[ClientInfo], **fields):
        client_info = client_info or ClientInfo()
        try:
            return model(ipAddress=client_info.ipAddress, userAgent=client_info.userAgent, **fields)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

    async def submit_inquiry(self, submission: InquirySubmission, client_info: Optional[ClientInfo] = None) -> Inquiry:
        inquiry = self._build(Inquiry, client_info, **submission.model_dump())
        saved = await self.store.save(inquiry)
        logger.info(f"📝 Contact form saved: {saved.id} ({saved.fullName})")

        await self.notifier.notify_all(
            [NotificationKind.INQUIRY_CONFIRMATION, NotificationKind.INQUIRY_ADMIN_NOTICE],
            saved,
        )
        return saved

    async def submit_application(self, submission: ApplicationSubmission, client_info: Optional[ClientInfo] = None) -> Application:
        application = self._build(Application, client_info, **submission.model_dump())
        saved = await self.store.save(application)
        logger.info(f"📝 Application saved: {saved.id} ({saved.fullName}, {saved.program.preferredProgram})")

        await self.notifier.notify_all(
            [NotificationKind.APPLICATION_CONFIRMATION, NotificationKind.APPLICATION_ADMIN_NOTICE],
            saved,
        )
        return saved

    async def subscribe(self, request: NewsletterRequest, client_info: Optional[ClientInfo] = None) -> SubscriptionOutcome:
        """
        Subscribe an email to the newsletter.

        - unknown email: create an active subscription and notify
        - active: nothing changes ("already_subscribed")
        - unsubscribed: reactivate with the new source and notify
        - bounced: rejected as a duplicate, nothing changes

        Raises:
            DuplicateKeyError: bounced record, or lost a concurrent insert race
        """
        existing = await self.store.find_by_normalized_email(request.email)
        now = self.clock()

        if existing is None:
            subscription = self._build(
                Subscription,
                client_info,
                email=request.email,
                source=request.source,
                lastEmailSent=now,
            )
            saved = await self.store.save(subscription)
            logger.info(f"📝 Newsletter subscription created: {saved.email} (source={saved.source})")
            await self._notify_subscription(saved)
            return SubscriptionOutcome(SUBSCRIBED, saved)

        if existing.is_active:
            logger.info(f"ℹ️ Email already subscribed: {existing.email}")
            return SubscriptionOutcome(ALREADY_SUBSCRIBED, existing)

        if existing.is_unsubscribed:
            existing.reactivate(request.source, now)
            saved = await self.store.save(existing)
            logger.info(f"🔄 Newsletter subscription reactivated: {saved.email}")
            await self._notify_subscription(saved, NotificationKind.NEWSLETTER_RESUBSCRIBE_ADMIN_NOTICE)
            return SubscriptionOutcome(RESUBSCRIBED, saved)

        logger.warning(f"⚠️ Subscribe refused for {existing.email}: status is {existing.status}")
        raise DuplicateKeyError("This email is already subscribed", key="email")

    async def unsubscribe(self, email: str) -> SubscriptionOutcome:
        """
        Raises:
            NotFoundError: no subscription for this email
        """
        subscription = await self.store.find_by_normalized_email(email)
        if subscription is None:
            raise NotFoundError("Email not found in our newsletter subscription list")

        if subscription.is_unsubscribed:
            return SubscriptionOutcome(ALREADY_UNSUBSCRIBED, subscription)

        subscription.unsubscribe(self.clock())
        saved = await self.store.save(subscription)
        logger.info(f"👋 Newsletter subscription cancelled: {saved.email}")
        return SubscriptionOutcome(UNSUBSCRIBED, saved)

    async def _notify_subscription(self, subscription: Subscription, admin_kind=NotificationKind.NEWSLETTER_ADMIN_NOTICE):
        await self.notifier.notify_all(
            [NotificationKind.NEWSLETTER_CONFIRMATION, admin_kind],
            subscription,
        )
