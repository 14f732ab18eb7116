from pydantic import BaseModel, EmailStr, field_validator
from typing import ClassVar, Literal, Optional
from datetime import datetime

from app.models.common import StoredRecord, normalize_email, utcnow

SubscriptionStatus = Literal["active", "unsubscribed", "bounced"]
SubscriptionSource = Literal["homepage", "contact_page", "apply_page", "other"]


class NewsletterRequest(BaseModel):
    email: EmailStr
    source: SubscriptionSource = "homepage"

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)


class UnsubscribeRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)


class Subscription(StoredRecord):
    """
    Newsletter subscription, one document per normalized email.
    Collection name: "newsletter_subscriptions" (unique index on email)

    Lifecycle: active -> unsubscribed -> active. "bounced" is never set by
    the public flows.
    """

    collection_name: ClassVar[str] = "newsletter_subscriptions"

    email: EmailStr
    status: SubscriptionStatus = "active"
    source: SubscriptionSource = "homepage"
    unsubscribedAt: Optional[datetime] = None
    lastEmailSent: Optional[datetime] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return normalize_email(value)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_unsubscribed(self) -> bool:
        return self.status == "unsubscribed"

    def unsubscribe(self, now: Optional[datetime] = None):
        self.status = "unsubscribed"
        self.unsubscribedAt = now or utcnow()

    def reactivate(self, source: str, now: Optional[datetime] = None):
        self.status = "active"
        self.source = source
        self.unsubscribedAt = None
        self.lastEmailSent = now or utcnow()
