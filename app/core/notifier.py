"""
Email notifications for form submissions.

The Notifier renders one of six templates for a stored record and hands
the message to an injected sink, making exactly one send attempt per call.
BrevoEmailSink is the production sink; tests pass a fake with the same
``send(message)`` coroutine.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import httpx

from app.core import email_templates
from app.core.exceptions import NotificationError
from app.models.application import Application
from app.models.inquiry import Inquiry
from app.models.subscription import Subscription

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


class NotificationKind(str, Enum):
    INQUIRY_CONFIRMATION = "inquiry_confirmation"
    INQUIRY_ADMIN_NOTICE = "inquiry_admin_notice"
    APPLICATION_CONFIRMATION = "application_confirmation"
    APPLICATION_ADMIN_NOTICE = "application_admin_notice"
    NEWSLETTER_CONFIRMATION = "newsletter_confirmation"
    NEWSLETTER_ADMIN_NOTICE = "newsletter_admin_notice"
    NEWSLETTER_RESUBSCRIBE_ADMIN_NOTICE = "newsletter_resubscribe_admin_notice"


# kind -> (renderer, recipient)
TEMPLATES = {
    NotificationKind.INQUIRY_CONFIRMATION: (email_templates.inquiry_confirmation, "submitter"),
    NotificationKind.INQUIRY_ADMIN_NOTICE: (email_templates.inquiry_admin_notice, "admin"),
    NotificationKind.APPLICATION_CONFIRMATION: (email_templates.application_confirmation, "submitter"),
    NotificationKind.APPLICATION_ADMIN_NOTICE: (email_templates.application_admin_notice, "admin"),
    NotificationKind.NEWSLETTER_CONFIRMATION: (email_templates.newsletter_confirmation, "submitter"),
    NotificationKind.NEWSLETTER_ADMIN_NOTICE: (email_templates.newsletter_admin_notice, "admin"),
    NotificationKind.NEWSLETTER_RESUBSCRIBE_ADMIN_NOTICE: (email_templates.newsletter_resubscribe_admin_notice, "admin"),
}


@dataclass
class EmailMessage:
    subject: str
    html: str
    to_email: str
    to_name: str
    sender_email: str
    sender_name: str


def submitter_address(record):
    """(email, display name) of whoever submitted the record."""
    if isinstance(record, Application):
        return record.personalInfo.email, record.fullName
    if isinstance(record, Inquiry):
        return record.email, record.fullName
    if isinstance(record, Subscription):
        return record.email, "Subscriber"
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


class BrevoEmailSink:
    """Sends rendered messages through the Brevo transactional email API."""

    def __init__(self, api_key: Optional[str], timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, message: EmailMessage) -> Dict[str, Any]:
        if not self.api_key:
            raise NotificationError("BREVO_API_KEY is not configured")

        payload = {
            "sender": {"name": message.sender_name, "email": message.sender_email},
            "to": [{"email": message.to_email, "name": message.to_name}],
            "subject": message.subject,
            "htmlContent": message.html,
        }
        headers = {
            "api-key": self.api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(BREVO_API_URL, headers=headers, json=payload)
        except httpx.RequestError as e:
            raise NotificationError(f"Brevo request failed: {str(e)}", original_error=e) from e

        if not response.is_success:
            raise NotificationError(f"Brevo API returned {response.status_code}: {response.text}")

        return response.json() if response.content else {}


class Notifier:
    def __init__(self, sink, from_email: str, admin_email: str, sender_name: str = email_templates.BRAND):
        self.sink = sink
        self.from_email = from_email
        self.admin_email = admin_email
        self.sender_name = sender_name

    def render(self, kind: NotificationKind, record) -> EmailMessage:
        renderer, recipient = TEMPLATES[NotificationKind(kind)]
        subject, html = renderer(record)

        if recipient == "admin":
            to_email, to_name = self.admin_email, "Admin"
        else:
            to_email, to_name = submitter_address(record)

        return EmailMessage(
            subject=subject,
            html=html,
            to_email=to_email,
            to_name=to_name,
            sender_email=self.from_email,
            sender_name=self.sender_name,
        )

    async def notify(self, kind: NotificationKind, record):
        """
        Render and send one notification.

        Raises:
            NotificationError: rendering or the single send attempt failed
        """
        kind_name = getattr(kind, "value", str(kind))
        try:
            message = self.render(kind, record)
            logger.info(f"📧 Sending {kind_name} email to {message.to_email}")
            result = await self.sink.send(message)
        except NotificationError as e:
            e.kind = kind_name
            raise
        except Exception as e:
            raise NotificationError(f"Failed to send {kind_name} email: {str(e)}", kind=kind_name, original_error=e) from e

        logger.info(f"✅ {kind_name} email sent")
        return result

    async def notify_all(self, kinds: Iterable[NotificationKind], record) -> List[NotificationError]:
        """
        Send several notifications concurrently and wait for all of them.

        Failures are logged and returned, never raised.
        """
        kinds = list(kinds)
        results = await asyncio.gather(
            *(self.notify(kind, record) for kind in kinds),
            return_exceptions=True,
        )

        failures = []
        for kind, result in zip(kinds, results):
            if isinstance(result, Exception):
                logger.error(f"❌ {getattr(kind, 'value', kind)} email failed: {str(result)}")
                failures.append(result)
        return failures
