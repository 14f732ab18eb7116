"""FastAPI dependencies wiring the intake pipeline to its collaborators."""

from functools import lru_cache

from app.core.config import get_settings
from app.core.intake import IntakePipeline
from app.core.notifier import BrevoEmailSink, Notifier
from app.db.mongo import get_db
from app.db.store import RecordStore


@lru_cache
def get_notifier() -> Notifier:
    settings = get_settings()
    return Notifier(
        sink=BrevoEmailSink(settings.brevo_api_key),
        from_email=settings.from_email,
        admin_email=settings.admin_email,
        sender_name=settings.sender_name,
    )


def get_intake_pipeline() -> IntakePipeline:
    return IntakePipeline(store=RecordStore(get_db()), notifier=get_notifier())
