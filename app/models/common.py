"""
Shared pieces for the stored form records.

Every collection document carries a server-assigned identity, creation and
modification timestamps, and the capture metadata (origin address and
client agent string) of the request that created it.
"""

from pydantic import BaseModel, ConfigDict
from typing import Any, ClassVar, Dict, Optional
from datetime import date, datetime, time, timezone

UNKNOWN = "unknown"


def trim(value):
    """Strip surrounding whitespace from strings, leave anything else alone."""
    if isinstance(value, str):
        return value.strip()
    return value


def normalize_email(value):
    """Canonical email key: trimmed and lower-cased."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredRecord(BaseModel):
    """Base for documents persisted by app.db.store.RecordStore."""

    model_config = ConfigDict(validate_assignment=True)

    collection_name: ClassVar[str]

    id: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    ipAddress: str = UNKNOWN
    userAgent: str = UNKNOWN

    def to_document(self) -> Dict[str, Any]:
        """Dump to a BSON-friendly dict (no ``id``, dates as midnight datetimes)."""
        return _bson_dates(self.model_dump(exclude={"id"}))

    @classmethod
    def from_document(cls, document: Dict[str, Any]):
        data = dict(document)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)


def _bson_dates(data):
    # BSON has no plain date type
    if isinstance(data, dict):
        return {key: _bson_dates(value) for key, value in data.items()}
    if isinstance(data, date) and not isinstance(data, datetime):
        return datetime.combine(data, time.min, tzinfo=timezone.utc)
    return data
