"""Shared fixtures: in-memory Mongo stand-in, fake email sink, wired pipeline."""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.core.config import get_settings
from app.core.exceptions import NotificationError
from app.core.intake import IntakePipeline
from app.core.notifier import Notifier
from app.db.init_db import initialize_database
from app.db.store import RecordStore


def _lookup(document: Dict[str, Any], dotted: str):
    value: Any = document
    for part in dotted.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class _InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class _UpdateResult:
    def __init__(self, matched_count: int):
        self.matched_count = matched_count
        self.modified_count = matched_count


class _Cursor:
    def __init__(self, items):
        self._items = items

    async def to_list(self, length=None):
        return list(self._items)


class FakeCollection:
    """Just enough of a Motor collection for the record store."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.indexes: List[Dict[str, Any]] = [{"name": "_id_"}]
        self.unique_fields: List[str] = []
        self.write_count = 0

    def _matches(self, document, query) -> bool:
        return all(_lookup(document, key) == value for key, value in query.items())

    async def create_index(self, keys, unique=False, **options):
        name = "_".join(f"{field}_{direction}" for field, direction in keys)
        self.indexes.append({"name": name, "unique": unique})
        if unique and len(keys) == 1:
            self.unique_fields.append(keys[0][0])
        return name

    def list_indexes(self):
        return _Cursor(self.indexes)

    async def count_documents(self, query):
        return sum(1 for document in self.documents if self._matches(document, query))

    async def find_one(self, query):
        for document in self.documents:
            if self._matches(document, query):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document):
        # Yield once so concurrent writers interleave like they would on a server
        await asyncio.sleep(0)
        for field in self.unique_fields:
            if any(_lookup(existing, field) == _lookup(document, field) for existing in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {field}_1")
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        self.write_count += 1
        return _InsertResult(document["_id"])

    async def update_one(self, query, update):
        await asyncio.sleep(0)
        for document in self.documents:
            if self._matches(document, query):
                document.update(copy.deepcopy(update.get("$set", {})))
                self.write_count += 1
                return _UpdateResult(1)
        return _UpdateResult(0)


class FakeDatabase:
    name = "forms_test"

    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def list_collection_names(self):
        return list(self.collections)


class FakeEmailSink:
    """Records every message; optionally fails for selected recipients or always."""

    def __init__(self, fail: bool = False, fail_for: tuple = ()):
        self.fail = fail
        self.fail_for = set(fail_for)
        self.sent = []
        self.attempts = []
        self.configured = True

    async def send(self, message):
        self.attempts.append(message)
        await asyncio.sleep(0)
        if self.fail or message.to_email in self.fail_for:
            raise NotificationError(f"sink unavailable for {message.to_email}")
        self.sent.append(message)
        return {"messageId": f"<{len(self.sent)}@fake>"}


ADMIN_EMAIL = "admin@consulting.example.com"
FROM_EMAIL = "noreply@consulting.example.com"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Run every test against default development settings."""
    for name in ("ENVIRONMENT", "NODE_ENV", "BREVO_API_KEY", "MONGODB_URL", "MONGODB_URI", "TRUST_PROXY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def fake_db() -> FakeDatabase:
    db = FakeDatabase()
    assert await initialize_database(db) is True
    return db


@pytest.fixture
def store(fake_db: FakeDatabase) -> RecordStore:
    return RecordStore(fake_db)


@pytest.fixture
def sink() -> FakeEmailSink:
    return FakeEmailSink()


@pytest.fixture
def notifier(sink: FakeEmailSink) -> Notifier:
    return Notifier(sink=sink, from_email=FROM_EMAIL, admin_email=ADMIN_EMAIL)


@pytest.fixture
def pipeline(store: RecordStore, notifier: Notifier) -> IntakePipeline:
    return IntakePipeline(store=store, notifier=notifier)


@pytest.fixture
def contact_payload() -> Dict[str, Any]:
    return {
        "firstName": "  John ",
        "lastName": "Doe",
        "email": "  John.Doe@Example.COM ",
        "phone": "+1234567890",
        "country": "United States",
        "program": "MBBS",
        "message": "I am interested in studying medicine in China. Please share details.",
    }


@pytest.fixture
def application_payload() -> Dict[str, Any]:
    return {
        "personalInfo": {
            "firstName": "Jane",
            "lastName": "Smith",
            "email": " Jane.Smith@Example.com",
            "phone": "+1234567891",
            "nationality": "Canadian",
            "dateOfBirth": "1995-01-01",
        },
        "academic": {
            "currentEducation": "High School Graduate",
            "institution": "ABC High School",
            "gpa": "3.8",
            "graduationYear": "2023",
            "fieldOfStudy": "Science",
        },
        "program": {
            "degreeLevel": "bachelors",
            "preferredProgram": "Computer Science",
            "preferredUniversity": "Tsinghua University",
            "startDate": "Fall 2024",
        },
        "documents": {
            "transcript": True,
            "passport": True,
            "languageTest": False,
            "recommendation": True,
        },
        "additional": {
            "scholarshipInterest": "yes",
            "personalStatement": "I am passionate about technology.",
            "previousExperience": "Several online programming courses.",
        },
    }
