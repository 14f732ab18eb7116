"""
Record store for the three form collections.

Records arrive here already validated and normalized by their pydantic
models; the store only assigns identity and timestamps and maps MongoDB
failures onto the intake error taxonomy.
"""

import logging
from typing import Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import errors as mongo_errors

from app.core.exceptions import DuplicateKeyError, StoreError
from app.models.common import StoredRecord, normalize_email, utcnow
from app.models.subscription import Subscription

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=StoredRecord)


class RecordStore:
    def __init__(self, db):
        self.db = db

    def _collection(self, model: Type[StoredRecord]):
        return self.db[model.collection_name]

    async def save(self, record: RecordT) -> RecordT:
        """
        Insert a new record or update an existing one.

        New records get their id, createdAt and updatedAt here; updates only
        refresh updatedAt.

        Raises:
            DuplicateKeyError: a unique index rejected the write
            StoreError: any other persistence failure
        """
        collection = self._collection(type(record))
        document = record.to_document()
        now = utcnow()

        try:
            if record.id is None:
                document["createdAt"] = now
                document["updatedAt"] = now
                result = await collection.insert_one(document)
                record.id = str(result.inserted_id)
                record.createdAt = now
                logger.info(f"✅ Saved new {collection.name} record {record.id}")
            else:
                document.pop("createdAt", None)
                document["updatedAt"] = now
                result = await collection.update_one({"_id": ObjectId(record.id)}, {"$set": document})
                if result.matched_count == 0:
                    raise StoreError(f"{collection.name} record {record.id} not found", operation="update")
                logger.info(f"✅ Updated {collection.name} record {record.id}")
        except mongo_errors.DuplicateKeyError as e:
            logger.warning(f"Duplicate key rejected in {collection.name}: {str(e)}")
            raise DuplicateKeyError(f"Duplicate key in {collection.name}", key="email") from e
        except mongo_errors.PyMongoError as e:
            logger.error(f"❌ Failed to save {collection.name} record: {str(e)}")
            raise StoreError(f"Failed to save {collection.name} record", operation="save") from e

        record.updatedAt = now
        return record

    async def get(self, model: Type[RecordT], record_id: str) -> Optional[RecordT]:
        """Read a stored record back by its identity."""
        try:
            object_id = ObjectId(record_id)
        except (InvalidId, TypeError):
            return None

        try:
            document = await self._collection(model).find_one({"_id": object_id})
        except mongo_errors.PyMongoError as e:
            raise StoreError(f"Failed to read {model.collection_name} record", operation="get") from e

        return model.from_document(document) if document else None

    async def find_by_normalized_email(self, email: str) -> Optional[Subscription]:
        """Look up a subscription by its trimmed, lower-cased email."""
        try:
            document = await self._collection(Subscription).find_one({"email": normalize_email(email)})
        except mongo_errors.PyMongoError as e:
            raise StoreError("Failed to look up subscription", operation="find") from e

        return Subscription.from_document(document) if document else None
