"""
Database initialization module for the forms backend.
This module ensures that the form collections and their indexes exist
when the backend starts. Safe to run repeatedly: only what is missing is
created.

The unique index on newsletter_subscriptions.email is what enforces "one
subscription per normalized email"; concurrent duplicate inserts are
settled by it, not by application-level locking.
"""

import logging
from datetime import datetime, timezone
from pymongo.errors import PyMongoError
from app.db.mongo import get_db
from app.models.application import Application
from app.models.inquiry import Inquiry
from app.models.subscription import Subscription

# Set up logger
logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = [
    {
        "name": Inquiry.collection_name,
        "description": "Contact form inquiries",
        "indexes": [
            {"keys": [("email", 1), ("createdAt", -1)], "unique": False},
            {"keys": [("status", 1), ("createdAt", -1)], "unique": False}
        ]
    },
    {
        "name": Application.collection_name,
        "description": "Study-abroad program applications",
        "indexes": [
            {"keys": [("personalInfo.email", 1), ("createdAt", -1)], "unique": False},
            {"keys": [("status", 1), ("createdAt", -1)], "unique": False},
            {"keys": [("program.degreeLevel", 1), ("createdAt", -1)], "unique": False}
        ]
    },
    {
        "name": Subscription.collection_name,
        "description": "Newsletter subscriptions (one per normalized email)",
        "indexes": [
            {"keys": [("email", 1)], "unique": True},
            {"keys": [("status", 1), ("createdAt", -1)], "unique": False}
        ]
    }
]


async def collection_exists(db, collection_name):
    """
    Check if a collection exists in the database.

    Args:
        db: MongoDB database connection
        collection_name (str): Name of the collection to check

    Returns:
        bool: True if collection exists, False otherwise
    """
    try:
        collections = await db.list_collection_names()
        return collection_name in collections
    except Exception as e:
        logger.error(f"Error checking if collection '{collection_name}' exists: {str(e)}")
        return False


async def ensure_collection_indexes(db, collection_config):
    """
    Create a collection's indexes (and so the collection) if missing.

    Returns:
        bool: True if every index is in place, False otherwise
    """
    collection_name = collection_config["name"]
    indexes = collection_config.get("indexes", [])
    collection = db[collection_name]

    if not await collection_exists(db, collection_name):
        logger.info(f"🔄 Creating collection '{collection_name}': {collection_config.get('description', '')}")

    ok = True
    for index_config in indexes:
        keys = index_config["keys"]
        options = {k: v for k, v in index_config.items() if k != "keys"}
        try:
            await collection.create_index(keys, **options)
            logger.debug(f"✅ Index {keys} ensured for '{collection_name}'")
        except PyMongoError as e:
            # A unique index that cannot be built means duplicates already exist
            logger.error(f"❌ Failed to create index {keys} for '{collection_name}': {str(e)}")
            ok = False

    return ok


async def initialize_database(db=None):
    """
    Initialize the database by creating all required collections and indexes.

    Returns:
        bool: True if initialization completed successfully, False otherwise
    """
    start_time = datetime.now(timezone.utc)

    try:
        if db is None:
            db = get_db()
        logger.info(f"📊 Initializing database: {db.name}")

        success_count = 0
        error_count = 0

        for collection_config in REQUIRED_COLLECTIONS:
            if await ensure_collection_indexes(db, collection_config):
                success_count += 1
            else:
                error_count += 1

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()

        if error_count == 0:
            logger.info(f"🎉 Database initialization completed: {success_count} collections in {duration:.2f}s")
            return True

        logger.warning(f"⚠️ Database initialization completed with errors: {success_count} successful, {error_count} errors in {duration:.2f}s")
        return False

    except PyMongoError as e:
        logger.error(f"❌ MongoDB error during database initialization: {str(e)}")
        return False


async def verify_database_setup(db=None):
    """
    Verify that all required collections exist and report their indexes.

    Returns:
        dict: Verification results with details about each collection
    """
    logger.info("🔍 Verifying database setup...")

    try:
        if db is None:
            db = get_db()
        verification_results = {
            "database_name": db.name,
            "collections": {},
            "overall_status": "unknown"
        }

        all_good = True

        for collection_config in REQUIRED_COLLECTIONS:
            collection_name = collection_config["name"]

            if not await collection_exists(db, collection_name):
                verification_results["collections"][collection_name] = {
                    "exists": False,
                    "status": "❌ MISSING"
                }
                logger.error(f"❌ {collection_name}: Collection does not exist")
                all_good = False
                continue

            collection = db[collection_name]
            doc_count = await collection.count_documents({})
            indexes = await collection.list_indexes().to_list(None)
            index_names = [idx.get("name", "unknown") for idx in indexes]

            verification_results["collections"][collection_name] = {
                "exists": True,
                "document_count": doc_count,
                "indexes": index_names,
                "status": "✅ OK"
            }
            logger.info(f"✅ {collection_name}: {doc_count} documents, {len(index_names)} indexes")

        verification_results["overall_status"] = "✅ PASS" if all_good else "❌ FAIL"
        return verification_results

    except PyMongoError as e:
        logger.error(f"❌ Error during database verification: {str(e)}")
        return {
            "database_name": "unknown",
            "collections": {},
            "overall_status": "❌ ERROR",
            "error": str(e)
        }
