"""Setup MongoDB indexes for the subscription collections.

This script creates the indexes backing the repository queries of the
meal subscription backend.

Collections:
- subscriptions: Subscription documents with their embedded snapshot
- delegations: Delegation documents with the day-by-day timeline

Usage:
    python scripts/setup_mongodb_indexes.py

Environment Variables:
    MONGODB_URI: MongoDB connection string (required)
    MONGODB_DATABASE: Database name (default: meal_subscriptions)
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from infrastructure.config import get_mongodb_database, get_mongodb_uri

logger = logging.getLogger(__name__)

COLLECTIONS = ("subscriptions", "delegations")


async def create_subscription_indexes(db: "AsyncIOMotorDatabase[Dict[str, Any]]") -> None:
    """Create indexes for subscriptions collection.

    Indexes:
    - _id: subscription id (automatic)
    - customer_id + created_at: list a customer's subscriptions, newest first
    - status + end_date: expiry sweep over active subscriptions
    """
    collection = db["subscriptions"]
    logger.info("Creating indexes for 'subscriptions' collection...")

    await collection.create_index(
        [("customer_id", 1), ("created_at", -1)],
        name="idx_customer_created",
        background=True,
    )
    logger.info("  Created index: customer_id + created_at (descending)")

    await collection.create_index(
        [("status", 1), ("end_date", 1)],
        name="idx_status_end_date",
        background=True,
    )
    logger.info("  Created index: status + end_date")


async def create_delegation_indexes(db: "AsyncIOMotorDatabase[Dict[str, Any]]") -> None:
    """Create indexes for delegations collection.

    Indexes:
    - _id: subscription id, one delegation per subscription (automatic)
    - timeline_entry_ids: unique, resolves a delivery day to its delegation
    """
    collection = db["delegations"]
    logger.info("Creating indexes for 'delegations' collection...")

    await collection.create_index(
        [("timeline_entry_ids", 1)],
        name="idx_timeline_entry_unique",
        unique=True,
        background=True,
    )
    logger.info("  Created unique index: timeline_entry_ids")


async def list_existing_indexes(db: "AsyncIOMotorDatabase[Dict[str, Any]]") -> None:
    """Log all existing indexes for verification."""
    for coll_name in COLLECTIONS:
        indexes = await db[coll_name].list_indexes().to_list(length=None)
        logger.info(f"{coll_name}:")
        for idx in indexes:
            keys = ", ".join(f"{k}:{v}" for k, v in idx.get("key", {}).items())
            unique = " (unique)" if idx.get("unique", False) else ""
            logger.info(f"  - {idx.get('name', 'unknown')}: [{keys}]{unique}")


async def setup_all_indexes() -> None:
    """Setup all MongoDB indexes used by the persistence layer."""
    uri = get_mongodb_uri()
    if not uri:
        logger.error("MONGODB_URI not configured!")
        sys.exit(1)

    database_name = get_mongodb_database()
    logger.info(f"Connecting to MongoDB: {database_name}")

    client: "AsyncIOMotorClient[Dict[str, Any]]" = AsyncIOMotorClient(uri)
    db = client[database_name]

    try:
        await client.admin.command("ping")
        await create_subscription_indexes(db)
        await create_delegation_indexes(db)
        logger.info("All indexes created successfully")
        await list_existing_indexes(db)
    except Exception as e:
        logger.error(f"Error setting up indexes: {e}")
        sys.exit(1)
    finally:
        client.close()


def main() -> None:
    """Main entry point."""
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(setup_all_indexes())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
