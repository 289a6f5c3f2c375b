"""Base MongoDB repository.

Shared plumbing for the subscription and delegation repositories:
client setup from configuration, entity/document mapping hooks, logged
collection operations and version-checked writes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError

from infrastructure.config import get_mongodb_database, get_mongodb_uri

TEntity = TypeVar("TEntity")

logger = logging.getLogger(__name__)


class MongoBaseRepository(ABC, Generic[TEntity]):
    """
    Abstract base class for MongoDB repositories.

    Subclasses provide:
    - collection_name: Name of MongoDB collection
    - to_document(): Convert domain entity to MongoDB document
    - from_document(): Convert MongoDB document to domain entity

    Every document carries an integer ``version`` field. ``_save_versioned``
    inserts version 1 for new entities and otherwise replaces the document
    only when the stored version matches the entity's.
    """

    def __init__(self, client: Optional[AsyncIOMotorClient[Dict[str, Any]]] = None):
        """
        Initialize repository with optional client.

        Args:
            client: Motor client (if None, creates new one from config)

        Raises:
            ValueError: If no client is given and MONGODB_URI is not set
        """
        if client is None:
            uri = get_mongodb_uri()
            if not uri:
                raise ValueError(
                    "MONGODB_URI not configured. "
                    "Set MONGODB_URI, MONGODB_USER, "
                    "and MONGODB_PASSWORD environment variables."
                )
            self._client: AsyncIOMotorClient[Dict[str, Any]] = AsyncIOMotorClient(uri)
        else:
            self._client = client

        self._collection = self._client[get_mongodb_database()][self.collection_name]
        logger.info(
            "Mongo repository initialized",
            extra={"repository": self.__class__.__name__, "collection": self.collection_name},
        )

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """MongoDB collection name."""
        pass

    @abstractmethod
    def to_document(self, entity: TEntity) -> Dict[str, Any]:
        """Convert domain entity to MongoDB document."""
        pass

    @abstractmethod
    def from_document(self, doc: Dict[str, Any]) -> TEntity:
        """
        Convert MongoDB document to domain entity.

        Raises:
            ValueError: If document is invalid or missing required fields
        """
        pass

    @property
    def collection(self) -> AsyncIOMotorCollection[Dict[str, Any]]:
        return self._collection

    def _log_failure(self, operation: str, error: Exception, **context: Any) -> None:
        logger.error(
            "Mongo operation failed",
            extra={
                "operation": operation,
                "collection": self.collection_name,
                "error": str(error),
                **context,
            },
        )

    async def _find_one(self, filter_dict: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Find single document; errors are logged and re-raised."""
        try:
            return await self._collection.find_one(filter_dict)
        except Exception as e:
            self._log_failure("find_one", e, filter=str(filter_dict))
            raise

    async def _find_many(
        self,
        filter_dict: Dict[str, Any],
        sort: Optional[List[Tuple[str, int]]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Find documents; errors are logged and re-raised."""
        try:
            cursor = self._collection.find(filter_dict)
            if sort:
                cursor = cursor.sort(sort)
            if limit:
                cursor = cursor.limit(limit)
            return await cursor.to_list(length=limit)
        except Exception as e:
            self._log_failure("find_many", e, filter=str(filter_dict))
            raise

    async def _save_versioned(self, document: Dict[str, Any], expected_version: int) -> bool:
        """
        Write document if the stored version equals expected_version.

        Args:
            document: Full document, its "version" already incremented
            expected_version: Version the caller read

        Returns:
            True if written, False if another writer got there first
        """
        try:
            if expected_version == 0:
                await self._collection.insert_one(document)
                return True
            result = await self._collection.replace_one(
                {"_id": document["_id"], "version": expected_version}, document
            )
            return result.matched_count == 1
        except DuplicateKeyError:
            return False
        except Exception as e:
            self._log_failure("save", e, document_id=str(document.get("_id")))
            raise

    async def _delete_one(self, filter_dict: Dict[str, Any]) -> int:
        """Delete single document. Returns deleted count."""
        try:
            result = await self._collection.delete_one(filter_dict)
            return result.deleted_count
        except Exception as e:
            self._log_failure("delete_one", e, filter=str(filter_dict))
            raise

    async def _count(self, filter_dict: Dict[str, Any]) -> int:
        try:
            return await self._collection.count_documents(filter_dict)
        except Exception as e:
            self._log_failure("count", e, filter=str(filter_dict))
            raise

    async def close(self) -> None:
        """Close MongoDB connection."""
        self._client.close()
