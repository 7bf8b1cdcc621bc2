"""Base repository class for common document operations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument

from events_api.database.connections import DatabaseManager


logger = structlog.get_logger(__name__)

T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """Base repository class providing common document operations.

    Every write runs in its own transaction holding exactly one document
    operation. Reads are not transactional.
    """

    def __init__(self, db_manager: DatabaseManager, collection_name: str):
        """
        Initialize base repository.

        Args:
            db_manager: Database manager instance
            collection_name: Name of the MongoDB collection
        """
        self.db_manager = db_manager
        self.collection_name = collection_name
        self.logger = logger.bind(component=f"{collection_name}_repository")

    @property
    def collection(self):
        """The backing collection."""
        return self.db_manager.get_collection(self.collection_name)

    @abstractmethod
    def _document_to_model(self, document: Mapping[str, Any]) -> T:
        """Convert a stored document to a model instance."""
        pass

    @abstractmethod
    def _model_to_document(self, model: Any) -> Dict[str, Any]:
        """Convert a model instance to a document for storage."""
        pass

    @staticmethod
    def _parse_id(id_value: Any) -> Optional[ObjectId]:
        """Return the ObjectId for an identifier, or None if it is malformed."""
        if isinstance(id_value, ObjectId):
            return id_value
        try:
            return ObjectId(id_value)
        except (InvalidId, TypeError):
            return None

    async def find_by_id(self, id_value: Any) -> Optional[T]:
        """
        Find a document by its ID.

        Args:
            id_value: The ID to search for

        Returns:
            Model instance if found, None otherwise
        """
        object_id = self._parse_id(id_value)
        if object_id is None:
            return None

        try:
            document = await self.collection.find_one({"_id": object_id})
            return self._document_to_model(document) if document else None

        except Exception as e:
            self.logger.error("Error finding document by ID",
                              collection=self.collection_name, id=str(id_value), error=str(e))
            raise

    async def find_by_criteria(self, criteria: Dict[str, Any]) -> List[T]:
        """
        Find documents matching equality criteria, in insertion order.

        Args:
            criteria: Field to value constraints; empty matches everything

        Returns:
            List of matching model instances
        """
        try:
            cursor = self.collection.find(criteria).sort("_id", ASCENDING)
            documents = await cursor.to_list(length=None)
            return [self._document_to_model(document) for document in documents]

        except Exception as e:
            self.logger.error("Error finding documents by criteria",
                              collection=self.collection_name, criteria=criteria, error=str(e))
            raise

    async def create(self, model: Any) -> T:
        """
        Insert a new document.

        Args:
            model: Model instance to store

        Returns:
            Stored model instance including its generated ID
        """
        document = self._model_to_document(model)

        try:
            async with self.db_manager.get_transaction() as session:
                result = await self.collection.insert_one(document, session=session)

        except Exception as e:
            self.logger.error("Error creating document",
                              collection=self.collection_name, error=str(e))
            raise

        document["_id"] = result.inserted_id
        self.logger.info("Document created",
                         collection=self.collection_name, id=str(result.inserted_id))
        return self._document_to_model(document)

    async def update(self, id_value: Any, updates: Dict[str, Any]) -> Optional[T]:
        """
        Update a document by ID.

        Args:
            id_value: ID of the document to update
            updates: Fields to set

        Returns:
            Updated model instance if found, None otherwise
        """
        object_id = self._parse_id(id_value)
        if object_id is None:
            return None

        updates = {k: v for k, v in updates.items() if k not in ("_id", "id")}
        if not updates:
            return await self.find_by_id(object_id)

        try:
            async with self.db_manager.get_transaction() as session:
                document = await self.collection.find_one_and_update(
                    {"_id": object_id},
                    {"$set": updates},
                    return_document=ReturnDocument.AFTER,
                    session=session,
                )

        except Exception as e:
            self.logger.error("Error updating document",
                              collection=self.collection_name, id=str(id_value), error=str(e))
            raise

        if document is None:
            return None

        self.logger.info("Document updated",
                         collection=self.collection_name, id=str(object_id), fields=sorted(updates))
        return self._document_to_model(document)

    async def delete(self, id_value: Any) -> bool:
        """
        Delete a document by ID.

        Args:
            id_value: ID of the document to delete

        Returns:
            True if the document was deleted, False if not found
        """
        object_id = self._parse_id(id_value)
        if object_id is None:
            return False

        try:
            async with self.db_manager.get_transaction() as session:
                result = await self.collection.delete_one({"_id": object_id}, session=session)

        except Exception as e:
            self.logger.error("Error deleting document",
                              collection=self.collection_name, id=str(id_value), error=str(e))
            raise

        deleted = result.deleted_count == 1
        if deleted:
            self.logger.info("Document deleted",
                             collection=self.collection_name, id=str(object_id))
        return deleted
