# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with connection pooling, timestamps and pagination.
"""

import os
import logging
from datetime import datetime
from typing import Callable, List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ServerSelectionTimeoutError,
    DuplicateKeyError
)
from bson import ObjectId
from bson.errors import InvalidId

from domain.validation import utc_now

logger = logging.getLogger(__name__)

DONORS = "donors"
BLOOD_REQUESTS = "blood_requests"
REPORTS = "reports"


class DuplicateDocumentError(ValueError):
    """Raised when an insert or update violates a unique index."""

    def __init__(self, collection: str, key_pattern: Optional[Dict[str, Any]] = None):
        super().__init__(f"Document with this identifier already exists in {collection}")
        self.collection = collection
        self.key_pattern = key_pattern or {}


class PaginationResult:
    """Result container for paginated queries."""

    def __init__(self, items: List[Dict], total: int, page: int, page_size: int):
        self.items = items
        self.total = total
        self.page = page
        self.page_size = page_size
        self.total_pages = (total + page_size - 1) // page_size
        self.has_next = page < self.total_pages
        self.has_prev = page > 1


class MongoDBService:
    """MongoDB service with connection pooling and id/timestamp handling."""

    def __init__(self, connection_string: str = None, database_name: str = None,
                 client: Optional[MongoClient] = None,
                 clock: Callable[[], datetime] = utc_now):
        """Initialize MongoDB service with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/blood_donation'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'blood_donation')
        self._client: Optional[MongoClient] = client
        self._database: Optional[Database] = None
        self.clock = clock

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True,
                    tz_aware=True
                )
                # Test connection
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                self._client = None
                raise

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.database.command('ping')

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    def _validate_object_id(self, doc_id: str) -> ObjectId:
        """Validate and convert string ID to ObjectId."""
        # ObjectId(None) would mint a fresh id
        if not isinstance(doc_id, str):
            raise ValueError(f"Invalid ObjectId format: {doc_id}")
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            raise ValueError(f"Invalid ObjectId format: {doc_id}")

    @staticmethod
    def _expose_id(document: Dict) -> Dict:
        """Replace the ObjectId `_id` with a string `id` for JSON serialization."""
        if "_id" in document:
            document["id"] = str(document.pop("_id"))
        return document

    def _add_timestamps(self, document: Dict, is_update: bool = False) -> Dict:
        """Add creation and update timestamps to document."""
        now = self.clock()

        if not is_update:
            document["createdAt"] = now

        document["updatedAt"] = now

        return document

    # CRUD Operations

    def create(self, collection: str, document: Dict) -> Dict:
        """Insert a document and return it with its string id and timestamps."""
        document = self._add_timestamps(dict(document))

        # Ensure document has an ID
        if "_id" not in document:
            document["_id"] = ObjectId()

        try:
            result = self.get_collection(collection).insert_one(document)
        except DuplicateKeyError as e:
            key_pattern = (e.details or {}).get("keyPattern")
            logger.warning(f"Duplicate key error in {collection}: {key_pattern}")
            raise DuplicateDocumentError(collection, key_pattern)

        logger.info(f"Created document in {collection}: {result.inserted_id}")
        return self._expose_id(document)

    def find_one(self, collection: str, query: Dict,
                 projection: Optional[Dict] = None) -> Optional[Dict]:
        """Find a single document matching an equality query."""
        document = self.get_collection(collection).find_one(query, projection)
        if document is None:
            logger.debug(f"No document in {collection} matched query on {sorted(query)}")
            return None
        return self._expose_id(document)

    def find_by_id(self, collection: str, doc_id: str,
                   projection: Optional[Dict] = None) -> Optional[Dict]:
        """Find a single document by ID; malformed IDs behave as missing."""
        try:
            object_id = self._validate_object_id(doc_id)
        except ValueError as e:
            logger.debug(f"Invalid document ID {doc_id}: {e}")
            return None

        return self.find_one(collection, {"_id": object_id}, projection)

    def update_by_id(self, collection: str, doc_id: str, updates: Dict,
                     unset: Optional[List[str]] = None) -> Optional[Dict]:
        """Apply $set (and optional $unset) and return the updated document."""
        try:
            object_id = self._validate_object_id(doc_id)
        except ValueError as e:
            logger.debug(f"Invalid document ID {doc_id}: {e}")
            return None

        operations: Dict[str, Any] = {"$set": self._add_timestamps(dict(updates), is_update=True)}
        if unset:
            operations["$unset"] = {field: "" for field in unset}

        try:
            document = self.get_collection(collection).find_one_and_update(
                {"_id": object_id},
                operations,
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError as e:
            key_pattern = (e.details or {}).get("keyPattern")
            logger.warning(f"Duplicate key error updating {doc_id} in {collection}: {key_pattern}")
            raise DuplicateDocumentError(collection, key_pattern)

        if document is None:
            logger.warning(f"No document updated for {doc_id} in {collection}")
            return None

        logger.info(f"Updated document {doc_id} in {collection}")
        return self._expose_id(document)

    def delete_by_id(self, collection: str, doc_id: str) -> bool:
        """Hard delete a document by ID."""
        try:
            object_id = self._validate_object_id(doc_id)
        except ValueError as e:
            logger.debug(f"Invalid document ID {doc_id}: {e}")
            return False

        result = self.get_collection(collection).delete_one({"_id": object_id})

        if result.deleted_count > 0:
            logger.info(f"Deleted document {doc_id} in {collection}")
            return True

        logger.warning(f"No document deleted for {doc_id} in {collection}")
        return False

    def paginate(self, collection: str, page: int = 1, page_size: int = 10,
                 filters: Dict = None, sort_by: str = "createdAt", sort_order: int = DESCENDING,
                 projection: Optional[Dict] = None) -> PaginationResult:
        """Paginate documents with sorting, equality filters and projection."""
        query = dict(filters or {})
        collection_obj = self.get_collection(collection)

        # Calculate skip value
        skip = (page - 1) * page_size

        # Get total count
        total = collection_obj.count_documents(query)

        # Get paginated documents
        cursor = collection_obj.find(query, projection).sort(sort_by, sort_order).skip(skip).limit(page_size)
        documents = [self._expose_id(doc) for doc in cursor]

        logger.debug(f"Paginated {len(documents)} documents from {collection} (page {page})")
        return PaginationResult(documents, total, page, page_size)

    def count(self, collection: str, filters: Dict = None) -> int:
        """Count documents with optional equality filters."""
        return self.get_collection(collection).count_documents(dict(filters or {}))

    # Index Management

    def create_indexes(self) -> None:
        """Create unique and sorting indexes for all collections."""
        logger.info("Creating MongoDB indexes...")

        # Donor uniqueness is enforced here, not by the registration pre-check
        donors = self.get_collection(DONORS)
        donors.create_index("email", unique=True)
        donors.create_index("phoneNumber", unique=True)

        blood_requests = self.get_collection(BLOOD_REQUESTS)
        blood_requests.create_index([("createdAt", DESCENDING)])
        blood_requests.create_index([("urgencyLevel", ASCENDING), ("createdAt", DESCENDING)])
        blood_requests.create_index([("bloodGroup", ASCENDING), ("createdAt", DESCENDING)])

        reports = self.get_collection(REPORTS)
        reports.create_index([("createdAt", DESCENDING)])
        reports.create_index([("reportCategory", ASCENDING), ("createdAt", DESCENDING)])

        logger.info("MongoDB indexes created successfully")
