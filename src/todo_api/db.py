from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection

from .models import DOC_FIELDS, PRIORITY_RANK, TodoEntity, TodoId
from .query import TodoQuery
from .repositories import Repository, utcnow
from .schemas import TodoCreate, TodoUpdate
from .settings import Settings

logger = logging.getLogger(__name__)

_F = DOC_FIELDS

# Entity field -> document field for partial updates
_UPDATE_FIELDS: Dict[str, str] = {
    "title": _F.title,
    "description": _F.description,
    "completed": _F.completed,
    "priority": _F.priority,
    "due_date": _F.due_date,
}


# PUBLIC_INTERFACE
@lru_cache(maxsize=None)
def get_client(uri: str) -> MongoClient:
    """Return a pooled MongoClient for uri; repeated calls reuse the same client."""
    logger.info("Connecting to MongoDB")
    return MongoClient(uri, tz_aware=True)


def _parse_id(todo_id: TodoId) -> Optional[ObjectId]:
    # Malformed ids cannot match any document
    if not ObjectId.is_valid(todo_id):
        return None
    return ObjectId(todo_id)


def _millis(value: Optional[datetime]) -> Optional[datetime]:
    # BSON dates hold milliseconds; truncate so returned records match stored ones
    if value is None:
        return None
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class MongoRepository(Repository):
    """
    Repository storing one document per todo in a MongoDB collection.
    """

    def __init__(self, collection: Collection) -> None:
        self._collection = collection
        self._init_indexes()

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoRepository":
        client = get_client(settings.mongo_uri)
        return cls(client[settings.mongo_db_name][settings.mongo_collection])

    def _init_indexes(self) -> None:
        self._collection.create_index([(_F.owner_id, ASCENDING), (_F.created_at, DESCENDING)])

    def _doc_to_entity(self, doc: Dict[str, Any]) -> TodoEntity:
        return {
            "id": TodoId(str(doc[_F.id])),
            "owner_id": str(doc[_F.owner_id]),
            "title": str(doc[_F.title]),
            "description": doc.get(_F.description),
            "completed": bool(doc.get(_F.completed, False)),
            "priority": str(doc.get(_F.priority, "medium")),
            "due_date": _utc(doc.get(_F.due_date)),
            "created_at": _utc(doc[_F.created_at]),  # type: ignore[typeddict-item]
            "updated_at": _utc(doc[_F.updated_at]),  # type: ignore[typeddict-item]
        }

    def create(self, owner_id: str, data: TodoCreate) -> TodoEntity:
        now = _millis(utcnow())
        doc: Dict[str, Any] = {
            _F.owner_id: owner_id,
            _F.title: data.title,
            _F.description: data.description,
            _F.completed: False,
            _F.priority: data.priority.value,
            _F.priority_rank: PRIORITY_RANK[data.priority.value],
            _F.due_date: _millis(data.due_date),
            _F.created_at: now,
            _F.updated_at: now,
        }
        result = self._collection.insert_one(doc)
        doc[_F.id] = result.inserted_id
        return self._doc_to_entity(doc)

    def get(self, owner_id: str, todo_id: TodoId) -> Optional[TodoEntity]:
        oid = _parse_id(todo_id)
        if oid is None:
            return None
        doc = self._collection.find_one({_F.id: oid, _F.owner_id: owner_id})
        return self._doc_to_entity(doc) if doc else None

    def update(self, owner_id: str, todo_id: TodoId, data: TodoUpdate) -> Optional[TodoEntity]:
        oid = _parse_id(todo_id)
        if oid is None:
            return None

        changes: Dict[str, Any] = {}
        for field, value in data.changes().items():
            if field == "priority":
                changes[_F.priority_rank] = PRIORITY_RANK[value.value]
                value = value.value
            elif field == "due_date":
                value = _millis(value)
            changes[_UPDATE_FIELDS[field]] = value
        changes[_F.updated_at] = _millis(utcnow())

        doc = self._collection.find_one_and_update(
            {_F.id: oid, _F.owner_id: owner_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return self._doc_to_entity(doc) if doc else None

    def delete(self, owner_id: str, todo_id: TodoId) -> bool:
        oid = _parse_id(todo_id)
        if oid is None:
            return False
        result = self._collection.delete_one({_F.id: oid, _F.owner_id: owner_id})
        return result.deleted_count > 0

    def list(self, query: TodoQuery) -> List[TodoEntity]:
        cursor = self._collection.find(query.to_filter()).sort(query.to_sort())
        return [self._doc_to_entity(doc) for doc in cursor]
