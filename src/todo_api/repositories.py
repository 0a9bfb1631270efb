from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from threading import RLock
from typing import Dict, List, Optional
from uuid import uuid4

from .models import TodoEntity, TodoId
from .query import TodoQuery
from .schemas import TodoCreate, TodoUpdate
from .settings import get_settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract repository contract for todo storage backends.
    Every operation is scoped to an owner; records of other owners are never
    returned, changed or removed.
    """

    @abstractmethod
    def create(self, owner_id: str, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity owned by owner_id."""

    @abstractmethod
    def get(self, owner_id: str, todo_id: TodoId) -> Optional[TodoEntity]:
        """Return the owner's TodoEntity by id, or None if absent or owned by someone else."""

    @abstractmethod
    def update(self, owner_id: str, todo_id: TodoId, data: TodoUpdate) -> Optional[TodoEntity]:
        """Apply the fields present in data. Return the updated entity or None if not found."""

    @abstractmethod
    def delete(self, owner_id: str, todo_id: TodoId) -> bool:
        """Delete the owner's TodoEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self, query: TodoQuery) -> List[TodoEntity]:
        """Return every TodoEntity matching the query, in the query's order."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[TodoId, TodoEntity] = {}

    def _now(self) -> datetime:
        return utcnow()

    def _owned(self, owner_id: str, todo_id: TodoId) -> Optional[TodoEntity]:
        item = self._items.get(todo_id)
        if item is None or item["owner_id"] != owner_id:
            return None
        return item

    def create(self, owner_id: str, data: TodoCreate) -> TodoEntity:
        now = self._now()
        entity: TodoEntity = {
            "id": TodoId(uuid4().hex),
            "owner_id": owner_id,
            "title": data.title,
            "description": data.description,
            "completed": False,
            "priority": data.priority.value,
            "due_date": data.due_date,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, owner_id: str, todo_id: TodoId) -> Optional[TodoEntity]:
        with self._lock:
            item = self._owned(owner_id, todo_id)
            return None if item is None else item.copy()

    def update(self, owner_id: str, todo_id: TodoId, data: TodoUpdate) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._owned(owner_id, todo_id)
            if existing is None:
                return None

            updated = existing.copy()
            for field, value in data.changes().items():
                if field == "priority":
                    value = value.value
                updated[field] = value  # type: ignore[literal-required]
            updated["updated_at"] = self._now()

            self._items[todo_id] = updated
            return updated.copy()

    def delete(self, owner_id: str, todo_id: TodoId) -> bool:
        with self._lock:
            if self._owned(owner_id, todo_id) is None:
                return False
            del self._items[todo_id]
            return True

    def list(self, query: TodoQuery) -> List[TodoEntity]:
        with self._lock:
            items = list(self._items.values())
        # Return copies to avoid external mutation
        return [t.copy() for t in query.apply(items)]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the configured repository, shared by all requests.
    - memory: InMemoryRepository
    - mongo: MongoRepository on the configured MongoDB collection
    """
    settings = get_settings()
    if settings.persistence_backend == "mongo":
        from .db import MongoRepository

        logger.info("Using MongoDB store %s.%s", settings.mongo_db_name, settings.mongo_collection)
        return MongoRepository.from_settings(settings)
    logger.info("Using in-memory store")
    return InMemoryRepository()
