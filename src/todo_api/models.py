from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, NewType, Optional, TypedDict

# Opaque, store-assigned identifier used by every operation
TodoId = NewType("TodoId", str)


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Total order used when sorting by priority
PRIORITY_RANK: Dict[str, int] = {
    Priority.LOW.value: 0,
    Priority.MEDIUM.value: 1,
    Priority.HIGH.value: 2,
}


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item as held by the
    storage backends.

    Fields:
    - id: Opaque store-assigned identifier
    - owner_id: Identity of the authenticated principal that created the item
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    - priority: One of 'low', 'medium', 'high'
    - due_date: Optional due datetime (UTC)
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp
    """

    id: TodoId
    owner_id: str
    title: str
    description: Optional[str]
    completed: bool
    priority: str
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class _DocFields:
    """Field names of a todo document in the document store."""

    id: str = "_id"
    owner_id: str = "ownerId"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    priority: str = "priority"
    priority_rank: str = "priorityRank"
    due_date: str = "dueDate"
    created_at: str = "createdAt"
    updated_at: str = "updatedAt"


DOC_FIELDS = _DocFields()
