"""
Translation of the list endpoint's filter/sort parameters into a store query.

resolve_query() validates the raw query-string values and returns a frozen
TodoQuery. The same TodoQuery renders a MongoDB filter/sort for the document
store and evaluates/sorts records for the in-memory store, so both backends
answer a listing identically.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import ValidationFailed
from .models import DOC_FIELDS, PRIORITY_RANK, Priority, TodoEntity

ALL = "all"

# Accepted sort keys -> entity field
SORT_FIELDS: Dict[str, str] = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "title": "title",
    "priority": "priority",
    "dueDate": "due_date",
    "due_date": "due_date",
}

# Entity field -> document field used for ordering
_SORT_DOC_FIELDS: Dict[str, str] = {
    "created_at": DOC_FIELDS.created_at,
    "title": DOC_FIELDS.title,
    "priority": DOC_FIELDS.priority_rank,
    "due_date": DOC_FIELDS.due_date,
}

DEFAULT_SORT = "createdAt"
DEFAULT_ORDER = "desc"


@dataclass(frozen=True)
class TodoQuery:
    """
    Resolved, owner-scoped listing query.
    """
    owner_id: str
    search: Optional[str] = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    sort_field: str = "created_at"
    descending: bool = True

    def to_filter(self) -> Dict[str, Any]:
        """Return the MongoDB filter document. The owner clause is always present."""
        query: Dict[str, Any] = {DOC_FIELDS.owner_id: self.owner_id}
        if self.search:
            pattern = re.escape(self.search)
            query["$or"] = [
                {DOC_FIELDS.title: {"$regex": pattern, "$options": "i"}},
                {DOC_FIELDS.description: {"$regex": pattern, "$options": "i"}},
            ]
        if self.priority is not None:
            query[DOC_FIELDS.priority] = self.priority.value
        if self.completed is not None:
            query[DOC_FIELDS.completed] = self.completed
        return query

    def to_sort(self) -> List[Tuple[str, int]]:
        """Return the MongoDB sort keys, with _id as a tiebreaker."""
        direction = -1 if self.descending else 1
        return [(_SORT_DOC_FIELDS[self.sort_field], direction), (DOC_FIELDS.id, direction)]

    def matches(self, entity: TodoEntity) -> bool:
        if entity["owner_id"] != self.owner_id:
            return False
        if self.priority is not None and entity["priority"] != self.priority.value:
            return False
        if self.completed is not None and entity["completed"] != self.completed:
            return False
        if self.search:
            needle = self.search.lower()
            in_title = needle in (entity["title"] or "").lower()
            in_desc = needle in (entity["description"] or "").lower()
            if not (in_title or in_desc):
                return False
        return True

    def sort_key(self, entity: TodoEntity) -> Tuple[bool, Any]:
        """
        Key for in-memory ordering. Missing values sort lowest, as they do in
        MongoDB.
        """
        value: Any = entity[self.sort_field]  # type: ignore[literal-required]
        if self.sort_field == "priority":
            value = PRIORITY_RANK[value]
        return (value is not None, value)

    def apply(self, entities: List[TodoEntity]) -> List[TodoEntity]:
        """
        Filter and order entities given in insertion order. Ties follow
        insertion order in the requested direction, like the _id tiebreaker.
        """
        selected = [e for e in entities if self.matches(e)]
        if self.descending:
            selected.reverse()
        return sorted(selected, key=self.sort_key, reverse=self.descending)


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    s = value.strip()
    return s or None


# PUBLIC_INTERFACE
def resolve_query(
    owner_id: str,
    search: Optional[str] = None,
    priority: Optional[str] = None,
    completed: Optional[str] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> TodoQuery:
    """
    Resolve raw listing parameters into a TodoQuery.

    - search: case-insensitive substring over title and description, matched as given; empty means no filter
    - priority: low, medium, high or 'all'; 'all'/absent means no filter
    - completed: 'true', 'false' or 'all'; 'all'/absent means no filter
    - sort: createdAt (default), title, priority or dueDate; anything else is rejected
    - order: 'asc' sorts ascending, anything else descending

    Raises:
        ValidationFailed for priority, completed or sort values outside their whitelist.
    """
    priority_value: Optional[Priority] = None
    p = _normalize(priority)
    if p is not None and p.lower() != ALL:
        try:
            priority_value = Priority(p.lower())
        except ValueError:
            raise ValidationFailed("priority must be one of 'low', 'medium', 'high' or 'all'") from None

    completed_value: Optional[bool] = None
    c = _normalize(completed)
    if c is not None and c.lower() != ALL:
        if c.lower() not in {"true", "false"}:
            raise ValidationFailed("completed must be 'true', 'false' or 'all'")
        completed_value = c.lower() == "true"

    sort_key = _normalize(sort) or DEFAULT_SORT
    if sort_key not in SORT_FIELDS:
        raise ValidationFailed("sort must be one of 'createdAt', 'title', 'priority' or 'dueDate'")

    ord_norm = (_normalize(order) or DEFAULT_ORDER).lower()

    return TodoQuery(
        owner_id=owner_id,
        search=search or None,
        priority=priority_value,
        completed=completed_value,
        sort_field=SORT_FIELDS[sort_key],
        descending=ord_norm != "asc",
    )
