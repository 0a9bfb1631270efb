"""
Owner-scoped todo operations.

Each function receives the authenticated principal and the repository
explicitly. A missing principal is rejected before the repository is touched.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .auth import Principal
from .errors import TodoNotFound, Unauthenticated
from .models import TodoEntity, TodoId
from .query import resolve_query
from .repositories import Repository
from .schemas import TodoCreate, TodoUpdate

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Todo deleted successfully"


def _require(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal


# PUBLIC_INTERFACE
def list_todos(
    principal: Optional[Principal],
    repo: Repository,
    search: Optional[str] = None,
    priority: Optional[str] = None,
    completed: Optional[str] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> List[TodoEntity]:
    """Return all of the caller's todos matching the filters, in the requested order."""
    owner = _require(principal)
    query = resolve_query(
        owner.id,
        search=search,
        priority=priority,
        completed=completed,
        sort=sort,
        order=order,
    )
    items = repo.list(query)
    logger.debug("Listed %d todos for %s", len(items), owner.id)
    return items


# PUBLIC_INTERFACE
def get_todo(principal: Optional[Principal], repo: Repository, todo_id: TodoId) -> TodoEntity:
    owner = _require(principal)
    item = repo.get(owner.id, todo_id)
    if item is None:
        raise TodoNotFound()
    return item


# PUBLIC_INTERFACE
def create_todo(principal: Optional[Principal], repo: Repository, data: TodoCreate) -> TodoEntity:
    """Create a todo owned by the caller."""
    owner = _require(principal)
    created = repo.create(owner.id, data)
    logger.info("Created todo %s for %s", created["id"], owner.id)
    return created


# PUBLIC_INTERFACE
def update_todo(
    principal: Optional[Principal], repo: Repository, todo_id: TodoId, data: TodoUpdate
) -> TodoEntity:
    """
    Apply a partial update to one of the caller's todos and return the full record.

    Raises:
        TodoNotFound if the id does not exist or belongs to another user.
    """
    owner = _require(principal)
    updated = repo.update(owner.id, todo_id, data)
    if updated is None:
        raise TodoNotFound()
    logger.info("Updated todo %s (%s)", todo_id, ", ".join(sorted(data.model_fields_set)) or "no fields")
    return updated


# PUBLIC_INTERFACE
def delete_todo(principal: Optional[Principal], repo: Repository, todo_id: TodoId) -> str:
    owner = _require(principal)
    if not repo.delete(owner.id, todo_id):
        raise TodoNotFound()
    logger.info("Deleted todo %s", todo_id)
    return DELETED_MESSAGE
