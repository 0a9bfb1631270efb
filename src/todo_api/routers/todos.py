from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from .. import service
from ..auth import Principal, get_principal
from ..models import TodoId
from ..repositories import Repository, get_repository
from ..schemas import TodoCreate, TodoOut, TodoUpdate

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)

_ERROR_RESPONSES = {
    401: {"description": "Not authenticated"},
    500: {"description": "Unexpected server error"},
}


class TodoListEnvelope(BaseModel):
    """
    Envelope for list responses.
    """
    todos: List[TodoOut] = Field(..., description="Todo items matching the query, in the requested order")


class TodoEnvelope(BaseModel):
    todo: TodoOut = Field(..., description="The Todo item")


class MessageEnvelope(BaseModel):
    message: str = Field(..., description="Confirmation message")


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoListEnvelope,
    summary="List Todos",
    description=(
        "List the caller's todos with optional filters.\n\n"
        "Query parameters:\n"
        "- search: case-insensitive substring match on title/description\n"
        "- priority: low, medium, high or all\n"
        "- completed: true, false or all\n"
        "- sort: one of createdAt, title, priority, dueDate (default createdAt)\n"
        "- order: asc or desc (default desc)"
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"description": "Invalid query parameters"},
        **_ERROR_RESPONSES,
    },
)
def list_todos(
    search: Optional[str] = Query(None, description="Search text for title/description"),
    priority: Optional[str] = Query(None, description="Filter by priority: low, medium, high or all"),
    completed: Optional[str] = Query(None, description="Filter by completion status: true, false or all"),
    sort: Optional[str] = Query(None, description="Sort by field: createdAt, title, priority, dueDate"),
    order: Optional[str] = Query(None, description="Sort direction: 'asc' or 'desc'"),
    principal: Principal = Depends(get_principal),
    repo: Repository = Depends(get_repository),
) -> TodoListEnvelope:
    items = service.list_todos(
        principal,
        repo,
        search=search,
        priority=priority,
        completed=completed,
        sort=sort,
        order=order,
    )
    return TodoListEnvelope(todos=[TodoOut(**it) for it in items])  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item owned by the caller and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Validation error"},
        **_ERROR_RESPONSES,
    },
)
def create_todo(
    payload: TodoCreate,
    principal: Principal = Depends(get_principal),
    repo: Repository = Depends(get_repository),
) -> TodoEnvelope:
    created = service.create_todo(principal, repo, payload)
    return TodoEnvelope(todo=TodoOut(**created))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found"},
        **_ERROR_RESPONSES,
    },
)
def get_todo(
    todo_id: str,
    principal: Principal = Depends(get_principal),
    repo: Repository = Depends(get_repository),
) -> TodoEnvelope:
    item = service.get_todo(principal, repo, TodoId(todo_id))
    return TodoEnvelope(todo=TodoOut(**item))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Update Todo",
    description="Partially update fields of a Todo item. Omitted fields are left unchanged.",
    responses={
        200: {"description": "Todo updated"},
        400: {"description": "Validation error"},
        404: {"description": "Todo not found"},
        **_ERROR_RESPONSES,
    },
)
def update_todo(
    todo_id: str,
    payload: TodoUpdate,
    principal: Principal = Depends(get_principal),
    repo: Repository = Depends(get_repository),
) -> TodoEnvelope:
    updated = service.update_todo(principal, repo, TodoId(todo_id), payload)
    return TodoEnvelope(todo=TodoOut(**updated))  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageEnvelope,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={
        200: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
        **_ERROR_RESPONSES,
    },
)
def delete_todo(
    todo_id: str,
    principal: Principal = Depends(get_principal),
    repo: Repository = Depends(get_repository),
) -> MessageEnvelope:
    return MessageEnvelope(message=service.delete_todo(principal, repo, TodoId(todo_id)))
