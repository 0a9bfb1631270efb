"""
HTTP client and list-state controller for the todo API.

TodoApiClient issues requests on behalf of one authenticated user.
TodoListController keeps the current list and filters in memory, refetching
whenever the filters change or a mutation succeeds.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class TodoApiError(Exception):
    """Raised for any non-2xx response from the todo API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class Filters:
    search: str = ""
    priority: str = "all"
    completed: str = "all"
    sort: str = "createdAt"
    order: str = "desc"

    def as_params(self) -> Dict[str, str]:
        return asdict(self)


class TodoApiClient:
    """
    Thin wrapper over an httpx.Client bound to one user.

    The http client carries the base URL; the principal headers are sent with
    every request.
    """

    def __init__(
        self,
        http: httpx.Client,
        user_id: str,
        email: str,
        user_id_header: str = "X-User-Id",
        email_header: str = "X-User-Email",
    ) -> None:
        self._http = http
        self._headers = {user_id_header: user_id, email_header: email}

    @classmethod
    def from_url(cls, base_url: str, user_id: str, email: str, timeout: float = 10.0) -> "TodoApiClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout), user_id, email)

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        response = self._http.request(method, url, headers=self._headers, **kwargs)
        if response.is_error:
            try:
                message = response.json().get("message", response.reason_phrase)
            except ValueError:
                message = response.reason_phrase
            raise TodoApiError(response.status_code, message)
        return response.json()

    def list(self, filters: Optional[Filters] = None) -> List[Dict[str, Any]]:
        params = (filters or Filters()).as_params()
        return self._request("GET", "/todos", params=params)["todos"]

    def get(self, todo_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/todos/{todo_id}")["todo"]

    def create(self, title: str, **fields: Any) -> Dict[str, Any]:
        return self._request("POST", "/todos", json={"title": title, **fields})["todo"]

    def update(self, todo_id: str, **changes: Any) -> Dict[str, Any]:
        return self._request("PUT", f"/todos/{todo_id}", json=changes)["todo"]

    def delete(self, todo_id: str) -> str:
        return self._request("DELETE", f"/todos/{todo_id}")["message"]


class TodoListController:
    """
    In-memory view of the user's todo list.

    Mutations go to the API first; the list is refetched afterwards so
    ordering and filtering always reflect the server.
    """

    def __init__(self, api: TodoApiClient, filters: Optional[Filters] = None) -> None:
        self.api = api
        self.filters = filters or Filters()
        self.todos: List[Dict[str, Any]] = []

    def refresh(self) -> List[Dict[str, Any]]:
        self.todos = self.api.list(self.filters)
        logger.debug("Fetched %d todos", len(self.todos))
        return self.todos

    def set_filters(self, **changes: str) -> List[Dict[str, Any]]:
        filters = replace(self.filters, **changes)
        if filters != self.filters:
            self.filters = filters
            self.refresh()
        return self.todos

    def clear_filters(self) -> List[Dict[str, Any]]:
        return self.set_filters(**Filters().as_params())

    def add(self, title: str, **fields: Any) -> Dict[str, Any]:
        created = self.api.create(title, **fields)
        self.refresh()
        return created

    def update(self, todo_id: str, **changes: Any) -> Dict[str, Any]:
        updated = self.api.update(todo_id, **changes)
        self.refresh()
        return updated

    def toggle(self, todo_id: str) -> Dict[str, Any]:
        current = next((t for t in self.todos if t["id"] == todo_id), None)
        if current is None:
            current = self.api.get(todo_id)
        return self.update(todo_id, completed=not current["completed"])

    def remove(self, todo_id: str) -> str:
        message = self.api.delete(todo_id)
        self.refresh()
        return message
