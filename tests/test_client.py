import pytest

from todo_api.client import Filters, TodoApiClient, TodoApiError, TodoListController

from conftest import ALICE, BOB


@pytest.fixture()
def api(client):
    return TodoApiClient(client, ALICE.id, ALICE.email)


@pytest.fixture()
def controller(api):
    return TodoListController(api)


class CountingClient(TodoApiClient):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.list_calls = 0

    def list(self, filters=None):
        self.list_calls += 1
        return super().list(filters)


def titles(controller):
    return [t["title"] for t in controller.todos]


def test_default_filters():
    assert Filters().as_params() == {
        "search": "",
        "priority": "all",
        "completed": "all",
        "sort": "createdAt",
        "order": "desc",
    }


def test_add_refetches(controller):
    controller.add("First")
    controller.add("Second", priority="high")
    assert titles(controller) == ["Second", "First"]


def test_filter_change_refetches(client):
    api = CountingClient(client, ALICE.id, ALICE.email)
    controller = TodoListController(api)
    controller.add("Buy milk")
    controller.add("Walk dog")
    calls = api.list_calls

    controller.set_filters(search="milk")
    assert titles(controller) == ["Buy milk"]
    assert api.list_calls == calls + 1

    # Same filters: no refetch
    controller.set_filters(search="milk")
    assert api.list_calls == calls + 1

    controller.clear_filters()
    assert controller.filters == Filters()
    assert titles(controller) == ["Walk dog", "Buy milk"]


def test_toggle_update_remove(controller):
    todo = controller.add("Flip me")
    toggled = controller.toggle(todo["id"])
    assert toggled["completed"] is True
    assert controller.todos[0]["completed"] is True
    assert controller.toggle(todo["id"])["completed"] is False

    controller.update(todo["id"], title="Renamed")
    assert titles(controller) == ["Renamed"]

    assert controller.remove(todo["id"]) == "Todo deleted successfully"
    assert controller.todos == []


def test_errors_raise_api_error(client, controller):
    todo = controller.add("Alice's")
    bob = TodoApiClient(client, BOB.id, BOB.email)
    with pytest.raises(TodoApiError) as excinfo:
        bob.get(todo["id"])
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Todo not found"

    with pytest.raises(TodoApiError) as excinfo:
        controller.set_filters(sort="owner")
    assert excinfo.value.status_code == 400
