from datetime import datetime, timedelta, timezone

import pytest

from todo_api.errors import ValidationFailed
from todo_api.models import Priority
from todo_api.query import TodoQuery, resolve_query

BASE = datetime(2025, 1, 1, tzinfo=timezone.utc)


def entity(i, title, owner="u1", description=None, priority="medium", completed=False, due_date=None):
    ts = BASE + timedelta(minutes=i)
    return {
        "id": f"id-{i}",
        "owner_id": owner,
        "title": title,
        "description": description,
        "completed": completed,
        "priority": priority,
        "due_date": due_date,
        "created_at": ts,
        "updated_at": ts,
    }


class TestResolveQuery:
    def test_defaults(self):
        q = resolve_query("u1")
        assert q == TodoQuery(owner_id="u1", sort_field="created_at", descending=True)
        assert q.to_filter() == {"ownerId": "u1"}
        assert q.to_sort() == [("createdAt", -1), ("_id", -1)]

    def test_all_means_no_filter(self):
        q = resolve_query("u1", priority="all", completed="all", search="")
        assert q.priority is None
        assert q.completed is None
        assert q.search is None
        assert q.to_filter() == {"ownerId": "u1"}

    def test_full_filter_document(self):
        q = resolve_query("u1", search="a.b", priority="HIGH", completed="false", sort="priority", order="asc")
        assert q.to_filter() == {
            "ownerId": "u1",
            "$or": [
                {"title": {"$regex": r"a\.b", "$options": "i"}},
                {"description": {"$regex": r"a\.b", "$options": "i"}},
            ],
            "priority": "high",
            "completed": False,
        }
        # Priority orders by its numeric rank in the store
        assert q.to_sort() == [("priorityRank", 1), ("_id", 1)]

    def test_search_kept_as_given(self):
        q = resolve_query("u1", search=" milk")
        assert q.search == " milk"
        assert resolve_query("u1", search=" ").search == " "

    def test_deterministic(self):
        args = dict(search="x", priority="low", completed="true", sort="dueDate", order="asc")
        assert resolve_query("u1", **args) == resolve_query("u1", **args)

    @pytest.mark.parametrize("order,descending", [("asc", False), ("ASC", False), ("desc", True), ("up", True), (None, True)])
    def test_order(self, order, descending):
        assert resolve_query("u1", order=order).descending is descending

    @pytest.mark.parametrize("sort,field", [("createdAt", "created_at"), ("title", "title"), ("priority", "priority"), ("dueDate", "due_date"), ("due_date", "due_date")])
    def test_sort_whitelist(self, sort, field):
        assert resolve_query("u1", sort=sort).sort_field == field

    @pytest.mark.parametrize("sort", ["ownerId", "updatedAt", "$where", "title; drop"])
    def test_sort_outside_whitelist_rejected(self, sort):
        with pytest.raises(ValidationFailed):
            resolve_query("u1", sort=sort)

    def test_invalid_priority_and_completed(self):
        with pytest.raises(ValidationFailed):
            resolve_query("u1", priority="urgent")
        with pytest.raises(ValidationFailed):
            resolve_query("u1", completed="yes")

    def test_completed_true(self):
        assert resolve_query("u1", completed="true").completed is True


class TestApply:
    def test_owner_filter_always_applied(self):
        items = [entity(0, "mine"), entity(1, "theirs", owner="u2")]
        assert [e["title"] for e in resolve_query("u1").apply(items)] == ["mine"]

    def test_search_matches_title_or_description(self):
        items = [
            entity(0, "Buy Milk"),
            entity(1, "Other", description="oat milk"),
            entity(2, "Nothing", description=None),
        ]
        titles = [e["title"] for e in resolve_query("u1", search="MILK", order="asc").apply(items)]
        assert titles == ["Buy Milk", "Other"]

    def test_priority_total_order(self):
        items = [entity(0, "m", priority="medium"), entity(1, "h", priority="high"), entity(2, "l", priority="low")]
        asc = resolve_query("u1", sort="priority", order="asc").apply(items)
        assert [e["priority"] for e in asc] == [Priority.LOW.value, Priority.MEDIUM.value, Priority.HIGH.value]
        desc = resolve_query("u1", sort="priority", order="desc").apply(items)
        assert [e["priority"] for e in desc] == ["high", "medium", "low"]

    def test_missing_due_dates_sort_lowest(self):
        items = [entity(0, "later", due_date=BASE + timedelta(days=2)), entity(1, "none"), entity(2, "soon", due_date=BASE)]
        asc = resolve_query("u1", sort="dueDate", order="asc").apply(items)
        assert [e["title"] for e in asc] == ["none", "soon", "later"]
        desc = resolve_query("u1", sort="dueDate").apply(items)
        assert [e["title"] for e in desc] == ["later", "soon", "none"]

    def test_completed_partition(self):
        items = [entity(i, f"t{i}", completed=(i % 2 == 0)) for i in range(6)]
        done = resolve_query("u1", completed="true").apply(items)
        open_ = resolve_query("u1", completed="false").apply(items)
        everything = resolve_query("u1", completed="all").apply(items)
        assert {e["id"] for e in done} | {e["id"] for e in open_} == {e["id"] for e in everything}
        assert not {e["id"] for e in done} & {e["id"] for e in open_}
