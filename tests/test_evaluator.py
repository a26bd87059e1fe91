# File: /tests/test_evaluator.py
from datetime import UTC, datetime

from viewengine.engine.evaluator import evaluate_predicate, execute_in_memory, resolve
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.filters import PropertyType
from viewengine.schemas.query import Predicate, QueryDescriptor, QueryRequest
from viewengine.schemas.view import SortDirection


def _p(field, op, value=None, ptype=PropertyType.text):
    return Predicate(field=field, operator=op, value=value, property_type=ptype)


def test_resolve_dotted_paths():
    rec = {"owner": {"id": "u1"}}
    assert resolve(rec, "owner.id") == "u1"
    assert resolve(rec, "owner.name") is None
    assert resolve({"owner": None}, "owner.id") is None


def test_text_is_case_insensitive():
    rec = {"title": "VPN outage"}
    assert evaluate_predicate(_p("title", Op.contains, "vpn"), rec)
    assert evaluate_predicate(_p("title", Op.starts_with, "vpn"), rec)
    assert evaluate_predicate(_p("title", Op.is_, "vpn OUTAGE"), rec)


def test_negative_operators_pass_missing_values():
    rec = {"title": None}
    assert evaluate_predicate(_p("title", Op.is_not, "x"), rec)
    assert evaluate_predicate(_p("title", Op.does_not_contain, "x"), rec)
    assert evaluate_predicate(_p("status", Op.is_none_of, ["OPEN"], PropertyType.enum), rec)
    assert not evaluate_predicate(_p("title", Op.contains, "x"), rec)
    assert not evaluate_predicate(_p("status", Op.is_any_of, ["OPEN"], PropertyType.enum), rec)


def test_known_unknown_and_booleans():
    assert evaluate_predicate(_p("tags", Op.is_unknown), {"tags": []})
    assert evaluate_predicate(_p("tags", Op.is_known), {"tags": ["a"]})
    assert evaluate_predicate(_p("urgent", Op.is_true, ptype=PropertyType.boolean), {"urgent": True})
    assert not evaluate_predicate(_p("urgent", Op.is_true, ptype=PropertyType.boolean), {})
    assert evaluate_predicate(_p("urgent", Op.is_false, ptype=PropertyType.boolean), {"urgent": "false"})


def test_dates_compare_by_day():
    rec = {"due": "2026-03-05T23:59:00"}
    d = PropertyType.date
    assert evaluate_predicate(_p("due", Op.is_, datetime(2026, 3, 5).date(), d), rec)
    assert evaluate_predicate(
        _p("due", Op.is_between, [datetime(2026, 3, 1).date(), datetime(2026, 3, 5).date()], d), rec
    )
    assert not evaluate_predicate(_p("due", Op.is_after, datetime(2026, 3, 5).date(), d), rec)


def test_relative_cutoff_is_an_exact_instant():
    cutoff = datetime(2026, 3, 5, 12, 0, tzinfo=UTC)
    d = PropertyType.date
    assert evaluate_predicate(_p("at", Op.is_after, cutoff, d), {"at": "2026-03-05T13:00:00+00:00"})
    assert not evaluate_predicate(_p("at", Op.is_after, cutoff, d), {"at": "2026-03-05T11:00:00+00:00"})


def test_person_objects_match_on_id():
    pred = _p("assignee", Op.is_any_of, ["u2"], PropertyType.person)
    assert evaluate_predicate(pred, {"assignee": {"id": "u2", "name": "Kim"}})
    assert evaluate_predicate(pred, {"assignee": [{"id": "u1"}, {"id": "u2"}]})


def test_execute_filters_searches_sorts_and_pages():
    rows = [
        {"id": 1, "title": "alpha", "amount": 3},
        {"id": 2, "title": "beta", "amount": None},
        {"id": 3, "title": "alphabet", "amount": 10},
        {"id": 4, "title": "gamma", "amount": 1},
    ]
    req = QueryRequest(
        filters=QueryDescriptor(),
        sort_field="amount",
        sort_direction=SortDirection.desc,
        page=1,
        page_size=2,
    )
    res = execute_in_memory(rows, req)
    assert res.total == 4
    assert [r["id"] for r in res.records] == [3, 1]

    last = execute_in_memory(rows, req.model_copy(update={"page": 2}))
    assert [r["id"] for r in last.records] == [4, 2]  # missing values sort last

    searched = execute_in_memory(
        rows, req.model_copy(update={"search_query": "ALPHA", "search_fields": ["title"]})
    )
    assert searched.total == 2
