# File: /tests/test_compiler.py
from datetime import UTC, date, datetime, timedelta

import pytest

from viewengine.core.exceptions import ValidationError
from viewengine.engine.compiler import (
    build_query_request,
    compile_condition,
    compile_filters,
    sanitize_filters,
)
from viewengine.engine.evaluator import matches
from viewengine.engine.filter_model import FilterModel
from viewengine.modules._base import cond, group
from viewengine.schemas.filters import DateUnit, FilterCondition, FilterGroup
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.view import SortDirection, SortState

RECORDS = [
    {"number": "T-1", "status": "OPEN", "createdAt": "2025-01-01"},
    {"number": "T-2", "status": "CLOSED", "createdAt": "2026-02-01"},
    {"number": "T-3", "status": "CLOSED", "createdAt": "2025-01-01"},
]


def test_empty_set_matches_everything(tickets_config):
    d = compile_filters([], tickets_config)
    assert d.matches_all
    assert all(matches(d, r) for r in RECORDS)


def test_group_without_conditions_matches_everything(tickets_config):
    d = compile_filters([FilterGroup()], tickets_config)
    assert d.branches == [[]]
    assert all(matches(d, r) for r in RECORDS)


def test_incomplete_conditions_are_skipped(tickets_config):
    groups = [group(FilterCondition(property_id="title"), cond("title", Op.contains, ""))]
    d = compile_filters(groups, tickets_config)
    assert d.branches == [[]]


def test_or_of_and_groups(tickets_config):
    groups = [
        group(cond("status", Op.is_any_of, ["OPEN"])),
        group(cond("createdAt", Op.is_after, "2026-01-01")),
    ]
    d = compile_filters(groups, tickets_config)
    assert len(d.branches) == 2
    assert matches(d, RECORDS[0])  # first branch
    assert matches(d, RECORDS[1])  # second branch
    assert not matches(d, RECORDS[2])


def test_between_bounds_are_ordered(tickets_config):
    c = FilterCondition(property_id="amount", operator=Op.is_between, value=10, secondary_value=2)
    pred = compile_condition(c, tickets_config)
    assert pred.value == [2.0, 10.0]


def test_relative_date_becomes_absolute_cutoff(tickets_config):
    now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
    recent = FilterCondition(
        property_id="createdAt", operator=Op.is_less_than_n_ago, value=2, unit=DateUnit.week
    )
    pred = compile_condition(recent, tickets_config, now)
    assert pred.operator == Op.is_after
    assert pred.value == now - timedelta(days=14)

    old = recent.model_copy(update={"operator": Op.is_more_than_n_ago, "unit": DateUnit.month})
    pred = compile_condition(old, tickets_config, now)
    assert pred.operator == Op.is_before
    assert pred.value == now - timedelta(days=60)


def test_accessor_is_the_predicate_field(tickets_config):
    pred = compile_condition(cond("owner", Op.is_any_of, ["u1"]), tickets_config)
    assert pred.field == "owner.id"


def test_quick_filters_are_anded_onto_every_branch(tickets_config):
    groups = [
        group(cond("title", Op.contains, "vpn")),
        group(cond("amount", Op.is_greater_than, 3)),
    ]
    d = compile_filters(groups, tickets_config, {"status": "OPEN", "number": "T-1"})
    for branch in d.branches:
        assert branch[-1].field == "status"
        assert branch[-1].value == ["OPEN"]
        # number is not offered as a quick filter
        assert all(p.field != "number" for p in branch)


def test_quick_filters_without_groups(tickets_config):
    d = compile_filters([], tickets_config, {"urgent": "true"})
    assert len(d.branches) == 1
    assert d.branches[0][0].operator == Op.is_true


def test_build_query_request(tickets_config):
    req = build_query_request(
        [],
        tickets_config,
        sort=SortState(column_id="owner", direction=SortDirection.desc),
        search_query="  vpn ",
        page=0,
        page_size=10_000,
    )
    assert req.sort_field == "owner.id"
    assert req.sort_direction == SortDirection.desc
    assert req.search_query == "vpn"
    assert req.page == 1
    assert req.page_size == 200
    assert "title" in req.search_fields


def test_build_query_request_rejects_unsortable_column(tickets_config):
    with pytest.raises(ValidationError):
        build_query_request([], tickets_config, sort=SortState(column_id="urgent"))


def test_sanitize_drops_what_config_no_longer_accepts(tickets_config):
    good = cond("createdAt", Op.is_before, date(2026, 1, 1).isoformat())
    stored = [
        {"conditions": [good.model_dump(), {"property_id": "retired", "operator": "is"}]},
        {"conditions": [{"property_id": "status", "operator": "is_any_of", "value": ["ARCHIVED"]}]},
        {"conditions": []},
    ]
    cleaned, problems = sanitize_filters(stored, tickets_config)
    assert len(cleaned) == 2  # third group is over the ceiling
    assert [c.id for c in cleaned[0].conditions] == [good.id]
    assert cleaned[1].conditions == []
    assert len(problems) == 3


def test_sanitize_makes_repeated_ids_unique(tickets_config):
    stored = [
        {"id": "g", "conditions": [{"id": "c", "property_id": "title", "operator": "contains", "value": "a"}]},
        {"id": "g", "conditions": [{"id": "g", "property_id": "title", "operator": "is", "value": "b"}]},
    ]
    cleaned, problems = sanitize_filters(stored, tickets_config)
    assert cleaned[0].id == "g"
    assert cleaned[1].id != "g"
    assert [c.id for c in cleaned[0].conditions] == ["c"]
    assert cleaned[1].conditions == []
    assert len(problems) == 2
    FilterModel(tickets_config).validate_groups(cleaned)
