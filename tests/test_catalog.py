# File: /tests/test_catalog.py
from datetime import date

import pytest

from viewengine.engine.catalog import (
    OPERATOR_FAMILIES,
    SHARED_OPERATORS,
    ValueArity,
    coerce_value,
    equality_operator,
    is_legal,
    label_for,
    operators_for,
    requires_value,
    resolve_property_type,
)
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.filters import PropertyType


def test_every_type_has_operators():
    for ptype in PropertyType:
        assert operators_for(ptype), ptype


def test_operator_families_only_overlap_on_shared_operators():
    owners = {}
    for ptype, ops in OPERATOR_FAMILIES.items():
        for op in ops:
            owners.setdefault(op, set()).add(ptype)
    # enum/status/person share one choice family
    choice = {PropertyType.enum, PropertyType.status, PropertyType.person}
    for op, types in owners.items():
        if len(types) > 1 and types != choice:
            assert op in SHARED_OPERATORS, (op, types)


def test_every_operator_belongs_to_a_family():
    covered = {op for ops in OPERATOR_FAMILIES.values() for op in ops}
    assert covered == set(Op)


def test_unknown_type_falls_back_to_text():
    assert resolve_property_type("rich_text") == PropertyType.text
    assert resolve_property_type(None) == PropertyType.text
    assert operators_for("DATE") == operators_for(PropertyType.date)


def test_legality():
    assert is_legal(PropertyType.date, Op.is_less_than_n_ago)
    assert not is_legal(PropertyType.text, Op.is_greater_than)
    assert not is_legal(PropertyType.boolean, Op.is_any_of)


def test_value_arity():
    assert requires_value(Op.is_known) == ValueArity.none
    assert requires_value(Op.is_true) == ValueArity.none
    assert requires_value(Op.is_between) == ValueArity.two
    assert requires_value(Op.contains) == ValueArity.one


def test_labels():
    assert label_for(Op.is_none_of) == "is none of"
    assert label_for(Op.is_greater_or_equal) == "is greater than or equal to"


def test_coerce_values_by_type():
    assert coerce_value(PropertyType.number, Op.is_equal_to, "42") == 42.0
    assert coerce_value(PropertyType.date, Op.is_after, "2026-01-01") == date(2026, 1, 1)
    assert coerce_value(PropertyType.date, Op.is_after, "2026-01-01T10:30:00") == date(2026, 1, 1)
    assert coerce_value(PropertyType.enum, Op.is_any_of, "OPEN") == ["OPEN"]
    assert coerce_value(PropertyType.date, Op.is_less_than_n_ago, "7") == 7
    assert coerce_value(PropertyType.boolean, Op.is_true, "whatever") is None


@pytest.mark.parametrize(
    "ptype,op,value",
    [
        (PropertyType.number, Op.is_equal_to, "abc"),
        (PropertyType.number, Op.is_equal_to, True),
        (PropertyType.date, Op.is_before, "not-a-date"),
        (PropertyType.date, Op.is_less_than_n_ago, 0),
        (PropertyType.date, Op.is_less_than_n_ago, 1.5),
        (PropertyType.enum, Op.is_any_of, [{"id": 1}]),
        (PropertyType.text, Op.contains, ["a"]),
    ],
)
def test_coerce_rejects_wrong_shapes(ptype, op, value):
    with pytest.raises(ValueError):
        coerce_value(ptype, op, value)


def test_quick_filter_operator():
    assert equality_operator(PropertyType.status, "OPEN") == Op.is_any_of
    assert equality_operator(PropertyType.boolean, "true") == Op.is_true
    assert equality_operator(PropertyType.boolean, False) == Op.is_false
    assert equality_operator(PropertyType.number, 3) == Op.is_equal_to
    assert equality_operator(PropertyType.text, "x") == Op.is_
