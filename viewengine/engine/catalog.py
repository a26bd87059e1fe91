# File: /viewengine/engine/catalog.py | Version: 1.0 | Title: Property & Operator Catalog
"""
Static, stateless mapping from property type to its legal operators, how many
values each operator takes, and how a raw (JSON-ish) value is coerced into the
typed value the compiler emits.

This module is the single source of truth the filter model, the compiler and
the service consult before accepting a condition.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

from viewengine.schemas.filters import DateUnit, FilterOperator, PropertyType

Op = FilterOperator


class ValueArity(str, Enum):
    none = "none"
    one = "one"
    two = "two"


_TEXT = (
    Op.is_,
    Op.is_not,
    Op.contains,
    Op.does_not_contain,
    Op.starts_with,
    Op.ends_with,
    Op.is_known,
    Op.is_unknown,
)
_NUMBER = (
    Op.is_equal_to,
    Op.is_not_equal_to,
    Op.is_greater_than,
    Op.is_greater_or_equal,
    Op.is_less_than,
    Op.is_less_or_equal,
    Op.is_between,
    Op.is_known,
    Op.is_unknown,
)
_DATE = (
    Op.is_,
    Op.is_before,
    Op.is_after,
    Op.is_between,
    Op.is_less_than_n_ago,
    Op.is_more_than_n_ago,
    Op.is_known,
    Op.is_unknown,
)
_BOOLEAN = (Op.is_true, Op.is_false, Op.is_known, Op.is_unknown)
_CHOICE = (Op.is_any_of, Op.is_none_of, Op.is_known, Op.is_unknown)

OPERATOR_FAMILIES: Dict[PropertyType, Tuple[FilterOperator, ...]] = {
    PropertyType.text: _TEXT,
    PropertyType.number: _NUMBER,
    PropertyType.date: _DATE,
    PropertyType.boolean: _BOOLEAN,
    PropertyType.enum: _CHOICE,
    PropertyType.status: _CHOICE,
    PropertyType.person: _CHOICE,
}

# Operators deliberately present in more than one family.
SHARED_OPERATORS = frozenset({Op.is_known, Op.is_unknown, Op.is_, Op.is_between})

NO_VALUE_OPERATORS = frozenset({Op.is_known, Op.is_unknown, Op.is_true, Op.is_false})
LIST_OPERATORS = frozenset({Op.is_any_of, Op.is_none_of})
RELATIVE_DATE_OPERATORS = frozenset({Op.is_less_than_n_ago, Op.is_more_than_n_ago})

UNIT_DELTAS: Dict[DateUnit, timedelta] = {
    DateUnit.day: timedelta(days=1),
    DateUnit.week: timedelta(days=7),
    DateUnit.month: timedelta(days=30),
}

OPERATOR_LABELS: Dict[FilterOperator, str] = {
    Op.is_: "is",
    Op.is_not: "is not",
    Op.contains: "contains",
    Op.does_not_contain: "does not contain",
    Op.starts_with: "starts with",
    Op.ends_with: "ends with",
    Op.is_equal_to: "is equal to",
    Op.is_not_equal_to: "is not equal to",
    Op.is_greater_than: "is greater than",
    Op.is_greater_or_equal: "is greater than or equal to",
    Op.is_less_than: "is less than",
    Op.is_less_or_equal: "is less than or equal to",
    Op.is_between: "is between",
    Op.is_before: "is before",
    Op.is_after: "is after",
    Op.is_less_than_n_ago: "is less than ... ago",
    Op.is_more_than_n_ago: "is more than ... ago",
    Op.is_true: "is true",
    Op.is_false: "is false",
    Op.is_any_of: "is any of",
    Op.is_none_of: "is none of",
    Op.is_known: "is known",
    Op.is_unknown: "is unknown",
}


def resolve_property_type(property_type: Union[PropertyType, str, None]) -> PropertyType:
    """Unknown or missing types fall back to text."""
    if isinstance(property_type, PropertyType):
        return property_type
    try:
        return PropertyType(str(property_type).lower())
    except ValueError:
        return PropertyType.text


def operators_for(property_type: Union[PropertyType, str, None]) -> List[FilterOperator]:
    return list(OPERATOR_FAMILIES[resolve_property_type(property_type)])


def is_legal(property_type: Union[PropertyType, str, None], operator: FilterOperator) -> bool:
    return operator in OPERATOR_FAMILIES[resolve_property_type(property_type)]


def requires_value(operator: FilterOperator) -> ValueArity:
    if operator in NO_VALUE_OPERATORS:
        return ValueArity.none
    if operator == Op.is_between:
        return ValueArity.two
    return ValueArity.one


def label_for(operator: FilterOperator) -> str:
    return OPERATOR_LABELS.get(operator, str(getattr(operator, "value", operator)))


def value_kind(operator: FilterOperator) -> str:
    """Shape of the value an operator expects: none, scalar, list, range or relative."""
    if operator in NO_VALUE_OPERATORS:
        return "none"
    if operator in LIST_OPERATORS:
        return "list"
    if operator in RELATIVE_DATE_OPERATORS:
        return "relative"
    if operator == Op.is_between:
        return "range"
    return "scalar"


# ----------------------------
# Value coercion
# ----------------------------
def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            return datetime.fromisoformat(raw).date()
        except ValueError:
            return date.fromisoformat(raw[:10])
    raise ValueError(f"Expected a date, got {type(value).__name__}")


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("Expected a number, got a boolean")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        return float(value.strip())
    raise ValueError(f"Expected a number, got {value!r}")


def _to_text(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError(f"Expected text, got {type(value).__name__}")
    return str(value)


def _to_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        out = []
        for item in value:
            if isinstance(item, bool) or not isinstance(item, (str, int)):
                raise ValueError(f"Expected a list of identifiers, got {item!r}")
            out.append(str(item))
        return out
    raise ValueError(f"Expected a list of values, got {type(value).__name__}")


def _to_positive_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("Expected a whole number, got a boolean")
    if isinstance(value, str):
        value = value.strip()
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Expected a whole number, got {value!r}")
    if isinstance(value, float) and value != n:
        raise ValueError(f"Expected a whole number, got {value!r}")
    if n < 1:
        raise ValueError("Relative dates need an amount of at least 1")
    return n


def coerce_value(
    property_type: Union[PropertyType, str, None], operator: FilterOperator, value: Any
) -> Any:
    """Coerce one operand for ``operator``. Raises ValueError when it cannot."""
    ptype = resolve_property_type(property_type)
    kind = value_kind(operator)
    if kind == "none":
        return None
    if kind == "list":
        return _to_list(value)
    if kind == "relative":
        return _to_positive_int(value)
    if ptype == PropertyType.number:
        return _to_number(value)
    if ptype == PropertyType.date:
        return _to_date(value)
    return _to_text(value)


def equality_operator(property_type: Union[PropertyType, str, None], value: Any) -> FilterOperator:
    """Operator a quick filter uses for a single picked value."""
    ptype = resolve_property_type(property_type)
    if isinstance(value, (list, tuple, set, frozenset)):
        return Op.is_any_of
    if ptype == PropertyType.boolean:
        if isinstance(value, str):
            truthy = value.strip().lower() in {"1", "true", "yes", "on"}
        else:
            truthy = bool(value)
        return Op.is_true if truthy else Op.is_false
    if ptype == PropertyType.number:
        return Op.is_equal_to
    if ptype in (PropertyType.enum, PropertyType.status, PropertyType.person):
        return Op.is_any_of
    return Op.is_
