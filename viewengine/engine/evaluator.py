# File: /viewengine/engine/evaluator.py | Version: 1.0 | Title: Reference in-memory executor for QueryRequest
"""
Executes a QueryRequest against plain dict records. It pins down the meaning of
every compiled predicate so other executors (see crud/record_query.py) can be
checked against it.

Negative operators (is_not, does_not_contain, is_not_equal_to, is_none_of)
let records with no value through.
"""
from __future__ import annotations

from datetime import UTC, date, datetime, time
from typing import Any, Dict, Iterable, List, Optional

from viewengine.schemas.filters import FilterOperator, PropertyType
from viewengine.schemas.query import Predicate, QueryDescriptor, QueryRequest, QueryResult
from viewengine.schemas.view import SortDirection

Op = FilterOperator

_NEGATIVE = {Op.is_not, Op.does_not_contain, Op.is_not_equal_to, Op.is_none_of}


def resolve(record: Any, path: str) -> Any:
    """Follow a dotted path through dicts and attributes; missing -> None."""
    current = record
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def _empty(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple, set)) and not value)


def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if isinstance(value, str) and value.strip():
        try:
            return _as_datetime(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_keys(value: Any) -> List[str]:
    # person/enum values may be scalars, lists, or {"id": ...} objects
    items = value if isinstance(value, (list, tuple, set)) else [value]
    out = []
    for item in items:
        if isinstance(item, dict):
            item = item.get("id", item.get("value"))
        if item is not None:
            out.append(str(item))
    return out


def _compare_dates(op: FilterOperator, raw: Any, target: Any) -> bool:
    actual = _as_datetime(raw)
    if actual is None:
        return False
    if op == Op.is_between:
        low, high = target
        return _as_datetime(low).date() <= actual.date() <= _as_datetime(high).date()
    if isinstance(target, datetime):
        # relative cut-off: exact instant
        cutoff = _as_datetime(target)
        return actual > cutoff if op == Op.is_after else actual < cutoff
    day = actual.date()
    target_day = _as_datetime(target).date()
    if op == Op.is_:
        return day == target_day
    if op == Op.is_before:
        return day < target_day
    if op == Op.is_after:
        return day > target_day
    return False


def _compare_numbers(op: FilterOperator, raw: Any, target: Any) -> bool:
    actual = _as_number(raw)
    if actual is None:
        return False
    if op == Op.is_between:
        return target[0] <= actual <= target[1]
    return {
        Op.is_equal_to: actual == target,
        Op.is_not_equal_to: actual != target,
        Op.is_greater_than: actual > target,
        Op.is_greater_or_equal: actual >= target,
        Op.is_less_than: actual < target,
        Op.is_less_or_equal: actual <= target,
    }.get(op, False)


def _compare_text(op: FilterOperator, raw: Any, target: Any) -> bool:
    actual = str(raw).lower()
    needle = str(target).lower()
    return {
        Op.is_: actual == needle,
        Op.is_not: actual != needle,
        Op.contains: needle in actual,
        Op.does_not_contain: needle not in actual,
        Op.starts_with: actual.startswith(needle),
        Op.ends_with: actual.endswith(needle),
    }.get(op, False)


def evaluate_predicate(predicate: Predicate, record: Any) -> bool:
    op = predicate.operator
    raw = resolve(record, predicate.field)

    if op == Op.is_known:
        return not _empty(raw)
    if op == Op.is_unknown:
        return _empty(raw)
    if op == Op.is_true:
        return raw is True or (isinstance(raw, (int, str)) and str(raw).lower() in {"1", "true"})
    if op == Op.is_false:
        return raw is False or (isinstance(raw, (int, str)) and str(raw).lower() in {"0", "false"})

    if _empty(raw):
        return op in _NEGATIVE

    if op in (Op.is_any_of, Op.is_none_of):
        hit = bool(set(_as_keys(raw)) & set(predicate.value))
        return hit if op == Op.is_any_of else not hit
    if predicate.property_type == PropertyType.date:
        return _compare_dates(op, raw, predicate.value)
    if predicate.property_type == PropertyType.number:
        return _compare_numbers(op, raw, predicate.value)
    return _compare_text(op, raw, predicate.value)


def matches(descriptor: QueryDescriptor, record: Any) -> bool:
    if not descriptor.branches:
        return True
    return any(
        all(evaluate_predicate(p, record) for p in branch) for branch in descriptor.branches
    )


def _search_hit(record: Any, query: str, fields: List[str]) -> bool:
    needle = query.lower()
    for field in fields:
        value = resolve(record, field)
        if value is not None and needle in str(value).lower():
            return True
    return False


def _sort_key(value: Any):
    if isinstance(value, bool):
        return (0, float(value))
    if isinstance(value, (int, float)):
        return (0, float(value))
    if isinstance(value, (datetime, date)):
        return (1, _as_datetime(value).isoformat())
    return (2, str(value).lower())


def execute_in_memory(records: Iterable[Dict[str, Any]], request: QueryRequest) -> QueryResult:
    rows = [r for r in records if matches(request.filters, r)]
    if request.search_query:
        rows = [r for r in rows if _search_hit(r, request.search_query, request.search_fields)]

    if request.sort_field:
        present = [r for r in rows if resolve(r, request.sort_field) is not None]
        missing = [r for r in rows if resolve(r, request.sort_field) is None]
        present.sort(
            key=lambda r: _sort_key(resolve(r, request.sort_field)),
            reverse=request.sort_direction == SortDirection.desc,
        )
        rows = present + missing

    total = len(rows)
    page = rows[request.offset : request.offset + request.page_size]
    return QueryResult(records=page, total=total)
