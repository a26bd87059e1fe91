# File: /viewengine/crud/record_query.py | Version: 1.0 | Title: SQLAlchemy executor for QueryRequest + record-count sources
from __future__ import annotations

import logging
from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Callable, Dict, Optional

from sqlalchemy import Date, DateTime, and_, func, inspect, not_, or_, select
from sqlalchemy.orm import Session

from viewengine.core.exceptions import ValidationError
from viewengine.schemas.filters import FilterOperator, PropertyType
from viewengine.schemas.query import Predicate, QueryDescriptor, QueryRequest, QueryResult
from viewengine.schemas.view import SortDirection

log = logging.getLogger(__name__)

Op = FilterOperator
ColumnMap = Optional[Dict[str, Any]]

_STRINGY = {PropertyType.text, PropertyType.enum, PropertyType.status, PropertyType.person}


def _column(model, field: str, column_map: ColumnMap):
    if column_map and field in column_map:
        return column_map[field]
    col = getattr(model, field, None)
    if col is None:
        raise ValidationError(f"{model.__name__} has no column for field {field!r}.")
    return col


def _day(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value)).date()


def _start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=UTC)


def _is_datetime_column(col) -> bool:
    col_type = getattr(col, "type", None)
    return isinstance(col_type, DateTime) and not isinstance(col_type, Date)


def _date_expr(col, op: FilterOperator, value: Any):
    if op == Op.is_between:
        low, high = _day(value[0]), _day(value[1])
        if _is_datetime_column(col):
            return and_(col >= _start(low), col < _start(high + timedelta(days=1)))
        return col.between(low, high)

    if isinstance(value, datetime):
        # relative cut-off, compared as an instant
        if _is_datetime_column(col):
            return col > value if op == Op.is_after else col < value
        # a date column holds midnights
        day = value.date()
        if op == Op.is_after:
            return col > day
        return col <= day if value.time() != time.min else col < day

    day = _day(value)
    if _is_datetime_column(col):
        nxt = _start(day + timedelta(days=1))
        if op == Op.is_:
            return and_(col >= _start(day), col < nxt)
        if op == Op.is_before:
            return col < _start(day)
        if op == Op.is_after:
            return col >= nxt
    else:
        if op == Op.is_:
            return col == day
        if op == Op.is_before:
            return col < day
        if op == Op.is_after:
            return col > day
    raise ValidationError(f"Operator {op.value} is not a date comparison.")


def predicate_expr(predicate: Predicate, col):
    op = predicate.operator
    val = predicate.value
    ptype = predicate.property_type

    if op in (Op.is_known, Op.is_unknown):
        present = and_(col.is_not(None), col != "") if ptype in _STRINGY else col.is_not(None)
        return present if op == Op.is_known else not_(present)
    if op == Op.is_true:
        return col.is_(True)
    if op == Op.is_false:
        return col.is_(False)
    if op == Op.is_any_of:
        return col.in_(val)
    if op == Op.is_none_of:
        return or_(col.is_(None), col.not_in(val))

    if ptype == PropertyType.date:
        return _date_expr(col, op, val)

    if ptype == PropertyType.number:
        if op == Op.is_between:
            return col.between(val[0], val[1])
        if op == Op.is_not_equal_to:
            return or_(col.is_(None), col != val)
        return {
            Op.is_equal_to: lambda: col == val,
            Op.is_greater_than: lambda: col > val,
            Op.is_greater_or_equal: lambda: col >= val,
            Op.is_less_than: lambda: col < val,
            Op.is_less_or_equal: lambda: col <= val,
        }[op]()

    # text, case-insensitive
    lowered = func.lower(col)
    needle = str(val).lower()
    if op == Op.is_:
        return lowered == needle
    if op == Op.is_not:
        return or_(col.is_(None), lowered != needle)
    if op == Op.contains:
        return lowered.contains(needle, autoescape=True)
    if op == Op.does_not_contain:
        return or_(col.is_(None), not_(lowered.contains(needle, autoescape=True)))
    if op == Op.starts_with:
        return lowered.startswith(needle, autoescape=True)
    if op == Op.ends_with:
        return lowered.endswith(needle, autoescape=True)
    raise ValidationError(f"Operator {op.value} is not supported for {ptype.value} fields.")


def build_where(descriptor: QueryDescriptor, model, column_map: ColumnMap = None):
    """OR of AND-branches; None when every record passes."""
    if descriptor.matches_all:
        return None
    branches = []
    for branch in descriptor.branches:
        exprs = [predicate_expr(p, _column(model, p.field, column_map)) for p in branch]
        branches.append(and_(*exprs))
    return or_(*branches)


def _search_expr(request: QueryRequest, model, column_map: ColumnMap):
    if not request.search_query:
        return None
    needle = request.search_query.lower()
    exprs = []
    for field in request.search_fields:
        try:
            col = _column(model, field, column_map)
        except ValidationError:
            log.debug("Search field %s not mapped on %s", field, model.__name__)
            continue
        exprs.append(func.lower(col).contains(needle, autoescape=True))
    if not exprs:
        return None
    return or_(*exprs)


def _filtered(model, request: QueryRequest, column_map: ColumnMap):
    stmt = select(model)
    where = build_where(request.filters, model, column_map)
    if where is not None:
        stmt = stmt.where(where)
    search = _search_expr(request, model, column_map)
    if search is not None:
        stmt = stmt.where(search)
    return stmt


def row_to_dict(row) -> Dict[str, Any]:
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


def count_records(db: Session, model, request: QueryRequest, column_map: ColumnMap = None) -> int:
    stmt = _filtered(model, request, column_map)
    return db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()


def execute_query(
    db: Session, model, request: QueryRequest, column_map: ColumnMap = None
) -> QueryResult:
    stmt = _filtered(model, request, column_map)
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

    if request.sort_field:
        col = _column(model, request.sort_field, column_map)
        direction = col.desc() if request.sort_direction == SortDirection.desc else col.asc()
        # missing values last in both directions
        stmt = stmt.order_by(col.is_(None), direction)

    rows = db.execute(stmt.offset(request.offset).limit(request.page_size)).scalars().all()
    return QueryResult(records=[row_to_dict(r) for r in rows], total=total)


# ----------------------------
# Record-count sources
# ----------------------------
RecordCounter = Callable[[Session, QueryRequest], int]

_COUNTERS: Dict[str, RecordCounter] = {}


def register_record_counter(entity_type: str, counter: RecordCounter) -> None:
    _COUNTERS[entity_type] = counter


def get_record_counter(entity_type: str) -> Optional[RecordCounter]:
    return _COUNTERS.get(entity_type)


def sqlalchemy_counter(model, column_map: ColumnMap = None) -> RecordCounter:
    def _count(db: Session, request: QueryRequest) -> int:
        return count_records(db, model, request, column_map)

    return _count
