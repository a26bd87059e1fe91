# File: /viewengine/engine/compiler.py | Version: 1.0 | Title: Filter compiler -> QueryDescriptor / QueryRequest
"""
Turns a FilterGroupSet (plus quick filters, sort, search and paging) into the
transport-neutral QueryRequest an executor runs.

Rules:
  * groups are OR-combined, conditions inside a group AND-combined;
  * an incomplete condition is skipped, so a group with no usable condition is
    a pass-all branch (same as an empty group);
  * quick filters are AND-ed onto every branch;
  * relative dates become absolute cut-offs taken at compile time.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from viewengine.core.config import settings
from viewengine.core.exceptions import ValidationError
from viewengine.engine.catalog import (
    UNIT_DELTAS,
    coerce_value,
    equality_operator,
    is_legal,
    value_kind,
)
from viewengine.engine.filter_model import FilterModel
from viewengine.schemas._base import gen_id
from viewengine.schemas.filters import DateUnit, FilterCondition, FilterGroup, FilterOperator
from viewengine.schemas.module_config import ModuleViewConfig
from viewengine.schemas.query import Predicate, QueryDescriptor, QueryRequest
from viewengine.schemas.view import SortDirection, SortState

log = logging.getLogger(__name__)


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple, set, frozenset)) and not value:
        return True
    return False


def compile_condition(
    condition: FilterCondition,
    config: ModuleViewConfig,
    now: Optional[datetime] = None,
) -> Optional[Predicate]:
    """One condition -> one predicate, or None when the condition is not usable yet."""
    prop = config.get_property(condition.property_id)
    op = condition.operator
    if prop is None or op is None or not is_legal(prop.type, op):
        return None

    kind = value_kind(op)
    try:
        if kind == "none":
            value = None
        elif kind == "range":
            if _blank(condition.value) or _blank(condition.secondary_value):
                return None
            low = coerce_value(prop.type, op, condition.value)
            high = coerce_value(prop.type, op, condition.secondary_value)
            if low > high:
                low, high = high, low
            value = [low, high]
        elif kind == "relative":
            if _blank(condition.value):
                return None
            amount = coerce_value(prop.type, op, condition.value)
            delta = UNIT_DELTAS[condition.unit or DateUnit.day] * amount
            value = (now or datetime.now(UTC)) - delta
            op = (
                FilterOperator.is_after
                if op == FilterOperator.is_less_than_n_ago
                else FilterOperator.is_before
            )
        else:
            if _blank(condition.value):
                return None
            value = coerce_value(prop.type, op, condition.value)
    except ValueError as exc:
        log.debug("Skipping condition %s: %s", condition.id, exc)
        return None

    return Predicate(field=prop.field, operator=op, value=value, property_type=prop.type)


def compile_quick_filters(
    quick_filters: Optional[Mapping[str, Any]],
    config: ModuleViewConfig,
) -> List[Predicate]:
    preds: List[Predicate] = []
    for property_id, raw in (quick_filters or {}).items():
        if _blank(raw):
            continue
        if property_id not in config.quick_filter_property_ids:
            log.debug("Ignoring quick filter on %s: not offered by %s", property_id, config.entity_type)
            continue
        prop = config.get_property(property_id)
        op = equality_operator(prop.type, raw)
        value = raw
        if value_kind(op) == "none":
            value = None
        elif value_kind(op) == "list" and not isinstance(raw, (list, tuple, set, frozenset)):
            value = [raw]
        pred = compile_condition(
            FilterCondition(property_id=property_id, operator=op, value=value), config
        )
        if pred is not None:
            preds.append(pred)
    return preds


def compile_filters(
    groups: Iterable[FilterGroup],
    config: ModuleViewConfig,
    quick_filters: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> QueryDescriptor:
    now = now or datetime.now(UTC)
    branches: List[List[Predicate]] = []
    for group in groups:
        branch = []
        for condition in group.conditions:
            pred = compile_condition(condition, config, now)
            if pred is not None:
                branch.append(pred)
        # An empty branch stays: AND of nothing is true.
        branches.append(branch)

    quick = compile_quick_filters(quick_filters, config)
    if quick:
        branches = [branch + quick for branch in branches] if branches else [list(quick)]
    return QueryDescriptor(branches=branches)


def build_query_request(
    groups: Iterable[FilterGroup],
    config: ModuleViewConfig,
    *,
    quick_filters: Optional[Mapping[str, Any]] = None,
    sort: Optional[SortState] = None,
    search_query: str = "",
    page: int = 1,
    page_size: Optional[int] = None,
    now: Optional[datetime] = None,
) -> QueryRequest:
    sort = sort or SortState()
    sort_field = None
    if sort.column_id:
        prop = config.get_property(sort.column_id)
        if prop is None or not prop.sortable:
            raise ValidationError(f"Column {sort.column_id!r} cannot be sorted.")
        sort_field = prop.field

    size = page_size or settings.DEFAULT_PAGE_SIZE
    return QueryRequest(
        filters=compile_filters(groups, config, quick_filters, now),
        sort_field=sort_field,
        sort_direction=sort.direction if sort_field else SortDirection.asc,
        page=max(1, page),
        page_size=min(max(1, size), settings.MAX_PAGE_SIZE),
        search_query=search_query.strip(),
        search_fields=config.search_fields(),
    )


def sanitize_filters(
    groups: Iterable[Any],
    config: ModuleViewConfig,
) -> Tuple[List[FilterGroup], List[str]]:
    """
    Drop stored conditions the current module configuration no longer accepts
    (removed property, illegal operator, retired option). A repeated group id
    gets a fresh one. Returns the cleaned groups and a human-readable note per
    change.
    """
    checker = FilterModel(config)
    problems: List[str] = []
    cleaned: List[FilterGroup] = []
    seen = set()
    for raw in groups:
        try:
            group = FilterGroup.model_validate(raw)
        except ValueError as exc:
            problems.append(f"Unreadable filter group dropped: {exc}")
            continue
        if len(cleaned) >= checker.max_groups:
            problems.append(f"Filter group {group.id} dropped: too many groups.")
            continue
        if group.id in seen:
            problems.append(f"Filter group {group.id} renamed: duplicate id.")
            group = group.model_copy(update={"id": gen_id()})
        seen.add(group.id)
        kept: List[FilterCondition] = []
        for condition in group.conditions:
            if condition.id in seen:
                problems.append(f"Condition {condition.id} dropped: duplicate id.")
                continue
            if len(kept) >= checker.max_conditions:
                problems.append(f"Condition {condition.id} dropped: too many conditions.")
                continue
            try:
                checker.check_condition(condition)
            except ValidationError as exc:
                problems.append(f"Condition {condition.id} dropped: {exc.message}")
                continue
            seen.add(condition.id)
            kept.append(condition)
        cleaned.append(group.model_copy(update={"conditions": kept}))

    if problems:
        log.info("Sanitized %s filters: %d condition(s) dropped", config.entity_type, len(problems))
    return cleaned, problems
