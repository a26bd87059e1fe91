# File: /viewengine/modules/_base.py | Version: 1.0 | Title: Small builders shared by the module view configurations
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Tuple

from viewengine.schemas.filters import FilterCondition, FilterGroup, FilterOperator, PropertyType
from viewengine.schemas.module_config import ColumnDescriptor, DefaultView, PropertyOption
from viewengine.schemas.view import SortDirection, SortState

# Placeholders resolved when default views are materialized for a user
CURRENT_USER = "{{currentUserId}}"
TODAY = "{{today}}"


def options(*pairs: Tuple[str, str]) -> List[PropertyOption]:
    return [PropertyOption(value=v, label=label) for v, label in pairs]


def lanes(*triples: Tuple[str, str, str]) -> List[PropertyOption]:
    return [PropertyOption(value=v, label=label, color=color) for v, label, color in triples]


def column(
    id: str,
    name: str,
    type: PropertyType = PropertyType.text,
    width: int = 150,
    *,
    visible: bool = False,
    sortable: bool = True,
    filterable: bool = True,
    group: Optional[str] = None,
    accessor: Optional[str] = None,
    opts: Sequence[PropertyOption] = (),
) -> ColumnDescriptor:
    return ColumnDescriptor(
        id=id,
        display_name=name,
        type=type,
        width=width,
        default_visible=visible,
        sortable=sortable,
        filterable=filterable,
        group=group,
        accessor=accessor,
        options=list(opts),
    )


def cond(property_id: str, operator: FilterOperator, value: Any = None, **extra: Any) -> FilterCondition:
    return FilterCondition(property_id=property_id, operator=operator, value=value, **extra)


def group(*conditions: FilterCondition) -> FilterGroup:
    return FilterGroup(conditions=list(conditions))


def view(
    name: str,
    description: str,
    columns: Iterable[str],
    sort_by: str,
    direction: str = "desc",
    *filters: FilterGroup,
) -> DefaultView:
    return DefaultView(
        name=name,
        description=description,
        columns=list(columns),
        sort=SortState(column_id=sort_by, direction=SortDirection(direction)),
        filters=list(filters),
    )
