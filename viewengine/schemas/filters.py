# File: /viewengine/schemas/filters.py | Version: 1.0 | Title: Filter conditions, groups and property/operator enums
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from viewengine.schemas._base import gen_id


class PropertyType(str, Enum):
    text = "text"
    number = "number"
    date = "date"
    boolean = "boolean"
    enum = "enum"
    person = "person"
    status = "status"


class FilterOperator(str, Enum):
    # text
    is_ = "is"
    is_not = "is_not"
    contains = "contains"
    does_not_contain = "does_not_contain"
    starts_with = "starts_with"
    ends_with = "ends_with"
    # number
    is_equal_to = "is_equal_to"
    is_not_equal_to = "is_not_equal_to"
    is_greater_than = "is_greater_than"
    is_greater_or_equal = "is_greater_or_equal"
    is_less_than = "is_less_than"
    is_less_or_equal = "is_less_or_equal"
    is_between = "is_between"
    # date
    is_before = "is_before"
    is_after = "is_after"
    is_less_than_n_ago = "is_less_than_n_ago"
    is_more_than_n_ago = "is_more_than_n_ago"
    # boolean
    is_true = "is_true"
    is_false = "is_false"
    # enum / status / person
    is_any_of = "is_any_of"
    is_none_of = "is_none_of"
    # shared
    is_known = "is_known"
    is_unknown = "is_unknown"


class DateUnit(str, Enum):
    day = "day"
    week = "week"
    month = "month"


# Operand shapes a condition may hold. The property's declared type is the
# tag: catalog.coerce_value turns the operand into that type's value.
ScalarValue = Union[bool, int, float, str, datetime, date]
FilterValue = Optional[Union[ScalarValue, List[Union[str, int, float]]]]


class FilterCondition(BaseModel):
    """
    One ``property operator value`` test. ``value`` stays as entered; it is
    typed against the property (text, number, date, list of option values,
    relative amount) only by ``catalog.coerce_value`` when validated or
    compiled.
    """

    id: str = Field(default_factory=gen_id)
    property_id: Optional[str] = None
    operator: Optional[FilterOperator] = None
    value: FilterValue = None
    secondary_value: FilterValue = None  # only for is_between
    unit: Optional[DateUnit] = None  # only for relative-date operators


class FilterGroup(BaseModel):
    """Conditions inside one group are AND-combined; groups are OR-combined."""

    id: str = Field(default_factory=gen_id)
    conditions: List[FilterCondition] = Field(default_factory=list)


# A FilterGroupSet is simply an ordered list of groups.
FilterGroupSet = List[FilterGroup]

filter_group_set_adapter: TypeAdapter[List[FilterGroup]] = TypeAdapter(List[FilterGroup])
