# File: /viewengine/schemas/query.py | Version: 1.0 | Title: Transport-neutral query descriptor handed to executors
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from viewengine.schemas.filters import FilterOperator, PropertyType
from viewengine.schemas.view import SavedViewOut, SortDirection


class Predicate(BaseModel):
    """One compiled comparison. ``property_type`` tags how ``value`` is shaped:

    text -> str, number -> float, date -> date (or an aware datetime cut-off
    for relative operators), enum/status/person -> list[str], boolean -> None.
    ``is_between`` carries ``[low, high]``.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    operator: FilterOperator
    value: Any = None
    property_type: PropertyType


class QueryDescriptor(BaseModel):
    """OR of AND-branches. An empty branch is always true."""

    branches: List[List[Predicate]] = Field(default_factory=list)

    @property
    def matches_all(self) -> bool:
        return not self.branches or any(len(b) == 0 for b in self.branches)


class QueryRequest(BaseModel):
    filters: QueryDescriptor = Field(default_factory=QueryDescriptor)
    sort_field: Optional[str] = None
    sort_direction: SortDirection = SortDirection.asc
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=25, ge=1)
    search_query: str = ""
    search_fields: List[str] = Field(default_factory=list)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class QueryResult(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = 0


class ApplyViewOut(BaseModel):
    view: SavedViewOut
    query: QueryRequest
    invalid_conditions: List[str] = Field(default_factory=list)
