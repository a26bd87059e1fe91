# File: /viewengine/schemas/module_config.py | Version: 1.0 | Title: Module View Configuration (one per entity type)
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from viewengine.schemas.filters import FilterGroup, PropertyType
from viewengine.schemas.view import SortState, ViewMode


class PropertyOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    color: Optional[str] = None


class PropertyDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    type: PropertyType = PropertyType.text
    sortable: bool = True
    filterable: bool = True
    group: Optional[str] = None
    # Dotted path into a record when the value is nested, e.g. "assignee.id"
    accessor: Optional[str] = None
    options: List[PropertyOption] = Field(default_factory=list)

    @property
    def field(self) -> str:
        return self.accessor or self.id

    def option_values(self) -> List[str]:
        return [o.value for o in self.options]


class ColumnDescriptor(PropertyDescriptor):
    width: int = 150
    min_width: int = 60
    default_visible: bool = False


class DefaultView(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    filters: List[FilterGroup] = Field(default_factory=list)
    sort: SortState = Field(default_factory=SortState)
    columns: Optional[List[str]] = None
    is_pinned: bool = True
    view_mode: ViewMode = ViewMode.table


class BoardConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    groupable_by_property_ids: List[str]
    default_group_by: str

    @model_validator(mode="after")
    def default_is_groupable(self) -> "BoardConfig":
        if self.default_group_by not in self.groupable_by_property_ids:
            raise ValueError("default_group_by must be one of groupable_by_property_ids")
        return self


class ModuleViewConfig(BaseModel):
    """Everything entity-specific the engine needs. The engine only reads it."""

    model_config = ConfigDict(frozen=True)

    entity_type: str
    entity_name: str
    primary_column_id: Optional[str] = None
    columns: List[ColumnDescriptor] = Field(min_length=1)
    quick_filter_property_ids: List[str] = Field(default_factory=list)
    searchable_property_ids: Optional[List[str]] = None
    default_views: List[DefaultView] = Field(default_factory=list)
    bulk_action_ids: List[str] = Field(default_factory=list)
    board_config: Optional[BoardConfig] = None

    @model_validator(mode="after")
    def references_resolve(self) -> "ModuleViewConfig":
        ids = [c.id for c in self.columns]
        if len(set(ids)) != len(ids):
            raise ValueError(f"{self.entity_type}: duplicate column ids")
        known = set(ids)

        if self.primary_column_id is not None and self.primary_column_id not in known:
            raise ValueError(f"{self.entity_type}: unknown primary column {self.primary_column_id}")
        for pid in self.quick_filter_property_ids:
            prop = self.get_property(pid)
            if prop is None or not prop.filterable:
                raise ValueError(f"{self.entity_type}: quick filter {pid} is not a filterable property")
        for pid in self.searchable_property_ids or []:
            if pid not in known:
                raise ValueError(f"{self.entity_type}: unknown searchable property {pid}")
        if self.board_config is not None:
            for pid in self.board_config.groupable_by_property_ids:
                if pid not in known:
                    raise ValueError(f"{self.entity_type}: unknown board group-by property {pid}")
        for view in self.default_views:
            for cid in view.columns or []:
                if cid not in known:
                    raise ValueError(f"{self.entity_type}: default view {view.name!r} lists unknown column {cid}")
        return self

    @property
    def primary_id(self) -> str:
        return self.primary_column_id or self.columns[0].id

    def get_property(self, property_id: Optional[str]) -> Optional[ColumnDescriptor]:
        if property_id is None:
            return None
        for c in self.columns:
            if c.id == property_id:
                return c
        return None

    def default_visible_column_ids(self) -> List[str]:
        visible = [c.id for c in self.columns if c.default_visible and c.id != self.primary_id]
        return [self.primary_id] + visible

    def search_fields(self) -> List[str]:
        if self.searchable_property_ids is not None:
            return [self.get_property(pid).field for pid in self.searchable_property_ids]
        return [c.field for c in self.columns if c.type == PropertyType.text]
