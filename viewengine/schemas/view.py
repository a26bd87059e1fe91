# File: /viewengine/schemas/view.py | Version: 1.0 | Title: Pydantic v2 schemas for Saved Views (ConfigDict + from_attributes)
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from viewengine.schemas.filters import FilterGroup


class Visibility(str, Enum):
    private = "private"
    team = "team"
    everyone = "everyone"


class ViewMode(str, Enum):
    table = "table"
    board = "board"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class ColumnState(BaseModel):
    visible_column_ids: List[str] = Field(default_factory=list)
    frozen_count: int = Field(default=0, ge=0)
    column_widths: Dict[str, int] = Field(default_factory=dict)


class SortState(BaseModel):
    column_id: Optional[str] = None
    direction: SortDirection = SortDirection.asc


class SavedViewBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    visibility: Visibility = Visibility.private
    filters: List[FilterGroup] = Field(default_factory=list)
    column_state: Optional[ColumnState] = None
    sort_state: SortState = Field(default_factory=SortState)
    view_mode: ViewMode = ViewMode.table
    board_group_by: Optional[str] = None
    pinned: bool = False
    is_default: bool = False
    color: Optional[str] = None


class SavedViewCreate(SavedViewBase):
    entity_type: str = Field(min_length=1, max_length=50)


class SavedViewUpdate(BaseModel):
    # Only fields present in the payload are applied (exclude_unset)
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    visibility: Optional[Visibility] = None
    filters: Optional[List[FilterGroup]] = None
    column_state: Optional[ColumnState] = None
    sort_state: Optional[SortState] = None
    view_mode: Optional[ViewMode] = None
    board_group_by: Optional[str] = None
    pinned: Optional[bool] = None
    is_default: Optional[bool] = None
    color: Optional[str] = None


class SavedViewOut(SavedViewBase):
    id: str
    entity_type: str
    owner_id: str
    display_order: int = 0
    is_system: bool = False
    cached_record_count: Optional[int] = None
    cached_record_count_at: Optional[datetime] = None
    use_count: int = 0
    last_used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Pydantic v2 style
    model_config = ConfigDict(from_attributes=True)


class CloneRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)


class ReorderRequest(BaseModel):
    entity_type: str
    ordered_ids: List[str] = Field(min_length=1)
