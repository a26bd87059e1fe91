# File: /viewengine/models/saved_view.py | Version: 1.0 | Title: SQLAlchemy model for persisted Saved Views
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from viewengine.db.base_class import Base


def gen_uuid() -> str:
    return str(uuid4())


class SavedView(Base):
    __tablename__ = "saved_views"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    owner_id: Mapped[str] = mapped_column(String, nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    visibility: Mapped[str] = mapped_column(String(20), nullable=False, default="private")

    # FilterGroupSet / ColumnState as plain JSON documents
    filters: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    column_state: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    sort_column_id: Mapped[Optional[str]] = mapped_column(String(100))
    sort_direction: Mapped[str] = mapped_column(String(4), nullable=False, default="asc")
    view_mode: Mapped[str] = mapped_column(String(10), nullable=False, default="table")
    board_group_by: Mapped[Optional[str]] = mapped_column(String(100))

    pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    color: Mapped[Optional[str]] = mapped_column(String(20))
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    cached_record_count: Mapped[Optional[int]] = mapped_column(Integer)
    cached_record_count_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    use_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        Index("ix_saved_views_owner_entity", "owner_id", "entity_type"),
        Index("ix_saved_views_entity_visibility", "entity_type", "visibility"),
    )

    @property
    def sort_state(self) -> Dict[str, Any]:
        # SavedViewOut reads this through from_attributes
        return {"column_id": self.sort_column_id, "direction": self.sort_direction or "asc"}
