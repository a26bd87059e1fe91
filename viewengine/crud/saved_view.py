# File: /viewengine/crud/saved_view.py | Version: 1.0 | Title: Saved View persistence rules (owner checks, fallback, ordering, counts)
from __future__ import annotations

import logging
from copy import deepcopy
from datetime import UTC, date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from viewengine.core.exceptions import (
    FallbackViewRequired,
    NotFoundError,
    PermissionDenied,
    ValidationError,
)
from viewengine.crud.record_query import get_record_counter
from viewengine.engine.board import resolve_group_by
from viewengine.engine.columns import (
    default_column_state,
    normalize_column_state,
    normalize_sort,
    validate_column_state,
    validate_sort,
)
from viewengine.engine.compiler import build_query_request, sanitize_filters
from viewengine.engine.filter_model import FilterModel
from viewengine.models.saved_view import SavedView
from viewengine.modules import get_module_config
from viewengine.modules._base import CURRENT_USER, TODAY
from viewengine.schemas._base import gen_id
from viewengine.schemas.filters import FilterGroup, filter_group_set_adapter
from viewengine.schemas.module_config import ModuleViewConfig
from viewengine.schemas.query import ApplyViewOut
from viewengine.schemas.view import (
    ColumnState,
    SavedViewCreate,
    SavedViewOut,
    SavedViewUpdate,
    SortState,
    ViewMode,
    Visibility,
)

log = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------
def _dump_filters(groups: List[FilterGroup]) -> List[Dict[str, Any]]:
    return filter_group_set_adapter.dump_python(groups, mode="json")


def _validate_payload(
    config: ModuleViewConfig,
    filters: List[FilterGroup],
    column_state: ColumnState,
    sort: SortState,
    view_mode: ViewMode,
    board_group_by: Optional[str],
) -> Optional[str]:
    FilterModel(config).validate_groups(filters)
    validate_column_state(column_state, config)
    validate_sort(sort, config)
    if view_mode == ViewMode.board or board_group_by is not None:
        return resolve_group_by(config, board_group_by)
    return None


def _own_views(db: Session, owner_id: str, entity_type: str) -> List[SavedView]:
    stmt = (
        select(SavedView)
        .where(SavedView.owner_id == owner_id, SavedView.entity_type == entity_type)
        .order_by(SavedView.display_order.asc(), SavedView.created_at.asc())
    )
    return list(db.execute(stmt).scalars().all())


def _next_display_order(db: Session, owner_id: str, entity_type: str) -> int:
    stmt = select(func.max(SavedView.display_order)).where(
        SavedView.owner_id == owner_id, SavedView.entity_type == entity_type
    )
    current = db.execute(stmt).scalar()
    return 0 if current is None else current + 1


def _unset_other_defaults(db: Session, view: SavedView) -> None:
    for other in _own_views(db, view.owner_id, view.entity_type):
        if other.id != view.id and other.is_default:
            other.is_default = False


def _renumber(db: Session, owner_id: str, entity_type: str) -> None:
    for i, v in enumerate(_own_views(db, owner_id, entity_type)):
        v.display_order = i


def _resolve_placeholders(value: Any, user_id: str, today: date) -> Any:
    if isinstance(value, list):
        return [_resolve_placeholders(v, user_id, today) for v in value]
    if value == CURRENT_USER:
        return user_id
    if value == TODAY:
        return today.isoformat()
    return value


def to_out(view: SavedView) -> SavedViewOut:
    return SavedViewOut.model_validate(view)


# ----------------------------
# Default views
# ----------------------------
def ensure_default_views(db: Session, owner_id: str, config: ModuleViewConfig) -> bool:
    """Give a user who owns no views of this type the module's default set."""
    if _own_views(db, owner_id, config.entity_type):
        return False

    today = datetime.now(UTC).date()
    for i, dv in enumerate(config.default_views):
        groups = []
        for g in dv.filters:
            conditions = [
                c.model_copy(
                    update={
                        "id": gen_id(),
                        "value": _resolve_placeholders(c.value, owner_id, today),
                        "secondary_value": _resolve_placeholders(c.secondary_value, owner_id, today),
                    }
                )
                for c in g.conditions
            ]
            groups.append(FilterGroup(conditions=conditions))
        columns = (
            normalize_column_state(ColumnState(visible_column_ids=dv.columns, frozen_count=1), config)
            if dv.columns
            else default_column_state(config)
        )
        db.add(
            SavedView(
                entity_type=config.entity_type,
                owner_id=owner_id,
                name=dv.name,
                description=dv.description,
                visibility=Visibility.private.value,
                filters=_dump_filters(groups),
                column_state=columns.model_dump(mode="json"),
                sort_column_id=dv.sort.column_id,
                sort_direction=dv.sort.direction.value,
                view_mode=dv.view_mode.value,
                pinned=dv.is_pinned,
                is_default=(i == 0),
                is_system=True,
                display_order=i,
            )
        )
    db.commit()
    log.info("Created %d default %s views for %s", len(config.default_views), config.entity_type, owner_id)
    return True


# ----------------------------
# Reads
# ----------------------------
def list_views(db: Session, user_id: str, entity_type: str) -> List[SavedView]:
    """The caller's own views in display order, then views others share."""
    config = get_module_config(entity_type)
    ensure_default_views(db, user_id, config)

    shared_stmt = (
        select(SavedView)
        .where(
            SavedView.entity_type == entity_type,
            SavedView.owner_id != user_id,
            SavedView.visibility != Visibility.private.value,
        )
        .order_by(SavedView.name.asc(), SavedView.id.asc())
    )
    return _own_views(db, user_id, entity_type) + list(db.execute(shared_stmt).scalars().all())


def get_view(db: Session, view_id: str) -> Optional[SavedView]:
    return db.get(SavedView, view_id)


def get_visible_view(db: Session, user_id: str, view_id: str) -> SavedView:
    v = get_view(db, view_id)
    if v is None or (v.owner_id != user_id and v.visibility == Visibility.private.value):
        # private views of other users are indistinguishable from missing ones
        raise NotFoundError("View not found", view_id=view_id)
    return v


def get_owned_view(db: Session, user_id: str, view_id: str, action: str = "modify") -> SavedView:
    v = get_visible_view(db, user_id, view_id)
    if v.owner_id != user_id:
        log.info("User %s tried to %s view %s owned by %s", user_id, action, view_id, v.owner_id)
        raise PermissionDenied(
            f"You can't {action} {v.name!r} because you don't own it. Clone it to make your own copy.",
            view_id=view_id,
        )
    return v


# ----------------------------
# Writes
# ----------------------------
def create_view(db: Session, user_id: str, data: SavedViewCreate) -> SavedView:
    config = get_module_config(data.entity_type)
    columns = data.column_state or default_column_state(config)
    group_by = _validate_payload(
        config, data.filters, columns, data.sort_state, data.view_mode, data.board_group_by
    )

    v = SavedView(
        entity_type=data.entity_type,
        owner_id=user_id,
        name=data.name,
        description=data.description,
        visibility=data.visibility.value,
        filters=_dump_filters(data.filters),
        column_state=columns.model_dump(mode="json"),
        sort_column_id=data.sort_state.column_id,
        sort_direction=data.sort_state.direction.value,
        view_mode=data.view_mode.value,
        board_group_by=group_by,
        pinned=data.pinned,
        is_default=data.is_default,
        color=data.color,
        display_order=_next_display_order(db, user_id, data.entity_type),
    )
    db.add(v)
    db.flush()
    if v.is_default:
        _unset_other_defaults(db, v)
    db.commit()
    db.refresh(v)
    return v


def update_view(db: Session, user_id: str, view_id: str, data: SavedViewUpdate) -> SavedView:
    v = get_owned_view(db, user_id, view_id, "update")
    config = get_module_config(v.entity_type)
    changes = data.model_dump(exclude_unset=True)

    # Stored fields the module no longer accepts are repaired, not rejected
    current = to_out(v)
    filters = data.filters if data.filters is not None else sanitize_filters(current.filters, config)[0]
    columns = data.column_state if data.column_state is not None else (
        normalize_column_state(current.column_state, config)
    )
    sort = data.sort_state if data.sort_state is not None else normalize_sort(current.sort_state, config)
    mode = data.view_mode if data.view_mode is not None else current.view_mode
    group_by = changes.get("board_group_by", current.board_group_by)
    group_by = _validate_payload(config, filters, columns, sort, mode, group_by)

    if "name" in changes and data.name is not None:
        v.name = data.name
    if "description" in changes:
        v.description = data.description
    if data.visibility is not None:
        v.visibility = data.visibility.value
    if "color" in changes:
        v.color = data.color
    if data.pinned is not None:
        v.pinned = data.pinned
    v.filters = _dump_filters(filters)
    v.column_state = columns.model_dump(mode="json")
    v.sort_column_id = sort.column_id
    v.sort_direction = sort.direction.value
    v.view_mode = mode.value
    v.board_group_by = group_by
    if data.is_default is not None:
        v.is_default = data.is_default
        if data.is_default:
            _unset_other_defaults(db, v)

    db.commit()
    db.refresh(v)
    return v


def delete_view(db: Session, user_id: str, view_id: str) -> None:
    v = get_owned_view(db, user_id, view_id, "delete")
    if v.pinned or v.is_default:
        others = [
            o for o in _own_views(db, user_id, v.entity_type)
            if o.id != v.id and (o.pinned or o.is_default)
        ]
        if not others:
            raise FallbackViewRequired(
                f"{v.name!r} is your last pinned view for {v.entity_type}; pin another view before deleting it.",
                view_id=view_id,
            )
    owner_id, entity_type = v.owner_id, v.entity_type
    db.delete(v)
    db.flush()
    _renumber(db, owner_id, entity_type)
    db.commit()


def clone_view(db: Session, user_id: str, view_id: str, name: Optional[str] = None) -> SavedView:
    src = get_visible_view(db, user_id, view_id)
    copy = SavedView(
        entity_type=src.entity_type,
        owner_id=user_id,
        name=name or f"{src.name} (Copy)",
        description=src.description,
        visibility=Visibility.private.value,
        filters=deepcopy(src.filters or []),
        column_state=deepcopy(src.column_state),
        sort_column_id=src.sort_column_id,
        sort_direction=src.sort_direction,
        view_mode=src.view_mode,
        board_group_by=src.board_group_by,
        pinned=False,
        color=src.color,
        display_order=_next_display_order(db, user_id, src.entity_type),
    )
    db.add(copy)
    db.commit()
    db.refresh(copy)
    return copy


def reorder_views(db: Session, user_id: str, entity_type: str, ordered_ids: List[str]) -> List[SavedView]:
    """All-or-nothing: the ids must be exactly the caller's views of this type."""
    own = _own_views(db, user_id, entity_type)
    by_id = {v.id: v for v in own}

    foreign = [i for i in ordered_ids if i not in by_id]
    for vid in foreign:
        other = get_view(db, vid)
        if other is not None and other.entity_type == entity_type:
            get_owned_view(db, user_id, vid, "reorder")
    if foreign or len(ordered_ids) != len(set(ordered_ids)) or set(ordered_ids) != set(by_id):
        raise ValidationError("Reorder must list each of your views exactly once.")

    try:
        for i, vid in enumerate(ordered_ids):
            by_id[vid].display_order = i
        db.commit()
    except Exception:
        db.rollback()
        raise
    return _own_views(db, user_id, entity_type)


def refresh_record_count(db: Session, user_id: str, view_id: str) -> SavedView:
    v = get_visible_view(db, user_id, view_id)
    counter = get_record_counter(v.entity_type)
    if counter is None:
        raise ValidationError(f"No record source is registered for {v.entity_type}.")
    config = get_module_config(v.entity_type)
    filters, _ = sanitize_filters(v.filters or [], config)
    request = build_query_request(filters, config)

    v.cached_record_count = counter(db, request)
    v.cached_record_count_at = datetime.now(UTC)
    db.commit()
    db.refresh(v)
    return v


def apply_view(db: Session, user_id: str, view_id: str, page: int = 1, page_size: Optional[int] = None) -> ApplyViewOut:
    """Track usage and compile the stored state, dropping what no longer fits the module."""
    v = get_visible_view(db, user_id, view_id)
    config = get_module_config(v.entity_type)
    filters, problems = sanitize_filters(v.filters or [], config)
    sort = normalize_sort(SortState.model_validate(v.sort_state), config)

    v.use_count = (v.use_count or 0) + 1
    v.last_used_at = datetime.now(UTC)
    db.commit()
    db.refresh(v)

    request = build_query_request(filters, config, sort=sort, page=page, page_size=page_size)
    return ApplyViewOut(view=to_out(v), query=request, invalid_conditions=problems)
