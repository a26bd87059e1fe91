# File: /viewengine/engine/columns.py | Version: 1.0 | Title: Column & sort state rules (primary column, freeze, widths)
from __future__ import annotations

import logging
from typing import Optional

from viewengine.core.config import settings
from viewengine.core.exceptions import ValidationError
from viewengine.engine.ordering import move
from viewengine.schemas.module_config import ModuleViewConfig
from viewengine.schemas.view import ColumnState, SortState

log = logging.getLogger(__name__)


def _max_frozen(max_frozen: Optional[int]) -> int:
    return settings.MAX_FROZEN_COLUMNS if max_frozen is None else max_frozen


def default_column_state(config: ModuleViewConfig, *, max_frozen: Optional[int] = None) -> ColumnState:
    visible = config.default_visible_column_ids()
    frozen = min(settings.DEFAULT_FROZEN_COLUMNS, len(visible), _max_frozen(max_frozen))
    return ColumnState(visible_column_ids=visible, frozen_count=frozen)


def validate_column_state(
    state: ColumnState, config: ModuleViewConfig, *, max_frozen: Optional[int] = None
) -> None:
    ids = state.visible_column_ids
    if not ids:
        raise ValidationError("At least the primary column must stay visible.")
    if len(set(ids)) != len(ids):
        raise ValidationError("A column can only be shown once.")
    for cid in ids:
        if config.get_property(cid) is None:
            raise ValidationError(f"Unknown column {cid!r} for {config.entity_type}.")
    if ids[0] != config.primary_id:
        raise ValidationError(f"Column {config.primary_id!r} must stay first.")

    limit = _max_frozen(max_frozen)
    if not 0 <= state.frozen_count <= limit:
        raise ValidationError(f"Frozen columns must be between 0 and {limit}.")
    if state.frozen_count > len(ids):
        raise ValidationError("Cannot freeze more columns than are visible.")

    for cid, width in state.column_widths.items():
        col = config.get_property(cid)
        if col is None:
            raise ValidationError(f"Unknown column {cid!r} in widths.")
        if width < col.min_width:
            raise ValidationError(f"Column {col.display_name!r} cannot be narrower than {col.min_width}px.")


def normalize_column_state(
    state: Optional[ColumnState], config: ModuleViewConfig, *, max_frozen: Optional[int] = None
) -> ColumnState:
    """Repair a stored column state against the current config instead of rejecting it."""
    if state is None or not state.visible_column_ids:
        return default_column_state(config, max_frozen=max_frozen)

    ids = []
    for cid in state.visible_column_ids:
        if cid != config.primary_id and cid not in ids and config.get_property(cid) is not None:
            ids.append(cid)
    ids.insert(0, config.primary_id)

    widths = {}
    for cid, width in state.column_widths.items():
        col = config.get_property(cid)
        if col is not None:
            widths[cid] = max(width, col.min_width)

    frozen = min(max(state.frozen_count, 0), _max_frozen(max_frozen), len(ids))
    fixed = ColumnState(visible_column_ids=ids, frozen_count=frozen, column_widths=widths)
    if fixed != state:
        log.debug("Normalized column state for %s", config.entity_type)
    return fixed


def set_column_visible(
    state: ColumnState, config: ModuleViewConfig, column_id: str, visible: bool
) -> ColumnState:
    if config.get_property(column_id) is None:
        raise ValidationError(f"Unknown column {column_id!r} for {config.entity_type}.")
    ids = list(state.visible_column_ids)
    if visible:
        if column_id not in ids:
            ids.append(column_id)
    else:
        if column_id == config.primary_id:
            raise ValidationError(f"Column {column_id!r} is the primary column and cannot be hidden.")
        if column_id in ids:
            ids.remove(column_id)
    return state.model_copy(
        update={"visible_column_ids": ids, "frozen_count": min(state.frozen_count, len(ids))}
    )


def move_column(
    state: ColumnState, config: ModuleViewConfig, from_index: int, to_index: int
) -> ColumnState:
    ids = move(state.visible_column_ids, from_index, to_index)
    if ids[0] != config.primary_id:
        raise ValidationError(f"Column {config.primary_id!r} must stay first.")
    return state.model_copy(update={"visible_column_ids": ids})


def set_frozen_count(
    state: ColumnState, count: int, *, max_frozen: Optional[int] = None
) -> ColumnState:
    limit = _max_frozen(max_frozen)
    if not 0 <= count <= limit:
        raise ValidationError(f"Frozen columns must be between 0 and {limit}.")
    if count > len(state.visible_column_ids):
        raise ValidationError("Cannot freeze more columns than are visible.")
    return state.model_copy(update={"frozen_count": count})


def resize_column(
    state: ColumnState, config: ModuleViewConfig, column_id: str, width: int
) -> ColumnState:
    col = config.get_property(column_id)
    if col is None:
        raise ValidationError(f"Unknown column {column_id!r} for {config.entity_type}.")
    widths = dict(state.column_widths)
    widths[column_id] = max(int(width), col.min_width)
    return state.model_copy(update={"column_widths": widths})


def validate_sort(sort: SortState, config: ModuleViewConfig) -> None:
    if sort.column_id is None:
        return
    col = config.get_property(sort.column_id)
    if col is None:
        raise ValidationError(f"Unknown sort column {sort.column_id!r}.")
    if not col.sortable:
        raise ValidationError(f"Column {col.display_name!r} is not sortable.")


def normalize_sort(sort: Optional[SortState], config: ModuleViewConfig) -> SortState:
    if sort is None:
        return SortState()
    try:
        validate_sort(sort, config)
    except ValidationError:
        log.debug("Dropping invalid sort %s for %s", sort.column_id, config.entity_type)
        return SortState()
    return sort
