# File: /tests/test_columns.py
import pytest

from viewengine.core.exceptions import ValidationError
from viewengine.engine.columns import (
    default_column_state,
    move_column,
    normalize_column_state,
    normalize_sort,
    resize_column,
    set_column_visible,
    set_frozen_count,
    validate_column_state,
    validate_sort,
)
from viewengine.schemas.view import ColumnState, SortDirection, SortState


def test_default_state_starts_with_primary(tickets_config):
    state = default_column_state(tickets_config)
    assert state.visible_column_ids == ["number", "title", "status", "createdAt"]
    assert state.frozen_count == 1
    validate_column_state(state, tickets_config)


def test_primary_column_cannot_be_hidden_or_displaced(tickets_config):
    state = default_column_state(tickets_config)
    with pytest.raises(ValidationError):
        set_column_visible(state, tickets_config, "number", False)
    with pytest.raises(ValidationError):
        move_column(state, tickets_config, 0, 2)
    with pytest.raises(ValidationError):
        move_column(state, tickets_config, 2, 0)
    moved = move_column(state, tickets_config, 3, 1)
    assert moved.visible_column_ids == ["number", "createdAt", "title", "status"]


def test_show_and_hide(tickets_config):
    state = default_column_state(tickets_config)
    shown = set_column_visible(state, tickets_config, "amount", True)
    assert shown.visible_column_ids[-1] == "amount"
    hidden = set_column_visible(shown, tickets_config, "title", False)
    assert "title" not in hidden.visible_column_ids
    with pytest.raises(ValidationError):
        set_column_visible(state, tickets_config, "ghost", True)


def test_frozen_count_limits(tickets_config):
    state = ColumnState(visible_column_ids=["number", "title"], frozen_count=0)
    assert set_frozen_count(state, 2).frozen_count == 2
    with pytest.raises(ValidationError):
        set_frozen_count(state, 3)
    with pytest.raises(ValidationError):
        set_frozen_count(state, 4)
    with pytest.raises(ValidationError):
        validate_column_state(state.model_copy(update={"frozen_count": 3}), tickets_config)


def test_resize_clamps_to_min_width(tickets_config):
    state = resize_column(default_column_state(tickets_config), tickets_config, "title", 10)
    assert state.column_widths["title"] == 60
    with pytest.raises(ValidationError):
        validate_column_state(state.model_copy(update={"column_widths": {"title": 10}}), tickets_config)


def test_validate_rejects_malformed_states(tickets_config):
    for ids in ([], ["title", "number"], ["number", "number"], ["number", "ghost"]):
        with pytest.raises(ValidationError):
            validate_column_state(ColumnState(visible_column_ids=ids), tickets_config)


def test_normalize_repairs_stored_state(tickets_config):
    stored = ColumnState(
        visible_column_ids=["title", "ghost", "number", "title"],
        frozen_count=3,
        column_widths={"title": 5, "ghost": 200},
    )
    fixed = normalize_column_state(stored, tickets_config)
    assert fixed.visible_column_ids == ["number", "title"]
    assert fixed.frozen_count == 2
    assert fixed.column_widths == {"title": 60}
    assert normalize_column_state(None, tickets_config) == default_column_state(tickets_config)


def test_sort_rules(tickets_config):
    validate_sort(SortState(column_id="createdAt", direction=SortDirection.desc), tickets_config)
    with pytest.raises(ValidationError):
        validate_sort(SortState(column_id="urgent"), tickets_config)
    assert normalize_sort(SortState(column_id="ghost"), tickets_config) == SortState()
