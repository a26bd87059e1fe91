# File: /tests/test_module_configs.py
import pytest
from pydantic import ValidationError as SchemaError

from viewengine.core.exceptions import NotFoundError
from viewengine.crud.saved_view import ensure_default_views, list_views, to_out
from viewengine.engine.columns import validate_column_state
from viewengine.engine.filter_model import FilterModel
from viewengine.modules import get_module_config, list_module_configs
from viewengine.modules._base import column
from viewengine.schemas.module_config import BoardConfig, ModuleViewConfig


@pytest.mark.parametrize("config", list_module_configs(), ids=lambda c: c.entity_type)
def test_default_views_materialize_cleanly(db_session, config):
    assert ensure_default_views(db_session, "u1", config)
    assert not ensure_default_views(db_session, "u1", config)

    views = [to_out(v) for v in list_views(db_session, "u1", config.entity_type)]
    assert len(views) == len(config.default_views)
    assert [v.is_default for v in views].count(True) == 1
    model = FilterModel(config)
    for v in views:
        model.validate_groups(v.filters)
        validate_column_state(v.column_state, config)
        for g in v.filters:
            for c in g.conditions:
                assert "{{" not in str(c.value)


@pytest.mark.parametrize("config", list_module_configs(), ids=lambda c: c.entity_type)
def test_primary_column_is_visible_by_default(config):
    assert config.default_visible_column_ids()[0] == config.primary_id
    assert config.get_property(config.primary_id).type.value == "text"


def test_unknown_module():
    with pytest.raises(NotFoundError):
        get_module_config("widgets")


def test_config_references_must_resolve():
    with pytest.raises(SchemaError):
        ModuleViewConfig(
            entity_type="x",
            entity_name="X",
            primary_column_id="missing",
            columns=[column("name", "Name")],
        )
    with pytest.raises(SchemaError):
        ModuleViewConfig(
            entity_type="x",
            entity_name="X",
            columns=[column("name", "Name", filterable=False)],
            quick_filter_property_ids=["name"],
        )
    with pytest.raises(SchemaError):
        BoardConfig(groupable_by_property_ids=["status"], default_group_by="priority")
