# File: /viewengine/engine/board.py | Version: 1.0 | Title: Board-mode lanes over executor records
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from viewengine.core.exceptions import ValidationError
from viewengine.engine.evaluator import resolve
from viewengine.schemas.module_config import ModuleViewConfig

NO_VALUE = "No Value"


class BoardLane(BaseModel):
    value: Optional[str] = None  # None is the "No Value" lane
    label: str
    color: Optional[str] = None
    records: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)


def resolve_group_by(config: ModuleViewConfig, group_by: Optional[str]) -> str:
    if config.board_config is None:
        raise ValidationError(f"{config.entity_name} has no board mode.")
    group_by = group_by or config.board_config.default_group_by
    if group_by not in config.board_config.groupable_by_property_ids:
        raise ValidationError(f"Cannot group {config.entity_name} by {group_by!r}.")
    return group_by


def _lane_key(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        value = value.get("id", value.get("value"))
    if value in (None, ""):
        return None
    return str(value)


def group_records(
    records: Iterable[Dict[str, Any]],
    config: ModuleViewConfig,
    group_by: Optional[str] = None,
) -> List[BoardLane]:
    """
    Lanes follow the property's configured options (empty lanes included),
    then values seen in the records but not configured, then "No Value".
    Records keep the executor's order inside each lane.
    """
    prop = config.get_property(resolve_group_by(config, group_by))

    lanes: Dict[Optional[str], BoardLane] = {}
    for opt in prop.options:
        lanes[opt.value] = BoardLane(value=opt.value, label=opt.label, color=opt.color)
    no_value = BoardLane(value=None, label=NO_VALUE)

    for record in records:
        key = _lane_key(resolve(record, prop.field))
        if key is None:
            no_value.records.append(record)
            continue
        if key not in lanes:
            lanes[key] = BoardLane(value=key, label=key)
        lanes[key].records.append(record)

    return list(lanes.values()) + [no_value]
