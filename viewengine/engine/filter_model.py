# File: /viewengine/engine/filter_model.py | Version: 1.0 | Title: Filter Model (OR of AND-groups) with validated mutations
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from viewengine.core.config import settings
from viewengine.core.exceptions import ValidationError
from viewengine.engine.catalog import (
    coerce_value,
    is_legal,
    label_for,
    operators_for,
    value_kind,
)
from viewengine.schemas._base import gen_id
from viewengine.schemas.filters import (
    DateUnit,
    FilterCondition,
    FilterGroup,
    FilterOperator,
)
from viewengine.schemas.module_config import ModuleViewConfig

log = logging.getLogger(__name__)

_PATCHABLE = {"property_id", "operator", "value", "secondary_value", "unit"}


class FilterModel:
    """
    Holds a structurally valid FilterGroupSet for one module.

    Every mutation works on a copy and only replaces the held groups once the
    result validates, so a rejected mutation leaves the model unchanged.
    """

    def __init__(
        self,
        config: ModuleViewConfig,
        groups: Optional[Iterable[FilterGroup]] = None,
        *,
        max_groups: Optional[int] = None,
        max_conditions: Optional[int] = None,
    ):
        self.config = config
        self.max_groups = max_groups if max_groups is not None else settings.MAX_FILTER_GROUPS
        self.max_conditions = (
            max_conditions if max_conditions is not None else settings.MAX_CONDITIONS_PER_GROUP
        )
        self._groups: List[FilterGroup] = []
        if groups:
            self.replace(groups)

    # ----------------------------
    # Read access
    # ----------------------------
    @property
    def groups(self) -> List[FilterGroup]:
        return [g.model_copy(deep=True) for g in self._groups]

    def is_empty(self) -> bool:
        return not self._groups

    def __len__(self) -> int:
        return len(self._groups)

    # ----------------------------
    # Mutations
    # ----------------------------
    def add_group(self) -> FilterGroup:
        if len(self._groups) >= self.max_groups:
            raise ValidationError(
                f"A view can combine at most {self.max_groups} filter groups.",
                rule="max_groups",
            )
        group = FilterGroup()
        self._groups = self.groups + [group]
        return group.model_copy(deep=True)

    def add_condition(self, group_id: str) -> FilterCondition:
        groups = self.groups
        group = groups[self._group_index(group_id)]
        if len(group.conditions) >= self.max_conditions:
            raise ValidationError(
                f"A filter group can hold at most {self.max_conditions} conditions.",
                rule="max_conditions",
            )
        condition = FilterCondition()
        group.conditions.append(condition)
        self._groups = groups
        return condition.model_copy(deep=True)

    def update_condition(
        self, group_id: str, condition_id: str, patch: Mapping[str, Any]
    ) -> FilterCondition:
        unknown = set(patch) - _PATCHABLE
        if unknown:
            raise ValidationError(f"Cannot update condition field(s): {', '.join(sorted(unknown))}")

        groups = self.groups
        group = groups[self._group_index(group_id)]
        idx = self._condition_index(group, condition_id)
        updated = self._apply_patch(group.conditions[idx], patch)
        self.check_condition(updated)
        group.conditions[idx] = updated
        self._groups = groups
        return updated.model_copy(deep=True)

    def remove_condition(self, group_id: str, condition_id: str) -> None:
        # The group stays even when it becomes empty; it is an OR branch placeholder.
        groups = self.groups
        group = groups[self._group_index(group_id)]
        idx = self._condition_index(group, condition_id)
        del group.conditions[idx]
        self._groups = groups

    def duplicate_group(self, group_id: str) -> FilterGroup:
        if len(self._groups) >= self.max_groups:
            raise ValidationError(
                f"A view can combine at most {self.max_groups} filter groups.",
                rule="max_groups",
            )
        groups = self.groups
        idx = self._group_index(group_id)
        source = groups[idx]
        clone = FilterGroup(
            conditions=[c.model_copy(update={"id": gen_id()}, deep=True) for c in source.conditions]
        )
        groups.insert(idx + 1, clone)
        self._groups = groups
        return clone.model_copy(deep=True)

    def remove_group(self, group_id: str) -> None:
        groups = self.groups
        del groups[self._group_index(group_id)]
        self._groups = groups

    def clear(self) -> None:
        self._groups = []

    def replace(self, groups: Iterable[FilterGroup]) -> None:
        candidate = [FilterGroup.model_validate(g).model_copy(deep=True) for g in groups]
        self.validate_groups(candidate)
        self._groups = candidate

    # ----------------------------
    # Validation
    # ----------------------------
    def validate_groups(self, groups: List[FilterGroup]) -> None:
        if len(groups) > self.max_groups:
            raise ValidationError(
                f"A view can combine at most {self.max_groups} filter groups.",
                rule="max_groups",
            )
        seen = set()
        for group in groups:
            if len(group.conditions) > self.max_conditions:
                raise ValidationError(
                    f"A filter group can hold at most {self.max_conditions} conditions.",
                    rule="max_conditions",
                )
            for item_id in [group.id] + [c.id for c in group.conditions]:
                if item_id in seen:
                    raise ValidationError(f"Duplicate filter id {item_id!r}.", rule="unique_ids")
                seen.add(item_id)
            for condition in group.conditions:
                self.check_condition(condition)

    def check_condition(self, condition: FilterCondition) -> None:
        """Reject a condition whose operator/value do not fit its property."""
        if condition.property_id is None:
            if condition.operator is not None or condition.value is not None:
                raise ValidationError("Select a property before choosing an operator or value.")
            return

        prop = self.config.get_property(condition.property_id)
        if prop is None:
            raise ValidationError(
                f"Unknown property {condition.property_id!r} for {self.config.entity_type}."
            )
        if not prop.filterable:
            raise ValidationError(f"Property {prop.display_name!r} cannot be filtered.")

        op = condition.operator
        if op is None:
            if condition.value is not None or condition.secondary_value is not None:
                raise ValidationError("Choose an operator before entering a value.")
            return
        if not is_legal(prop.type, op):
            raise ValidationError(
                f"Operator '{label_for(op)}' is not available for "
                f"{prop.type.value} property {prop.display_name!r}.",
                rule="operator_for_type",
            )

        kind = value_kind(op)
        if kind == "none" and (condition.value is not None or condition.secondary_value is not None):
            raise ValidationError(f"Operator '{label_for(op)}' does not take a value.")
        if op != FilterOperator.is_between and condition.secondary_value is not None:
            raise ValidationError("A second value is only used by 'is between'.")
        if kind != "relative" and condition.unit is not None:
            raise ValidationError("A unit is only used by relative date operators.")

        for raw in (condition.value, condition.secondary_value):
            if raw is None:
                continue
            try:
                coerced = coerce_value(prop.type, op, raw)
            except ValueError as exc:
                raise ValidationError(f"{prop.display_name}: {exc}") from exc
            if kind == "list" and prop.options:
                allowed = set(prop.option_values())
                bad = [v for v in coerced if v not in allowed]
                if bad:
                    raise ValidationError(
                        f"{prop.display_name}: unknown option(s) {', '.join(bad)}."
                    )

    # ----------------------------
    # Internals
    # ----------------------------
    def _apply_patch(self, current: FilterCondition, patch: Mapping[str, Any]) -> FilterCondition:
        data = current.model_dump()

        if "property_id" in patch and patch["property_id"] != current.property_id:
            new_prop = self.config.get_property(patch["property_id"])
            if patch["property_id"] is not None and new_prop is None:
                raise ValidationError(
                    f"Unknown property {patch['property_id']!r} for {self.config.entity_type}."
                )
            old_prop = self.config.get_property(current.property_id)
            data["property_id"] = patch["property_id"]
            old_type = old_prop.type if old_prop else None
            new_type = new_prop.type if new_prop else None
            if old_type != new_type:
                # Stale operator/value pairs never survive a type change
                data["operator"] = operators_for(new_type)[0] if new_prop else None
                data["unit"] = None
            data["value"] = None
            data["secondary_value"] = None

        if "operator" in patch:
            new_op = FilterOperator(patch["operator"]) if patch["operator"] is not None else None
            old_op = data["operator"]
            data["operator"] = new_op
            if new_op is None or value_kind(new_op) == "none":
                data["value"] = None
                data["secondary_value"] = None
            elif old_op is None or value_kind(FilterOperator(old_op)) != value_kind(new_op):
                if not (value_kind(new_op) == "range" and old_op is not None
                        and value_kind(FilterOperator(old_op)) == "scalar"):
                    data["value"] = None
                data["secondary_value"] = None
            if new_op is not None and value_kind(new_op) == "relative":
                data["unit"] = data["unit"] or DateUnit.day
            else:
                data["unit"] = None

        for key in ("value", "secondary_value", "unit"):
            if key in patch:
                data[key] = patch[key]

        return FilterCondition.model_validate(data)

    def _group_index(self, group_id: str) -> int:
        for i, g in enumerate(self._groups):
            if g.id == group_id:
                return i
        raise ValidationError(f"Unknown filter group {group_id!r}.")

    @staticmethod
    def _condition_index(group: FilterGroup, condition_id: str) -> int:
        for i, c in enumerate(group.conditions):
            if c.id == condition_id:
                return i
        raise ValidationError(f"Unknown condition {condition_id!r} in group {group.id!r}.")
