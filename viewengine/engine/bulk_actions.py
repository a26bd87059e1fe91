# File: /viewengine/engine/bulk_actions.py | Version: 1.0 | Title: Bulk action registry and outcomes
from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from viewengine.core.exceptions import ValidationError
from viewengine.schemas.module_config import ModuleViewConfig

log = logging.getLogger(__name__)


class BulkOutcomeStatus(str, Enum):
    success = "success"
    partial = "partial"
    failure = "failure"


class BulkActionOutcome(BaseModel):
    action_id: str
    status: BulkOutcomeStatus
    processed_ids: List[str] = Field(default_factory=list)
    failed_ids: List[str] = Field(default_factory=list)
    message: Optional[str] = None

    @classmethod
    def from_failures(
        cls, action_id: str, requested: Iterable[str], failed: Iterable[str] = ()
    ) -> "BulkActionOutcome":
        failed_set = set(failed)
        requested = list(requested)
        processed = [i for i in requested if i not in failed_set]
        if not failed_set:
            status = BulkOutcomeStatus.success
        elif processed:
            status = BulkOutcomeStatus.partial
        else:
            status = BulkOutcomeStatus.failure
        return cls(
            action_id=action_id,
            status=status,
            processed_ids=processed,
            failed_ids=[i for i in requested if i in failed_set],
        )


BulkHandler = Callable[[str, List[str]], Awaitable[Optional[BulkActionOutcome]]]


class BulkActionRegistry:
    """Maps bulk action ids to externally supplied async handlers."""

    def __init__(self) -> None:
        self._handlers: Dict[str, BulkHandler] = {}

    def register(self, action_id: str, handler: BulkHandler) -> None:
        self._handlers[action_id] = handler

    def __contains__(self, action_id: str) -> bool:
        return action_id in self._handlers

    async def run(
        self, config: ModuleViewConfig, action_id: str, selected_ids: Iterable[str]
    ) -> BulkActionOutcome:
        ids = list(selected_ids)
        if action_id not in config.bulk_action_ids:
            raise ValidationError(f"{config.entity_name} does not offer bulk action {action_id!r}.")
        handler = self._handlers.get(action_id)
        if handler is None:
            raise ValidationError(f"No handler registered for bulk action {action_id!r}.")
        if not ids:
            raise ValidationError("Select at least one record first.")

        try:
            outcome = await handler(action_id, ids)
        except Exception as exc:
            # A crashing handler is a failed outcome for every selected id
            log.warning("Bulk action %s failed on %d record(s)", action_id, len(ids), exc_info=True)
            return BulkActionOutcome(
                action_id=action_id,
                status=BulkOutcomeStatus.failure,
                failed_ids=ids,
                message=str(exc) or exc.__class__.__name__,
            )
        if outcome is None:
            outcome = BulkActionOutcome.from_failures(action_id, ids)
        log.info("Bulk action %s finished: %s", action_id, outcome.status.value)
        return outcome
