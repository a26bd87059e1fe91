# File: /viewengine/engine/ordering.py | Version: 1.0 | Title: Ordering/Drag Coordinator (views and columns share it)
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Sequence

from viewengine.core.exceptions import ValidationError

log = logging.getLogger(__name__)


def move(ids: Sequence[str], from_index: int, to_index: int) -> List[str]:
    """
    Move the item at ``from_index`` so it ends up at ``to_index``.

    The result is a new list; positions stay dense (0..n-1) and ids unique.
    Moving an item onto its own index returns an equal list.
    """
    items = list(ids)
    if len(set(items)) != len(items):
        raise ValidationError("Ordered ids must be unique.")
    n = len(items)
    if not (0 <= from_index < n) or not (0 <= to_index < n):
        raise ValidationError(f"Move {from_index} -> {to_index} is out of range for {n} items.")
    if from_index == to_index:
        return items
    item = items.pop(from_index)
    items.insert(to_index, item)
    return items


def move_id(ids: Sequence[str], item_id: str, to_index: int) -> List[str]:
    try:
        from_index = list(ids).index(item_id)
    except ValueError:
        raise ValidationError(f"Unknown id {item_id!r}.")
    return move(ids, from_index, to_index)


def same_members(a: Sequence[str], b: Sequence[str]) -> bool:
    return len(a) == len(b) and set(a) == set(b) and len(set(a)) == len(a)


class ReorderPhase(str, Enum):
    idle = "idle"
    pending = "pending"


class OptimisticOrder:
    """
    Two-phase reorder: ``propose`` applies locally and returns a token,
    ``confirm``/``revert`` settle it once the gateway answers.

    Only the latest token settles the order; answers for superseded
    proposals are logged and ignored.
    """

    def __init__(self, ids: Sequence[str] = ()):
        self._confirmed: List[str] = list(ids)
        self._current: List[str] = list(ids)
        self._token = 0
        self.phase = ReorderPhase.idle

    @property
    def current(self) -> List[str]:
        return list(self._current)

    @property
    def confirmed(self) -> List[str]:
        return list(self._confirmed)

    @property
    def pending(self) -> bool:
        return self.phase == ReorderPhase.pending

    def reset(self, ids: Sequence[str]) -> None:
        self._confirmed = list(ids)
        self._current = list(ids)
        self._token += 1
        self.phase = ReorderPhase.idle

    def propose(self, from_index: int, to_index: int) -> int:
        return self.propose_order(move(self._current, from_index, to_index))

    def propose_order(self, ids: Sequence[str]) -> int:
        if not same_members(ids, self._current):
            raise ValidationError("A reorder must list exactly the current ids.")
        self._current = list(ids)
        self._token += 1
        self.phase = ReorderPhase.pending
        return self._token

    def confirm(self, token: Optional[int] = None) -> bool:
        if token is not None and token != self._token:
            log.info("Ignoring confirmation for superseded reorder %s (latest %s)", token, self._token)
            return False
        self._confirmed = list(self._current)
        self.phase = ReorderPhase.idle
        return True

    def revert(self, token: Optional[int] = None) -> bool:
        if token is not None and token != self._token:
            log.info("Ignoring revert for superseded reorder %s (latest %s)", token, self._token)
            return False
        self._current = list(self._confirmed)
        self.phase = ReorderPhase.idle
        return True
