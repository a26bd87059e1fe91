# File: /viewengine/engine/debounce.py | Version: 1.0 | Title: Cancelable generation-stamped debounce
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

log = logging.getLogger(__name__)


class Debouncer:
    """
    Coalesces bursts of ``schedule(generation)`` into one ``callback(generation)``
    carrying the latest generation. Each schedule cancels the pending timer.

    The timer lives on the running asyncio loop. Without one, the call stays
    pending until ``flush()``.
    """

    def __init__(self, delay: float, callback: Callable[[int], None]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._generation = 0
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def schedule(self, generation: int) -> None:
        self.cancel()
        self._generation = generation
        self._pending = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = False

    def flush(self) -> bool:
        """Run the pending call now. Returns False when nothing was pending."""
        if not self._pending:
            return False
        self.cancel()
        self.callback(self._generation)
        return True

    def _fire(self) -> None:
        self._handle = None
        if not self._pending:
            return
        self._pending = False
        self.callback(self._generation)
