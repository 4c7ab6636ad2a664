# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Loading indicators for long-running service calls.

Services receive a :class:`LoadingTracker` explicitly and wrap each remote
call in :meth:`LoadingTracker.track`. Listeners (a progress bar, a spinner)
subscribe to ``loading.started`` / ``loading.finished`` on the bus the
tracker was built with.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from src.events import AppEvent, EventBus


class LoadingTracker:
    """Counts operations in flight and announces start/finish on an event bus."""

    def __init__(self, bus: EventBus | None = None) -> None:
        self._bus = bus
        self._active = 0

    @property
    def active(self) -> int:
        """Number of operations currently in flight."""
        return self._active

    @property
    def is_loading(self) -> bool:
        return self._active > 0

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """Mark ``operation`` as running for the duration of the block."""
        self._active += 1
        self._emit(AppEvent.LOADING_STARTED, operation)
        try:
            yield
        finally:
            self._active -= 1
            self._emit(AppEvent.LOADING_FINISHED, operation)

    def _emit(self, event_type: AppEvent, operation: str) -> None:
        if self._bus is not None:
            self._bus.publish(
                event_type, {"operation": operation, "active": self._active}
            )
