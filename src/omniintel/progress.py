"""Observable export progress."""

from __future__ import annotations

import logging
from typing import Callable

from omniintel.models import ExportProgress

logger = logging.getLogger(__name__)

ProgressListener = Callable[[ExportProgress | None], None]


class ProgressReporter:
    """Holds the progress of the running export; ``None`` means no export is running.

    Listeners are called synchronously on every change.
    """

    def __init__(self) -> None:
        self._current: ExportProgress | None = None
        self._listeners: list[ProgressListener] = []

    @property
    def current(self) -> ExportProgress | None:
        return self._current

    @property
    def is_running(self) -> bool:
        return self._current is not None

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, current: int, total: int, label: str) -> ExportProgress:
        if self._current is not None and current < self._current.current:
            raise ValueError(
                f"Progress cannot go backwards ({self._current.current} -> {current})"
            )
        self._current = ExportProgress(current=current, total=total, label=label)
        logger.info("Export progress %d/%d: %s", current, total, label)
        self._notify()
        return self._current

    def clear(self) -> None:
        self._current = None
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)
