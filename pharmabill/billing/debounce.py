"""Quiet-period scheduling for search-as-you-type."""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from PyQt5.QtCore import QObject, QTimer


class Debouncer(QObject):
    """Runs callback(generation, *args) once input has been quiet for quiet_ms.

    Each schedule() restarts the timer and replaces the pending arguments, so
    only the last call in a burst fires. Callers that do slow work with the
    result check is_current(generation) before applying it.
    """

    def __init__(
        self,
        quiet_ms: int,
        callback: Callable[..., Any],
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._callback = callback
        self._generation = 0
        self._pending: Optional[Tuple[Any, ...]] = None
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(quiet_ms)
        self._timer.timeout.connect(self._fire)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_pending(self) -> bool:
        return self._timer.isActive()

    def schedule(self, *args: Any) -> int:
        self._generation += 1
        self._pending = args
        self._timer.start()
        return self._generation

    def cancel(self) -> None:
        """Drop the pending call and invalidate any result still in flight."""
        self._timer.stop()
        self._pending = None
        self._generation += 1

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _fire(self) -> None:
        if self._pending is None:
            return
        args, self._pending = self._pending, None
        self._callback(self._generation, *args)
