"""Running API calls off the UI thread."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

from pharmabill.errors import BillingError

logger = logging.getLogger(__name__)


class _TaskSignals(QObject):
    succeeded = pyqtSignal(object)
    failed = pyqtSignal(object)


class ApiTask(QRunnable):
    """Calls fn() on a pool thread and reports back through queued signals."""

    def __init__(self, fn: Callable[[], Any]) -> None:
        super().__init__()
        self.fn = fn
        self.signals = _TaskSignals()

    def run(self) -> None:
        try:
            result = self.fn()
        except BillingError as exc:
            self.signals.failed.emit(exc)
            return
        except Exception as exc:  # noqa: BLE001 - surface to the window
            logger.exception("Background task crashed")
            self.signals.failed.emit(exc)
            return
        self.signals.succeeded.emit(result)


def run_async(
    fn: Callable[[], Any],
    on_success: Callable[[Any], None],
    on_error: Optional[Callable[[Exception], None]] = None,
    pool: Optional[QThreadPool] = None,
) -> ApiTask:
    task = ApiTask(fn)
    task.signals.succeeded.connect(on_success)
    if on_error is not None:
        task.signals.failed.connect(on_error)
    else:
        task.signals.failed.connect(lambda exc: logger.warning("Background task failed: %s", exc))
    (pool or QThreadPool.globalInstance()).start(task)
    return task
