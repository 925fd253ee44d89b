"""Single-slot debounced task scheduling."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Holds at most one pending deferred call.

    ``schedule`` replaces whatever was pending, so a burst of calls results
    in a single execution of the last one after ``delay`` seconds of quiet.
    Must be used from within a running event loop.
    """

    def __init__(self, on_error: Optional[Callable[[Exception], None]] = None):
        self._task: Optional[asyncio.Task] = None
        self._fn: Optional[Callable[[], None]] = None
        self._on_error = on_error
        self.last_error: Optional[Exception] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, fn: Callable[[], None], delay: float) -> None:
        self.cancel_pending()
        self._fn = fn
        self._task = asyncio.get_running_loop().create_task(self._fire_later(delay))

    def cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._fn = None

    def flush(self) -> None:
        """Run the pending call now, if any."""
        fn = self._fn
        self.cancel_pending()
        if fn is not None:
            self._run(fn)

    async def _fire_later(self, delay: float) -> None:
        await asyncio.sleep(delay)
        fn, self._fn = self._fn, None
        self._task = None
        if fn is not None:
            self._run(fn)

    def _run(self, fn: Callable[[], None]) -> None:
        try:
            fn()
            self.last_error = None
        except Exception as e:
            # Nobody awaits a debounced call; hand the error to the owner
            self.last_error = e
            if self._on_error is None:
                logger.error("Debounced call failed: %s", e)
            else:
                self._on_error(e)
