"""Cooperative cancellation token for batch runs."""

import logging

logger = logging.getLogger(__name__)


class CancellationToken:
    """Flag checked by batch loops between items or chunks.

    Cancelling never interrupts an in-flight provider call; the loop
    notices the flag at its next yield point and stops scheduling work.
    """

    def __init__(self):
        self._cancelled = False
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "") -> None:
        if not self._cancelled:
            logger.info("Cancellation requested%s", f": {reason}" if reason else "")
        self._cancelled = True
        self._reason = reason
