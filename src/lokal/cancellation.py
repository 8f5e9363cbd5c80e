"""Cooperative cancellation for long directory walks and sync runs."""

import threading


class CancellationToken:
    """
    Flag checked between files and between translation batches.

    Cancelling never interrupts a file or batch that is already in progress;
    the running operation stops at its next checkpoint and reports
    ``cancelled=True`` in its result.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def is_cancelled(token) -> bool:
    """Return True if ``token`` is set; ``None`` means never cancelled."""
    return token is not None and token.cancelled
