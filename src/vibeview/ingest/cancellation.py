from __future__ import annotations

import threading


class CancellationToken:
    """
    One-shot cancellation flag shared between a caller and an ingest session.

    Once :meth:`cancel` has been called the token stays cancelled; there is no
    way to reset it. Create a new token for every session.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return the cancelled state."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"CancellationToken(cancelled={self.cancelled})"


__all__ = ["CancellationToken"]
