"""
Review context — cancellation and deadline for one admission call.

Every cluster read is bound by the context of the call that issued it.
Validators call ``check()`` before each read; a cancelled or expired
context raises instead of letting a partial decision through.

Design notes:
    - One context per call, never shared between calls.
    - ``cancel()`` may come from another thread (the serving layer).
"""

from __future__ import annotations

import threading
import time

from restore_admission.core.errors import ReviewCancelled


class ReviewContext:
    """Deadline + cancel flag for a single admission call."""

    def __init__(self, timeout: float | None = None):
        self._cancelled = threading.Event()
        self._reason = ""
        self._deadline = time.monotonic() + timeout if timeout else None

    @classmethod
    def background(cls) -> ReviewContext:
        """A context that never expires."""
        return cls()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self, reason: str = "review cancelled") -> None:
        self._reason = reason
        self._cancelled.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self) -> None:
        """Raise ReviewCancelled if the call must stop now."""
        if self._cancelled.is_set():
            raise ReviewCancelled(self._reason)
        if self.expired():
            raise ReviewCancelled("review deadline exceeded")
