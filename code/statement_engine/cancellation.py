"""
cancellation.py

Cooperative cancellation for a single analyze() call.

The caller keeps a CancellationToken and may call cancel() from another
thread; the engine checks it between passes and raises AnalysisCancelled.
"""

from __future__ import annotations

import threading
from typing import Optional


class AnalysisCancelled(Exception):
    """Raised when the caller cancelled an in-flight analysis."""
    pass


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "") -> None:
        if self._event.is_set():
            where = f" during {stage}" if stage else ""
            raise AnalysisCancelled(f"Analysis aborted{where}: {self._reason}")


def check_cancelled(token: Optional[CancellationToken], stage: str = "") -> None:
    if token is not None:
        token.raise_if_cancelled(stage)
