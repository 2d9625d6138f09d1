"""
Single-slot pause gate for the emission loop.
"""

from __future__ import annotations

import asyncio
from typing import Optional


class PauseGate:
    """
    One-shot rendezvous between a paused loop and whoever resumes it.

    At most one waiter is pending at a time. `release()` wakes that waiter
    and clears the slot; with nothing waiting it does nothing.
    """

    def __init__(self) -> None:
        self._waiter: Optional[asyncio.Future[None]] = None

    @property
    def waiting(self) -> bool:
        return self._waiter is not None

    async def wait(self) -> None:
        if self._waiter is not None:
            raise RuntimeError("pause gate already has a waiter")
        waiter = asyncio.get_running_loop().create_future()
        self._waiter = waiter
        try:
            await waiter
        finally:
            if self._waiter is waiter:
                self._waiter = None

    def release(self) -> bool:
        """Wake the pending waiter. Returns False if there was none."""
        waiter, self._waiter = self._waiter, None
        if waiter is None or waiter.done():
            return False
        waiter.set_result(None)
        return True
