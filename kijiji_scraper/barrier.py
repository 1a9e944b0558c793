"""
Counted completion barrier for fan-out writes.
"""
import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CompletionBarrier:
    """
    Fires `on_complete` exactly once after `expected` operations have arrived.

    The expected count is fixed up front. Every operation must call
    `arrive()` once when it resolves, successfully or not. With nothing
    expected the barrier completes on construction.
    """

    def __init__(self, expected: int, on_complete: Optional[Callable[["CompletionBarrier"], None]] = None):
        if expected < 0:
            raise ValueError("expected must be >= 0")
        self.expected = expected
        self.pending = expected
        self.succeeded = 0
        self.failed = 0
        self.on_complete = on_complete
        self._event = asyncio.Event()
        self._fired = False
        if self.pending == 0:
            self._fire()

    @property
    def done(self) -> bool:
        return self._fired

    def arrive(self, ok: bool = True):
        if self.pending == 0:
            raise RuntimeError("CompletionBarrier received more arrivals than expected")
        self.pending -= 1
        if ok:
            self.succeeded += 1
        else:
            self.failed += 1
        if self.pending == 0:
            self._fire()

    def _fire(self):
        if self._fired:
            return
        self._fired = True
        self._event.set()
        logger.debug(f"Barrier complete: {self.succeeded} ok, {self.failed} failed")
        if self.on_complete is not None:
            self.on_complete(self)

    async def wait(self):
        await self._event.wait()
