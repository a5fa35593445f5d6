import asyncio
import logging
from typing import Awaitable, Callable, Optional

log = logging.getLogger("newsdesk.scheduling")


class DelayedTask:
    """One-shot coroutine run after `delay` seconds, cancelable until it fires.

    Cancelling after the callback started also cancels the callback.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]], name: str = "delayed"):
        self.delay = max(0.0, delay)
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None
        self._fired = False

    def start(self) -> "DelayedTask":
        if self._task is not None:
            raise RuntimeError(f"{self.name}: deja demarre")
        self._task = asyncio.ensure_future(self._run())
        return self

    async def _run(self) -> None:
        await asyncio.sleep(self.delay)
        self._fired = True
        await self.callback()

    def cancel(self) -> bool:
        """Cancel the task. Returns True if it had not completed yet."""
        if self._task is None or self._task.done():
            return False
        self._task.cancel()
        log.debug("%s: annule (fired=%s).", self.name, self._fired)
        return True

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def pending(self) -> bool:
        """True while still waiting out the delay."""
        return self._task is not None and not self._task.done() and not self._fired

    @property
    def cancelled(self) -> bool:
        return self._task is not None and self._task.cancelled()

    async def wait(self) -> None:
        """Wait for completion; a cancelled task counts as complete."""
        if self._task is None:
            return
        try:
            await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise
