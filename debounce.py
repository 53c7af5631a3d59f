# debounce.py

import asyncio
from typing import Any, Awaitable, Callable, Optional


class Debouncer:
    """
    Collapses bursts of calls into one. Each trigger() restarts the
    quiescence timer; when it finally expires the callback runs once
    with the arguments of the last trigger.
    """

    def __init__(self, delay: float, callback: Callable[..., Awaitable[Any]]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def _fire(self, args: tuple) -> None:
        self._handle = None
        self._task = asyncio.ensure_future(self.callback(*args))

    def cancel(self) -> None:
        """Drop a pending timer. A callback that already started keeps running."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    async def flush(self) -> None:
        """Wait for the most recently fired callback, if any."""
        if self._task is not None:
            await self._task
