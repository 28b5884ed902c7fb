"""Delay-and-coalesce scheduling on the asyncio event loop."""

import asyncio
from collections.abc import Callable


class Debouncer:
    """Runs `callback` once `delay` seconds pass without another `trigger()`.

    The callback runs synchronously from the event loop; it is never invoked
    after `cancel()`.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """(Re)start the quiet period."""
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Disarm the timer. Safe to call when nothing is armed."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> bool:
        """Fire immediately if armed. Returns whether the callback ran."""
        if self._handle is None:
            return False
        self.cancel()
        self._callback()
        return True

    def _fire(self) -> None:
        self._handle = None
        self._callback()
