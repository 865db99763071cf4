"""Cooperative request pacing for upstream APIs."""

import asyncio
import time


class RequestThrottle:
    """
    Hands out permits no closer together than ``min_interval`` seconds.

    Not a token bucket: there is no burst allowance. The first permit is
    granted immediately.
    """

    def __init__(self, min_interval: float):
        self.min_interval = max(min_interval, 0.0)
        self._last_permit: float | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_milliseconds(cls, delay_ms: int) -> "RequestThrottle":
        return cls(delay_ms / 1000)

    async def wait(self) -> None:
        """Wait until the next permit is available."""
        async with self._lock:
            if self._last_permit is not None:
                remaining = self.min_interval - (time.monotonic() - self._last_permit)
                if remaining > 0:
                    await asyncio.sleep(remaining)
            self._last_permit = time.monotonic()
