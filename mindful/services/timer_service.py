"""
Cooperative once-per-interval clock used by the session player and the
breathing driver
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TickClock:
    """
    Calls `callback(interval)` every `interval` seconds on the running
    event loop.

    Every start() takes a new token; a tick only fires while its token is
    still current, so a stop() followed by an immediate start() can never
    deliver a tick from the old run.
    """

    def __init__(self, callback: Callable[[float], None], interval: float = 1.0, name: str = "clock"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.callback = callback
        self.interval = interval
        self.name = name
        self._token = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def token(self) -> int:
        return self._token

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> int:
        """Start ticking; returns the token of this run"""
        self.stop()
        self._token += 1
        token = self._token

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Driven manually (tests, synchronous callers)
            logger.debug(f"⏰ {self.name}: no running loop, ticks must be driven manually")
            return token

        self._task = loop.create_task(self._worker(token))
        logger.debug(f"⏰ {self.name} started (token {token})")
        return token

    def stop(self) -> None:
        """Invalidate the current run and cancel its task"""
        self._token += 1
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            self._task = None
            logger.debug(f"⏹️ {self.name} stopped")

    def is_current(self, token: int) -> bool:
        return token == self._token

    async def _worker(self, token: int) -> None:
        try:
            while self.is_current(token):
                await asyncio.sleep(self.interval)
                if not self.is_current(token):
                    break
                try:
                    self.callback(self.interval)
                except Exception as e:
                    logger.error(f"❌ Error in {self.name} tick: {e}")
        except asyncio.CancelledError:
            logger.debug(f"⏹️ {self.name} task cancelled (token {token})")
            raise
