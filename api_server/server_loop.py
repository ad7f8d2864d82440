"""
Server Loop
Prints a startup banner once, then repeats (request line, wait) at a fixed
interval drawn once at startup.

States:
  starting -> looping   start() prints the banner and draws the interval
  looping  -> looping   one request line, one timed wait
  looping  -> stopped   only from outside: stop(), task cancellation,
                        Ctrl+C, or the max_iterations bound
"""

import asyncio
import logging
import sys
import threading
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, TextIO

from pydantic import BaseModel

from api_server.config import ServerConfig
from api_server.metrics import LOOP_INTERVAL, LOOP_RUNNING, REQUESTS_HANDLED
from api_server.random_source import RandomSource

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    STARTING = "starting"
    LOOPING = "looping"
    STOPPED = "stopped"


class LoopStatus(BaseModel):
    state: LoopState
    interval_seconds: Optional[int] = None
    iterations: int
    seed: int
    started_at: Optional[datetime] = None


class ServerLoop:
    """
    Single sequential flow of control: banner, then request lines forever.

    `wait` is the timed-wait primitive used between request lines. It takes
    the interval in seconds and returns True if the loop should stop. The
    default waits on the loop's stop event, so stop() cuts a wait short.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        random_source: Optional[RandomSource] = None,
        out: Optional[TextIO] = None,
        wait: Optional[Callable[[float], bool]] = None,
    ):
        self.config = (config or ServerConfig()).validate()
        self.random_source = random_source or RandomSource(self.config.seed)
        self.out = out
        self.state = LoopState.STARTING
        self.iterations = 0
        self.started_at: Optional[datetime] = None
        self._interval: Optional[int] = None
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._async_stop: Optional[asyncio.Event] = None
        self._event_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def interval(self) -> Optional[int]:
        """Seconds between request lines; None until start()"""
        return self._interval

    def _emit(self, line: str):
        # Resolve stdout at call time so redirected streams are honoured
        print(line, file=self.out or sys.stdout, flush=True)

    def start(self) -> int:
        """Print the banner, draw the interval and enter the looping state"""
        if self.state is not LoopState.STARTING:
            raise RuntimeError(f"Server loop already started (state: {self.state.value})")

        self._emit(self.config.banner)
        self._interval = self.random_source.draw_interval(
            self.config.interval_min_seconds,
            self.config.interval_max_seconds,
        )
        self.started_at = datetime.now()
        self.state = LoopState.LOOPING

        LOOP_INTERVAL.set(self._interval)
        LOOP_RUNNING.set(1)
        logger.info(f"Server loop started (interval: {self._interval}s, seed: {self.random_source.seed})")
        return self._interval

    def _handle_request(self):
        self._emit(self.config.request_message)
        self.iterations += 1
        REQUESTS_HANDLED.inc()

    def _should_continue(self) -> bool:
        if self._stop_event.is_set():
            return False
        limit = self.config.max_iterations
        return limit is None or self.iterations < limit

    def _finish(self):
        self.state = LoopState.STOPPED
        LOOP_RUNNING.set(0)
        logger.info(f"Server loop stopped after {self.iterations} request(s)")

    def run(self) -> int:
        """Run the loop, blocking until stopped. Returns the number of request lines."""
        self.start()
        try:
            while self._should_continue():
                self._handle_request()
                if not self._should_continue():
                    break
                if self._wait(self._interval):
                    break
        finally:
            self._finish()
        return self.iterations

    async def run_async(self) -> int:
        """
        Cooperative variant of run().

        The wait is bound to an asyncio.Event, so stop() or cancelling the
        task ends the loop without waiting out the interval.
        """
        self._event_loop = asyncio.get_running_loop()
        self._async_stop = asyncio.Event()
        self.start()
        try:
            while self._should_continue():
                self._handle_request()
                if not self._should_continue():
                    break
                try:
                    await asyncio.wait_for(self._async_stop.wait(), timeout=self._interval)
                    break
                except asyncio.TimeoutError:
                    pass
        finally:
            self._finish()
        return self.iterations

    def stop(self):
        """Ask the loop to stop; safe to call from another thread"""
        self._stop_event.set()
        if self._async_stop is None or self.state is not LoopState.LOOPING:
            return
        try:
            self._event_loop.call_soon_threadsafe(self._async_stop.set)
        except RuntimeError:
            # run_async() already returned and its event loop is closed
            logger.debug("Event loop closed before stop() was delivered")

    def status(self) -> LoopStatus:
        return LoopStatus(
            state=self.state,
            interval_seconds=self._interval,
            iterations=self.iterations,
            seed=self.random_source.seed,
            started_at=self.started_at,
        )
