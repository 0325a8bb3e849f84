"""
SessionLoop - A small cooperative event loop for learning sessions.

Provides:
- Cancellable timers (auto-advance, checkpoint debounce)
- Background calls on a worker pool whose results are delivered back on
  the loop thread

The loop never runs by itself. The owner calls run_pending() (the
streamlit app does so on every rerun) and every callback runs on the
calling thread, so session state is only ever touched from one thread.
"""

import heapq
import itertools
import logging
import queue
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerHandle:
    """Handle returned by SessionLoop.call_later."""

    def __init__(self, when: float, seq: int, callback: Callable, args: tuple):
        self.when = when
        self._seq = seq
        self._callback = callback
        self._args = args
        self.cancelled = False

    def __lt__(self, other: "TimerHandle") -> bool:
        return (self.when, self._seq) < (other.when, other._seq)

    def cancel(self):
        self.cancelled = True

    def _run(self):
        self._callback(*self._args)


class SessionLoop:
    """
    Timers plus background work, resumed on the owner's thread.

    Args:
        executor: Worker pool for background calls (default: 4 threads)
        clock: Monotonic time source, injectable for tests
    """

    def __init__(self, executor: Optional[Executor] = None, clock: Callable[[], float] = time.monotonic):
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="mentorverse")
        self._clock = clock
        self._timers: list[TimerHandle] = []
        self._seq = itertools.count()
        self._completed: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()
        self._outstanding = 0
        self._closed = False

    def time(self) -> float:
        return self._clock()

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def call_later(self, delay: float, callback: Callable, *args) -> TimerHandle:
        """Run callback(*args) on the loop thread once delay seconds have passed."""
        handle = TimerHandle(self._clock() + max(delay, 0.0), next(self._seq), callback, args)
        heapq.heappush(self._timers, handle)
        return handle

    def submit(
        self,
        fn: Callable,
        *args,
        on_success: Optional[Callable] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> Future:
        """
        Run fn(*args) in the background.

        on_success(result) or on_error(exception) is called from a later
        run_pending(), never from the worker thread.
        """
        if self._closed:
            raise RuntimeError("SessionLoop is shut down")

        self._outstanding += 1
        future = self._executor.submit(fn, *args)

        def done(f: Future):
            error = f.exception()
            if error is not None:
                self._completed.put(lambda: on_error(error) if on_error else _log_unhandled(fn, error))
            elif on_success is not None:
                self._completed.put(lambda: on_success(f.result()))
            else:
                self._completed.put(lambda: None)

        future.add_done_callback(done)
        return future

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def run_pending(self) -> int:
        """
        Deliver finished background results, then fire due timers.

        Returns:
            Number of callbacks run
        """
        ran = 0

        while True:
            try:
                deliver = self._completed.get_nowait()
            except queue.Empty:
                break
            self._outstanding -= 1
            deliver()
            ran += 1

        now = self._clock()
        while self._timers and self._timers[0].when <= now:
            handle = heapq.heappop(self._timers)
            if handle.cancelled:
                continue
            handle._run()
            ran += 1

        return ran

    def has_pending(self) -> bool:
        """True while background calls are outstanding or live timers are scheduled."""
        if self._outstanding:
            return True
        return any(not t.cancelled for t in self._timers)

    def next_deadline(self) -> Optional[float]:
        """Seconds until the next live timer, or None."""
        live = [t.when for t in self._timers if not t.cancelled]
        if not live:
            return None
        return max(min(live) - self._clock(), 0.0)

    def shutdown(self, wait: bool = False):
        """Drop timers and stop accepting background work."""
        self._closed = True
        for t in self._timers:
            t.cancel()
        self._timers.clear()
        if self._owns_executor:
            self._executor.shutdown(wait=wait)


def _log_unhandled(fn: Callable, error: BaseException):
    logger.error(f"Background call {getattr(fn, '__name__', fn)!r} failed: {error}")
