"""
SessionLoop tests.
"""

import threading
import time

import pytest

from mentorverse.classroom import SessionLoop

from conftest import DeferredExecutor


class TestTimers:
    def test_fires_when_due(self, loop, clock):
        fired = []
        loop.call_later(1.0, fired.append, "a")
        assert loop.run_pending() == 0
        clock.advance(1.0)
        assert loop.run_pending() == 1
        assert fired == ["a"]
        assert loop.run_pending() == 0

    def test_order_by_deadline_then_scheduling(self, loop, clock):
        fired = []
        loop.call_later(2.0, fired.append, "late")
        loop.call_later(1.0, fired.append, "first")
        loop.call_later(1.0, fired.append, "second")
        clock.advance(5.0)
        loop.run_pending()
        assert fired == ["first", "second", "late"]

    def test_cancel(self, loop, clock):
        fired = []
        handle = loop.call_later(1.0, fired.append, "x")
        handle.cancel()
        assert not loop.has_pending()
        clock.advance(2.0)
        loop.run_pending()
        assert fired == []

    def test_next_deadline(self, loop, clock):
        assert loop.next_deadline() is None
        loop.call_later(3.0, lambda: None)
        loop.call_later(1.5, lambda: None)
        assert loop.next_deadline() == pytest.approx(1.5)
        clock.advance(2.0)
        assert loop.next_deadline() == 0.0

    def test_timer_scheduled_by_timer_waits_for_its_own_deadline(self, loop, clock):
        fired = []
        loop.call_later(1.0, lambda: loop.call_later(1.0, fired.append, "inner"))
        clock.advance(1.0)
        loop.run_pending()
        assert fired == []
        clock.advance(1.0)
        loop.run_pending()
        assert fired == ["inner"]


class TestBackgroundCalls:
    def test_result_delivered_on_run_pending(self, clock):
        executor = DeferredExecutor()
        loop = SessionLoop(executor=executor, clock=clock)
        results = []
        loop.submit(lambda a, b: a + b, 2, 3, on_success=results.append)

        assert loop.has_pending()
        executor.run_all()
        assert results == []
        loop.run_pending()
        assert results == [5]
        assert not loop.has_pending()

    def test_error_delivered_on_run_pending(self, loop):
        errors = []

        def fail():
            raise ValueError("nope")

        loop.submit(fail, on_error=errors.append)
        assert errors == []
        loop.run_pending()
        assert len(errors) == 1
        assert isinstance(errors[0], ValueError)

    def test_unhandled_error_is_logged(self, loop, caplog):
        def fail():
            raise ValueError("nope")

        loop.submit(fail)
        loop.run_pending()
        assert "Background call 'fail' failed" in caplog.text

    def test_callbacks_run_on_loop_thread(self):
        loop = SessionLoop()
        threads = []
        worker = []

        def work():
            worker.append(threading.current_thread())
            return 1

        loop.submit(work, on_success=lambda _: threads.append(threading.current_thread()))
        deadline = time.monotonic() + 5.0
        while not threads and time.monotonic() < deadline:
            loop.run_pending()
            time.sleep(0.01)
        loop.shutdown(wait=True)

        assert threads == [threading.current_thread()]
        assert worker[0] is not threading.current_thread()

    def test_shutdown(self, loop, clock):
        fired = []
        loop.call_later(1.0, fired.append, "x")
        loop.shutdown()
        clock.advance(2.0)
        loop.run_pending()
        assert fired == []
        with pytest.raises(RuntimeError):
            loop.submit(lambda: None)
