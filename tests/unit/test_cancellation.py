"""Unit tests for the cancellation token."""

import threading
from unittest.mock import Mock

from docsign_ai.analysis.cancellation import CancellationToken


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_remaining_counts_down(self):
        clock = FakeClock()
        token = CancellationToken(10.0, clock=clock)

        clock.now += 4.0

        assert token.remaining() == 6.0
        assert not token.expired

    def test_expires_at_deadline(self):
        clock = FakeClock()
        token = CancellationToken(10.0, clock=clock)

        clock.now += 11.0

        assert token.remaining() == 0.0
        assert token.expired

    def test_cancel_runs_callbacks_once(self):
        token = CancellationToken(10.0)
        callback = Mock()
        token.on_cancel(callback)

        token.cancel()
        token.cancel()

        callback.assert_called_once()
        assert token.cancelled
        assert token.expired

    def test_callback_after_cancel_runs_immediately(self):
        token = CancellationToken(10.0)
        token.cancel()
        callback = Mock()

        token.on_cancel(callback)

        callback.assert_called_once()

    def test_failing_callback_does_not_stop_others(self):
        token = CancellationToken(10.0)
        second = Mock()
        token.on_cancel(Mock(side_effect=RuntimeError("close failed")))
        token.on_cancel(second)

        token.cancel()

        second.assert_called_once()

    def test_deadline_fires_while_armed(self):
        """An armed token cancels itself when the deadline passes."""
        fired = threading.Event()
        token = CancellationToken(0.05)
        token.on_cancel(fired.set)

        with token:
            assert fired.wait(2.0)

        assert token.cancelled

    def test_exit_disarms_timer(self):
        callback = Mock()
        token = CancellationToken(30.0)
        token.on_cancel(callback)

        with token:
            pass

        assert not token.cancelled
        callback.assert_not_called()

    def test_entering_expired_token_cancels(self):
        clock = FakeClock()
        token = CancellationToken(1.0, clock=clock)
        callback = Mock()
        token.on_cancel(callback)
        clock.now += 2.0

        with token:
            pass

        callback.assert_called_once()
