"""Tests for the input debouncer."""

import threading

from order_assistant.debounce import InputDebouncer


class Recorder:
    """Delivery handler that records texts and signals each delivery."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.delivered = threading.Event()

    def __call__(self, text: str) -> None:
        self.calls.append(text)
        self.delivered.set()


class TestFlush:
    """flush() should deliver buffered input immediately."""

    def test_inputs_are_joined_in_arrival_order(self):
        """Buffered pieces are joined with spaces in arrival order."""
        recorder = Recorder()
        debouncer = InputDebouncer(recorder, delay=60)
        debouncer.push("two burgers")
        debouncer.push("and a cola")
        debouncer.push("for pickup")
        debouncer.flush()
        assert recorder.calls == ["two burgers and a cola for pickup"]

    def test_flush_without_input_does_nothing(self):
        """An empty buffer delivers nothing."""
        recorder = Recorder()
        InputDebouncer(recorder, delay=60).flush()
        assert recorder.calls == []

    def test_buffer_is_cleared_after_delivery(self):
        """A second flush does not redeliver."""
        recorder = Recorder()
        debouncer = InputDebouncer(recorder, delay=60)
        debouncer.push("hello")
        debouncer.flush()
        assert not debouncer.pending
        debouncer.flush()
        assert recorder.calls == ["hello"]


class TestTimer:
    """The timer should deliver once the input has gone quiet."""

    def test_timer_delivers_once_after_quiet_period(self):
        """Rapid pushes become one delivery."""
        recorder = Recorder()
        debouncer = InputDebouncer(recorder, delay=0.2)
        debouncer.push("one")
        debouncer.push("two")
        debouncer.push("three")
        assert recorder.delivered.wait(timeout=5)
        assert recorder.calls == ["one two three"]
        assert not debouncer.pending

    def test_new_input_restarts_timer(self):
        """Input inside the quiet period extends it."""
        recorder = Recorder()
        debouncer = InputDebouncer(recorder, delay=0.3)
        debouncer.push("first")
        threading.Event().wait(0.1)
        debouncer.push("second")
        assert recorder.delivered.wait(timeout=5)
        assert recorder.calls == ["first second"]

    def test_flush_cancels_pending_timer(self):
        """A flushed buffer is not delivered again by the timer."""
        recorder = Recorder()
        debouncer = InputDebouncer(recorder, delay=0.2)
        debouncer.push("only once")
        debouncer.flush()
        threading.Event().wait(0.4)
        assert recorder.calls == ["only once"]
