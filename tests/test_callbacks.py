"""Tests for CallbackSet."""

import pytest

from timed_operations.callbacks import CallbackSet
from timed_operations.config import OutcomeKind
from timed_operations.outcome import Outcome


class TestCallbackSetCreation:
    def test_only_on_success_required(self):
        cs = CallbackSet(on_success=print)
        assert cs.on_error is None
        assert cs.on_throttle is None
        assert cs.on_timeout is None

    def test_missing_on_success_raises(self):
        with pytest.raises(TypeError):
            CallbackSet()  # type: ignore[call-arg]

    def test_none_on_success_raises(self):
        with pytest.raises(TypeError, match="on_success is required"):
            CallbackSet(on_success=None)  # type: ignore[arg-type]

    def test_non_callable_handler_raises(self):
        with pytest.raises(TypeError, match="on_error must be callable"):
            CallbackSet(on_success=print, on_error="oops")  # type: ignore[arg-type]

    def test_frozen(self):
        cs = CallbackSet(on_success=print)
        with pytest.raises(AttributeError):
            cs.on_null = print  # type: ignore[misc]

    def test_ignore_discards_everything(self):
        cs = CallbackSet.ignore()
        cs.dispatch(Outcome(OutcomeKind.SUCCESS, value=1))
        cs.dispatch(Outcome(OutcomeKind.ERROR, error=ValueError("x")))


class TestCallbackSetDispatch:
    def test_success_passes_value(self, recorder):
        recorder.callbacks().dispatch(Outcome(OutcomeKind.SUCCESS, value=42))
        assert recorder.events == [("success", 42)]

    def test_error_passes_exception(self, recorder):
        exc = RuntimeError("boom")
        recorder.callbacks().dispatch(Outcome(OutcomeKind.ERROR, error=exc))
        assert recorder.events == [("error", exc)]

    @pytest.mark.parametrize("kind", ["null", "empty", "timeout", "waiting"])
    def test_signal_outcomes(self, recorder, kind):
        recorder.callbacks().dispatch(Outcome(OutcomeKind(kind)))
        assert recorder.kinds == [kind]

    def test_missing_optional_handler_is_noop(self):
        calls = []
        cs = CallbackSet(on_success=calls.append)
        cs.dispatch(Outcome(OutcomeKind.NULL))
        cs.dispatch(Outcome(OutcomeKind.EMPTY))
        cs.dispatch(Outcome(OutcomeKind.ERROR, error=ValueError()))
        cs.dispatch(Outcome(OutcomeKind.TIMEOUT))
        cs.throttled()
        cs.waiting()
        assert calls == []

    def test_handler_error_propagates(self):
        def explode(_value):
            raise KeyError("handler")

        cs = CallbackSet(on_success=explode)
        with pytest.raises(KeyError):
            cs.dispatch(Outcome(OutcomeKind.SUCCESS, value=1))

    def test_throttled_and_waiting(self, recorder):
        cs = recorder.callbacks()
        cs.throttled()
        cs.waiting()
        assert recorder.kinds == ["throttle", "waiting"]
