import logging
from concurrent.futures import Future

import pytest

from lorgnette.core import drive
from lorgnette.deferred import (Deferred, PENDING, FULFILLED, REJECTED,
                                RejectedWith, defer, failed, is_thenable,
                                to_deferred)


def test_fulfill_fires_reactions_in_order():
    d = Deferred()
    calls = []
    d.subscribe(lambda v: calls.append(('first', v)))
    d.subscribe(lambda v: calls.append(('second', v)))
    assert calls == []

    assert d.fulfill(42) is True
    assert calls == [('first', 42), ('second', 42)]
    assert d.state == FULFILLED
    assert d.value == 42
    assert d.is_settled()


def test_reject_fires_rejection_reactions_with_the_same_error():
    d = Deferred()
    error = ValueError("boom")
    seen = []
    d.subscribe(lambda v: seen.append('fulfilled'), seen.append)

    d.reject(error)
    assert seen == [error]
    assert seen[0] is error
    assert d.state == REJECTED
    assert d.error is error


def test_settling_twice_is_a_noop():
    d = Deferred()
    calls = []
    d.subscribe(calls.append, calls.append)

    assert d.fulfill(1) is True
    assert d.fulfill(2) is False
    assert d.reject(Exception("late")) is False
    assert calls == [1]
    assert d.value == 1
    assert d.error is None


def test_subscribing_after_settlement_fires_immediately():
    d = defer("ready")
    calls = []
    d.subscribe(calls.append)
    assert calls == ["ready"]

    e = failed(KeyError("missing"))
    d.subscribe(None, calls.append)
    e.subscribe(None, calls.append)
    assert calls[-1].args == ("missing",)


def test_subscribing_from_a_reaction_keeps_registration_order():
    d = Deferred()
    calls = []

    def first(value):
        calls.append('first')
        d.subscribe(lambda v: calls.append('third'))

    d.subscribe(first)
    d.subscribe(lambda v: calls.append('second'))
    d.fulfill(None)
    assert calls == ['first', 'second', 'third']


def test_a_raising_reaction_does_not_stop_the_others(caplog):
    d = Deferred()
    calls = []

    def explode(value):
        raise RuntimeError("reaction failed")

    d.subscribe(explode)
    d.subscribe(calls.append)
    with caplog.at_level(logging.ERROR, logger="lorgnette"):
        d.fulfill(3)

    assert calls == [3]
    assert "reaction failed" in caplog.text


def test_missing_handler_is_skipped():
    d = Deferred()
    d.subscribe(None, None)
    d.reject(ValueError())
    assert d.state == REJECTED


def test_subscribe_rejects_non_callables():
    with pytest.raises(TypeError):
        Deferred().subscribe(5)


def test_reject_requires_an_exception():
    d = Deferred()
    with pytest.raises(TypeError):
        d.reject("boom")
    assert d.state == PENDING


def test_repr_shows_state():
    assert "pending" in repr(Deferred())
    assert "value: 7" in repr(defer(7))


def test_to_deferred_passes_deferreds_through():
    d = Deferred()
    assert to_deferred(d) is d


def test_to_deferred_wraps_plain_values():
    for value in (None, 0, "text", [1, 2]):
        d = to_deferred(value)
        assert d.state == FULFILLED
        assert d.value is value


class Subscribable:
    def __init__(self):
        self.reactions = []

    def subscribe(self, on_fulfilled, on_rejected):
        self.reactions.append((on_fulfilled, on_rejected))

    def fulfill(self, value):
        for on_fulfilled, _ in self.reactions:
            on_fulfilled(value)

    def reject(self, reason):
        for _, on_rejected in self.reactions:
            on_rejected(reason)


def test_to_deferred_adopts_subscribable_objects():
    source = Subscribable()
    d = to_deferred(source)
    assert d is not source
    assert not d.is_settled()

    source.reactions[0][0]("adopted")
    assert d.value == "adopted"


def test_adopted_rejections_always_settle():
    source = Subscribable()
    d = to_deferred(source)
    source.reject("boom")
    assert d.state == REJECTED
    assert isinstance(d.error, RejectedWith)
    assert d.error.reason == "boom"

    source = Subscribable()
    d = to_deferred(source)
    error = ValueError("kept")
    source.reject(error)
    assert d.error is error


@pytest.mark.timeout(10)
def test_oroutine_sees_a_non_exception_rejection(loop, settle):
    source = Subscribable()

    def gen():
        try:
            yield source
        except RejectedWith as e:
            return e.reason

    d = drive(gen, scheduler=loop)
    loop.queue_task(0, source.reject, "boom")
    assert settle(d, loop).value == "boom"


class FakeFailure:
    def __init__(self, value):
        self.value = value

    def trap(self, *errors):
        return self.value


class CallbacksDeferred:
    def __init__(self):
        self.callbacks = None

    def addCallbacks(self, callback, errback):
        self.callbacks = (callback, errback)


def test_to_deferred_adopts_add_callbacks_and_unwraps_failures():
    source = CallbacksDeferred()
    d = to_deferred(source)
    error = IOError("lost")
    source.callbacks[1](FakeFailure(error))
    assert d.error is error


def test_to_deferred_adopts_futures():
    future = Future()
    d = to_deferred(future)
    assert not d.is_settled()
    future.set_result("done")
    assert d.value == "done"

    future = Future()
    error = ZeroDivisionError()
    d = to_deferred(future)
    future.set_exception(error)
    assert d.error is error


def test_to_deferred_adopts_already_finished_futures():
    future = Future()
    future.set_result(1)
    assert to_deferred(future).value == 1


def test_is_thenable():
    assert is_thenable(Deferred())
    assert is_thenable(Future())
    assert is_thenable(Subscribable())
    assert not is_thenable(3)
    assert not is_thenable(object())
