import pytest

from lorgnette.basic_stack.eventloop import EventLoop


@pytest.fixture
def loop():
    """A private event loop, so tests don't share queued tasks."""
    return EventLoop()


@pytest.fixture
def eventloop():
    """The process-wide event loop used by @o and friends."""
    from lorgnette.stack import eventloop
    return eventloop


@pytest.fixture
def settle():
    """Run an event loop until a Deferred settles, then return it."""

    def settle(d, loop):
        if not d.is_settled():
            d.subscribe(lambda value: loop.halt(), lambda error: loop.halt())
            loop.run()
        return d

    return settle
