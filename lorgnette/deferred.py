# A single-assignment result, sort of like Twisted's Deferred but
# simplified.  We don't do callback chaining, since oroutines replace
# that mechanism.

import logging
import threading
from collections import deque

log = logging.getLogger("lorgnette")

PENDING = 'pending'
FULFILLED = 'fulfilled'
REJECTED = 'rejected'


class Deferred:
    def __init__(self):
        self._lock = threading.Lock()
        self._reactions = deque()
        self._firing = False
        self.state = PENDING
        self.value = None
        self.error = None

    def __repr__(self):
        if self.state == FULFILLED:
            detail = "; value: %r" % (self.value,)
        elif self.state == REJECTED:
            detail = "; error: %r" % (self.error,)
        else:
            detail = ""
        return "<%s.%s object at 0x%x; %s%s>" % (self.__class__.__module__,
                                                 self.__class__.__name__,
                                                 id(self), self.state, detail)

    def __await__(self):
        return (yield self)

    def is_settled(self):
        return self.state != PENDING

    def subscribe(self, on_fulfilled=None, on_rejected=None):
        for handler in (on_fulfilled, on_rejected):
            if handler is not None and not callable(handler):
                raise TypeError("'%s' object is not callable" %
                                type(handler).__name__)
        with self._lock:
            self._reactions.append((on_fulfilled, on_rejected))
            if self.state == PENDING or self._firing:
                return
            self._firing = True
        self._fire()

    def fulfill(self, value=None):
        return self._settle(FULFILLED, value)

    def reject(self, error):
        if not isinstance(error, BaseException):
            raise TypeError("can only reject with an exception, not %r" %
                            (error,))
        return self._settle(REJECTED, error)

    def _settle(self, state, outcome):
        with self._lock:
            if self.state != PENDING:
                log.debug("ignoring %s of already %s %r",
                          state, self.state, self)
                return False
            if state == FULFILLED:
                self.value = outcome
            else:
                self.error = outcome
            self.state = state
            self._firing = True
        self._fire()
        return True

    def _fire(self):
        # Reactions subscribed while we're firing are appended to the
        # same queue, so everything fires once and in registration order.
        while True:
            with self._lock:
                if not self._reactions:
                    self._firing = False
                    return
                on_fulfilled, on_rejected = self._reactions.popleft()
            if self.state == FULFILLED:
                handler, outcome = on_fulfilled, self.value
            else:
                handler, outcome = on_rejected, self.error
            if handler is None:
                continue
            try:
                handler(outcome)
            except Exception:
                log.exception("reaction %r on %r raised", handler, self)


def defer(value=None):
    d = Deferred()
    d.fulfill(value)
    return d


def failed(error):
    d = Deferred()
    d.reject(error)
    return d


class RejectedWith(Exception):
    """An adopted result was rejected with something other than an exception."""

    def __init__(self, reason):
        Exception.__init__(self, reason)
        self.reason = reason


def _as_error(reason):
    # Twisted hands errbacks a Failure; the exception is its .value
    if hasattr(reason, 'value') and hasattr(reason, 'trap'):
        reason = reason.value
    if isinstance(reason, BaseException):
        return reason
    return RejectedWith(reason)


def _adopt_future(future, d):
    def done(future):
        try:
            value = future.result()
        except BaseException as e:
            d.reject(e)
        else:
            d.fulfill(value)
    future.add_done_callback(done)


def is_thenable(x):
    return any(callable(getattr(x, name, None))
               for name in ('subscribe', 'addCallbacks', 'add_done_callback'))


def to_deferred(x):
    """
    Turn anything an oroutine might wait on into a Deferred.

    Deferreds pass straight through.  Other objects that look like
    deferred results are adopted: a ``subscribe(on_fulfilled,
    on_rejected)`` method (our own shape), Twisted's
    ``addCallbacks(callback, errback)``, or ``add_done_callback``
    futures (concurrent.futures, asyncio, Tornado).  Anything else is
    a plain value, and becomes an already-fulfilled Deferred.
    """
    if isinstance(x, Deferred):
        return x

    d = Deferred()
    if callable(getattr(x, 'subscribe', None)):
        x.subscribe(d.fulfill, lambda reason: d.reject(_as_error(reason)))
    elif callable(getattr(x, 'addCallbacks', None)):
        x.addCallbacks(d.fulfill, lambda f: d.reject(_as_error(f)))
    elif callable(getattr(x, 'add_done_callback', None)):
        _adopt_future(x, d)
    else:
        d.fulfill(x)
    return d
