# The driver loop is based heavily on inlineCallbacks from Twisted 10.0.

import functools
import inspect
import logging
import os.path
import sys
import time
import traceback

from lorgnette.deferred import (REJECTED, Deferred, failed, to_deferred,
                                is_thenable)
from lorgnette.computation import (Computation, Finished, Failed,
                                   ResumeError, as_computation)

log = logging.getLogger("lorgnette")

blocking_warn_threshold = 500 # ms
tracebacks_elide_internals = True

STARTING = 'starting'
STEPPING = 'stepping'
WAITING = 'waiting'
SETTLED = 'settled'

_this_dir = os.path.dirname(os.path.abspath(__file__))
_internal_files = {os.path.join(_this_dir, name)
                   for name in ('core.py', 'computation.py', 'deferred.py')}


class DriverStateError(Exception):
    pass


def _is_internal(filename):
    return os.path.abspath(filename) in _internal_files


def format_stack_lines(stack, elide_internals=None):
    if elide_internals is None:
        elide_internals = tracebacks_elide_internals
    eliding = False
    lines = []
    for frame in stack:
        if not elide_internals or not _is_internal(frame.filename):
            eliding = False
            lines.append("  File %s, line %s, in %s\n    %s" %
                         (frame.filename, frame.lineno, frame.name,
                          (frame.line or "").strip()))
        elif not eliding:
            eliding = True
            lines.append("  -- eliding lorgnette internals --")
    return lines


def format_tb(e, elide_internals=None):
    stack = traceback.extract_tb(e.__traceback__)
    last = ''.join(traceback.format_exception_only(type(e), e)).rstrip()
    lines = ["Traceback (most recent call last):"]
    lines += format_stack_lines(stack, elide_internals)
    lines.append(last)
    return '\n'.join(lines)


def log_exception(e=None, elide_internals=None):
    if e is None:
        e = sys.exc_info()[1]
    log.error("%s\n%s", str(e), format_tb(e, elide_internals=elide_internals))


def _default_scheduler():
    from lorgnette.stack import eventloop
    return eventloop


class Driver:
    """
    Steps one suspendable computation to completion, and reports how it
    ended through a single Deferred.

    Every time the computation suspends, the payload is turned into a
    Deferred with to_deferred().  When that Deferred settles, the next
    step is queued on the scheduler, which resumes the computation with
    the value, or raises the error inside it.  Payloads that are already
    settled are fed straight back in without going through the queue.

    A Driver is used once: call start() and keep the Deferred it returns.
    """

    def __init__(self, factory, scheduler=None):
        self._factory = factory
        self._scheduler = scheduler
        self._computation = None
        self.state = STARTING
        self.result = Deferred()

    def __repr__(self):
        return "<%s %s %r>" % (type(self).__name__, self.state,
                               self._computation)

    def start(self, initial=None):
        if self.state != STARTING or self._computation is not None:
            raise DriverStateError("%r already started" % self)
        try:
            self._computation = as_computation(self._factory())
        except Exception as e:
            self._reject(e)
            return self.result

        self._queue(self._step, initial, False)
        return self.result

    def _queue(self, f, *args):
        scheduler = self._scheduler or _default_scheduler()
        scheduler.queue_task(0, f, *args)

    def _resume(self, value):
        self._queue(self._step, value, False)

    def _throw(self, error):
        self._queue(self._step, error, True)

    def _step(self, to_comp, is_error):
        # Repeatedly yielding already settled Deferreds would otherwise
        # recurse without bound, so the recursion is unfolded into this
        # loop.
        while True:
            if self.state not in (STARTING, WAITING):
                raise DriverStateError("%r stepped while %s" %
                                       (self, self.state))
            self.state = STEPPING

            start = time.time()
            try:
                if is_error:
                    outcome = self._computation.resume_with_error(to_comp)
                else:
                    outcome = self._computation.resume_with_value(to_comp)
            except ResumeError:
                raise
            except Exception as e:
                outcome = Failed(e)
            finally:
                duration = (time.time() - start) * 1000
                if duration > blocking_warn_threshold:
                    log.warning("%r blocked for %dms",
                                self._computation, duration)

            if isinstance(outcome, Finished):
                self._fulfill(outcome.value)
                return
            elif isinstance(outcome, Failed):
                self._reject(outcome.error)
                return

            self.state = WAITING
            try:
                d = to_deferred(outcome.payload)
            except Exception as e:
                d = failed(e)
            if not d.is_settled():
                d.subscribe(self._resume, self._throw)
                return

            if d.state == REJECTED:
                to_comp, is_error = d.error, True
            else:
                to_comp, is_error = d.value, False

    def _fulfill(self, value):
        self.state = SETTLED
        self._computation = None
        self.result.fulfill(value)

    def _reject(self, error):
        self.state = SETTLED
        self._computation = None
        self.result.reject(error)


def drive(factory, initial=None, scheduler=None):
    """
    Run the computation ``factory()`` returns, and return a Deferred for
    its outcome.

    The factory is called right away; the computation itself starts on
    the next turn of the scheduler (the current event loop by default).
    """
    return Driver(factory, scheduler=scheduler).start(initial)


def maybe_drive(f, *args, **kw):
    try:
        result = f(*args, **kw)
    except Exception as e:
        return failed(e)

    if isinstance(result, Computation) or inspect.isgenerator(result) or \
       inspect.iscoroutine(result):
        return drive(lambda: result)
    return to_deferred(result)


# @_o
def _o(f):
    """
    lorgnette helps you write Deferred-using code that looks like a
    regular sequential function.  For example::

        @_o
        def foo():
            result = yield make_some_request_resulting_in_deferred()
            print(result)

    When you call anything that results in a Deferred, you can simply
    yield it; your generator will be resumed when the Deferred settles.
    The generator is sent the value with 'send', or if the Deferred was
    rejected, the error is raised at the yield with 'throw'.  Yielding
    anything that isn't deferred-shaped resumes the generator with that
    same value.

    Calling foo() returns a Deferred, which is fulfilled with the
    return value of the generator (``return result`` or ``yield
    Return(result)``), or rejected with any exception the generator
    doesn't handle::

        @_o
        def foo():
            result = yield make_some_request_resulting_in_deferred()
            if result == 'foo':
                # this will become the value of the Deferred
                return 'success'
            else:
                # this will become its error
                raise Exception('fail')

    ``async def`` functions work too, awaiting Deferreds instead of
    yielding them.
    """
    @functools.wraps(f)
    def unwind_generator(*args, **kwargs):
        return maybe_drive(f, *args, **kwargs)
    return unwind_generator
o = _o


def launch(f, *args, **kwargs):
    """Call f without waiting for it, logging whatever it fails with."""
    elide_internals = kwargs.pop('elide_internals', tracebacks_elide_internals)
    try:
        result = f(*args, **kwargs)
    except (ResumeError, DriverStateError):
        raise
    except Exception as e:
        log_exception(e, elide_internals=elide_internals)
        return None

    if is_thenable(result):
        d = to_deferred(result)
        d.subscribe(None, functools.partial(log_exception,
                                            elide_internals=elide_internals))
        return d
    return result
