import sys
import threading

from lorgnette import launch

# prefer fast reactors
if "twisted.internet.reactor" not in sys.modules:
    for name in ('epollreactor', 'kqreactor', 'pollreactor'):
        try:
            module = __import__('twisted.internet.' + name,
                                fromlist=['install'])
            module.install()
        except ImportError:
            continue
        break

from twisted.internet import reactor
from twisted.internet.error import ReactorNotRunning


class Task:
    def __init__(self, delay, callable, args, kw):
        self._delay = delay
        self._callable = callable
        self._args = args
        self._kw = kw
        self._call = None
        self.cancelled = False

    def schedule(self):
        # runs on the reactor thread
        if not self.cancelled:
            self._call = reactor.callLater(self._delay, launch, self._callable,
                                           *self._args, **self._kw)

    def cancel(self):
        self.cancelled = True
        if self._call is not None and self._call.active():
            self._call.cancel()


class EventLoop:
    _instantiated = False

    def __init__(self):
        if EventLoop._instantiated:
            raise RuntimeError("Twisted can only have one EventLoop (reactor)")
        EventLoop._instantiated = True
        self._halted = False
        self._thread_ident = threading.get_ident()

    def queue_task(self, delay, callable, *args, **kw):
        task = Task(delay, callable, args, kw)
        if threading.get_ident() != self._thread_ident:
            reactor.callFromThread(task.schedule)
        else:
            task.schedule()
        return task

    def run(self):
        if self._halted:
            self._halted = False
            return
        self._thread_ident = threading.get_ident()
        reactor.run()

    def halt(self):
        try:
            reactor.stop()
        except ReactorNotRunning:
            self._halted = True

evlp = EventLoop()
queue_task = evlp.queue_task
run = evlp.run
halt = evlp.halt
