import heapq
import itertools
import threading
import time

from lorgnette import launch


class Task:
    def __init__(self, callable, args, kw):
        self._callable = callable
        self._args = args
        self._kw = kw
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def __call__(self):
        if not self.cancelled:
            launch(self._callable, *self._args, **self._kw)


class EventLoop:
    def __init__(self):
        self._halted = False
        self._queue = []
        self._counter = itertools.count()
        self._condition = threading.Condition()

    def queue_task(self, delay, callable, *args, **kw):
        when = time.monotonic() + delay
        task = Task(callable, args, kw)
        with self._condition:
            # the counter keeps tasks due at the same time in FIFO order
            heapq.heappush(self._queue, (when, next(self._counter), task))
            self._condition.notify()
        return task

    def run(self):
        while True:
            with self._condition:
                if self._halted:
                    self._halted = False
                    return
                if not self._queue:
                    self._condition.wait()
                    continue
                timeout = self._queue[0][0] - time.monotonic()
                if timeout > 0:
                    self._condition.wait(timeout)
                    continue
                task = heapq.heappop(self._queue)[2]
            task()

    def halt(self):
        with self._condition:
            self._halted = True
            self._condition.notify()

evlp = EventLoop()
queue_task = evlp.queue_task
run = evlp.run
halt = evlp.halt
