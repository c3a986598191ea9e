import threading

import tornado.ioloop

from lorgnette import launch


class Task:
    def __init__(self, tornado_ioloop):
        self._tornado_ioloop = tornado_ioloop
        self._timeout = None
        self.cancelled = False

    def schedule(self, delay, callable, args, kw):
        # runs on the IOLoop thread
        def task():
            return launch(callable, *args, **kw)
        if not self.cancelled:
            self._timeout = self._tornado_ioloop.call_later(delay, task)

    def cancel(self):
        self.cancelled = True
        if self._timeout is not None:
            self._tornado_ioloop.remove_timeout(self._timeout)


class EventLoop:
    def __init__(self):
        self._tornado_ioloop = tornado.ioloop.IOLoop.current()
        self._thread_ident = threading.get_ident()

    def queue_task(self, delay, callable, *args, **kw):
        task = Task(self._tornado_ioloop)
        if threading.get_ident() != self._thread_ident:
            self._tornado_ioloop.add_callback(task.schedule, delay, callable,
                                              args, kw)
        else:
            task.schedule(delay, callable, args, kw)
        return task

    def run(self):
        self._tornado_ioloop.start()

    def halt(self):
        self._tornado_ioloop.stop()

evlp = EventLoop()
queue_task = evlp.queue_task
run = evlp.run
halt = evlp.halt
