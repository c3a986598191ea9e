from lorgnette.stack.eventloop import queue_task
from lorgnette.deferred import Deferred


def sleep(seconds):
    d = Deferred()
    queue_task(seconds, d.fulfill, None)
    return d
