# -*- coding: utf-8 -*-

from collections import deque

from lorgnette.deferred import Deferred
from lorgnette.stack.eventloop import queue_task
from lorgnette import _o


# Go-style channels
class Channel:
    def __init__(self, bufsize=0):
        self.bufsize = bufsize
        self._msgs = deque()
        self._recv_ds = deque()
        # blocked senders, as (deferred, value), oldest first
        self._send_ds = deque()

    @_o
    def send(self, value):
        if self._recv_ds:
            # if there are receivers waiting, send to the first one
            rd = self._recv_ds.popleft()
            queue_task(0, rd.fulfill, value)
        elif len(self._msgs) < self.bufsize and not self._send_ds:
            # if there's available buffer, use that
            self._msgs.append(value)
        else:
            # otherwise, wait behind the other blocked senders
            d = Deferred()
            self._send_ds.append((d, value))
            yield d

    @_o
    def recv(self):
        # if there's buffer, read it, and let the first blocked sender
        # into the space that frees up
        if self._msgs:
            value = self._msgs.popleft()
            if self._send_ds:
                d, waiting = self._send_ds.popleft()
                self._msgs.append(waiting)
                d.fulfill(None)
            return value

        # otherwise take straight from a blocked sender
        if self._send_ds:
            d, value = self._send_ds.popleft()
            d.fulfill(None)
            return value

        # otherwise wait for a sender
        rd = Deferred()
        self._recv_ds.append(rd)
        value = yield rd
        return value
