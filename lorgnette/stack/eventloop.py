# The event loop of whichever stack lorgnette.init() picked.

import importlib

import lorgnette

_stack = importlib.import_module("lorgnette.%s_stack.eventloop" %
                                 lorgnette.get_stack_name())

evlp = _stack.evlp
queue_task = evlp.queue_task
run = evlp.run
halt = evlp.halt
