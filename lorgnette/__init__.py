VERSION = '0.1.0'

DEFAULT_STACK = 'basic'

_stack_name = None


def init(stack_name):
    global _stack_name
    import sys
    if ('lorgnette.stack.eventloop' in sys.modules and
        get_stack_name() != stack_name):
        raise RuntimeError("lorgnette stack is already '%s'" % get_stack_name())
    _stack_name = stack_name


def get_stack_name():
    return _stack_name or DEFAULT_STACK


from lorgnette.deferred import Deferred, defer, failed, to_deferred
from lorgnette.computation import Return, Computation, GeneratorComputation
from lorgnette.core import _o, o, drive, Driver, launch, log_exception
