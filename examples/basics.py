import sys

import lorgnette
from lorgnette import _o, Return
lorgnette.init(sys.argv[1] if len(sys.argv) > 1 else 'basic')

from lorgnette.stack import eventloop

@_o
def square(x):
    yield Return(x*x)
    print("not reached")

@_o
def fail():
    raise Exception("boo")
    print((yield square(2)))

@_o
def plain_value():
    # anything that isn't deferred-shaped comes straight back
    value = yield "just a string"
    return value

@_o
def main():
    value = yield square(5)
    print(value)
    try:
        yield fail()
    except Exception as e:
        print("Caught exception:", type(e), str(e))

    print((yield plain_value()))
    eventloop.halt()

lorgnette.launch(main)
eventloop.run()
