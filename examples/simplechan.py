import sys

import lorgnette
from lorgnette import _o
lorgnette.init(sys.argv[1] if len(sys.argv) > 1 else 'basic')

from lorgnette.stack import eventloop
from lorgnette.experimental import Channel

@_o
def main():
    s = 2
    ch = Channel(s)
    for i in range(s):
        print(i)
        yield ch.send(i)

    print(ch.bufsize, len(ch._msgs))
    for i in range(s):
        print((yield ch.recv()))
    print("done")
    eventloop.halt()

lorgnette.launch(main)
eventloop.run()
