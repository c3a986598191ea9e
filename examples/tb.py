import sys

import lorgnette
lorgnette.init(sys.argv[1] if len(sys.argv) > 1 else 'basic')
from lorgnette import _o, launch
from lorgnette.util import sleep
from lorgnette.stack import eventloop

def die():
  raise Exception("boom")

@_o
def fifth():
  die()

def fourth():
  return fifth()

@_o
def third():
  yield fourth()

def second():
  return third()

@_o
def first():
  yield second()

@_o
def first_evlp():
  try:
    yield sleep(1)
    yield launch(second)
  finally:
    eventloop.halt()

launch(first)
eventloop.queue_task(0, first_evlp)
eventloop.run()
