from twisted.python.failure import Failure
from twisted.internet.defer import Deferred


def deferred_to_df(d):
    """Hand a lorgnette Deferred to code that expects a Twisted one."""
    df = Deferred()
    d.subscribe(df.callback, lambda e: df.errback(Failure(e)))
    return df
