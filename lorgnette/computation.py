import inspect
import types


class Return:
    def __init__(self, *args):
        # mimic the semantics of the return statement
        if len(args) == 0:
            self.value = None
        elif len(args) == 1:
            self.value = args[0]
        else:
            self.value = args

    def __repr__(self):
        return "<%s.%s object at 0x%x; value: %s>" % (self.__class__.__module__,
                                                      self.__class__.__name__,
                                                      id(self),
                                                      repr(self.value))


class ResumeError(Exception):
    """A computation was resumed while finished or already running."""


class Suspended:
    def __init__(self, payload):
        self.payload = payload

    def __repr__(self):
        return "Suspended(%r)" % (self.payload,)


class Finished:
    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return "Finished(%r)" % (self.value,)


class Failed:
    def __init__(self, error):
        self.error = error

    def __repr__(self):
        return "Failed(%r)" % (self.error,)


class Computation:
    """
    Something that can pause, and later be resumed from exactly where
    it paused.

    Each resume returns one of Suspended(payload), Finished(value) or
    Failed(error).  resume_with_error raises the error at the point
    where the computation paused, so its own try/except sees it.
    """

    def resume_with_value(self, value):
        raise NotImplementedError("Subclasses must implement this method.")

    def resume_with_error(self, error):
        raise NotImplementedError("Subclasses must implement this method.")


class GeneratorComputation(Computation):
    def __init__(self, generator):
        self._generator = generator
        self._running = False
        self._started = False
        self.finished = False

    def __repr__(self):
        name = getattr(self._generator, '__qualname__',
                       type(self._generator).__name__)
        frame = (getattr(self._generator, 'gi_frame', None) or
                 getattr(self._generator, 'cr_frame', None))
        if inspect.isframe(frame):
            fi = inspect.getframeinfo(frame, context=0)
            return "<%s %r at %s:%s>" % (type(self).__name__, name,
                                         fi.filename, fi.lineno)
        return "<%s %r>" % (type(self).__name__, name)

    def resume_with_value(self, value):
        if not (self._started or self.finished) and value is not None:
            # a generator has nowhere to put a value until its first yield
            self.finished = True
            self._generator.close()
            return Failed(TypeError(
                "%r can only be started with None, not %r" % (self, value)))
        return self._resume(self._generator.send, value)

    def resume_with_error(self, error):
        return self._resume(self._generator.throw, error)

    def _resume(self, method, arg):
        if self.finished:
            raise ResumeError("%r resumed after it finished" % self)
        if self._running:
            raise ResumeError("%r resumed while already running" % self)

        self._running = True
        self._started = True
        try:
            from_gen = method(arg)
        except StopIteration as stop:
            # "return" statement (or fell off the end of the generator)
            self.finished = True
            return Finished(stop.value)
        except Exception as e:
            self.finished = True
            return Failed(e)
        finally:
            self._running = False

        if isinstance(from_gen, Return):
            self.finished = True
            try:
                self._generator.close()
            except Exception as e:
                return Failed(e)
            return Finished(from_gen.value)
        return Suspended(from_gen)


def as_computation(obj):
    if isinstance(obj, Computation):
        return obj
    if isinstance(obj, types.GeneratorType) or inspect.iscoroutine(obj):
        return GeneratorComputation(obj)
    raise TypeError("expected a generator, coroutine or Computation, got %r" %
                    (obj,))
