"""Exceptions raised by futurity, and conversion between reasons and exceptions

A Future may be rejected with any value at all as its reason. When a rejection
has to be raised, because a sequenced routine or a trio task is waiting on the
future, we need an exception; when an exception escapes a handler or a routine,
we need a reason. `exception_of` and `reason_of` are inverses, so a reason
which passes through a routine comes out the other side unchanged.

"""
import typing as t

__all__ = [
    'FuturityError',
    'Rejection',
    'SuspendOutsideContext',
    'NonFutureYielded',
    'FutureTimeout',
    'NoDefaultTimer',
    'exception_of',
    'reason_of',
]

class FuturityError(Exception):
    pass

class Rejection(FuturityError):
    """A future was rejected with a reason which isn't an exception.

    The original reason is available as `reason`.

    """
    def __init__(self, reason: t.Any) -> None:
        super().__init__(reason)
        self.reason = reason

class SuspendOutsideContext(FuturityError, RuntimeError):
    "suspend was called without a sequenced routine currently running"
    pass

class NonFutureYielded(FuturityError, TypeError):
    "A sequenced routine yielded something other than a Future to its driver"
    pass

class FutureTimeout(FuturityError, TimeoutError):
    "The reason a future produced by `timeout` is rejected with"
    def __init__(self, ms: float) -> None:
        super().__init__("timeout")
        self.ms = ms

    def __repr__(self) -> str:
        return f"FutureTimeout(ms={self.ms!r})"

class NoDefaultTimer(FuturityError, RuntimeError):
    "A timer was needed outside of trio, but none was passed and no default was set"
    pass

def exception_of(reason: t.Any) -> BaseException:
    "Get something we can raise for this rejection reason."
    if isinstance(reason, BaseException):
        return reason
    return Rejection(reason)

def reason_of(exn: BaseException) -> t.Any:
    "Get the rejection reason corresponding to this raised exception."
    if isinstance(exn, Rejection):
        return exn.reason
    return exn
