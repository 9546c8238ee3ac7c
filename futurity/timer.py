"""One-shot timers, which call a callback after some number of milliseconds

A timer fires its callback exactly once, no earlier than the requested delay,
and can't be cancelled.

Under trio we use TrioTimer, which sleeps in a separate trio task, so other
futures keep making progress while the timer is waiting.

Outside of trio there is nothing else to run in the meantime, and there's no
default timer: combinators which need to wait raise NoDefaultTimer unless they
are passed a timer or one was set with `set_default_timer`. BlockingTimer is
available for that, but since it sleeps inline, each timer fires before the
next one is even scheduled. That means `race` and `timeout` over
BlockingTimer delays settle in construction order, not in order of duration;
`timeout(delay(1000), 10)` sleeps for a second and then fulfills.

"""
from __future__ import annotations
from futurity.exceptions import NoDefaultTimer
import abc
import logging
import time
import trio
import typing as t

__all__ = [
    'Timer',
    'TrioTimer',
    'BlockingTimer',
    'set_default_timer',
    'get_default_timer',
    'is_running_under_trio',
]

logger = logging.getLogger(__name__)

class Timer(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def schedule(self, ms: float, callback: t.Callable[[], None]) -> None:
        "Call `callback` with no arguments, once, at least `ms` milliseconds from now."
        pass

class TrioTimer(Timer):
    """A Timer which waits in a trio task

    If `nursery` is passed, the waiting tasks are started in it, and so are
    cancelled (never firing) if the nursery is cancelled. Otherwise they are
    started as trio system tasks.

    This must be used from inside the trio run, on the trio thread; the
    callbacks are called on the trio thread as well.

    """
    def __init__(self, nursery: t.Optional[trio.Nursery]=None) -> None:
        self.nursery = nursery

    def schedule(self, ms: float, callback: t.Callable[[], None]) -> None:
        if self.nursery is not None:
            self.nursery.start_soon(self._fire, ms, callback)
        else:
            trio.lowlevel.spawn_system_task(self._fire, ms, callback)

    async def _fire(self, ms: float, callback: t.Callable[[], None]) -> None:
        await trio.sleep(max(ms, 0) / 1000)
        logger.debug("TrioTimer(%s): firing %s after %sms", self.nursery, callback, ms)
        callback()

class BlockingTimer(Timer):
    """A Timer which blocks the caller of `schedule` until the time has elapsed

    This is never used unless asked for, with `set_default_timer` or by
    passing it to a combinator. Since `schedule` only returns after the
    callback has run, timers fire in the order they were scheduled, whatever
    their durations.

    """
    def schedule(self, ms: float, callback: t.Callable[[], None]) -> None:
        time.sleep(max(ms, 0) / 1000)
        logger.debug("BlockingTimer: firing %s after %sms", callback, ms)
        callback()

def is_running_under_trio() -> bool:
    try:
        trio.lowlevel.current_task()
    except RuntimeError:
        return False
    return True

_default_timer: t.Optional[Timer] = None

def set_default_timer(timer: t.Optional[Timer]) -> None:
    "Use this timer whenever a combinator isn't passed an explicit one; None restores the automatic choice."
    global _default_timer
    _default_timer = timer

def get_default_timer() -> Timer:
    "Get the timer to use when a combinator isn't passed one; outside trio, one must have been set."
    if _default_timer is not None:
        return _default_timer
    if is_running_under_trio():
        return TrioTimer()
    raise NoDefaultTimer(
        "not running under trio and no default timer is set; pass timer=, "
        "or call set_default_timer (for example with BlockingTimer())")
