"""Functions building new futures out of values, other futures, and time

None of these cancel anything. A future which loses a `race`, or which is
still pending when `all_of` fails, or which outlives its `timeout`, keeps
running; its eventual outcome just isn't observed by the combined future.

"""
from __future__ import annotations
from futurity.core import Future, is_future
from futurity.exceptions import FutureTimeout, reason_of
from futurity.timer import Timer, get_default_timer
import logging
import outcome
import typing as t

__all__ = [
    'DEFAULT_RETRY_ATTEMPTS',
    'DEFAULT_RETRY_DELAY_MS',
    'resolve',
    'reject',
    'all_of',
    'race',
    'delay',
    'timeout',
    'retry',
]

logger = logging.getLogger(__name__)

T = t.TypeVar('T')

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 1000

def resolve(value: T=None) -> Future[T]:
    "Return a future already fulfilled with `value`."
    return Future(lambda resolve, reject: resolve(value))

def reject(reason: t.Any) -> Future[t.Any]:
    "Return a future already rejected with `reason`."
    return Future(lambda resolve, reject: reject(reason))

def _as_future(value: t.Any) -> Future[t.Any]:
    return value if is_future(value) else resolve(value)

def all_of(futures: t.Iterable[t.Any]) -> Future[t.List[t.Any]]:
    """Return a future for the list of values of all these futures, in order.

    If any of them is rejected, the returned future is rejected with the first
    reason to arrive, and the other values are discarded. An empty iterable
    gives a future already fulfilled with the empty list.

    """
    inputs = [_as_future(fut) for fut in futures]
    def executor(resolve: t.Callable[[t.Any], None], reject: t.Callable[[t.Any], None]) -> None:
        if not inputs:
            resolve([])
            return
        results: t.List[t.Any] = [None]*len(inputs)
        remaining = len(inputs)
        def on_fulfilled(i: int, value: t.Any) -> None:
            nonlocal remaining
            results[i] = value
            remaining -= 1
            if remaining == 0:
                resolve(results)
        for i, fut in enumerate(inputs):
            fut.then(lambda value, i=i: on_fulfilled(i, value)).catch(reject)
    return Future(executor)

def race(futures: t.Iterable[t.Any]) -> Future[t.Any]:
    """Return a future settled the same way as whichever of these futures settles first.

    An empty iterable gives a future which never settles.

    Which future "settles first" depends on the timers behind them: under
    trio, delays settle in order of duration, but with BlockingTimer every
    delay has already settled by the time it's passed here, so the earliest
    one in `futures` wins.

    """
    inputs = [_as_future(fut) for fut in futures]
    if not inputs:
        logger.debug("race: no futures passed, so the result will never settle")
    def executor(resolve: t.Callable[[t.Any], None], reject: t.Callable[[t.Any], None]) -> None:
        for fut in inputs:
            fut.then(resolve).catch(reject)
    return Future(executor)

def delay(ms: float, timer: t.Optional[Timer]=None) -> Future[None]:
    """Return a future fulfilled with None after at least `ms` milliseconds.

    Raises NoDefaultTimer outside trio if there's no `timer` and no default timer.

    """
    timer = timer or get_default_timer()
    return Future(lambda resolve, reject: timer.schedule(ms, lambda: resolve(None)))

def timeout(future: Future[T], ms: float, timer: t.Optional[Timer]=None) -> Future[T]:
    """Return a future settled like `future`, or rejected with FutureTimeout after `ms` milliseconds.

    Whichever happens first wins; `future` itself keeps running either way.

    Outside trio, `timer` or a default set with `set_default_timer` is
    required, or this raises NoDefaultTimer. With BlockingTimer the deadline
    only starts after `future` was built, so a `future` made from a
    BlockingTimer delay always wins.

    """
    timer = timer or get_default_timer()
    deadline: Future[t.Any] = Future(
        lambda resolve, reject: timer.schedule(ms, lambda: reject(FutureTimeout(ms))))
    return race([future, deadline])

def _attempt(producer: t.Union[Future[T], t.Callable[[], t.Any]]) -> Future[t.Any]:
    if is_future(producer):
        return producer
    result = outcome.capture(producer)
    if isinstance(result, outcome.Error):
        return reject(reason_of(result.error))
    return _as_future(result.value)

def retry(producer: t.Union[Future[T], t.Callable[[], t.Any]],
          max_attempts: int=DEFAULT_RETRY_ATTEMPTS,
          delay_ms: float=DEFAULT_RETRY_DELAY_MS,
          timer: t.Optional[Timer]=None,
) -> Future[T]:
    """Return a future for the first successful attempt, trying up to `max_attempts` times.

    `producer` is normally a zero-argument function, called once per attempt
    to start a fresh attempt. The first attempt starts immediately; after each
    rejection we wait `delay_ms` milliseconds before the next attempt. Once
    `max_attempts` attempts have been rejected, the returned future is
    rejected with the reason from the last one.

    If `producer` is a future rather than a function, every attempt reuses
    that same future. Once it's rejected, each further attempt is rejected
    immediately with the same reason, until `max_attempts` is used up.

    """
    timer = timer or get_default_timer()
    def executor(resolve: t.Callable[[t.Any], None], reject: t.Callable[[t.Any], None]) -> None:
        attempts = 0
        def try_once(_: t.Any=None) -> None:
            nonlocal attempts
            attempts += 1
            logger.debug("retry(%s): starting attempt %d of %d", producer, attempts, max_attempts)
            _attempt(producer).then(resolve).catch(on_rejected)
        def on_rejected(reason: t.Any) -> None:
            if attempts >= max_attempts:
                logger.debug("retry(%s): giving up after %d attempts: %r", producer, attempts, reason)
                reject(reason)
            else:
                delay(delay_ms, timer).then(try_once)
        try_once()
    return Future(executor)
