"""Writing future-based code as straight-line coroutines

`wrap` turns an `async def` routine into a function returning a Future. Inside
the routine, `await suspend(fut)` (or just `await fut`) pauses the routine
until `fut` settles, then either returns the fulfilled value or raises the
rejection reason at that point, where it can be caught as usual.

```
@wrap
async def fetch_both(a, b):
    x = await suspend(a)
    y = await b
    return x + y

fetch_both(resolve(1), delay(10).then(lambda _: 2))  # a Future for 3
```

There's no event loop here. When the routine suspends on a pending future,
control returns synchronously to whoever called the driver (or whoever settled
the previous future), and the routine is resumed, synchronously, by whatever
call later settles that future.

"""
from __future__ import annotations
from futurity.core import Future, State, is_future, _work_list
from futurity.exceptions import SuspendOutsideContext, NonFutureYielded, exception_of, reason_of
import enum
import functools
import inspect
import logging
import outcome
import types
import typing as t

__all__ = [
    'Status',
    'SequencerContext',
    'wrap',
    'suspend',
    'current_context',
]

logger = logging.getLogger(__name__)

T = t.TypeVar('T')

class Status(enum.Enum):
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    FAILED = "failed"

def current_context() -> t.Optional[SequencerContext]:
    "The context whose routine is executing right now, if any."
    return _work_list.running_context

class SequencerContext(t.Generic[T]):
    """One execution of a wrapped routine, driving it to completion

    Each call of a wrapped routine makes a new SequencerContext; contexts are
    never shared between calls. The context is the executor for its own
    result future, so stepping starts as soon as the result future is made.

    """
    def __init__(self, coro: t.Coroutine[t.Any, t.Any, T], name: str) -> None:
        self.coro = coro
        self.name = name
        self.status = Status.RUNNING
        self._resolve: t.Optional[t.Callable[[T], None]] = None
        self._reject: t.Optional[t.Callable[[t.Any], None]] = None

    def __repr__(self) -> str:
        return f"SequencerContext({self.name}, {self.status.value})"

    def start(self, resolve: t.Callable[[T], None], reject: t.Callable[[t.Any], None]) -> None:
        self._resolve = resolve
        self._reject = reject
        self.step(outcome.Value(None))

    def _complete(self, value: T) -> None:
        self.status = Status.COMPLETED
        logger.debug("%s: returned %r", self, value)
        self._resolve(value) # type: ignore

    def _fail(self, reason: t.Any) -> None:
        self.status = Status.FAILED
        logger.debug("%s: failed with %r", self, reason)
        self._reject(reason) # type: ignore

    def step(self, resumption: outcome.Outcome) -> None:
        """Resume the routine with this outcome, and keep it going until it finishes or blocks.

        When the routine suspends on a future which has already settled, we
        loop right here and resume it again, rather than registering a
        callback, so a routine working through many settled futures doesn't
        grow the stack.

        """
        while True:
            previous_context = _work_list.running_context
            _work_list.running_context = self
            self.status = Status.RUNNING
            finished: t.Optional[outcome.Outcome]
            try:
                if isinstance(resumption, outcome.Value):
                    yielded = self.coro.send(resumption.value)
                else:
                    yielded = self.coro.throw(resumption.error)
            except StopIteration as e:
                finished = outcome.Value(e.value)
            except BaseException as e:
                finished = outcome.Error(e)
            else:
                finished = None
            finally:
                _work_list.running_context = previous_context
            # settle only with the previous marker restored
            if isinstance(finished, outcome.Value):
                self._complete(finished.value)
                return
            elif isinstance(finished, outcome.Error):
                self._fail(reason_of(finished.error))
                if not isinstance(finished.error, Exception):
                    finished.unwrap()
                return
            if not is_future(yielded):
                self.coro.close()
                self._fail(NonFutureYielded(
                    f"{self.name} yielded a non-future value: {yielded!r}"))
                return
            future: Future[t.Any] = yielded
            if future.state is not State.PENDING:
                resumption = future.outcome()
                continue
            self.status = Status.SUSPENDED
            logger.debug("%s: suspended on %s", self, future)
            future.then(self._resume_with_value)
            future.catch(self._resume_with_reason)
            return

    def _resume_with_value(self, value: t.Any) -> None:
        self.step(outcome.Value(value))

    def _resume_with_reason(self, reason: t.Any) -> None:
        self.step(outcome.Error(exception_of(reason)))

def wrap(routine: t.Callable[..., t.Awaitable[T]]) -> t.Callable[..., Future[T]]:
    """Turn this `async def` function into one which runs it and returns a Future for its result.

    The routine starts running immediately, inside the call, and runs until
    it first suspends on a pending future.

    """
    if not inspect.iscoroutinefunction(routine):
        raise TypeError("wrap expects an async def function", routine)
    @functools.wraps(routine)
    def driver(*args: t.Any, **kwargs: t.Any) -> Future[T]:
        context = SequencerContext[T](routine(*args, **kwargs), routine.__qualname__)
        return Future(context.start)
    return driver

@types.coroutine
def _suspend_on(future: Future[T]) -> t.Generator[Future[T], t.Any, T]:
    return (yield future)

def suspend(value_or_executor: t.Union[Future[T], t.Callable[[t.Callable[[T], None], t.Callable[[t.Any], None]], t.Any]]
) -> t.Awaitable[T]:
    """Pause the running routine until this future settles; use as `await suspend(fut)`.

    If passed a function instead of a future, it's used as the executor for a
    new Future, which we then suspend on.

    This can only be called while a wrapped routine is running.

    """
    if _work_list.running_context is None:
        raise SuspendOutsideContext("suspend can only be called from inside a wrapped routine")
    if is_future(value_or_executor):
        future = t.cast(Future[T], value_or_executor)
    elif callable(value_or_executor):
        future = Future(value_or_executor)
    else:
        raise TypeError("suspend expects a Future or an executor function", value_or_executor)
    return _suspend_on(future)
