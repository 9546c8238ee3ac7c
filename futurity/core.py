"""The Future state machine

A Future starts out pending and settles exactly once, either fulfilled with a
value or rejected with a reason. Callbacks registered with `then` and `catch`
run synchronously: there's no task queue and no event loop tick, a callback
runs inside whatever call caused the settlement (or inside `then`/`catch`
itself, if the future had already settled). So the order in which callbacks
run is exactly the order in which settlements actually happen.

To keep long chains of futures from growing the Python stack, all callbacks
are run from a single work-list. The outermost call which settles a future
drains the work-list before returning; any settlements which happen while
draining just append more work. Callbacks still run before the outermost call
returns, but a callback which settles another future returns before the
callbacks of that other future run.

"""
from __future__ import annotations
from futurity.exceptions import exception_of, reason_of
import collections
import enum
import functools
import logging
import outcome
import typing as t

__all__ = [
    'State',
    'Future',
    'is_future',
]

logger = logging.getLogger(__name__)

T = t.TypeVar('T')
U = t.TypeVar('U')

Callback = t.Callable[[t.Any], None]
Executor = t.Callable[[t.Callable[[T], None], t.Callable[[t.Any], None]], t.Any]

class State(enum.Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"

class _WorkList:
    "The single queue of callbacks waiting to be run, drained by the outermost caller"
    def __init__(self) -> None:
        self._work: t.Deque[t.Tuple[Callback, t.Any]] = collections.deque()
        self._draining = False
        # The sequencer context whose routine is executing, if any; always None
        # while callbacks run.
        self.running_context: t.Any = None

    def run(self, callbacks: t.Iterable[Callback], value: t.Any) -> None:
        self._work.extend((cb, value) for cb in callbacks)
        if self._draining:
            return
        self._draining = True
        previous_context, self.running_context = self.running_context, None
        try:
            while self._work:
                cb, arg = self._work.popleft()
                cb(arg)
        finally:
            self._draining = False
            self.running_context = previous_context

_work_list = _WorkList()

class Future(t.Generic[T]):
    """A value which will eventually be either fulfilled or rejected

    `executor` is called immediately, before the constructor returns, with two
    functions: one which fulfills this future with its argument, and one which
    rejects it with its argument. Whatever `executor` returns is ignored. If
    `executor` raises, the exception propagates out of the constructor.

    """
    def __init__(self, executor: Executor[T]) -> None:
        self._state = State.PENDING
        self._value: t.Any = None
        self._on_fulfilled: t.List[Callback] = []
        self._on_rejected: t.List[Callback] = []
        executor(self.resolve, self.reject)

    @property
    def state(self) -> State:
        return self._state

    @property
    def value(self) -> t.Any:
        "The fulfilled value or the rejection reason; None while pending."
        return self._value

    def resolve(self, value: T) -> None:
        "Fulfill this future with `value`, if it's still pending; otherwise, do nothing."
        if self._state is not State.PENDING:
            logger.debug("%s: ignoring resolve with %r", self, value)
            return
        self._state = State.FULFILLED
        self._value = value
        callbacks = self._on_fulfilled
        self._on_fulfilled, self._on_rejected = [], []
        logger.debug("%s: fulfilled, running %d callbacks", self, len(callbacks))
        _work_list.run(callbacks, value)

    def reject(self, reason: t.Any) -> None:
        "Reject this future with `reason`, if it's still pending; otherwise, do nothing."
        if self._state is not State.PENDING:
            logger.debug("%s: ignoring reject with %r", self, reason)
            return
        self._state = State.REJECTED
        self._value = reason
        callbacks = self._on_rejected
        self._on_fulfilled, self._on_rejected = [], []
        logger.debug("%s: rejected, running %d callbacks", self, len(callbacks))
        _work_list.run(callbacks, reason)

    def _subscribe(self, on_fulfilled: Callback, on_rejected: Callback) -> None:
        if self._state is State.PENDING:
            self._on_fulfilled.append(on_fulfilled)
            self._on_rejected.append(on_rejected)
        elif self._state is State.FULFILLED:
            _work_list.run([on_fulfilled], self._value)
        else:
            _work_list.run([on_rejected], self._value)

    def then(self, handler: t.Callable[[T], t.Any]) -> Future[t.Any]:
        """Return a future for the result of calling `handler` on our value once we're fulfilled.

        If we're rejected, `handler` is never called, and the returned future
        is rejected with the same reason.

        If we're already fulfilled, `handler` is called before this returns;
        except when `then` is itself called from inside another callback, in
        which case `handler` runs right after that callback returns.

        """
        def executor(resolve: t.Callable[[t.Any], None], reject: t.Callable[[t.Any], None]) -> None:
            self._subscribe(functools.partial(_settle_from_handler, handler, resolve, reject), reject)
        return Future(executor)

    def catch(self, handler: t.Callable[[t.Any], t.Any]) -> Future[t.Any]:
        """Return a future for the result of calling `handler` on our reason once we're rejected.

        If we're fulfilled, `handler` is never called, and the returned future
        is fulfilled with the same value.

        As with `then`, if we're already rejected, `handler` is called before
        this returns, unless `catch` is called from inside another callback.

        """
        def executor(resolve: t.Callable[[t.Any], None], reject: t.Callable[[t.Any], None]) -> None:
            self._subscribe(resolve, functools.partial(_settle_from_handler, handler, resolve, reject))
        return Future(executor)

    def outcome(self) -> outcome.Outcome:
        "Get our result as an outcome.Value or outcome.Error; we must already be settled."
        if self._state is State.FULFILLED:
            return outcome.Value(self._value)
        elif self._state is State.REJECTED:
            return outcome.Error(exception_of(self._value))
        else:
            raise RuntimeError("outcome() called on a pending future", self)

    def __await__(self) -> t.Generator[t.Any, t.Any, T]:
        from futurity.sequencer import suspend
        return (yield from suspend(self))

    def __repr__(self) -> str:
        if self._state is State.PENDING:
            return f"Future(pending, id={id(self):#x})"
        return f"Future({self._state.value}, {self._value!r})"

def _settle_from_handler(
        handler: t.Callable[[t.Any], t.Any],
        resolve: t.Callable[[t.Any], None], reject: t.Callable[[t.Any], None],
        value: t.Any,
) -> None:
    result = outcome.capture(handler, value)
    if isinstance(result, outcome.Error):
        logger.debug("handler %s raised %r", handler, result.error)
        reject(reason_of(result.error))
        if not isinstance(result.error, Exception):
            # KeyboardInterrupt, SystemExit and friends still reach whoever settled us
            result.unwrap()
    elif is_future(result.value):
        result.value._subscribe(resolve, reject)
    else:
        resolve(result.value)

def is_future(value: t.Any) -> bool:
    "Is this value a Future?"
    return isinstance(value, Future)
