"""Futures with synchronous continuations, and straight-line code on top of them

A Future is a value which settles exactly once: it's either fulfilled with a
value or rejected with a reason. We register callbacks on it with `then` and
`catch`, and get back new futures for the results of those callbacks:

```
fetch_cb(url).then(parse).then(store).catch(log_failure)
```

Callbacks run synchronously, in the very call which settles the future. There
is no event loop deciding when callbacks get to run, and there's no task queue
reordering them; if one future settles before another, its callbacks run
first. Whoever settles a future is the one who runs the code waiting for it.

Writing everything as chains of callbacks is awkward, so we also let a
coroutine suspend on a future and be resumed when it settles, turning the
chain above into:

```
@wrap
async def fetch_and_store(url):
    try:
        page = await fetch_cb(url)
        await store(parse(page))
    except Exception as e:
        log_failure(e)
```

The wrapped coroutine isn't run by an event loop either. It runs inside the
call to `fetch_and_store` until it suspends on a pending future, and then it's
resumed inside whichever call settles that future.

Waiting for time to pass is the one thing which needs some outside help; see
`futurity.timer`. Under trio, timers run in trio tasks, and trio code can wait
for a Future with `futurity.trio_bridge.wait`.

"""
from futurity.core import State, Future, is_future
from futurity.combinators import resolve, reject, all_of, race, delay, timeout, retry
from futurity.sequencer import Status, wrap, suspend, current_context
from futurity.timer import Timer, TrioTimer, BlockingTimer, set_default_timer
from futurity.exceptions import FuturityError, Rejection, SuspendOutsideContext, NonFutureYielded, FutureTimeout, NoDefaultTimer
