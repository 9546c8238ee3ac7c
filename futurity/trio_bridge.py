"Waiting for Futures from ordinary trio tasks"
from __future__ import annotations
from futurity.core import Future, State
import logging
import outcome
import trio
import typing as t

__all__ = [
    'settled',
    'wait',
]

logger = logging.getLogger(__name__)

T = t.TypeVar('T')

async def settled(future: Future[T]) -> outcome.Outcome:
    "Block this trio task until `future` settles, and return its outcome."
    if future.state is State.PENDING:
        event = trio.Event()
        future.then(lambda _: event.set())
        future.catch(lambda _: event.set())
        logger.debug("settled(%s): waiting", future)
        await event.wait()
    return future.outcome()

async def wait(future: Future[T]) -> T:
    "Block this trio task until `future` settles; return its value or raise its rejection reason."
    return (await settled(future)).unwrap()
