from futurity.core import Future
from futurity.combinators import resolve, reject, delay
from futurity.exceptions import Rejection
from futurity.trio_bridge import settled, wait
from futurity.tests.trio_test_case import TrioTestCase
import outcome
import trio

class MyException(Exception):
    pass

class TestTrioBridge(TrioTestCase):
    async def test_wait_settled(self) -> None:
        self.assertEqual(await wait(resolve("ready")), "ready")

    async def test_wait_pending(self) -> None:
        fut = Future(lambda resolve, reject: None)
        async def settle_later() -> None:
            await trio.sleep(5)
            fut.resolve("later")
        self.nursery.start_soon(settle_later)
        self.assertEqual(await wait(fut), "later")
        self.assertGreaterEqual(trio.current_time(), 5)

    async def test_wait_raises_exception_reason(self) -> None:
        with self.assertRaises(MyException):
            await wait(delay(10).then(lambda _: reject(MyException("late failure"))))

    async def test_wait_raises_rejection(self) -> None:
        with self.assertRaises(Rejection) as cm:
            await wait(reject("plain reason"))
        self.assertEqual(cm.exception.reason, "plain reason")

    async def test_settled_outcome(self) -> None:
        result = await settled(delay(10).then(lambda _: 7))
        self.assertIsInstance(result, outcome.Value)
        self.assertEqual(result.unwrap(), 7)

    async def test_settled_pending_rejection(self) -> None:
        fut = Future(lambda resolve, reject: None)
        async def reject_later() -> None:
            await trio.sleep(1)
            fut.reject("gave up")
        self.nursery.start_soon(reject_later)
        result = await settled(fut)
        self.assertIsInstance(result, outcome.Error)
        self.assertEqual(result.error.reason, "gave up")
