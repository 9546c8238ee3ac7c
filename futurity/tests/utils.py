import typing as t
from futurity.timer import Timer

import logging
logger = logging.getLogger(__name__)
# logging.basicConfig(level=logging.DEBUG)

class ManualTimer(Timer):
    "A Timer which only fires when told to, so tests control exactly when time passes"
    def __init__(self) -> None:
        self.scheduled: t.List[t.Tuple[float, t.Callable[[], None]]] = []
        self.requested: t.List[float] = []

    def schedule(self, ms: float, callback: t.Callable[[], None]) -> None:
        logger.debug("ManualTimer: scheduled %s for %sms", callback, ms)
        self.requested.append(ms)
        self.scheduled.append((ms, callback))

    def fire_all(self) -> None:
        "Fire everything scheduled so far, shortest delay first; callbacks scheduled meanwhile wait."
        scheduled, self.scheduled = self.scheduled, []
        for _, callback in sorted(scheduled, key=lambda pair: pair[0]):
            callback()

class ImmediateTimer(Timer):
    "A Timer which fires inline, as if the delay had already elapsed"
    def __init__(self) -> None:
        self.requested: t.List[float] = []

    def schedule(self, ms: float, callback: t.Callable[[], None]) -> None:
        self.requested.append(ms)
        callback()

class Counter:
    "A zero-argument factory for futures, which records how many times it's called"
    def __init__(self, make: t.Callable[[int], t.Any]) -> None:
        self.calls = 0
        self.make = make

    def __call__(self) -> t.Any:
        self.calls += 1
        return self.make(self.calls)
