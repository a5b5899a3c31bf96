# scheduler.py
#
# Description:
# A tiny abstraction over periodic callbacks. The engines only ever call
# register_periodic() and cancel(), so the running app can use Textual's
# timers while tests use VirtualScheduler and move a fake clock forward
# instead of waiting on real time.
#

import datetime
import itertools
from typing import Any, Callable, Dict, List, Protocol


class Scheduler(Protocol):
    def register_periodic(self, interval: float, callback: Callable[[], Any]) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class TextualScheduler:
    """Runs periodic callbacks on a Textual app's event loop."""

    def __init__(self, app):
        self.app = app

    def register_periodic(self, interval: float, callback: Callable[[], Any]):
        return self.app.set_interval(interval, callback)

    def cancel(self, handle):
        handle.stop()


class VirtualScheduler:
    """
    A scheduler driven by a virtual clock.

    Nothing runs until advance() is called; callbacks then fire in due-time
    order, one after another, with `now` set to each callback's due moment.
    Pass `scheduler.clock` wherever a clock callable is expected.
    """

    def __init__(self, start: datetime.datetime):
        self.now = start
        self._jobs: Dict[int, List[Any]] = {}
        self._handles = itertools.count(1)

    def clock(self) -> datetime.datetime:
        return self.now

    def register_periodic(self, interval: float, callback: Callable[[], Any]) -> int:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = next(self._handles)
        step = datetime.timedelta(seconds=interval)
        self._jobs[handle] = [self.now + step, step, callback]
        return handle

    def cancel(self, handle: int):
        self._jobs.pop(handle, None)

    @property
    def active_handles(self) -> List[int]:
        return list(self._jobs)

    def advance(self, seconds: float):
        """Moves the clock forward, running every callback that comes due."""
        self.advance_to(self.now + datetime.timedelta(seconds=seconds))

    def advance_to(self, moment: datetime.datetime):
        while True:
            due = [(job[0], handle) for handle, job in self._jobs.items() if job[0] <= moment]
            if not due:
                break
            due_at, handle = min(due)
            job = self._jobs[handle]
            self.now = due_at
            job[0] = due_at + job[1]
            job[2]()
        self.now = moment
