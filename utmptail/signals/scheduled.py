from typing import Callable, Iterable, Optional
from utmptail.signals.wake_signal import WakeSignalSource

WakeEvent = Optional[Callable[[], None]]


class ScheduledSignals(WakeSignalSource):
    """
    Deterministic wake source driven by a fixed schedule.

    Each event is an optional callable run right before the wake is
    delivered (e.g. appending bytes to the tailed file). Once the schedule
    is exhausted the source behaves as if shut down.
    """

    def __init__(self, events: Iterable[WakeEvent] = ()):
        super().__init__()
        self._events = list(events)
        self._shutdown = False
        self.path: Optional[str] = None
        self.delivered = 0

    def subscribe(self, path: str) -> None:
        self.path = path

    def wait(self, timeout: Optional[float] = None) -> bool:
        if self._shutdown or not self._events:
            return False
        action = self._events.pop(0)
        if action is not None:
            action()
        self.delivered += 1
        return True

    @property
    def remaining(self) -> int:
        return len(self._events)

    def shutdown(self) -> None:
        self._shutdown = True
