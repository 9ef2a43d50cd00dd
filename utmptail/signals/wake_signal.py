from abc import ABC, abstractmethod
import logging
import threading
from typing import Optional


class WakeSignalSource(ABC):
    """
    "Wake me when this path was written" port consumed by the tail cursor.

    At least one signal per write is required; duplicates and coalesced
    signals are fine since the cursor always reads until a short read.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def subscribe(self, path: str) -> None:
        """Start delivering write signals for path. Raises OSError on failure."""

    @abstractmethod
    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a signal is pending and consume it. False on shutdown or timeout."""

    @abstractmethod
    def shutdown(self) -> None:
        """Request cooperative cancellation of any current or future wait."""

    def close(self) -> None:
        self.shutdown()


class SingleSlotSignal(WakeSignalSource):
    """
    Capacity-1 notification slot with coalesce-if-full semantics.
    Any number of posts before the consumer wakes leave exactly one pending signal.
    """

    def __init__(self) -> None:
        super().__init__()
        self._cond = threading.Condition()
        self._pending = False
        self._shutdown = False

    def subscribe(self, path: str) -> None:
        # Signals are posted by whoever owns the slot
        pass

    def post(self) -> bool:
        """Post a signal; returns False when it was coalesced into a pending one."""
        with self._cond:
            if self._shutdown:
                return False
            if self._pending:
                return False
            self._pending = True
            self._cond.notify()
            return True

    @property
    def pending(self) -> bool:
        with self._cond:
            return self._pending

    @property
    def is_shutdown(self) -> bool:
        with self._cond:
            return self._shutdown

    def wait(self, timeout: Optional[float] = None) -> bool:
        with self._cond:
            self._cond.wait_for(lambda: self._pending or self._shutdown, timeout=timeout)
            if self._shutdown:
                return False
            if not self._pending:
                return False
            self._pending = False
            return True

    def shutdown(self) -> None:
        with self._cond:
            self._shutdown = True
            self._cond.notify_all()
