import os
import threading
from typing import Optional, Tuple
from utmptail.signals.wake_signal import SingleSlotSignal


class PollingWriteWatcher(SingleSlotSignal):
    """
    Posts a write signal whenever the watched file's size or mtime changes.

    A daemon thread stats the path every `interval` seconds; it only posts
    into the slot, the cursor's thread does all reading.
    """

    def __init__(self, interval: float = 0.25):
        super().__init__()
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        self.interval = interval
        self.path: Optional[str] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last: Optional[Tuple[int, int]] = None

    def subscribe(self, path: str) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Already watching {self.path}")
        self.path = path
        self._last = self._snapshot()  # Raises OSError if the path is missing
        self._thread = threading.Thread(target=self._run, name="utmptail-watcher", daemon=True)
        self._thread.start()
        self.logger.debug("Watching %s every %.3fs", path, self.interval)

    def _snapshot(self) -> Tuple[int, int]:
        st = os.stat(self.path)
        return st.st_size, st.st_mtime_ns

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                current = self._snapshot()
            except FileNotFoundError:
                self.logger.warning("Watched file %s disappeared", self.path)
                continue
            except OSError as exc:
                self.logger.warning("Cannot stat %s: %s", self.path, exc)
                continue
            if current != self._last:
                self._last = current
                self.post()

    def shutdown(self) -> None:
        self._stop.set()
        super().shutdown()

    def close(self) -> None:
        self.shutdown()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=max(self.interval * 4, 1.0))
