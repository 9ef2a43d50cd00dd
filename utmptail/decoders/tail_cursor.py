import io
import logging
import os
from typing import BinaryIO, Iterator, List, Optional
from utmptail.decoders.record_decoder_base import RecordDecoderBase
from utmptail.decoders.utmp_decoder import UtmpDecoder
from utmptail.models.record import AccountingRecord
from utmptail.signals.wake_signal import WakeSignalSource
from utmptail.types.enums import CursorState
from utmptail.types.errors import (
    CursorClosedError, OpenError, RecordIOError, ShortReadError
)


class TailCursor:
    """
    Forward-only reader over a growing utmp/wtmp file.

    The byte offset is the only record of what was consumed: it advances by
    exactly one record per successful decode and never on a short read, so a
    partially flushed record is simply re-read on the next signal.
    """

    def __init__(self, path: str, fp: BinaryIO, signals: WakeSignalSource,
                 decoder: RecordDecoderBase, offset: int, state: CursorState):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.path = path
        self._fp = fp
        self._signals = signals
        self._decoder = decoder
        self._offset = offset
        self._state = state

    @classmethod
    def open(cls, path: str, start_at_end: bool, signals: WakeSignalSource,
             decoder: Optional[RecordDecoderBase] = None) -> "TailCursor":
        """
        Subscribe to writes on path, then open it.
        start_at_end=True only sees records appended after this call;
        start_at_end=False replays every existing record first.
        """
        decoder = decoder or UtmpDecoder()
        try:
            signals.subscribe(path)
        except OSError as exc:
            raise OpenError(path, f"watch failed: {exc}") from exc

        try:
            fp = open(path, "rb")
        except OSError as exc:
            signals.close()
            raise OpenError(path, exc) from exc

        try:
            offset = fp.seek(0, io.SEEK_END) if start_at_end else 0
        except OSError as exc:
            fp.close()
            signals.close()
            raise OpenError(path, f"seek failed: {exc}") from exc

        state = CursorState.IDLE if start_at_end else CursorState.REPLAYING
        cursor = cls(path, fp, signals, decoder, offset, state)
        cursor.logger.info("Tailing %s from offset %d (%s)", path, offset, state.value)
        if offset % decoder.record_size:
            cursor.logger.warning("File size %d is not a multiple of the %d-byte record size",
                                  offset, decoder.record_size)
        return cursor

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is CursorState.CLOSED

    def _read_one(self) -> AccountingRecord:
        """Decode the record at the current offset; advance only on success."""
        if self.closed:
            raise CursorClosedError(f"cursor on {self.path} is closed")
        try:
            self._fp.seek(self._offset, os.SEEK_SET)
            record = self._decoder.decode_stream(self._fp, self._offset)
        except RecordIOError:
            self.close()
            raise
        except OSError as exc:
            self.close()
            raise RecordIOError(self._offset, exc) from exc
        self._offset += self._decoder.record_size
        return record

    def iter_available(self) -> Iterator[AccountingRecord]:
        """
        Yield every complete record past the offset without blocking.
        Each record is yielded as soon as it is decoded; the offset already
        points past it, so stopping early never re-delivers it.
        """
        if self._state is CursorState.IDLE:
            self._state = CursorState.DECODING
        count = 0
        try:
            while True:
                try:
                    record = self._read_one()
                except ShortReadError as exc:
                    if exc.actual:
                        self.logger.debug("Partial record at offset %d (%d bytes), waiting for more",
                                          self._offset, exc.actual)
                    return
                count += 1
                yield record
        finally:
            if not self.closed:
                self._state = CursorState.IDLE
            if count:
                self.logger.debug("Drained %d records, offset now %d", count, self._offset)

    def drain_available(self) -> List[AccountingRecord]:
        """Decode every complete record past the offset without blocking."""
        return list(self.iter_available())

    def wait_for_growth(self) -> None:
        """Suspend until a write signal arrives. Raises CursorClosedError on shutdown."""
        if self.closed:
            raise CursorClosedError(f"cursor on {self.path} is closed")
        self._state = CursorState.IDLE
        if not self._signals.wait():
            self.logger.info("Shutdown requested while waiting on %s", self.path)
            self.close()
            raise CursorClosedError(f"shutdown requested for {self.path}")

    def next(self) -> AccountingRecord:
        """
        Wait for one signal, then decode exactly one record.
        A spurious or partial wake surfaces as ShortReadError; the offset is unchanged.
        """
        self.wait_for_growth()
        self._state = CursorState.DECODING
        try:
            return self._read_one()
        finally:
            if not self.closed:
                self._state = CursorState.IDLE

    def shutdown(self) -> None:
        """Cancel a pending or future wait; safe to call from another thread."""
        self._signals.shutdown()

    def close(self) -> None:
        if self._state is CursorState.CLOSED:
            return
        self._state = CursorState.CLOSED
        self._signals.close()
        self._fp.close()
        self.logger.debug("Closed cursor on %s at offset %d", self.path, self._offset)

    def __enter__(self) -> "TailCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
