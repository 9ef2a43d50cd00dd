import logging
from utmptail.decoders.tail_cursor import TailCursor
from utmptail.exporters.formatters import Formatter
from utmptail.exporters.sinks import LineSink
from utmptail.models.record import AccountingRecord
from utmptail.types.enums import CursorState
from utmptail.types.errors import CursorClosedError, ShortReadError


class StreamingDriver:
    """
    Pumps records from a tail cursor into a sink.

    Short reads are the only condition handled here; any other error
    propagates to the caller, which terminates.
    """

    def __init__(self, cursor: TailCursor, sink: LineSink, formatter: Formatter):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.cursor = cursor
        self.sink = sink
        self.formatter = formatter
        self.emitted = 0
        self._stopping = False

    def _emit(self, record: AccountingRecord) -> None:
        self.sink.write(self.formatter(record))
        self.emitted += 1

    def _forward_available(self) -> int:
        """Emit records as they are decoded; stops early once stop() was called."""
        count = 0
        records = self.cursor.iter_available()
        try:
            for record in records:
                self._emit(record)
                count += 1
                if self._stopping:
                    break
        finally:
            records.close()
        return count

    def replay(self) -> int:
        """Forward every record already in the file."""
        count = self._forward_available()
        self.logger.info("Replayed %d existing records", count)
        return count

    def run(self) -> int:
        """Stream until shutdown; returns the number of records emitted."""
        if self.cursor.state is CursorState.REPLAYING:
            self.replay()

        while True:
            try:
                record = self.cursor.next()
            except ShortReadError as exc:
                self.logger.debug("Wake without a full record: %s", exc)
                continue
            except CursorClosedError:
                break
            self._emit(record)
            # One signal may stand for several writes
            self._forward_available()

        self.logger.info("Stream stopped after %d records", self.emitted)
        return self.emitted

    def stop(self) -> None:
        self._stopping = True
        self.cursor.shutdown()
