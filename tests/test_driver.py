import io
import json
import pytest
from utmptail.decoders.layout import RECORD_SIZE
from utmptail.decoders.tail_cursor import TailCursor
from utmptail.exporters.formatters import get_formatter
from utmptail.exporters.sinks import LineSink
from utmptail.signals.scheduled import ScheduledSignals
from utmptail.stream.driver import StreamingDriver
from utmptail.types.errors import RecordIOError


def _run(path, start_at_end, events):
    out = io.StringIO()
    cursor = TailCursor.open(str(path), start_at_end, ScheduledSignals(events))
    driver = StreamingDriver(cursor, LineSink(stream=out), get_formatter("json", utc=True))
    emitted = driver.run()
    return emitted, [json.loads(line) for line in out.getvalue().splitlines()], cursor


class TestStreamingDriver:
    def test_replay_then_follow(self, wtmp_file, make_block):
        path, append = wtmp_file
        append(make_block(pid=1) + make_block(pid=2))

        emitted, lines, cursor = _run(path, False, [lambda: append(make_block(pid=3))])

        assert emitted == 3
        assert [line["pid"] for line in lines] == [1, 2, 3]
        assert cursor.closed

    def test_start_at_end_skips_history(self, wtmp_file, make_block):
        path, append = wtmp_file
        append(make_block(pid=1))

        emitted, lines, _ = _run(path, True, [lambda: append(make_block(pid=2))])

        assert [line["pid"] for line in lines] == [2]

    def test_coalesced_signal_drains_everything(self, wtmp_file, make_block):
        """Three writes behind one wake are all emitted, in file order"""
        path, append = wtmp_file
        burst = b"".join(make_block(pid=n) for n in (10, 11, 12))

        emitted, lines, cursor = _run(path, True, [lambda: append(burst)])

        assert [line["pid"] for line in lines] == [10, 11, 12]
        assert cursor.offset == 3 * RECORD_SIZE

    def test_partial_write_recovers(self, wtmp_file, make_block):
        path, append = wtmp_file
        block = make_block(pid=5)

        emitted, lines, _ = _run(path, True, [
            lambda: append(block[:50]),
            None,
            lambda: append(block[50:]),
        ])

        assert emitted == 1
        assert lines[0]["pid"] == 5

    def test_io_error_is_fatal(self, wtmp_file, make_block):
        path, append = wtmp_file
        cursor = TailCursor.open(str(path), True, ScheduledSignals([lambda: append(make_block())]))
        driver = StreamingDriver(cursor, LineSink(stream=io.StringIO()), get_formatter("json"))

        def broken_decode(fp, offset=None):
            raise RecordIOError(offset, OSError("EIO"))

        cursor._decoder.decode_stream = broken_decode
        with pytest.raises(RecordIOError):
            driver.run()
        assert cursor.closed

    def test_stop_ends_run(self, wtmp_file, make_block):
        path, append = wtmp_file
        holder = {}
        signals = ScheduledSignals([
            lambda: append(make_block(pid=1)),
            lambda: holder["driver"].stop(),
            lambda: append(make_block(pid=2)),
        ])
        cursor = TailCursor.open(str(path), True, signals)
        out = io.StringIO()
        holder["driver"] = StreamingDriver(cursor, LineSink(stream=out), get_formatter("csv", utc=True))

        assert holder["driver"].run() == 1
        assert out.getvalue().startswith("7,1,pts/0,root,ts/0,10.0.0.5,")

    def test_stop_during_replay(self, wtmp_file, make_block):
        """Replay is streamed, so a stop request takes effect mid-file"""
        path, append = wtmp_file
        append(b"".join(make_block(pid=n) for n in range(1, 6)))
        cursor = TailCursor.open(str(path), False, ScheduledSignals([None]))
        out = io.StringIO()
        holder = {}
        render = get_formatter("json", utc=True)

        def render_then_stop(record):
            if record.pid == 2:
                holder["driver"].stop()
            return render(record)

        holder["driver"] = StreamingDriver(cursor, LineSink(stream=out), render_then_stop)

        assert holder["driver"].run() == 2
        assert cursor.offset == 2 * RECORD_SIZE
        assert cursor.closed
