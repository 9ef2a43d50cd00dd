import io
import json
import pandas as pd
import pytest
from utmptail.decoders.utmp_decoder import UtmpDecoder
from utmptail.exporters.accounting_exporter import AccountingExporter
from utmptail.exporters.formatters import csv_line, get_formatter, json_line
from utmptail.exporters.sinks import LineSink
from utmptail.types.errors import FormatError, SinkError


@pytest.fixture
def record(make_block):
    block = make_block(type_code=8, pid=321, line=b"tty2", line_id=b"2", user=b"carol",
                       host=b"host,with,commas", termination=1, exit=2, session=9,
                       tv_sec=1700000000, tv_usec=250000)
    return UtmpDecoder().decode(block, offset=768)


class TestFormatters:
    def test_json_line_fields(self, record):
        data = json.loads(json_line(record, utc=True))

        assert data == {
            "type": 8,
            "pid": 321,
            "device": "tty2",
            "id": "2",
            "user": "carol",
            "host": "host,with,commas",
            "exit_status": {"termination": 1, "exit": 2},
            "session": 9,
            "time": "2023-11-14 22:13:20",
            "addr": "10.0.0.5",
        }

    def test_json_local_time_format(self, record):
        data = json.loads(json_line(record))
        assert len(data["time"]) == len("YYYY-MM-DD HH:MM:SS")

    def test_csv_line(self, record):
        line = csv_line(record, utc=True)
        assert line == '8,321,tty2,carol,2,"host,with,commas",2023-11-14 22:13:20'

    def test_empty_layout_fails(self, record):
        with pytest.raises(FormatError):
            json_line(record, time_layout="")
        with pytest.raises(FormatError):
            csv_line(record, time_layout="")

    def test_unknown_formatter(self):
        with pytest.raises(FormatError):
            get_formatter("xml")

    def test_get_formatter_binds_options(self, record):
        render = get_formatter("json", time_layout="%Y", utc=True)
        assert json.loads(render(record))["time"] == "2023"


class TestAccountingExporter:
    def test_records_to_dataframe(self, record, make_block):
        other = UtmpDecoder().decode(make_block(type_code=77))
        df = AccountingExporter.records_to_dataframe([record, other], utc=True)

        assert list(df.columns) == AccountingExporter.ALL_COLUMNS
        assert len(df) == 2
        assert df.loc[0, 'kind'] == 'DEAD_PROCESS'
        assert df.loc[1, 'kind'] == 'UNKNOWN'
        assert df.loc[1, 'type'] == 77
        assert df.loc[0, 'time_ns'] == 1700000000_250_000_000
        assert df.loc[0, 'offset'] == 768
        assert pd.isna(df.loc[1, 'offset'])
        assert str(df['pid'].dtype) == 'int32'

    def test_empty_dataframe(self):
        df = AccountingExporter.records_to_dataframe([])
        assert df.empty
        assert list(df.columns) == AccountingExporter.ALL_COLUMNS

    def test_export_to_csv(self, record, tmp_path):
        out = tmp_path / "records.csv"
        AccountingExporter.export_to_csv(AccountingExporter.records_to_dataframe([record]), str(out))

        df = pd.read_csv(out)
        assert df.loc[0, 'user'] == 'carol'


class TestLineSink:
    def test_appends_to_file(self, tmp_path):
        out = tmp_path / "out.log"
        out.write_text("existing\n")

        with LineSink(str(out)) as sink:
            sink.write("one")
            sink.write("two")

        assert out.read_text() == "existing\none\ntwo\n"
        assert sink.lines_written == 2

    def test_stream_target(self):
        buf = io.StringIO()
        sink = LineSink(stream=buf)
        sink.write("x")
        sink.close()
        assert buf.getvalue() == "x\n"


class TestLineSinkFailures:
    def test_write_error_raises_sink_error(self):
        class FullStream(io.StringIO):
            def write(self, s):
                raise OSError(28, "No space left on device")

        sink = LineSink(stream=FullStream())
        with pytest.raises(SinkError):
            sink.write("line")
        assert sink.lines_written == 0

    def test_unopenable_output_raises_sink_error(self, tmp_path):
        with pytest.raises(SinkError):
            LineSink(str(tmp_path))


class TestRowRendering:
    def test_row_matches_dataframe(self, record):
        row = AccountingExporter.record_to_row(record, utc=True)
        df = AccountingExporter.records_to_dataframe([record], utc=True)

        assert list(row) == AccountingExporter.ALL_COLUMNS
        assert row['time'] == df.loc[0, 'time']
        assert row['offset'] == 768

    def test_csv_line_builds_no_dataframe(self, record, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("DataFrame built for a single line")

        monkeypatch.setattr(AccountingExporter, "records_to_dataframe", fail)
        assert csv_line(record, utc=True).startswith("8,321,tty2,carol,2,")

    def test_local_time_keeps_nanoseconds(self, record):
        local = record.local_time()

        assert local.tz is not None
        assert local.value == record.timestamp.value
        assert local.tz_convert("UTC") == record.timestamp
        assert record.local_time(utc=True) is record.timestamp
