import csv
import io
import json
from typing import Callable, Dict
from utmptail.exporters.accounting_exporter import AccountingExporter
from utmptail.models.record import AccountingRecord
from utmptail.types.errors import FormatError

DEFAULT_TIME_LAYOUT = "%Y-%m-%d %H:%M:%S"

Formatter = Callable[[AccountingRecord], str]


def json_line(record: AccountingRecord, time_layout: str = DEFAULT_TIME_LAYOUT, utc: bool = False) -> str:
    """One JSON object per record: type, pid, device, id, user, host, exit_status, session, time, addr."""
    if not time_layout:
        raise FormatError("time layout is empty")
    try:
        return json.dumps(record.to_dict(time_layout, utc), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise FormatError(f"cannot render record at offset {record.offset}: {exc}") from exc


def csv_line(record: AccountingRecord, time_layout: str = DEFAULT_TIME_LAYOUT, utc: bool = False) -> str:
    """type,pid,device,user,id,host,time"""
    if not time_layout:
        raise FormatError("time layout is empty")
    buf = io.StringIO()
    try:
        row = AccountingExporter.record_to_row(record, time_layout, utc)
        csv.writer(buf, lineterminator="\n").writerow(row[col] for col in AccountingExporter.CSV_LINE_COLUMNS)
    except (csv.Error, TypeError, ValueError) as exc:
        raise FormatError(f"cannot render record at offset {record.offset}: {exc}") from exc
    return buf.getvalue().rstrip("\n")


FORMATTERS: Dict[str, Callable[..., str]] = {
    "json": json_line,
    "csv": csv_line,
}


def get_formatter(name: str, time_layout: str = DEFAULT_TIME_LAYOUT, utc: bool = False) -> Formatter:
    try:
        render = FORMATTERS[name]
    except KeyError:
        raise FormatError(f"unknown output format {name!r}, expected one of {sorted(FORMATTERS)}") from None
    if not time_layout:
        raise FormatError("time layout is empty")
    return lambda record: render(record, time_layout, utc)
