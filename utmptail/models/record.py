from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address
from typing import Optional, Union
import pandas as pd
from dateutil import tz
from utmptail.types.enums import RecordType

IPAddress = Union[IPv4Address, IPv6Address]


@dataclass(frozen=True)
class ExitStatus:
    """Exit status of a DEAD_PROCESS record (zero for other kinds)."""
    termination: int
    exit: int


@dataclass(frozen=True)
class AccountingRecord:
    """One decoded utmp/wtmp entry."""
    kind: RecordType
    type_code: int  # Raw ut_type, also for codes outside RecordType
    pid: int
    device: str  # ut_line
    line_id: str  # ut_id
    user: str
    host: str
    exit_status: ExitStatus
    session: int
    timestamp: pd.Timestamp  # UTC, nanosecond precision
    address: IPAddress
    offset: Optional[int] = None  # Position of the record in the file

    @property
    def nanoseconds(self) -> int:
        """Sub-second part of the timestamp in nanoseconds."""
        return self.timestamp.value % 1_000_000_000

    def local_time(self, utc: bool = False) -> pd.Timestamp:
        if utc:
            return self.timestamp
        return self.timestamp.tz_convert(tz.tzlocal())

    def to_dict(self, time_layout: str = "%Y-%m-%d %H:%M:%S", utc: bool = False) -> dict:
        return {
            "type": self.type_code,
            "pid": self.pid,
            "device": self.device,
            "id": self.line_id,
            "user": self.user,
            "host": self.host,
            "exit_status": {
                "termination": self.exit_status.termination,
                "exit": self.exit_status.exit,
            },
            "session": self.session,
            "time": self.local_time(utc).strftime(time_layout),
            "addr": str(self.address),
        }
