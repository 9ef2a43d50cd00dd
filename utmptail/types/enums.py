from enum import Enum, IntEnum


class RecordType(IntEnum):
    """utmp record types (ut_type), see man utmp"""

    UNKNOWN = -1  # Code outside 0-9, kept as raw type_code on the record

    EMPTY = 0  # Record does not contain valid info
    RUN_LEVEL = 1  # Change in system run-level
    BOOT_TIME = 2  # Time of system boot (ut_tv)
    NEW_TIME = 3  # Time after system clock change
    OLD_TIME = 4  # Time before system clock change
    INIT_PROCESS = 5  # Process spawned by init
    LOGIN_PROCESS = 6  # Session leader process for user login
    USER_PROCESS = 7  # Normal process
    DEAD_PROCESS = 8  # Terminated process
    ACCOUNTING = 9  # Not implemented on Linux

    @classmethod
    def from_code(cls, code: int) -> "RecordType":
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


class FieldKind(Enum):
    """How a fixed-width field of the record is interpreted"""
    INT = "int"
    TEXT = "text"
    BYTES = "bytes"
    PADDING = "padding"


class CursorState(Enum):
    """Tail cursor lifecycle"""
    REPLAYING = "replaying"  # Draining records present before open
    IDLE = "idle"  # Waiting for a write signal
    DECODING = "decoding"  # Processing one signal's worth of bytes
    CLOSED = "closed"
