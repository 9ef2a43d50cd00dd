class UtmpTailError(Exception):
    """Base class for all errors raised by utmptail."""


class OpenError(UtmpTailError):
    """The input file or its write subscription could not be set up."""

    def __init__(self, path, reason):
        super().__init__(f"cannot open {path}: {reason}")
        self.path = path
        self.reason = reason


class DecodeError(UtmpTailError):
    pass


class ShortReadError(DecodeError):
    """Fewer bytes than one full record are available (yet)."""

    def __init__(self, expected: int, actual: int, offset=None):
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"short read{where}: expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual
        self.offset = offset


class RecordIOError(DecodeError):
    """Underlying read failure other than a short read."""

    def __init__(self, offset, cause: OSError):
        super().__init__(f"read failed at offset {offset}: {cause}")
        self.offset = offset
        self.cause = cause


class CursorClosedError(UtmpTailError):
    """Raised from a wait once shutdown was requested or the cursor was closed."""


class FormatError(UtmpTailError):
    pass


class SinkError(UtmpTailError):
    pass


class ConfigError(UtmpTailError):
    pass
