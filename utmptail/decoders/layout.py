from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address
from typing import Dict, List
from utmptail.types.enums import FieldKind
from utmptail.models.record import IPAddress


@dataclass(frozen=True)
class FieldSpec:
    """A fixed-width field of the on-disk record."""
    name: str
    offset: int
    length: int
    kind: FieldKind

    @property
    def end(self) -> int:
        return self.offset + self.length

    def slice(self, block: bytes) -> bytes:
        return block[self.offset:self.end]


# struct utmp from <utmp.h> on Linux (x86, x86_64, arm), 384 bytes
UTMP_FIELDS: List[FieldSpec] = [
    FieldSpec("type", 0, 2, FieldKind.INT),  # short ut_type
    FieldSpec("_align", 2, 2, FieldKind.PADDING),
    FieldSpec("pid", 4, 4, FieldKind.INT),  # pid_t ut_pid
    FieldSpec("line", 8, 32, FieldKind.TEXT),  # ut_line[UT_LINESIZE]
    FieldSpec("id", 40, 4, FieldKind.TEXT),  # ut_id[4]
    FieldSpec("user", 44, 32, FieldKind.TEXT),  # ut_user[UT_NAMESIZE]
    FieldSpec("host", 76, 256, FieldKind.TEXT),  # ut_host[UT_HOSTSIZE]
    FieldSpec("exit_termination", 332, 2, FieldKind.INT),  # ut_exit.e_termination
    FieldSpec("exit_exit", 334, 2, FieldKind.INT),  # ut_exit.e_exit
    FieldSpec("session", 336, 4, FieldKind.INT),  # int32 ut_session
    FieldSpec("tv_sec", 340, 4, FieldKind.INT),  # int32 ut_tv.tv_sec
    FieldSpec("tv_usec", 344, 4, FieldKind.INT),  # int32 ut_tv.tv_usec
    FieldSpec("addr_v6", 348, 16, FieldKind.BYTES),  # int32 ut_addr_v6[4]
    FieldSpec("_reserved", 364, 20, FieldKind.PADDING),
]

FIELDS_BY_NAME: Dict[str, FieldSpec] = {f.name: f for f in UTMP_FIELDS}

RECORD_SIZE = 384

_IPV6_ZERO_SUFFIX = bytes(12)


def _check_layout(fields: List[FieldSpec], size: int) -> None:
    position = 0
    for field in fields:
        if field.offset != position:
            raise ValueError(f"Field {field.name} starts at {field.offset}, expected {position}")
        position = field.end
    if position != size:
        raise ValueError(f"Layout covers {position} bytes, expected {size}")


_check_layout(UTMP_FIELDS, RECORD_SIZE)


def read_int(data: bytes, offset: int, length: int, byteorder: str = "little", signed: bool = True) -> int:
    """Read a fixed-size integer at offset without relying on host struct alignment."""
    if offset < 0 or offset + length > len(data):
        raise ValueError(f"Integer at {offset}+{length} outside {len(data)}-byte buffer")
    return int.from_bytes(data[offset:offset + length], byteorder=byteorder, signed=signed)


def trim_text(raw: bytes) -> str:
    """
    Decode a fixed-width text field.
    Every NUL byte is removed, not only trailing ones: b"ab\\0cd\\0\\0" -> "abcd".
    """
    return raw.replace(b"\x00", b"").decode("utf-8", errors="replace")


def normalize_address(raw: bytes) -> IPAddress:
    """
    ut_addr_v6 holds an IPv6 address, or an IPv4 address in the first 4 bytes.
    Anything whose last 12 bytes are zero is treated as IPv4 (no ::ffff: check).
    """
    if len(raw) != 16:
        raise ValueError(f"Address field must be 16 bytes, got {len(raw)}")
    if raw[4:] == _IPV6_ZERO_SUFFIX:
        return IPv4Address(raw[:4])
    return IPv6Address(raw)
