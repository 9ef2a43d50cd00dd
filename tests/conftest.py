import struct
import pytest

UTMP_STRUCT = "hxxi32s4s32s256shhiii16s20x"


def pack_record(type_code=7, pid=1234, line=b"pts/0", line_id=b"ts/0", user=b"root",
                host=b"10.0.0.5", termination=0, exit=0, session=0,
                tv_sec=1700000000, tv_usec=0, addr=bytes([10, 0, 0, 5]) + bytes(12),
                byteorder="<"):
    """Build one 384-byte utmp record."""
    return struct.pack(byteorder + UTMP_STRUCT, type_code, pid, line, line_id, user, host,
                       termination, exit, session, tv_sec, tv_usec, addr)


@pytest.fixture
def make_block():
    return pack_record


@pytest.fixture
def wtmp_file(tmp_path):
    """Empty wtmp file plus an append helper."""
    path = tmp_path / "wtmp"
    path.write_bytes(b"")

    def append(data: bytes) -> None:
        with open(path, "ab") as f:
            f.write(data)

    return path, append
