from typing import Optional
import pandas as pd
from utmptail.decoders.record_decoder_base import RecordDecoderBase
from utmptail.decoders.layout import (
    FIELDS_BY_NAME, RECORD_SIZE, UTMP_FIELDS, normalize_address, read_int, trim_text
)
from utmptail.models.record import AccountingRecord, ExitStatus
from utmptail.types.enums import FieldKind, RecordType
from utmptail.types.errors import ShortReadError


class UtmpDecoder(RecordDecoderBase):
    """
    Decode fixed-size utmp/wtmp records.

    Decoding is total for a full block: every byte pattern maps to a record.
    Only a block shorter than RECORD_SIZE fails (ShortReadError).
    """

    def __init__(self, byteorder: str = "little"):
        super().__init__()
        if byteorder not in ("little", "big"):
            raise ValueError(f"byteorder must be 'little' or 'big', got {byteorder!r}")
        self.byteorder = byteorder
        self.decoder_map = {
            FieldKind.INT: self._decode_int,
            FieldKind.TEXT: self._decode_text,
            FieldKind.BYTES: self._decode_bytes,
        }

    @property
    def record_size(self) -> int:
        return RECORD_SIZE

    def decode(self, block: bytes, offset: Optional[int] = None) -> AccountingRecord:
        if len(block) < RECORD_SIZE:
            raise ShortReadError(RECORD_SIZE, len(block), offset)
        if len(block) > RECORD_SIZE:
            raise ValueError(f"Block holds {len(block)} bytes, a record is exactly {RECORD_SIZE}")

        fields = self._parse_fields(block)
        type_code = fields["type"]
        kind = RecordType.from_code(type_code)
        if kind is RecordType.UNKNOWN:
            self.logger.debug("Unrecognized record type %d at offset %s", type_code, offset)

        record = AccountingRecord(
            kind=kind,
            type_code=type_code,
            pid=fields["pid"],
            device=fields["line"],
            line_id=fields["id"],
            user=fields["user"],
            host=fields["host"],
            exit_status=ExitStatus(
                termination=fields["exit_termination"],
                exit=fields["exit_exit"],
            ),
            session=fields["session"],
            timestamp=self._decode_timestamp(fields["tv_sec"], fields["tv_usec"]),
            address=normalize_address(fields["addr_v6"]),
            offset=offset,
        )
        self.logger.debug("Decoded %s record: offset=%s, user=%r, line=%r",
                          kind.name, offset, record.user, record.device)
        return record

    def _parse_fields(self, block: bytes) -> dict:
        values = {}
        for field in UTMP_FIELDS:
            decoder_func = self.decoder_map.get(field.kind)
            if decoder_func:
                values[field.name] = decoder_func(block, field.name)
        return values

    # ========== FIELD DECODERS ==========

    def _decode_int(self, block: bytes, name: str) -> int:
        field = FIELDS_BY_NAME[name]
        return read_int(block, field.offset, field.length, self.byteorder, signed=True)

    def _decode_text(self, block: bytes, name: str) -> str:
        return trim_text(FIELDS_BY_NAME[name].slice(block))

    def _decode_bytes(self, block: bytes, name: str) -> bytes:
        # Network byte order regardless of platform byte order
        return bytes(FIELDS_BY_NAME[name].slice(block))

    @staticmethod
    def _decode_timestamp(seconds: int, microseconds: int) -> pd.Timestamp:
        """ut_tv: microseconds are scaled to nanoseconds, not truncated."""
        return pd.Timestamp(seconds * 1_000_000_000 + microseconds * 1000, unit="ns", tz="UTC")
