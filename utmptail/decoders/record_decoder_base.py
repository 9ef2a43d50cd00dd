from abc import ABC, abstractmethod
import logging
from typing import BinaryIO, Optional
from utmptail.models.record import AccountingRecord
from utmptail.types.errors import RecordIOError


class RecordDecoderBase(ABC):
    def __init__(self) -> None:
        # Initialize a per-instance logger; subclasses should call super().__init__()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def record_size(self) -> int:
        pass

    @abstractmethod
    def decode(self, block: bytes, offset: Optional[int] = None) -> AccountingRecord:
        pass

    def decode_stream(self, fp: BinaryIO, offset: Optional[int] = None) -> AccountingRecord:
        """Read exactly one record from a binary file object and decode it."""
        try:
            block = fp.read(self.record_size)
        except OSError as exc:
            raise RecordIOError(offset, exc) from exc
        return self.decode(block or b"", offset)
