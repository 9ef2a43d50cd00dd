import logging
import sys
from typing import Optional, TextIO
from utmptail.types.errors import SinkError


class LineSink:
    """Writes one rendered record per line to stdout or an append-mode file."""

    def __init__(self, output_path: Optional[str] = None, stream: Optional[TextIO] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.output_path = output_path
        self._owned = False
        if stream is not None:
            self._stream = stream
        elif output_path:
            try:
                self._stream = open(output_path, "a", encoding="utf-8")
            except OSError as exc:
                raise SinkError(f"cannot open output {output_path}: {exc}") from exc
            self._owned = True
        else:
            self._stream = sys.stdout
        self.lines_written = 0

    def write(self, line: str) -> None:
        try:
            self._stream.write(line + "\n")
            self._stream.flush()
        except OSError as exc:
            raise SinkError(f"write to {self.output_path or 'stdout'} failed: {exc}") from exc
        self.lines_written += 1

    def close(self) -> None:
        if self._owned:
            self._stream.close()
            self._owned = False

    def __enter__(self) -> "LineSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
