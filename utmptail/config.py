from dataclasses import dataclass
from typing import Optional
from utmptail.exporters.formatters import DEFAULT_TIME_LAYOUT, FORMATTERS
from utmptail.types.errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class TailConfig:
    """Runtime settings for one tailing session."""
    input_path: str
    output_path: Optional[str] = None  # None -> stdout
    from_beginning: bool = False
    output_format: str = "json"
    time_layout: str = DEFAULT_TIME_LAYOUT
    utc: bool = False
    poll_interval: float = 0.25  # Seconds between stat() calls of the watcher
    byteorder: str = "little"
    log_level: str = "WARNING"

    @classmethod
    def from_args(cls, args) -> "TailConfig":
        return cls(
            input_path=args.input,
            output_path=args.output or None,
            from_beginning=args.from_beginning,
            output_format=args.format,
            time_layout=args.time_layout,
            utc=args.utc,
            poll_interval=args.poll_interval,
            byteorder=args.byteorder,
            log_level=args.log_level.upper(),
        )

    def validate(self) -> "TailConfig":
        if not self.input_path:
            raise ConfigError("Need a input file")
        if self.output_format not in FORMATTERS:
            raise ConfigError(f"Unknown format {self.output_format!r}")
        if not self.time_layout:
            raise ConfigError("Time layout must not be empty")
        if self.poll_interval <= 0:
            raise ConfigError(f"Poll interval must be positive, got {self.poll_interval}")
        if self.byteorder not in ("little", "big"):
            raise ConfigError(f"Byte order must be 'little' or 'big', got {self.byteorder!r}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level {self.log_level!r}")
        return self
