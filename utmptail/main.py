import argparse
import logging
import signal
import sys
from typing import List, Optional

from utmptail.config import LOG_LEVELS, TailConfig
from utmptail.decoders.tail_cursor import TailCursor
from utmptail.decoders.utmp_decoder import UtmpDecoder
from utmptail.exporters.formatters import DEFAULT_TIME_LAYOUT, FORMATTERS, get_formatter
from utmptail.exporters.sinks import LineSink
from utmptail.signals.polling_watcher import PollingWriteWatcher
from utmptail.stream.driver import StreamingDriver
from utmptail.types.errors import ConfigError, UtmpTailError

logger = logging.getLogger("utmptail")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="utmptail", description="Stream utmp/wtmp records as they are appended")
    p.add_argument("-i", "--input", default="", help="utmp file input, like /var/log/wtmp")
    p.add_argument("-o", "--output", default="", help="output file (appended to), stdout if empty")
    p.add_argument("-s", "--from-beginning", dest="from_beginning", action="store_true",
                   help="Start with the file at the beginning")
    p.add_argument("-f", "--format", choices=sorted(FORMATTERS), default="json")
    p.add_argument("--time-layout", dest="time_layout", default=DEFAULT_TIME_LAYOUT,
                   help="strftime layout of the time field")
    p.add_argument("--utc", action="store_true", help="Render times in UTC instead of local time")
    p.add_argument("--poll-interval", dest="poll_interval", type=float, default=0.25,
                   help="Seconds between checks of the input file for writes")
    p.add_argument("--byteorder", choices=["little", "big"], default="little")
    p.add_argument("--log-level", dest="log_level", default="WARNING",
                   type=str.upper, choices=LOG_LEVELS)
    return p


def run(config: TailConfig) -> int:
    decoder = UtmpDecoder(byteorder=config.byteorder)
    watcher = PollingWriteWatcher(interval=config.poll_interval)
    formatter = get_formatter(config.output_format, config.time_layout, config.utc)

    with LineSink(config.output_path) as sink:
        with TailCursor.open(config.input_path, not config.from_beginning, watcher, decoder) as cursor:
            driver = StreamingDriver(cursor, sink, formatter)

            def _request_stop(signum, frame):
                logger.info("Received signal %d, stopping", signum)
                driver.stop()

            previous = {signum: signal.signal(signum, _request_stop)
                        for signum in (signal.SIGINT, signal.SIGTERM)}
            try:
                return driver.run()
            finally:
                for signum, handler in previous.items():
                    signal.signal(signum, handler)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # ============================================================
    # LOGGING CONFIGURATION
    # ============================================================
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("utmptail").setLevel(args.log_level)

    try:
        config = TailConfig.from_args(args).validate()
    except ConfigError as exc:
        parser.print_usage(sys.stderr)
        print(exc, file=sys.stderr)
        return 1

    try:
        run(config)
    except UtmpTailError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
