# musicrpc/debug.py
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

DEBUG_LOG_PATH = Path(__file__).resolve().parents[1] / "musicrpc_debug.log"

_LEVEL_STYLES = {
    logging.CRITICAL: ("fatal", (237, 135, 150)),
    logging.ERROR: ("error", (237, 135, 150)),
    logging.WARNING: ("warn", (238, 212, 159)),
    logging.INFO: ("info", (138, 173, 244)),
    logging.DEBUG: ("debug", (198, 160, 246)),
}

_LEVEL_NAMES = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def parse_level(name: str) -> int:
    try:
        return _LEVEL_NAMES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown log level {name!r}") from None


class ConsoleFormatter(logging.Formatter):
    """Short padded level names, coloured when writing to a terminal."""

    def __init__(self, color: bool):
        super().__init__("%(levelname)s %(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        name, (r, g, b) = _LEVEL_STYLES.get(record.levelno, (record.levelname.lower(), (255, 255, 255)))
        label = f"{name:<6}"
        if self.color:
            label = f"\x1b[38;2;{r};{g};{b}m{label}\x1b[0m"
        return f"{label}{record.getMessage()}" + (
            "\n" + self.formatException(record.exc_info) if record.exc_info else ""
        )


def setup_logging(
    level: str = "warning",
    debug_file: bool = False,
    stream: Optional[TextIO] = None,
    log_path: Path = DEBUG_LOG_PATH,
) -> None:
    stream = stream or sys.stdout
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(stream)
    console.setLevel(parse_level(level))
    isatty = getattr(stream, "isatty", None)
    console.setFormatter(ConsoleFormatter(color=bool(isatty and isatty())))
    root.addHandler(console)

    if debug_file:
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)

    # urllib3 and asyncio are chatty at debug
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
