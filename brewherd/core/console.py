import sys
import logging
import logging.handlers
from pathlib import Path
from typing import IO, Optional

logger = logging.getLogger(__name__)

GREEN = "\x1b[32;20m"
YELLOW = "\x1b[33;20m"
RED = "\x1b[31;20m"
RESET = "\x1b[0m"


# --- User-facing output ---
def _write(message: str, stream: IO[str], color: Optional[str] = None) -> None:
    if not message:
        return
    if color and getattr(stream, "isatty", lambda: False)():
        message = f"{color}{message}{RESET}"
    try:
        stream.write(message + "\n")
        stream.flush()
    except (OSError, ValueError) as e:
        # Closed or broken stream; console output is best-effort
        logger.debug(f"CONSOLE: Could not write to console: {e}")


def output(message: str, stream: Optional[IO[str]] = None) -> None:
    _write(message, stream or sys.stdout)


def info(message: str, stream: Optional[IO[str]] = None) -> None:
    _write(message, stream or sys.stdout, GREEN)


def warning(message: str, stream: Optional[IO[str]] = None) -> None:
    _write(message, stream or sys.stderr, YELLOW)


def error(message: str, stream: Optional[IO[str]] = None) -> None:
    _write(message, stream or sys.stderr, RED)


# --- Logging ---
class ColorLogFormatter(logging.Formatter):
    """Adds ANSI color codes to log messages based on level for console output."""

    GREY = "\x1b[38;20m"
    YELLOW = "\x1b[33;20m" # Warning
    RED = "\x1b[31;20m"    # Error
    BOLD_RED = "\x1b[31;1m" # Critical
    RESET = "\x1b[0m"

    BASE_FORMAT = '%(asctime)s [%(levelname)-7s] %(name)s: %(message)s'
    DATE_FORMAT = '%H:%M:%S'

    FORMATS = {
        logging.DEBUG: GREY + BASE_FORMAT + RESET,
        logging.INFO: BASE_FORMAT,
        logging.WARNING: YELLOW + BASE_FORMAT + RESET,
        logging.ERROR: RED + BASE_FORMAT + RESET,
        logging.CRITICAL: BOLD_RED + BASE_FORMAT + RESET
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.BASE_FORMAT)
        formatter = logging.Formatter(log_fmt, datefmt=self.DATE_FORMAT)
        return formatter.format(record)


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Console handler on stderr (WARNING, or DEBUG when verbose) plus a rotating
    file handler when log_file can be opened. The directory must already exist.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(ColorLogFormatter())
    root_logger.addHandler(console_handler)

    if log_file is None:
        return
    try:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8'
        )
    except OSError as e:
        logger.debug(f"CONSOLE: File logging disabled, cannot open {log_file}: {e}")
        return
    file_handler.setFormatter(logging.Formatter(ColorLogFormatter.BASE_FORMAT,
                                                datefmt=ColorLogFormatter.DATE_FORMAT))
    file_handler.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    logger.debug(f"CONSOLE: File logging initialized at: {log_file}")
