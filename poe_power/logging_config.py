import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Chatty third-party loggers, capped unless the driver itself runs at DEBUG.
NOISY_LOGGERS = ("urllib3", "werkzeug")


def _resolve_level(level: str) -> int:
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        logging.getLogger(__name__).warning("Unknown log level %r, using INFO", level)
        return logging.INFO
    return value


def _open_log_file(log_dir: Path) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"poe-power_{datetime.now():%Y-%m-%d__%H_%M_%S}.log"


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> Optional[Path]:
    """Send all records to stdout and, when log_dir is set, to a timestamped file.

    Safe to call twice (early with defaults, again once settings are loaded);
    handlers are replaced, not stacked. Returns the log file path, if any.
    """
    numeric_level = _resolve_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level if numeric_level <= logging.DEBUG else logging.WARNING)

    if not log_dir:
        return None

    try:
        log_file = _open_log_file(log_dir)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    except OSError as exc:
        root.error("File logging disabled (cannot write under %s): %s", log_dir, exc)
        return None

    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    root.info("Logging to file: %s", log_file)
    return log_file
