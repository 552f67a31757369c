"""Logging setup shared by the API server and the CLI.

Both entry points pass the level and optional log file from Settings (or
command-line flags); library modules only ever call logging.getLogger.
"""

import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP plumbing that floods INFO/DEBUG with connection-pool chatter
NOISY_LOGGERS = ("urllib3", "requests")


def parse_level(level: Union[int, str]) -> int:
    """Resolve a level given as a number or a name such as 'info'.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    name = str(level).strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """Configure the root logger with a console handler and an optional file.

    Only configures if the root logger has no handlers (idempotent). The
    HTTP client loggers stay at WARNING unless DEBUG is requested.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level = parse_level(level)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fh = logging.FileHandler(log_file, mode="a")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    root.setLevel(level)

    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
