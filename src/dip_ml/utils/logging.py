"""
Logging setup for the dip command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached once, to the ``dip_ml`` logger, by the CLI entry point.
"""

import logging
import sys
from collections.abc import Mapping
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = "dip_ml",
    level: int = logging.INFO,
    log_file: Path | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Attach a stdout handler (and optionally a file handler) to ``name``.

    Calling it again replaces the handlers, so repeated CLI invocations in one
    process (tests) do not duplicate output. Propagation is turned off: records
    from ``dip_ml.*`` modules stop here instead of reaching the root logger.

    Args:
        name: Logger to configure
        level: Level for the logger and its handlers
        log_file: Optional file that receives the same records (appended)
        format_string: Record format (default: LOG_FORMAT)

    Returns:
        The configured logger
    """
    formatter = logging.Formatter(format_string or LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a"))

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def verbosity_to_level(verbose: int) -> int:
    """Map a -v count to a logging level (0 -> INFO, 1+ -> DEBUG)."""
    return logging.DEBUG if verbose >= 1 else logging.INFO


def configure_cli_logging(verbose: int = 0, log_file: Path | None = None) -> logging.Logger:
    """Logger for the ``dip`` group: ``-v`` count and ``--log-file`` applied."""
    logger = setup_logger("dip_ml", level=verbosity_to_level(verbose), log_file=log_file)
    if log_file is not None:
        logger.debug(f"Logging to file: {log_file}")
    return logger


def log_section(
    logger: logging.Logger,
    title: str,
    details: Mapping[str, object] | None = None,
    width: int = 80,
    char: str = "=",
):
    """Log a banner header, followed by ``key: value`` lines when given."""
    logger.info(char * width)
    logger.info(title)
    for key, value in (details or {}).items():
        logger.info(f"  {key}: {value}")
    logger.info(char * width)
