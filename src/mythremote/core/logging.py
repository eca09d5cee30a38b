"""
Unified logging setup for mythremote.

This module provides centralized logging configuration with:
- Custom VERBOSE logging level (level 9, more verbose than DEBUG)
- verbose() method added to the standard Logger class
- An optional protocol log file recording every line exchanged with the frontend

Usage:
    from mythremote.core.logging import setup_logging, get_logger

    # In your CLI or main entry point:
    setup_logging(verbosity_level=2, quiet=False)  # VERBOSE level

    # Use verbose logging anywhere:
    logger = get_logger()
    logger.verbose("This is a verbose message")
"""

import logging
from pathlib import Path
from typing import Any

# Define custom VERBOSE level (9 is between DEBUG (10) and NOTSET (0))
VERBOSE = 9
logging.addLevelName(VERBOSE, "VERBOSE")

PROTOCOL_LOGGER_ID = "protocol"

DATE_FMT = "%Y-%m-%d %H:%M:%S"
LOG_FMT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PROTOCOL_LOG_FMT = "%(asctime)s - %(source)s: %(message)s"


class VerboseLogger(logging.Logger):
    def verbose(self: logging.Logger, message: str, *args: Any, **kwargs: Any) -> None:
        """
        Log a message with severity 'VERBOSE'.

        VERBOSE is a custom level that is more verbose than DEBUG, used for
        raw socket traffic that would clutter DEBUG output.

        Args:
            self: The logger instance (injected via method binding).
            message: The log message.
            *args: Arguments for message formatting.
            **kwargs: Additional keyword arguments passed to log().
        """
        if self.isEnabledFor(VERBOSE):
            self._log(VERBOSE, message, args, **kwargs)


def setup_logging(
    verbosity_level: int = 0,
    quiet: bool = False,
    protocol_log_file: str | None = None,
) -> None:
    """
    Configure logging based on verbosity settings.

    Args:
        verbosity_level: Verbosity counter from CLI (Click's count=True).
            - 0: WARNING level (default, keeps command output clean)
            - 1: INFO level (-v)
            - 2: DEBUG level (-vv)
            - 3+: VERBOSE level (-vvv or more)
        quiet: If True, set log level to ERROR (takes precedence over verbosity_level).
        protocol_log_file: Optional path to a file recording every protocol line.
            A separate logger named 'protocol' writes only to this file (propagate=False).
    """
    if quiet:
        level = logging.ERROR
    elif verbosity_level >= 3:
        level = VERBOSE
    elif verbosity_level == 2:
        level = logging.DEBUG
    elif verbosity_level == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.setLoggerClass(VerboseLogger)

    logging.basicConfig(level=level, format=LOG_FMT, datefmt=DATE_FMT)

    setup_file_logger(protocol_log_file, PROTOCOL_LOGGER_ID)


def setup_file_logger(log_file: str | None, logger_id: str) -> None:
    file_logger = logging.getLogger(logger_id)

    # Already configured
    if file_logger.handlers and \
        any(isinstance(h, logging.FileHandler) for h in file_logger.handlers):
        return

    try:
        fh: logging.Handler = logging.NullHandler()
        if log_file:
            log_path = Path(log_file).expanduser()
            if log_path.parent:
                log_path.parent.mkdir(parents=True, exist_ok=True)

            fh = logging.FileHandler(str(log_path), encoding="utf-8", mode="a")
            fh.setFormatter(logging.Formatter(PROTOCOL_LOG_FMT, datefmt=DATE_FMT))
            fh.setLevel(logging.INFO)

        file_logger.addHandler(fh)
        file_logger.setLevel(logging.INFO)

        # Do not propagate to root logger - only write to file
        file_logger.propagate = False

    except OSError as e:
        logging.getLogger(__name__).error(
            f"Failed to set up log file '{log_file}' for logger '{logger_id}': {e}"
        )


def get_logger(name: str | None = None) -> VerboseLogger:
    """
    Get a logger instance, ensuring it is a VerboseLogger.

    Wraps logging.getLogger so that loggers created before setup_logging()
    was called still gain the verbose() method.

    Args:
        name: The name of the logger to get. Defaults to the calling module.

    Returns:
        An instance of VerboseLogger.
    """
    if name is None:
        import inspect

        frame = inspect.stack()[1]
        module = inspect.getmodule(frame[0])
        name = module.__name__ if module else "__main__"

    logger = logging.getLogger(name)

    if not isinstance(logger, VerboseLogger):
        logger.__class__ = VerboseLogger

    return logger  # type: ignore


def get_protocol_logger() -> logging.Logger:
    return logging.getLogger(PROTOCOL_LOGGER_ID)


def log_protocol_communication(content: str, address: str | None, sent: bool) -> None:
    source = address or "frontend"
    get_protocol_logger().info(
        content, extra={"source": f"Sent {source}" if sent else f"Recv {source}"}
    )


def log_protocol_sent(content: str, address: str | None = None) -> None:
    log_protocol_communication(content, address, sent=True)


def log_protocol_recv(content: str, address: str | None = None) -> None:
    log_protocol_communication(content, address, sent=False)
