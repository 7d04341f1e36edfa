"""Logging setup for the node bootstrapper.

Operator-facing records go through rich so they share the console with the
bootstrap progress output. The optional log file is a plain trace in which
every record carries the workflow step that was running when it was emitted.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(step)s] %(name)s: %(message)s"
NO_STEP = "-"
NOISY_LOGGERS = ("urllib3", "requests")

_current_step = NO_STEP


def set_step(name: str | None) -> None:
    """Tag subsequent log records with the running workflow step."""
    global _current_step
    _current_step = name or NO_STEP


class StepFilter(logging.Filter):
    """Adds the current workflow step to each record as `step`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.step = _current_step
        return True


def setup_logging(
    verbose: bool = False, log_file: Path | None = None, console: Console | None = None
) -> None:
    """Configure the root logger.

    Args:
        verbose: Show DEBUG records on the console instead of only warnings
        log_file: Optional path that receives every record at DEBUG
        console: Console to log through; defaults to a stderr console
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose or log_file else logging.INFO)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=console or Console(stderr=True), show_path=False, markup=False
    )
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            root_logger.warning(f"Cannot write log file {log_file}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            file_handler.addFilter(StepFilter())
            root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
