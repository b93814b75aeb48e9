"""
Logging for divvy subsampling runs.

Everything logs under the package logger ``divvy``: a console handler
always, and a JSON Lines file (``subsampling.jsonl``) only when a run
directory is given or DIVVY_LOG_DIR is set. Phase summaries carry their
inputs, outputs and timing as structured fields in the file log.

Usage:
    from divvy.logging_config import get_run_logger
    log = get_run_logger(__name__)
"""

import json
import logging
import os
import time
import uuid

PACKAGE_LOGGER = "divvy"
LOG_FILENAME = "subsampling.jsonl"

# Structured fields passed via ``extra=`` by log_step_summary().
SUMMARY_FIELDS = ("step_name", "input_summary", "output_summary", "timing_seconds")

_run_id = None
_file_handler = None


def set_run_id(run_id=None):
    """Tag subsequent records with ``run_id`` (a fresh 8-char id if None)."""
    global _run_id
    _run_id = run_id or uuid.uuid4().hex[:8]
    return _run_id


class RunIdFilter(logging.Filter):
    """Stamp the current run id onto each record a handler emits."""

    def filter(self, record):
        record.run_id = _run_id or set_run_id()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with any summary fields attached."""

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "run_id": getattr(record, "run_id", None),
            "message": record.getMessage(),
        }
        entry.update({k: getattr(record, k) for k in SUMMARY_FIELDS
                      if hasattr(record, k)})
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):

    def __init__(self):
        super().__init__("%(asctime)s [%(levelname)s] %(message)s",
                         datefmt="%H:%M:%S")


def _attach(logger, handler, level):
    handler.setLevel(level)
    handler.addFilter(RunIdFilter())
    logger.addHandler(handler)
    return handler


def setup_logging(run_dir=None, console_level=None):
    """Attach handlers to the ``divvy`` logger.

    The console handler is attached once. A file handler is attached by
    the first call that resolves a run directory (the argument, else
    DIVVY_LOG_DIR); later calls leave existing handlers alone.

    Parameters
    ----------
    run_dir : str, optional
        Directory for the JSON Lines log; created if missing.
    console_level : int, optional
        Defaults to the LOG_LEVEL environment variable, else INFO.
    """
    global _file_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        if console_level is None:
            name = os.environ.get("LOG_LEVEL", "INFO").upper()
            console_level = getattr(logging, name, logging.INFO)
        logger.setLevel(logging.DEBUG)
        console = logging.StreamHandler()
        console.setFormatter(ConsoleFormatter())
        _attach(logger, console, console_level)

    run_dir = run_dir or os.environ.get("DIVVY_LOG_DIR")
    if run_dir and _file_handler is None:
        os.makedirs(run_dir, exist_ok=True)
        fh = logging.FileHandler(os.path.join(run_dir, LOG_FILENAME))
        fh.setFormatter(JsonFormatter())
        _file_handler = _attach(logger, fh, logging.DEBUG)


def reset_logging():
    """Detach and close all ``divvy`` handlers and forget the run id."""
    global _file_handler, _run_id

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    _file_handler = None
    _run_id = None


def get_run_logger(name):
    """Logger for a divvy module, setting up handlers on first use."""
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logging()
    return logging.getLogger(name)


def log_step_summary(logger, step_name, status="success", input_summary=None,
                     output_summary=None, timing_seconds=None):
    """Log one INFO line for a run phase ("indexing" or "draw").

    ``status`` is "success" or "error". The summaries and timing go into
    the record as structured fields; the message repeats the output
    summary and timing for the console.
    """
    message = f"[{step_name}] {status}"
    extra = {"step_name": step_name}
    if timing_seconds is not None:
        message += f" ({timing_seconds:.1f}s)"
        extra["timing_seconds"] = timing_seconds
    if output_summary:
        message += f" output={output_summary}"
        extra["output_summary"] = output_summary
    if input_summary:
        extra["input_summary"] = input_summary
    logger.info(message, extra=extra)


class StepTimer:
    """Wall-clock timer for a run phase; read ``elapsed`` after the block."""

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *exc):
        self.elapsed = time.perf_counter() - self.start
