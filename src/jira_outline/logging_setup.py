# src/jira_outline/logging_setup.py
from __future__ import annotations

import logging
import os
import sys
import uuid

from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(command)s %(run_id)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(command)s %(run_id)s"


class CommandContextFilter(logging.Filter):
    """Stamps every record with the CLI subcommand and the id of this run."""

    def __init__(self, command: str, run_id: str) -> None:
        super().__init__()
        self.command = command
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.command = self.command
        record.run_id = self.run_id
        return True


def _build_formatter(json_mode: bool) -> logging.Formatter:
    if json_mode:
        return JsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(command: str, *, verbose: bool = False) -> str:
    """
    Configures the root logger for one CLI invocation and returns the run id.
    --verbose wins over LOG_LEVEL; LOG_JSON=true switches to JSON lines and
    LOG_FILE adds a file sink next to stderr.
    """
    run_id = os.getenv("RUN_ID") or uuid.uuid4().hex[:8]
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"
    log_file = os.getenv("LOG_FILE")

    root = logging.getLogger()
    root.setLevel(log_level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    fmt = _build_formatter(json_mode)
    context = CommandContextFilter(command, run_id)
    for h in handlers:
        h.setFormatter(fmt)
        h.addFilter(context)
        root.addHandler(h)

    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging initialized", extra={"level": logging.getLevelName(log_level)})
    return run_id
