"""
Loggers for the playback engine, feeds and parser.

Every module logger writes state changes and load failures to the terminal
through Rich. Setting `TRACKPLAY_LOG_FILE` also appends them, one JSON object
per line, to that file so a replay session can be inspected afterwards.
"""

import logging
import os
import json
from pathlib import Path

from rich.logging import RichHandler

LOG_FILE_ENV = "TRACKPLAY_LOG_FILE"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record; tracebacks go under "exception".
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level":     record.levelname,
            "logger":    record.name,
            "message":   record.getMessage(),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def get_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Module logger for trackplay code, set up on first request.

    Handlers are attached once per name, so calling this at import time from
    several modules never duplicates output. The JSON file is read from the
    environment at that first call.

    Parameters
    ----------
    name
        Dotted module name, e.g. `trackplay.playback.engine`.
    level
        Threshold for both the logger and its handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        console_handler = RichHandler(rich_tracebacks=True)
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

        log_file = os.environ.get(LOG_FILE_ENV)
        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)

    return logger
