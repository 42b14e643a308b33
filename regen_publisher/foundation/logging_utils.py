"""Operational logging for publish runs."""

from __future__ import annotations

import logging
import os

ROOT_LOGGER_NAME = "regen_publisher"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_operational_logger(
    log_dir: str,
    run_id: str,
    *,
    console_level: int = logging.INFO,
) -> tuple[logging.Logger, str]:
    """
    Configure the package logger for one publish run.

    Every framework module logs through a child of ``regen_publisher``, so the
    handlers installed here capture the whole pass: a UTF-8 file under
    ``log_dir`` (DEBUG and up) and stderr (``console_level`` and up).
    """

    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f"{run_id}_publish.log")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(console_level)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    logger.info("Operational logging initialized for publish run %s", run_id)
    logger.debug("Operational log file: %s", log_file)

    return logger, log_file
