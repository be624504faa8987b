"""Configuration du logging applicatif."""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "actionculture"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_HANDLER_MARK = "_actionculture_handler"


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    """
    Configure le logger racine du package (console + fichier optionnel).

    Idempotent : les handlers posés par un appel précédent sont remplacés,
    jamais empilés.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    setattr(console, _HANDLER_MARK, True)
    logger.addHandler(console)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        logger.addHandler(file_handler)
    return logger
