"""Tests de la configuration du logging applicatif."""

from __future__ import annotations

import logging
from pathlib import Path

from actionculture.core.utils.logging import LOGGER_NAME, setup_logging


def _own_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, "_actionculture_handler", False)]


def test_setup_logging_is_idempotent(tmp_path: Path) -> None:
    logger = setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    assert len(_own_handlers(logger)) == 1


def test_setup_logging_writes_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "actionculture.log"
    logger = setup_logging(logging.INFO, log_file=log_file)

    logging.getLogger("actionculture.core.api.client").info("requête envoyée")
    for handler in _own_handlers(logger):
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "[INFO] actionculture.core.api.client: requête envoyée" in content

    setup_logging(logging.WARNING)
    assert len(_own_handlers(logger)) == 1
