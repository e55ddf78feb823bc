"""Logger utility shared by services and controllers."""
from __future__ import annotations

import logging

_ROOT_NAME = "bakery"

logger = logging.getLogger(_ROOT_NAME)
if not logger.handlers:
    h = logging.StreamHandler()
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    h.setFormatter(fmt)
    logger.addHandler(h)
    logger.setLevel(logging.INFO)


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logger
    return logger.getChild(name.rsplit(".", 1)[-1])


def set_level(level: str | int) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)
