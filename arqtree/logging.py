"""Loggers for the ``arqtree`` hierarchy, levelled by ``ARQTREE_LOG_LEVEL``."""

from __future__ import annotations

import logging
from typing import Optional

from . import config as arq_config


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a child of the ``arqtree`` logger.

    ``name`` may be relative (``"core.static_tree"``) or already rooted, such
    as a module's ``__name__``; either way the result lives under ``arqtree``.
    """

    root = arq_config.LOGGER_ROOT
    if not name or name == root:
        qualified = root
    elif name.startswith(root + "."):
        qualified = name
    else:
        qualified = f"{root}.{name}"
    logger = logging.getLogger(qualified)
    logger.setLevel(arq_config.runtime_config().log_level)
    return logger
