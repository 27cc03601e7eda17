# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Logging setup and user-facing console helpers."""

from __future__ import annotations

import logging
import sys
from typing import Final

from .public import emoji, fail, info, ok, warn

PACKAGE_LOGGER_NAME: Final[str] = "shellqa"
_CONFIGURED_FLAG: Final[str] = "_shellqa_configured"


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the package logger once.

    Library modules only create loggers; the CLI calls this to make their
    records visible.

    Args:
        verbose: Emit debug records when ``True``; warnings and above otherwise.

    Returns:
        logging.Logger: The package root logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if getattr(logger, _CONFIGURED_FLAG, False):
        return logger
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    setattr(logger, _CONFIGURED_FLAG, True)
    return logger


__all__ = [
    "PACKAGE_LOGGER_NAME",
    "configure_logging",
    "emoji",
    "fail",
    "info",
    "ok",
    "warn",
]
