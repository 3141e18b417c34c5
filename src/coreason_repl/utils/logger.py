# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_repl

"""Process-wide loguru configuration.

Importing this module replaces loguru's default handler with two sinks:
a human-readable stderr sink and a JSON-serialized rotating file sink
under ``logs/app.log``.
"""

import sys
from pathlib import Path

from loguru import logger

LOG_DIR = Path("logs")
LOG_FILE = LOG_DIR / "app.log"


def setup_logging(level: str = "INFO") -> None:
    """(Re)configure the global loguru logger."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
    )
    logger.add(
        LOG_FILE,
        level=level,
        rotation="10 MB",
        retention="7 days",
        serialize=True,
        enqueue=True,
    )


setup_logging()

__all__ = ["logger", "setup_logging"]
