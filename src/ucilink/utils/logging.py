"""Logging setup: console output and an optional engine protocol transcript."""

import sys
from pathlib import Path

from loguru import logger


def _is_wire(record: dict) -> bool:
    return bool(record["extra"].get("wire"))


def setup_logging(level: str = "INFO", protocol_log: str | Path | None = None) -> None:
    """Configure loguru for the engine client.

    Lines exchanged with engines are logged at TRACE by the channel and
    tagged ``wire``. They reach the console only when ``level`` is TRACE.
    With ``protocol_log`` set they are also written to that file whatever
    the console level, one line per message prefixed with the engine pid
    and ``>`` (sent) or ``<`` (received).

    Args:
        level: Minimum level for the console.
        protocol_log: Optional file for the protocol transcript.
    """
    level = level.upper()
    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if protocol_log:
        path = Path(protocol_log)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level="TRACE",
            filter=_is_wire,
            format="{time:HH:mm:ss.SSS} [{extra[pid]}] {message}",
        )
        logger.debug(f"Protocol transcript: {path}")
