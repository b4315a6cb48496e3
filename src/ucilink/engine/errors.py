"""Exceptions raised by the UCI engine session."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ucilink.engine.channel import ResponseBatch


class UCIEngineError(Exception):
    """Raised when UCI communication fails."""

    pass


class EngineLaunchError(UCIEngineError):
    """Raised when the engine executable cannot be started."""

    pass


class EngineTerminatedError(UCIEngineError):
    """Raised when the engine process closed its pipes.

    When the failure happened while reading, ``batch`` holds the lines
    that were collected before the stream closed.
    """

    def __init__(self, message: str, batch: ResponseBatch | None = None) -> None:
        super().__init__(message)
        self.batch = batch


class EngineTimeoutError(UCIEngineError):
    """Raised when the engine did not answer before the read deadline."""

    def __init__(self, message: str, lines: list[str] | None = None) -> None:
        super().__init__(message)
        self.lines = lines or []
