"""UCI engine session and protocol helpers."""

from ucilink.engine.channel import LineChannel, ResponseBatch
from ucilink.engine.errors import (
    EngineLaunchError,
    EngineTerminatedError,
    EngineTimeoutError,
    UCIEngineError,
)
from ucilink.engine.position import PositionLog
from ucilink.engine.responses import (
    BestMove,
    EngineInfo,
    EngineOption,
    parse_bestmove,
    parse_engine_info,
    parse_fen,
    parse_handshake,
)
from ucilink.engine.session import UCIEngine

__all__ = [
    "BestMove",
    "EngineInfo",
    "EngineLaunchError",
    "EngineOption",
    "EngineTerminatedError",
    "EngineTimeoutError",
    "LineChannel",
    "PositionLog",
    "ResponseBatch",
    "UCIEngine",
    "UCIEngineError",
    "parse_bestmove",
    "parse_engine_info",
    "parse_fen",
    "parse_handshake",
]
