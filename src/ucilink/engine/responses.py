"""Interpreters for UCI response batches.

All parsers are anchored on the protocol's labels (``bestmove``, ``ponder``,
``Fen:``, ``id name``) rather than on fixed columns, and return None for
output they cannot make sense of instead of raising.
"""

import re
from dataclasses import dataclass, field

from ucilink.engine.channel import ResponseBatch

NULL_MOVES = frozenset({"(none)", "0000"})

_BESTMOVE_RE = re.compile(r"\bbestmove\s+(\S+)(?:\s+ponder\s+(\S+))?")
_FEN_LABEL = "Fen:"
_ID_RE = re.compile(r"^id\s+(name|author)\s+(.*)$")
_OPTION_RE = re.compile(r"^option\s+name\s+(.+?)\s+type\s+(\S+)(.*)$")
_DEFAULT_RE = re.compile(r"\bdefault\s+(.*?)(?=\s+(?:min|max|var)\s|$)")


@dataclass(frozen=True)
class BestMove:
    """Result of a ``go`` search."""

    move: str
    ponder: str | None = None


@dataclass(frozen=True)
class EngineOption:
    """An option advertised during the ``uci`` handshake."""

    name: str
    type: str
    default: str | None = None


@dataclass
class EngineInfo:
    """Identification reported between ``uci`` and ``uciok``."""

    name: str | None = None
    author: str | None = None
    options: dict[str, EngineOption] = field(default_factory=dict)


def parse_handshake(batch: ResponseBatch) -> str:
    """Join the handshake lines into one diagnostic string."""
    return batch.text


def parse_engine_info(batch: ResponseBatch) -> EngineInfo:
    """Extract engine name, author and options from a ``uciok`` batch."""
    info = EngineInfo()
    for line in batch:
        line = line.strip()
        id_match = _ID_RE.match(line)
        if id_match:
            setattr(info, id_match.group(1), id_match.group(2).strip())
            continue

        option_match = _OPTION_RE.match(line)
        if option_match:
            name, kind, rest = option_match.groups()
            default = _DEFAULT_RE.search(rest)
            info.options[name] = EngineOption(
                name=name,
                type=kind,
                default=default.group(1) if default else None,
            )
    return info


def parse_bestmove(batch: ResponseBatch) -> BestMove | None:
    """Extract the best and ponder moves from a search batch.

    Uses the last line containing ``bestmove``. Returns None for an
    incomplete batch, when no such line exists, when it carries no move
    token, or when the engine reports a null move (no legal moves).
    """
    if not batch.complete:
        return None
    candidates = [line for line in batch.lines if "bestmove" in line]
    if not candidates:
        return None

    match = _BESTMOVE_RE.search(candidates[-1])
    if match is None:
        return None

    move, ponder = match.groups()
    if move in NULL_MOVES:
        return None
    if ponder in NULL_MOVES:
        ponder = None
    return BestMove(move=move, ponder=ponder)


def parse_fen(batch: ResponseBatch) -> str | None:
    """Extract the FEN from a ``d`` board dump.

    Engines print the FEN a few lines above the ``Checkers:`` line with a
    ``Fen:`` label; the labelled line is searched for instead of counted.
    A dump cut short by the engine exiting yields None.
    """
    if not batch.complete:
        return None
    for line in reversed(batch.lines):
        stripped = line.strip()
        if stripped.startswith(_FEN_LABEL):
            fen = stripped[len(_FEN_LABEL):].strip()
            return fen or None
    return None
