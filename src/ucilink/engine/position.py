"""Accumulated game position sent to the engine before each search."""

START_COMMAND = "position startpos moves "


class PositionLog:
    """Append-only move log with the derived ``position`` command.

    The command is rebuilt from the move list on every access, so the
    list and the line sent to the engine can never disagree.
    """

    def __init__(self) -> None:
        self._moves: list[str] = []
        self._armed = False

    @property
    def armed(self) -> bool:
        """Whether a game has been started and moves are accumulating."""
        return self._armed

    @property
    def moves(self) -> tuple[str, ...]:
        return tuple(self._moves)

    @property
    def command(self) -> str:
        """The ``position startpos moves ...`` line, one space after each move.

        Empty when no game has been started.
        """
        if not self._armed:
            return ""
        return START_COMMAND + "".join(f"{move} " for move in self._moves)

    def reset(self) -> None:
        """Drop all moves and start accumulating from the start position."""
        self._moves.clear()
        self._armed = True

    def append(self, move: str) -> None:
        """Record a move token in coordinate notation (e.g. ``h2e2``).

        Raises:
            RuntimeError: If no game has been started.
            ValueError: If the token is empty or contains whitespace.
        """
        if not self._armed:
            raise RuntimeError("No game in progress; reset() the log first")
        if not move or move != move.strip() or len(move.split()) != 1:
            raise ValueError(f"Invalid move token: {move!r}")
        self._moves.append(move)

    def __len__(self) -> int:
        return len(self._moves)
