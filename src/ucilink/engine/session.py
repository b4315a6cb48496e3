"""UCI engine session.

This module drives an external UCI engine (Pikafish, Stockfish, ...) over
its standard input and output. A session owns the engine process for its
whole lifetime, keeps the moves of the current game, and re-sends the
accumulated ``position`` line before every search so the engine's board
matches the caller's game.
"""

import shutil
import signal
import threading
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from ucilink.engine.channel import DEFAULT_TIMEOUT, LineChannel, ResponseBatch
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
    parse_bestmove,
    parse_engine_info,
    parse_fen,
    parse_handshake,
)


class UCIEngine:
    """Synchronous session with a UCI engine subprocess.

    The engine is started and the ``uci`` handshake completed on
    construction. Every request blocks until the engine answers, the
    engine exits, or the read deadline expires.

    Example:
        engine = UCIEngine("/path/to/pikafish")
        engine.begin_new_game(threads=4, hash_size_mb=64)
        result = engine.play("h2e2", depth=12)
        engine.close()

    Or as a context manager:
        with UCIEngine("/path/to/pikafish") as engine:
            engine.begin_new_game(threads=4, hash_size_mb=64)
            result = engine.search(depth=12)
    """

    def __init__(
        self,
        binary_path: str | Path,
        args: Sequence[str] = (),
        *,
        timeout: float | None = 30.0,
        banner_timeout: float = 1.0,
        stop_timeout: float = 5.0,
    ) -> None:
        """Start the engine and run the UCI handshake.

        Args:
            binary_path: Path to the UCI engine executable.
            args: Extra command-line arguments for the engine.
            timeout: Deadline in seconds for each response. None waits forever.
            banner_timeout: How long to wait for the start-up banner line.
            stop_timeout: After a timed-out request, how long to wait for
                the late reply once ``stop`` was sent. If it does not come
                the engine is killed.

        Raises:
            EngineLaunchError: If the executable is missing or cannot be started.
            UCIEngineError: If the handshake fails.
        """
        self.binary_path = Path(binary_path)
        self.args = [str(arg) for arg in args]
        self.timeout = timeout
        self.stop_timeout = stop_timeout
        self.banner: str | None = None
        self.info = EngineInfo()

        self._channel: LineChannel | None = None
        self._position = PositionLog()
        self._lock = threading.RLock()
        self._start_engine(banner_timeout)

    @classmethod
    def start(
        cls,
        binary_path: str | Path,
        args: Sequence[str] = (),
        *,
        timeout: float | None = 30.0,
        banner_timeout: float = 1.0,
        stop_timeout: float = 5.0,
    ) -> "UCIEngine":
        """Spawn an engine and return the ready session."""
        return cls(
            binary_path, args, timeout=timeout, banner_timeout=banner_timeout, stop_timeout=stop_timeout
        )

    def _start_engine(self, banner_timeout: float) -> None:
        """Start the subprocess, read its banner and run the handshake."""
        if not self.binary_path.exists():
            found = shutil.which(str(self.binary_path))
            if found is None:
                raise EngineLaunchError(f"Engine binary not found: {self.binary_path}")
            self.binary_path = Path(found)

        self._channel = LineChannel.spawn([str(self.binary_path), *self.args], timeout=self.timeout)

        try:
            self.banner = self._channel.read_line(timeout=banner_timeout) or None
        except EngineTimeoutError:
            logger.warning(f"No banner from {self.binary_path.name} within {banner_timeout}s")
        if self.banner:
            logger.debug(f"Engine banner: {self.banner}")

        try:
            self.uci()
        except UCIEngineError:
            self._kill_quietly()
            raise

        logger.debug(f"UCI engine initialized: {self.name}")

    def _kill_quietly(self) -> None:
        """Kill the engine after a failure; shutdown errors are only logged."""
        channel, self._channel = self._channel, None
        if channel is not None:
            self._terminate(channel)

    @staticmethod
    def _terminate(channel: LineChannel) -> list[Exception]:
        """Kill (if still running), reap and close the pipes of ``channel``.

        Every step is attempted even if an earlier one fails.

        Returns:
            The errors raised along the way, already logged.
        """
        errors: list[Exception] = []
        child = channel.child
        if child.proc.poll() is None:
            try:
                child.kill(signal.SIGKILL)
            except OSError as e:
                logger.error(f"Failed to kill engine: {e}")
                errors.append(e)
        try:
            child.wait()
        except OSError as e:
            logger.error(f"Failed to reap engine: {e}")
            errors.append(e)
        try:
            channel.close()
        except OSError as e:
            logger.error(f"Failed to close engine pipes: {e}")
            errors.append(e)
        return errors

    @property
    def channel(self) -> LineChannel:
        if self._channel is None:
            raise UCIEngineError("Engine not running")
        return self._channel

    @property
    def is_alive(self) -> bool:
        return self._channel is not None and self._channel.child.proc.poll() is None

    @property
    def name(self) -> str:
        """Engine name from the handshake, or the binary name."""
        return self.info.name or self.binary_path.name

    @property
    def moves(self) -> tuple[str, ...]:
        """Moves recorded in the current game, in play order."""
        return self._position.moves

    @property
    def position_command(self) -> str:
        """The ``position`` line that will be sent before the next search."""
        return self._position.command

    def send(self, command: str) -> None:
        """Send a raw command line to the engine."""
        self.channel.send(command)

    def collect_until(self, sentinel: str, timeout: float | None = DEFAULT_TIMEOUT) -> ResponseBatch:
        """Collect engine output up to and including a line containing ``sentinel``."""
        return self.channel.collect_until(sentinel, timeout)

    def _request(
        self, command: str, sentinel: str, timeout: float | None = DEFAULT_TIMEOUT
    ) -> ResponseBatch:
        """Send ``command`` and wait for the sentinel; a closed stream is an error.

        On timeout the session is brought back in step with the engine
        before the error propagates, see ``_resync``.
        """
        self.send(command)
        try:
            batch = self.collect_until(sentinel, timeout)
        except EngineTimeoutError:
            self._resync(command, sentinel)
            raise
        if not batch.complete:
            raise EngineTerminatedError(
                f"Engine exited before answering '{command}' with '{sentinel}'", batch
            )
        return batch

    def _resync(self, command: str, sentinel: str) -> None:
        """Consume the late answer to a timed-out ``command``.

        Sends ``stop`` and waits up to ``stop_timeout`` for the sentinel, so
        the reply cannot be mistaken for the answer to a later request. If
        it does not arrive the engine is killed and the session is closed.
        """
        logger.warning(f"'{command}' timed out; sending 'stop' and draining until '{sentinel}'")
        try:
            self.send("stop")
            late = self.collect_until(sentinel, self.stop_timeout)
        except UCIEngineError as e:
            logger.error(f"Engine did not recover after timeout ({e}); killing it")
            self._kill_quietly()
            return
        if not late.complete:
            logger.error("Engine exited while draining after timeout")
            self._kill_quietly()
            return
        logger.debug(f"Discarded late reply: {late.last}")

    def uci(self) -> str:
        """Run the ``uci`` handshake.

        Returns:
            All lines up to ``uciok`` joined with newlines.
        """
        with self._lock:
            batch = self._request("uci", "uciok")
            self.info = parse_engine_info(batch)
            return parse_handshake(batch)

    def is_ready(self) -> bool:
        """Wait until the engine has processed every command sent so far."""
        with self._lock:
            batch = self._request("isready", "readyok")
            return batch.complete

    def set_option(self, name: str, value: object | None = None) -> None:
        """Send ``setoption``; buttons such as ``Clear Hash`` take no value."""
        with self._lock:
            command = f"setoption name {name}"
            if value is not None:
                command += f" value {value}"
            self.send(command)

    def begin_new_game(self, threads: int, hash_size_mb: int) -> None:
        """Configure the engine and start a game from the start position.

        Any moves recorded so far are discarded.

        Args:
            threads: Search threads.
            hash_size_mb: Transposition table size in megabytes.
        """
        with self._lock:
            self.set_option("Threads", threads)
            self.set_option("Hash", hash_size_mb)
            self.set_option("Clear Hash")
            self.send("ucinewgame")
            self.is_ready()
            self.send("position startpos")
            self._position.reset()
            logger.debug(f"New game: threads={threads} hash={hash_size_mb}MB")

    def record_move(self, move: str) -> None:
        """Add a move to the current game.

        The engine only learns about it with the next search.

        Raises:
            UCIEngineError: If no game has been started.
            ValueError: If the move token is malformed.
        """
        with self._lock:
            if not self._position.armed:
                raise UCIEngineError("No game in progress; call begin_new_game() first")
            self._position.append(move)

    def search(
        self,
        fen: str | None = None,
        depth: int | None = None,
        movetime: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> BestMove | None:
        """Search the current game position, or a one-off FEN position.

        Args:
            fen: Search this position instead of the game; the game's
                moves are left untouched.
            depth: Search depth limit.
            movetime: Search time limit in milliseconds.
            timeout: Deadline in seconds for ``bestmove``. By default the
                session timeout plus ``movetime``. None waits forever.

        Returns:
            The best move and optional ponder move, or None if the engine
            reported no move.

        Raises:
            EngineTerminatedError: If the engine exited during the search.
            EngineTimeoutError: If no ``bestmove`` arrived in time. The
                search is stopped first; if the engine does not answer
                ``stop`` either, the session is closed.
        """
        with self._lock:
            if fen is not None:
                position = f"position fen {fen}"
            elif self._position.armed:
                position = self._position.command
            else:
                raise UCIEngineError("No position to search; call begin_new_game() or pass a FEN")

            go = ["go"]
            if depth is not None:
                go.append(f"depth {depth}")
            if movetime is not None:
                go.append(f"movetime {movetime}")

            if timeout == DEFAULT_TIMEOUT:
                timeout = self.timeout
                if timeout is not None and movetime is not None:
                    timeout += movetime / 1000

            self.send(position)
            batch = self._request(" ".join(go), "bestmove", timeout)

            result = parse_bestmove(batch)
            if result is None:
                logger.warning(f"No move in engine reply: {batch.last}")
            else:
                logger.debug(f"bestmove {result.move} ponder {result.ponder}")
            return result

    def play(
        self,
        move: str,
        depth: int | None = None,
        movetime: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> BestMove | None:
        """Record ``move`` and search the reply."""
        with self._lock:
            self.record_move(move)
            return self.search(depth=depth, movetime=movetime, timeout=timeout)

    def fen(self) -> str | None:
        """Ask the engine for its current board as FEN via the ``d`` command.

        Returns:
            The FEN, or None if the dump carried no ``Fen:`` line.
        """
        with self._lock:
            batch = self._request("d", "Checkers")
            return parse_fen(batch)

    def close(self) -> None:
        """Stop the engine and reclaim the process.

        Every step is attempted even if an earlier one fails; the first
        failure is raised once all of them ran.
        """
        with self._lock:
            channel, self._channel = self._channel, None
            if channel is None:
                return

            logger.debug(f"Stopping UCI engine: {self.binary_path.name}")
            try:
                channel.send("stop")
            except UCIEngineError as e:
                logger.warning(f"Could not send 'stop': {e}")

            errors = self._terminate(channel)
            if errors:
                raise UCIEngineError(f"Engine shutdown failed: {errors[0]}") from errors[0]

    def __enter__(self) -> "UCIEngine":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __del__(self) -> None:
        """Destructor - ensure process is cleaned up."""
        if getattr(self, "_channel", None) is not None:
            try:
                self.close()
            except UCIEngineError:
                pass
