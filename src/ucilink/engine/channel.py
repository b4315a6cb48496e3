"""Line-oriented channel to a UCI engine subprocess.

The channel wraps a ``pexpect.popen_spawn.PopenSpawn`` child. PopenSpawn
talks to the process over plain pipes and drains stdout on a background
reader thread, so every read here can be bounded by a deadline instead of
blocking forever on a silent engine.
"""

import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

import pexpect
from loguru import logger
from pexpect.popen_spawn import PopenSpawn

from ucilink.engine.errors import EngineLaunchError, EngineTerminatedError, EngineTimeoutError

# pexpect convention: a timeout of -1 means "use the channel default".
DEFAULT_TIMEOUT = -1

_NEWLINE = r"\r?\n"


@dataclass
class ResponseBatch:
    """Lines collected from the engine for one request.

    ``complete`` is False when the output stream closed before a line
    containing ``sentinel`` arrived.
    """

    sentinel: str
    lines: list[str] = field(default_factory=list)
    complete: bool = False

    @property
    def last(self) -> str | None:
        return self.lines[-1] if self.lines else None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


class LineChannel:
    """Duplex text channel speaking newline-terminated commands.

    PopenSpawn always starts the process with stderr redirected into
    stdout, so anything the engine prints on stderr shows up as ordinary
    lines here. Such lines land in response batches and can match a
    sentinel; engines that write diagnostics to stderr should be wrapped
    in a launcher that silences it.

    Traffic is logged at TRACE on a logger bound with ``wire=True`` and
    the engine pid, which ``setup_logging(protocol_log=...)`` routes to a
    transcript file.
    """

    def __init__(self, child: PopenSpawn) -> None:
        self._child = child
        self._wire = logger.bind(wire=True, pid=child.pid)

    @classmethod
    def spawn(
        cls,
        argv: Sequence[str],
        *,
        timeout: float | None = 30.0,
    ) -> "LineChannel":
        """Start a process with stdin and stdout connected to pipes.

        Args:
            argv: Executable followed by its arguments.
            timeout: Default read deadline in seconds. None blocks forever.

        Raises:
            EngineLaunchError: If the process cannot be started.
        """
        argv = [str(arg) for arg in argv]
        logger.debug(f"Spawning engine process: {' '.join(argv)}")
        try:
            child = PopenSpawn(
                argv,
                timeout=timeout,
                encoding="utf-8",
                codec_errors="replace",
            )
        except OSError as e:
            raise EngineLaunchError(f"Cannot start engine '{argv[0]}': {e}") from e
        return cls(child)

    @property
    def child(self) -> PopenSpawn:
        return self._child

    @property
    def pid(self) -> int:
        return self._child.pid

    @property
    def timeout(self) -> float | None:
        return self._child.timeout

    def send(self, command: str) -> None:
        """Write one command line to the engine.

        stdin is opened unbuffered, so the line reaches the engine as soon
        as the write returns.

        Raises:
            EngineTerminatedError: If the engine's stdin is closed.
        """
        self._wire.trace(f"> {command}")
        try:
            self._child.send(command + "\n")
        except (OSError, ValueError) as e:
            raise EngineTerminatedError(f"Cannot send '{command}': engine input is closed") from e

    def read_line(self, timeout: float | None = DEFAULT_TIMEOUT) -> str | None:
        """Read one line without its terminator.

        Returns:
            The line (possibly empty), a trailing unterminated fragment at
            end of stream, or None once the stream is exhausted.

        Raises:
            EngineTimeoutError: If no complete line arrived in time.
        """
        try:
            index = self._child.expect([_NEWLINE, pexpect.EOF], timeout=timeout)
        except pexpect.TIMEOUT as e:
            raise EngineTimeoutError("Timeout waiting for engine output") from e

        line = self._child.before or ""
        if index == 1:
            # EOF: whatever is left has no terminator
            if not line:
                return None
        self._wire.trace(f"< {line}")
        return line

    def collect_until(self, sentinel: str, timeout: float | None = DEFAULT_TIMEOUT) -> ResponseBatch:
        """Collect lines until one contains ``sentinel``.

        Empty lines are skipped. The matching line is included in the
        batch. If the stream closes first, the lines read so far are
        returned with ``complete=False``.

        Args:
            sentinel: Substring marking the end of the response.
            timeout: Overall deadline in seconds for the whole batch.
                -1 uses the channel default, None blocks forever.

        Raises:
            EngineTimeoutError: If the deadline expires first. The lines
                collected so far are attached to the error.
        """
        if timeout == DEFAULT_TIMEOUT:
            timeout = self.timeout
        deadline = None if timeout is None else time.monotonic() + timeout

        batch = ResponseBatch(sentinel)
        while True:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                line = self.read_line(remaining)
            except EngineTimeoutError as e:
                raise EngineTimeoutError(
                    f"Timeout waiting for '{sentinel}' after {len(batch)} lines", batch.lines
                ) from e

            if line is None:
                logger.warning(f"Engine output closed before '{sentinel}' ({len(batch)} lines read)")
                return batch
            if not line:
                continue

            batch.lines.append(line)
            if sentinel in line:
                batch.complete = True
                return batch

    def close(self) -> None:
        """Close both pipes. Call once the process has been reaped."""
        self._child.sendeof()
        self._child.proc.stdout.close()
