"""Pytest configuration and shared fixtures."""

import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from loguru import logger

from ucilink.engine import UCIEngine

MOCK_ENGINE = Path(__file__).parent / "mock_engine.py"


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop sinks added by a test so they don't outlive its streams."""
    yield
    logger.remove()


@pytest.fixture
def transcript(tmp_path: Path) -> Path:
    """File the mock engine appends every received command to."""
    return tmp_path / "transcript.txt"


@pytest.fixture
def mock_argv(transcript: Path) -> Callable[..., list[str]]:
    """Build the argument list that runs the mock engine with some flags."""

    def build(*flags: str) -> list[str]:
        return ["-u", str(MOCK_ENGINE), str(transcript), *flags]

    return build


@pytest.fixture
def make_engine(mock_argv: Callable[..., list[str]]) -> Iterator[Callable[..., UCIEngine]]:
    """Factory starting mock engine sessions; all of them are closed afterwards."""
    engines: list[UCIEngine] = []

    def make(
        *flags: str, timeout: float | None = 5.0, banner_timeout: float = 2.0, **kwargs
    ) -> UCIEngine:
        engine = UCIEngine(
            sys.executable,
            mock_argv(*flags),
            timeout=timeout,
            banner_timeout=banner_timeout,
            **kwargs,
        )
        engines.append(engine)
        return engine

    yield make

    for engine in engines:
        engine.close()


@pytest.fixture
def sent_commands(transcript: Path) -> Callable[[], list[str]]:
    """Read back the commands the mock engine received, in order."""

    def read() -> list[str]:
        if not transcript.exists():
            return []
        return transcript.read_text().splitlines()

    return read
