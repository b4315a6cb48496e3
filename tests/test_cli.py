"""Tests for the command-line interface."""

import sys
from pathlib import Path

import pytest
from omegaconf import OmegaConf
from typer.testing import CliRunner

from ucilink import __version__
from ucilink.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, mock_argv) -> Path:
    """Config pointing the CLI at the mock engine."""

    def write(*flags: str) -> Path:
        path = tmp_path / "ucilink.yaml"
        OmegaConf.save(
            OmegaConf.create(
                {
                    "engine": {"path": sys.executable, "args": mock_argv(*flags), "timeout": 5.0},
                    "log_level": "WARNING",
                }
            ),
            path,
        )
        return path

    return write


class TestCli:
    """Tests for the ucilink commands."""

    def test_version(self) -> None:
        """Test the version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_protocol_log_override(self, config_file, tmp_path) -> None:
        """Test that --set protocol_log writes the engine transcript."""
        protocol_log = tmp_path / "protocol.log"
        result = runner.invoke(
            app,
            ["bestmove", "--config", str(config_file()), "-d", "3", "--set", f"protocol_log={protocol_log}"],
        )

        assert result.exit_code == 0, result.stdout
        text = protocol_log.read_text()
        assert "> go depth 3" in text
        assert "< bestmove h2e2 ponder h9g7" in text

    def test_bestmove(self, config_file, sent_commands) -> None:
        """Test a full search through the CLI."""
        result = runner.invoke(
            app,
            ["bestmove", "--config", str(config_file()), "-m", "h2e2", "-m", "h9g7", "-d", "6", "--threads", "2"],
        )

        assert result.exit_code == 0, result.stdout
        assert "h2e2" in result.stdout
        assert "h9g7" in result.stdout
        commands = sent_commands()
        assert "setoption name Threads value 2" in commands
        assert "setoption name Hash value 16" in commands
        go_index = commands.index("go depth 6")
        assert commands[go_index - 1] == "position startpos moves h2e2 h9g7 "

    def test_bestmove_uses_search_config(self, config_file, sent_commands) -> None:
        """Test that search limits come from --set when not given as options."""
        result = runner.invoke(
            app,
            ["bestmove", "--config", str(config_file()), "--set", "search.movetime=250"],
        )

        assert result.exit_code == 0, result.stdout
        assert "go movetime 250" in sent_commands()

    def test_bestmove_show_fen(self, config_file) -> None:
        """Test that --show-fen prints the board dump's FEN."""
        result = runner.invoke(app, ["bestmove", "--config", str(config_file()), "--show-fen"])

        assert result.exit_code == 0, result.stdout
        assert "FEN: rnbakabnr/9/1c5c1" in result.stdout

    def test_bestmove_engine_failure(self, config_file) -> None:
        """Test that an engine dying mid-search exits non-zero."""
        result = runner.invoke(app, ["bestmove", "--config", str(config_file("--die-on-go"))])

        assert result.exit_code == 1
        assert "Engine error" in result.stdout

    def test_bestmove_missing_engine(self, tmp_path) -> None:
        """Test that a missing executable exits non-zero."""
        result = runner.invoke(app, ["bestmove", str(tmp_path / "no-such-engine")])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_info(self, config_file) -> None:
        """Test that engine identity and options are listed."""
        result = runner.invoke(app, ["info", "--config", str(config_file())])

        assert result.exit_code == 0, result.stdout
        assert "Mockfish 1.0" in result.stdout
        assert "Clear Hash" in result.stdout
