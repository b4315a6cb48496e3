"""Tests for configuration loading and logging setup."""

import pytest
from loguru import logger
from omegaconf.errors import OmegaConfBaseException

from ucilink.configs import (
    EngineConfig,
    SearchConfig,
    SessionConfig,
    config_from_dict,
    config_to_dict,
    load_config,
    save_config,
)
from ucilink.utils import setup_logging


class TestSchema:
    """Tests for the configuration dataclasses."""

    def test_defaults(self) -> None:
        """Test the default session configuration."""
        config = SessionConfig()
        assert config.engine.threads == 1
        assert config.engine.hash_mb == 16
        assert config.engine.timeout == 30.0
        assert config.search.depth is None
        assert config.search.movetime is None
        assert config.log_level == "INFO"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"threads": 0},
            {"hash_mb": 0},
            {"timeout": 0},
            {"timeout": -1.0},
            {"banner_timeout": 0},
            {"stop_timeout": 0},
        ],
    )
    def test_invalid_engine_values(self, kwargs: dict) -> None:
        """Test that nonsensical engine settings are rejected."""
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

    def test_timeout_none_waits_forever(self) -> None:
        """Test that None is an accepted timeout."""
        assert EngineConfig(timeout=None).timeout is None

    @pytest.mark.parametrize("kwargs", [{"depth": 0}, {"movetime": 0}, {"depth": -3}])
    def test_invalid_search_values(self, kwargs: dict) -> None:
        """Test that non-positive search limits are rejected."""
        with pytest.raises(ValueError):
            SearchConfig(**kwargs)

    def test_dict_conversion(self) -> None:
        """Test conversion to and from plain dictionaries."""
        config = SessionConfig(
            engine=EngineConfig(path="/opt/pikafish", args=["--nnue"], threads=4),
            search=SearchConfig(depth=12),
            log_level="DEBUG",
        )
        data = config_to_dict(config)
        assert data["engine"]["args"] == ["--nnue"]
        assert config_from_dict(data) == config


class TestLoader:
    """Tests for load_config() and save_config()."""

    def test_defaults_without_file(self) -> None:
        """Test loading with nothing but defaults."""
        assert load_config() == SessionConfig()

    def test_yaml_file_and_overrides(self, tmp_path) -> None:
        """Test that overrides win over the file, which wins over defaults."""
        path = tmp_path / "engine.yaml"
        path.write_text("engine:\n  path: /opt/pikafish\n  threads: 4\nsearch:\n  depth: 10\n")

        config = load_config(path, ["search.depth=14", "engine.hash_mb=256"])

        assert config.engine.path == "/opt/pikafish"
        assert config.engine.threads == 4
        assert config.engine.hash_mb == 256
        assert config.search.depth == 14

    def test_protocol_log_and_stop_timeout_overrides(self) -> None:
        """Test that the transcript path and stop deadline can be set from the command line."""
        config = load_config(overrides=["protocol_log=/tmp/uci.log", "engine.stop_timeout=2.5"])

        assert config.protocol_log == "/tmp/uci.log"
        assert config.engine.stop_timeout == 2.5

    def test_unknown_key_is_rejected(self, tmp_path) -> None:
        """Test that typos in config keys are caught."""
        with pytest.raises(OmegaConfBaseException):
            load_config(overrides=["engine.thread=4"])

    def test_merged_values_are_validated(self) -> None:
        """Test that overrides go through the dataclass checks."""
        with pytest.raises(ValueError):
            load_config(overrides=["engine.threads=0"])

    def test_missing_file(self, tmp_path) -> None:
        """Test that a missing config file is reported."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_save_then_load(self, tmp_path) -> None:
        """Test that a saved config loads back unchanged."""
        config = SessionConfig(engine=EngineConfig(path="/opt/pikafish", timeout=None))
        path = tmp_path / "nested" / "config.yaml"
        save_config(config, path)

        assert path.exists()
        assert load_config(path) == config


class TestLogging:
    """Tests for setup_logging()."""

    def test_protocol_log_records_engine_traffic(self, tmp_path, make_engine) -> None:
        """Test that the transcript holds both directions, tagged with the engine pid."""
        protocol_log = tmp_path / "logs" / "protocol.log"
        setup_logging("info", protocol_log=protocol_log)

        engine = make_engine()
        pid = engine.channel.pid
        engine.close()
        logger.complete()

        lines = protocol_log.read_text().splitlines()
        assert any(line.endswith(f"[{pid}] > uci") for line in lines)
        assert any(line.endswith(f"[{pid}] < uciok") for line in lines)
        assert any(line.endswith(f"[{pid}] > stop") for line in lines)

    def test_protocol_log_excludes_other_messages(self, tmp_path) -> None:
        """Test that ordinary log records stay out of the transcript."""
        protocol_log = tmp_path / "protocol.log"
        setup_logging("trace", protocol_log=protocol_log)

        logger.info("engine started")
        logger.bind(wire=True, pid=42).trace("> isready")
        logger.complete()

        text = protocol_log.read_text()
        assert "[42] > isready" in text
        assert "engine started" not in text

    def test_console_hides_traffic_below_trace(self, capsys) -> None:
        """Test that wire lines only reach the console at TRACE."""
        setup_logging("debug")

        logger.debug("engine started")
        logger.bind(wire=True, pid=42).trace("> uci")
        logger.complete()

        err = capsys.readouterr().err
        assert "engine started" in err
        assert "> uci" not in err
