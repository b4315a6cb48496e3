"""Strongly-typed configuration schemas for ucilink.

These dataclasses are the single source of truth for engine and search
settings. YAML files and CLI overrides are merged onto them by
``ucilink.configs.loader``.
"""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class EngineConfig:
    """How to launch and talk to the engine process."""

    path: str = "pikafish"
    args: list[str] = field(default_factory=list)
    timeout: float | None = 30.0  # Seconds per response, None waits forever
    banner_timeout: float = 1.0
    stop_timeout: float = 5.0  # Wait for a late reply after a timed-out request
    threads: int = 1
    hash_mb: int = 16

    def __post_init__(self) -> None:
        """Validate."""
        if self.threads < 1:
            msg = f"threads must be >= 1, got {self.threads}"
            raise ValueError(msg)
        if self.hash_mb < 1:
            msg = f"hash_mb must be >= 1, got {self.hash_mb}"
            raise ValueError(msg)
        if self.timeout is not None and self.timeout <= 0:
            msg = f"timeout must be positive or None, got {self.timeout}"
            raise ValueError(msg)
        if self.banner_timeout <= 0:
            msg = f"banner_timeout must be positive, got {self.banner_timeout}"
            raise ValueError(msg)
        if self.stop_timeout <= 0:
            msg = f"stop_timeout must be positive, got {self.stop_timeout}"
            raise ValueError(msg)


@dataclass
class SearchConfig:
    """Limits passed to ``go``. Both None means the engine's own default."""

    depth: int | None = None
    movetime: int | None = None  # Milliseconds

    def __post_init__(self) -> None:
        """Validate."""
        if self.depth is not None and self.depth < 1:
            msg = f"depth must be >= 1, got {self.depth}"
            raise ValueError(msg)
        if self.movetime is not None and self.movetime < 1:
            msg = f"movetime must be >= 1 ms, got {self.movetime}"
            raise ValueError(msg)


@dataclass
class SessionConfig:
    """Top-level configuration combining all sub-configs."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    log_level: str = "INFO"
    protocol_log: str | None = None  # File receiving every line sent to and read from the engine


def config_from_dict(data: dict[str, Any]) -> SessionConfig:
    """Create SessionConfig from a dictionary (e.g., from OmegaConf).

    Args:
        data: Dictionary with configuration values.

    Returns:
        SessionConfig instance.
    """
    return SessionConfig(
        engine=EngineConfig(**data.get("engine", {})),
        search=SearchConfig(**data.get("search", {})),
        log_level=data.get("log_level", "INFO"),
        protocol_log=data.get("protocol_log"),
    )


def config_to_dict(config: SessionConfig) -> dict[str, Any]:
    """Convert SessionConfig to a dictionary for serialization."""
    return asdict(config)
