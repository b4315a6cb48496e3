"""Configuration loading utilities."""

from pathlib import Path

from omegaconf import DictConfig, OmegaConf

from ucilink.configs.schema import SessionConfig, config_from_dict, config_to_dict


def load_config(
    config_path: str | Path | None = None,
    overrides: list[str] | None = None,
) -> SessionConfig:
    """Load a configuration file with optional overrides.

    Values are merged onto the defaults in struct mode, so OmegaConf
    rejects unknown keys.

    Args:
        config_path: Optional path to a YAML configuration file.
        overrides: Optional list of CLI-style overrides (e.g., ["engine.threads=4"]).

    Returns:
        The merged configuration.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
    """
    config: DictConfig = OmegaConf.create(config_to_dict(SessionConfig()))
    OmegaConf.set_struct(config, True)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)
        config = OmegaConf.merge(config, OmegaConf.load(config_path))

    if overrides:
        config = OmegaConf.merge(config, OmegaConf.from_dotlist(overrides))

    # Rebuild the dataclasses so __post_init__ validation runs on merged values
    return config_from_dict(OmegaConf.to_container(config, resolve=True))


def save_config(config: SessionConfig, path: str | Path) -> None:
    """Save a configuration to a YAML file.

    Args:
        config: Configuration to save.
        path: Path to save the configuration to.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    OmegaConf.save(OmegaConf.create(config_to_dict(config)), path)
