"""
CLI Configuration

Locates and loads the runtime configuration for the CLI.
Supports environment variables and YAML/JSON configuration files.
"""

from __future__ import annotations

from pathlib import Path

from core.config import RuntimeConfig, get_default_config_template


def default_config_paths() -> list[Path]:
    """Locations searched when no --config is given, in order."""
    return [
        Path.cwd() / "leanimt.yaml",
        Path.cwd() / "leanimt.yml",
        Path.cwd() / "leanimt.json",
        Path.home() / ".config" / "leanimt" / "config.yaml",
    ]


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration

    Raises:
        FileNotFoundError: If config_path is given but does not exist
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for default_path in default_config_paths():
            if default_path.exists():
                config = RuntimeConfig.from_file(default_path)
                break

    return config.with_env_overrides()


__all__ = [
    "default_config_paths",
    "load_config",
    "get_default_config_template",
]
