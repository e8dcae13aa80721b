"""
Configuration loader — reads directory.yml into the workspace config model.

A workspace is any directory that holds a directory.yml. The file is
optional: without one, the current directory is the workspace and every
setting takes its default.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from src.core.models.directory import DirectoryConfig

logger = logging.getLogger(__name__)

# Default config filename
DIRECTORY_CONFIG_FILE = "directory.yml"


class ConfigError(Exception):
    """Raised when workspace configuration is invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for directory.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to directory.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / DIRECTORY_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> DirectoryConfig:
    """Load and validate workspace configuration.

    Args:
        path: Explicit path to directory.yml. If None, searches upward
            and falls back to defaults when nothing is found.

    Returns:
        Validated DirectoryConfig model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found — using defaults", DIRECTORY_CONFIG_FILE)
        return DirectoryConfig()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return DirectoryConfig()

    logger.debug("Loading workspace config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return DirectoryConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "directory" key or be flat
    config_data = data.get("directory", data) if "directory" in data else data

    try:
        config = DirectoryConfig.model_validate(config_data)
    except Exception as e:
        raise ConfigError(f"Invalid directory configuration: {e}") from e

    logger.info("Loaded workspace '%s' (catalog at %s)", config.name, config.catalog_path)
    return config


def workspace_root(config_path: Path | None) -> Path:
    """Get the workspace root directory from a config file path."""
    return config_path.parent.resolve() if config_path else Path.cwd().resolve()
