"""
Configuration loader — reads devsetup.yml into a ProvisionConfig.

The file is optional.  Resolution order:

    1. explicit path (``--config``)
    2. ``DEVSETUP_CONFIG`` environment variable
    3. ``devsetup.yml`` in the working directory or any parent
    4. ``~/.config/devsetup/devsetup.yml``
    5. built-in defaults

An explicit path (1 or 2) that does not exist is an error; the
searched locations are simply skipped when absent.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from devsetup.core.models.profile import ProvisionConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "devsetup.yml"
CONFIG_ENV_VAR = "DEVSETUP_CONFIG"
USER_CONFIG_PATH = Path("~/.config/devsetup") / CONFIG_FILE


class ConfigError(Exception):
    """Raised when the provisioning profile is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for devsetup.yml starting from the given directory, walking up.

    Falls back to the per-user config file.

    Returns:
        Path to the config file, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    user_config = USER_CONFIG_PATH.expanduser()
    if user_config.is_file():
        return user_config
    return None


def load_config(path: Path | None = None) -> ProvisionConfig:
    """Load and validate the provisioning profile.

    Args:
        path: Explicit path to a config file.  If None, the env var and
              the search locations are tried, then defaults are used.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid.
    """
    if path is None and os.environ.get(CONFIG_ENV_VAR):
        path = Path(os.environ[CONFIG_ENV_VAR]).expanduser()
        logger.debug("Using %s=%s", CONFIG_ENV_VAR, path)
    elif path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using built-in defaults", CONFIG_FILE)
            return ProvisionConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading provisioning config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid provisioning configuration in {path}: {e}") from e

    logger.info("Loaded provisioning config from %s", path)
    return config
