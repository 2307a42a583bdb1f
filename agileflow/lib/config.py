"""
Configuration loaders for agileflow.

Locates the agile/ root by searching upward from the working directory and
loads the optional agile/config.yaml.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from agileflow.lib import validate
from agileflow.lib.constants import AGILE_DIR, CONFIG_FILE, DEFAULT_OWNER_PLACEHOLDERS
from agileflow.lib.errors import AgileError
from agileflow.workflow.bdd import DEFAULT_MIN_SCENARIOS

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10


class ConfigError(AgileError):
    """agile/ root missing or config.yaml invalid."""

    exit_code = 2


@dataclass
class AgileConfig:
    """Settings from agile/config.yaml. Every key is optional."""
    root: Path
    lock_timeout: int = DEFAULT_LOCK_TIMEOUT
    min_scenarios: int = DEFAULT_MIN_SCENARIOS
    owner_placeholders: list[str] = field(default_factory=lambda: list(DEFAULT_OWNER_PLACEHOLDERS))


def find_agile_root(start: Optional[Path] = None) -> Path:
    """Return the nearest agile/ directory at or above start.

    Raises:
        ConfigError: If no agile/ directory exists in any parent.
    """
    current = (start or Path.cwd()).resolve()

    for parent in [current] + list(current.parents):
        if parent.name == AGILE_DIR and parent.is_dir():
            return parent
        candidate = parent / AGILE_DIR
        if candidate.is_dir():
            return candidate

    raise ConfigError(
        f"Could not find an '{AGILE_DIR}/' directory in {current} or any parent. "
        f"Create one with: mkdir {AGILE_DIR}"
    )


def load_config(agile_root: Path) -> AgileConfig:
    """Load agile/config.yaml and return AgileConfig.

    If the file doesn't exist or is not valid YAML, returns defaults.

    Raises:
        ConfigError: If the file parses but violates the config schema.
    """
    config_path = agile_root / CONFIG_FILE
    if not config_path.exists():
        return AgileConfig(root=agile_root)

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return AgileConfig(root=agile_root)

    if data is None:
        return AgileConfig(root=agile_root)

    try:
        validate.validate(data, "config")
    except validate.SchemaError as e:
        raise ConfigError(f"Invalid {config_path}: {e}") from None

    config = AgileConfig(root=agile_root)
    if "lock_timeout" in data:
        config.lock_timeout = data["lock_timeout"]
    if "min_scenarios" in data:
        config.min_scenarios = data["min_scenarios"]
    if "owner_placeholders" in data:
        config.owner_placeholders = [p.lower() for p in data["owner_placeholders"]]
    return config
