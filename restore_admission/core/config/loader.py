"""
Configuration loader — reads restore-admission.yml into AdmissionConfig.

The file is optional: without one the admitter runs with defaults, and
with no feature gates enabled every CREATE is refused until the
Snapshot gate is switched on.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "restore-admission.yml"

# Comma-separated override for feature_gates
FEATURE_GATES_ENV = "RESTORE_ADMISSION_FEATURE_GATES"

SNAPSHOT_GATE = "Snapshot"

# Gates this admitter knows about; anything else is reported by `config check`
KNOWN_GATES = frozenset({SNAPSHOT_GATE})


class ConfigError(Exception):
    """Raised when the configuration file is invalid or unreadable."""


class KubectlSettings(BaseModel):
    """How the kubectl gateway reaches the cluster."""

    context: str | None = None
    kubeconfig: str | None = None


class AdmissionConfig(BaseModel):
    """Runtime configuration of the admitter."""

    feature_gates: list[str] = Field(default_factory=list)
    review_timeout: float = 10.0        # seconds per call, 0 = no deadline
    kubectl: KubectlSettings = Field(default_factory=KubectlSettings)

    def snapshot_enabled(self) -> bool:
        """Feature-gate query for snapshot/restore."""
        return SNAPSHOT_GATE in self.feature_gates

    @property
    def timeout(self) -> float | None:
        return self.review_timeout if self.review_timeout > 0 else None

    def unknown_gates(self) -> list[str]:
        return [g for g in self.feature_gates if g not in KNOWN_GATES]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for restore-admission.yml starting from a directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

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

    return None


def load_config(path: Path | None = None, *, search: bool = True) -> AdmissionConfig:
    """Load and validate the admitter configuration.

    Args:
        path: Explicit config path. If None and ``search`` is set,
            searches upward from cwd; no file means defaults.
        search: Whether to look for a config file when ``path`` is None.

    Returns:
        Validated AdmissionConfig, with env overrides applied.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None and search:
        path = find_config_file()

    data: dict = {}
    if path is not None:
        data = _read_yaml(path)

    env_gates = os.environ.get(FEATURE_GATES_ENV)
    if env_gates is not None:
        data["feature_gates"] = [g.strip() for g in env_gates.split(",") if g.strip()]

    try:
        config = AdmissionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid admission configuration: {e}") from e

    logger.info("Feature gates enabled: %s", ", ".join(config.feature_gates) or "(none)")
    return config


def _read_yaml(path: Path) -> dict:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading admission config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under an "admission" key or be flat
    if isinstance(data.get("admission"), dict):
        data = data["admission"]
    return dict(data)
