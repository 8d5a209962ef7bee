"""
Config check use case — validate restore-admission.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from restore_admission.core.config.loader import (
    SNAPSHOT_GATE,
    AdmissionConfig,
    ConfigError,
    find_config_file,
    load_config,
)


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: AdmissionConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "feature_gates": self.config.feature_gates if self.config else [],
            "review_timeout": self.config.review_timeout if self.config else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate the admitter configuration and report issues.

    A missing file is not an error (defaults apply) but is warned about.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            result.warnings.append("No restore-admission.yml found; using defaults.")
    result.config_path = config_path

    try:
        config = load_config(config_path, search=False)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config

    # Semantic checks
    if not config.snapshot_enabled():
        result.warnings.append(
            f"Feature gate '{SNAPSHOT_GATE}' is disabled: every restore CREATE will be refused."
        )

    for gate in config.unknown_gates():
        result.warnings.append(f"Unknown feature gate '{gate}'.")

    if config.review_timeout < 0:
        result.errors.append("review_timeout must not be negative.")

    if config.kubectl.kubeconfig and not Path(config.kubectl.kubeconfig).expanduser().is_file():
        result.warnings.append(f"kubeconfig not found: {config.kubectl.kubeconfig}")

    result.valid = not result.errors
    return result
