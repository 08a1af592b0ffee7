"""Layered configuration: .vigil/config.toml -> VIGIL_* env vars -> defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from vigil.errors import ConfigError

try:
    import tomllib  # 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

# VIGIL_POLICY__<key>=<value> overrides a single [policy] entry
_POLICY_ENV_PREFIX = "VIGIL_POLICY__"


def _flatten_policy(data: dict, prefix: str = "") -> dict[str, object]:
    """Flatten nested tables back into dotted keys.

    TOML reads an unquoted `BelowThresholdDetector.threshold_MEMORY = 11` as a
    nested table; both spellings resolve to the same composite key.
    """
    flat: dict[str, object] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten_policy(value, f"{full_key}."))
        else:
            flat[full_key] = value
    return flat


@dataclass(frozen=True, slots=True)
class DetectionConfig:
    """Detection pass settings."""

    default_kind: str = "below"


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    def level_number(self) -> int:
        """Numeric level for the configured level name."""
        number = logging.getLevelName(self.level.upper())
        if not isinstance(number, int):
            raise ConfigError(f"Unknown log level: {self.level}")
        return number


@dataclass(frozen=True, slots=True)
class PolicyConfig:
    """Policy values looked up by composite key, e.g. detector thresholds."""

    values: dict[str, object] = field(default_factory=dict)

    def get_config(self, key: str) -> object | None:
        """Return the raw value for key, or None if it is not configured.

        Values are stored as read; consumers convert and validate them.
        """
        return self.values.get(key)

    def with_value(self, key: str, value: object) -> PolicyConfig:
        """Return a copy with key set to value."""
        return PolicyConfig(values={**self.values, key: value})


@dataclass(frozen=True, slots=True)
class VigilConfig:
    """Top-level configuration container."""

    project_path: Path = field(default_factory=Path.cwd)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)

    @property
    def vigil_dir(self) -> Path:
        return self.project_path / ".vigil"

    @property
    def config_path(self) -> Path:
        return self.vigil_dir / "config.toml"

    @classmethod
    def load(cls, project_path: Path | None = None) -> VigilConfig:
        """Load config with layering: TOML file -> env vars -> defaults."""
        project = Path(project_path) if project_path else Path.cwd()
        toml_path = project / ".vigil" / "config.toml"

        toml_data: dict = {}
        if toml_path.is_file():
            with open(toml_path, "rb") as f:
                try:
                    toml_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as exc:
                    raise ConfigError(f"Invalid {toml_path}: {exc}") from exc

        detection_data = toml_data.get("detection", {})
        logging_data = toml_data.get("logging", {})
        policy_data = toml_data.get("policy", {})

        # Use literal defaults (slots=True prevents class-level attribute access)
        _detect_defaults = DetectionConfig()
        _log_defaults = LoggingConfig()

        detection = DetectionConfig(
            default_kind=os.environ.get(
                "VIGIL_DETECTOR_KIND",
                detection_data.get("default_kind", _detect_defaults.default_kind),
            ),
        )

        logging_config = LoggingConfig(
            level=os.environ.get(
                "VIGIL_LOG_LEVEL",
                str(logging_data.get("level", _log_defaults.level)),
            ).upper(),
            format=os.environ.get(
                "VIGIL_LOG_FORMAT",
                logging_data.get("format", _log_defaults.format),
            ),
        )

        if not isinstance(policy_data, dict):
            raise ConfigError(f"[policy] in {toml_path} must be a table")
        values = _flatten_policy(policy_data)
        for name, value in os.environ.items():
            if name.startswith(_POLICY_ENV_PREFIX):
                values[name[len(_POLICY_ENV_PREFIX):]] = value

        return cls(
            project_path=project,
            detection=detection,
            logging=logging_config,
            policy=PolicyConfig(values=values),
        )
