"""Error taxonomy for metric aggregation and symptom detection.

Contract violations are raised immediately to the caller. Absent instances or
metrics are not errors: lookups return None or an empty mapping instead.
"""

from __future__ import annotations


class VigilError(Exception):
    """Base class for all vigil errors."""


class DuplicateInstanceError(VigilError, ValueError):
    """An instance id is already present in a ComponentMetrics."""

    def __init__(self, component: str, instance: str) -> None:
        super().__init__(f"Instance metrics exist: {component}/{instance}")
        self.component = component
        self.instance = instance


class DuplicateMetricValueError(VigilError, ValueError):
    """A (metric, timestamp) pair already holds a value on an instance."""

    def __init__(self, instance: str, metric: str, timestamp: object) -> None:
        super().__init__(
            f"Value already recorded for {instance}.{metric} at {timestamp}"
        )
        self.instance = instance
        self.metric = metric
        self.timestamp = timestamp


class AmbiguousMetricAccessError(VigilError, LookupError):
    """Single-value access on a metric that holds several timestamped values."""

    def __init__(self, instance: str, metric: str, count: int) -> None:
        super().__init__(
            f"{instance}.{metric} has {count} values; use get_metric_values"
        )
        self.instance = instance
        self.metric = metric
        self.count = count


class ComponentMismatchError(VigilError, ValueError):
    """Two ComponentMetrics of different components were merged."""


class MissingConfigError(VigilError, KeyError):
    """A required policy configuration value could not be resolved."""

    def __str__(self) -> str:
        # KeyError repr()s its argument otherwise
        return str(self.args[0]) if self.args else ""


class UnknownDetectorError(VigilError, ValueError):
    """No detector is registered under the requested kind."""


class DetectorNotInitializedError(VigilError, RuntimeError):
    """detect() was called before initialize()."""


class ConfigError(VigilError, ValueError):
    """The configuration file or environment holds an unusable value."""
