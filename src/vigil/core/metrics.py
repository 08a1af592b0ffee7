"""Per-instance and per-component metric time series with non-destructive merge."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from vigil.errors import (
    AmbiguousMetricAccessError,
    ComponentMismatchError,
    DuplicateInstanceError,
    DuplicateMetricValueError,
)
from vigil.models.observation import Measurement

logger = logging.getLogger("vigil.metrics")


def _epoch() -> datetime:
    return datetime.fromtimestamp(0, tz=timezone.utc)


class InstanceMetrics:
    """Metric values of one instance: metric name -> (timestamp -> value)."""

    def __init__(
        self,
        name: str,
        metric_name: str | None = None,
        value: float | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        self.name = name
        self._metrics: dict[str, dict[datetime, float]] = {}
        if metric_name is not None and value is not None:
            self.add_metric_value(metric_name, timestamp or _epoch(), value)

    def add_metric_value(self, metric: str, timestamp: datetime, value: float) -> None:
        """Insert a single value. Rejects a second value for the same timestamp."""
        values = self._metrics.setdefault(metric, {})
        if timestamp in values:
            raise DuplicateMetricValueError(self.name, metric, timestamp)
        values[timestamp] = float(value)

    def add_metric_values(self, metric: str, values: dict[datetime, float]) -> None:
        for timestamp, value in values.items():
            self.add_metric_value(metric, timestamp, value)

    def metric_names(self) -> list[str]:
        return list(self._metrics)

    def get_metric_values(self, metric: str) -> dict[datetime, float]:
        """All values for metric, keyed by timestamp. Empty if none recorded."""
        return dict(self._metrics.get(metric, {}))

    def get_metric_value(self, metric: str) -> float | None:
        """The only value for metric, None if there is none.

        Raises AmbiguousMetricAccessError when more than one value is known;
        use get_metric_values in that case.
        """
        values = self._metrics.get(metric)
        if not values:
            return None
        if len(values) > 1:
            raise AmbiguousMetricAccessError(self.name, metric, len(values))
        return next(iter(values.values()))

    def has_metric_above_limit(self, metric: str, limit: float) -> bool:
        return any(v > limit for v in self._metrics.get(metric, {}).values())

    def has_metric_below_limit(self, metric: str, limit: float) -> bool:
        return any(v < limit for v in self._metrics.get(metric, {}).values())

    def copy(self) -> InstanceMetrics:
        clone = InstanceMetrics(self.name)
        clone._metrics = {m: dict(v) for m, v in self._metrics.items()}
        return clone

    @staticmethod
    def merge(first: InstanceMetrics, second: InstanceMetrics) -> InstanceMetrics:
        """Layer second onto first, timestamp by timestamp. Inputs are not modified.

        Values from second win on timestamp collision; entries only present in
        first are kept.
        """
        merged = first.copy()
        for metric, values in second._metrics.items():
            merged._metrics.setdefault(metric, {}).update(values)
        return merged

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InstanceMetrics):
            return NotImplemented
        return self.name == other.name and self._metrics == other._metrics

    def __repr__(self) -> str:
        return f"InstanceMetrics(name={self.name!r}, metrics={self._metrics!r})"


class ComponentMetrics:
    """Metrics of all instances of one component, keyed by instance id."""

    def __init__(
        self,
        name: str,
        instances: Iterable[InstanceMetrics] | None = None,
    ) -> None:
        self.name = name
        self._instances: dict[str, InstanceMetrics] = {}
        for instance in instances or ():
            self.add_instance_metric(instance)

    def add_instance_metric(self, instance: InstanceMetrics) -> None:
        """Add an instance. Raises DuplicateInstanceError if its id is taken."""
        if instance.name in self._instances:
            raise DuplicateInstanceError(self.name, instance.name)
        self._instances[instance.name] = instance

    def instance_names(self) -> list[str]:
        return list(self._instances)

    def get_instance_metrics(self, instance: str) -> InstanceMetrics | None:
        found = self._instances.get(instance)
        return found.copy() if found is not None else None

    def get_metric_values(self, instance: str, metric: str) -> dict[datetime, float] | None:
        """All known values of metric for instance.

        Returns None for an unknown instance and an empty dict when the
        instance has no values for the metric.
        """
        found = self._instances.get(instance)
        if found is None:
            return None
        return found.get_metric_values(metric)

    def get_metric_value(self, instance: str, metric: str) -> float | None:
        """The only known value of metric for instance.

        Raises AmbiguousMetricAccessError if more than one value is known;
        use get_metric_values in such a case.
        """
        found = self._instances.get(instance)
        if found is None:
            return None
        return found.get_metric_value(metric)

    def any_instance_above_limit(self, metric: str, limit: float) -> bool:
        return any(i.has_metric_above_limit(metric, limit) for i in self._instances.values())

    def any_instance_below_limit(self, metric: str, limit: float) -> bool:
        return any(i.has_metric_below_limit(metric, limit) for i in self._instances.values())

    def get_aggregated_metrics_value(self, metric: str) -> float:
        """Sum of every recorded value of metric across all instances and timestamps."""
        return float(
            sum(
                sum(i.get_metric_values(metric).values())
                for i in self._instances.values()
            )
        )

    @staticmethod
    def merge(first: ComponentMetrics, second: ComponentMetrics) -> ComponentMetrics:
        """Merge two data sets of the same component into a new object.

        Instances present in both are merged with InstanceMetrics.merge, the
        second operand winning on timestamp collision. Instances present in
        only one operand are carried over. Inputs are not modified.
        """
        if first.name != second.name:
            raise ComponentMismatchError(
                f"Cannot merge metrics of {first.name!r} with {second.name!r}"
            )

        merged = ComponentMetrics(first.name)
        for name, instance in first._instances.items():
            other = second._instances.get(name)
            if other is not None:
                merged.add_instance_metric(InstanceMetrics.merge(instance, other))
            else:
                merged.add_instance_metric(instance.copy())
        for name, instance in second._instances.items():
            if name not in merged._instances:
                merged.add_instance_metric(instance.copy())
        return merged

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, instance: object) -> bool:
        return instance in self._instances

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComponentMetrics):
            return NotImplemented
        return self.name == other.name and self._instances == other._instances

    def __repr__(self) -> str:
        return f"ComponentMetrics(name={self.name!r}, instances={list(self._instances)!r})"


def build_component_metrics(
    name: str, measurements: Iterable[Measurement]
) -> ComponentMetrics:
    """Fold a measurement snapshot into a ComponentMetrics for one component.

    Measurements of other components are skipped.
    """
    instances: dict[str, InstanceMetrics] = {}
    skipped = 0
    for m in measurements:
        if m.component_id != name:
            skipped += 1
            continue
        instance = instances.get(m.instance_id)
        if instance is None:
            instance = instances[m.instance_id] = InstanceMetrics(m.instance_id)
        instance.add_metric_value(m.metric_name, m.timestamp, m.value)

    if skipped:
        logger.debug("Skipped %d measurements not belonging to %s", skipped, name)
    return ComponentMetrics(name, instances.values())
