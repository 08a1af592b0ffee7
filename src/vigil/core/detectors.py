"""Threshold detectors turning measurements into symptoms at a checkpoint."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from vigil.config import PolicyConfig
from vigil.errors import (
    DetectorNotInitializedError,
    MissingConfigError,
    UnknownDetectorError,
)
from vigil.models.enums import DetectorKind, SymptomKind
from vigil.models.observation import Measurement, Symptom, composite_name

logger = logging.getLogger("vigil.detectors")


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Run-scoped handle passed to detectors by the policy execution loop."""

    checkpoint_at: datetime
    previous_checkpoint_at: datetime | None = None

    def checkpoint(self) -> datetime:
        """Logical time the current detection pass evaluates."""
        return self.checkpoint_at

    def previous_checkpoint(self) -> datetime | None:
        return self.previous_checkpoint_at


@runtime_checkable
class Detector(Protocol):
    """Capability set the execution loop drives."""

    def initialize(self, context: ExecutionContext) -> None:
        ...

    def detect(self, measurements: Iterable[Measurement]) -> list[Symptom]:
        ...


class ThresholdDetector(ABC):
    """Emits one symptom per measurement of a metric that crosses a threshold.

    Subclasses set CONF_PREFIX (the policy key prefix), SYMPTOM_KIND and
    implement _triggers().
    """

    CONF_PREFIX: str = ""
    SYMPTOM_KIND: SymptomKind

    def __init__(self, policy: PolicyConfig, metric_name: str) -> None:
        self.metric_name = metric_name
        self.symptom_type = composite_name(self.SYMPTOM_KIND.value, metric_name)
        self.threshold = self._resolve_threshold(policy, metric_name)
        self._context: ExecutionContext | None = None

    @classmethod
    def _resolve_threshold(cls, policy: PolicyConfig, metric_name: str) -> float:
        key = composite_name(cls.CONF_PREFIX, metric_name)
        value = policy.get_config(key)
        if value is None:
            raise MissingConfigError(f"No threshold configured for {key}")
        if isinstance(value, bool):
            raise MissingConfigError(f"Threshold {key}={value!r} is not numeric")
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise MissingConfigError(f"Threshold {key}={value!r} is not numeric") from exc

    def initialize(self, context: ExecutionContext) -> None:
        self._context = context

    def detect(self, measurements: Iterable[Measurement]) -> list[Symptom]:
        if self._context is None:
            raise DetectorNotInitializedError(
                f"{type(self).__name__} for {self.metric_name} was not initialized"
            )
        checkpoint = self._context.checkpoint()

        symptoms = [
            Symptom(
                symptom_type=self.symptom_type,
                instance_id=m.instance_id,
                assigned_at=checkpoint,
                measurements=(m,),
            )
            for m in measurements
            if m.metric_name == self.metric_name and self._triggers(m.value)
        ]
        logger.debug(
            "%s: %d symptom(s) at %s (threshold=%s)",
            self.symptom_type, len(symptoms), checkpoint.isoformat(), self.threshold,
        )
        return symptoms

    @abstractmethod
    def _triggers(self, value: float) -> bool:
        ...

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(metric_name={self.metric_name!r}, "
            f"threshold={self.threshold!r})"
        )


class BelowThresholdDetector(ThresholdDetector):
    """Flags instances whose value is strictly below the configured threshold."""

    CONF_PREFIX = "BelowThresholdDetector.threshold"
    SYMPTOM_KIND = SymptomKind.LOW

    def _triggers(self, value: float) -> bool:
        return value < self.threshold


class AboveThresholdDetector(ThresholdDetector):
    """Flags instances whose value is strictly above the configured threshold."""

    CONF_PREFIX = "AboveThresholdDetector.threshold"
    SYMPTOM_KIND = SymptomKind.HIGH

    def _triggers(self, value: float) -> bool:
        return value > self.threshold


DETECTORS: dict[DetectorKind, type[ThresholdDetector]] = {
    DetectorKind.BELOW: BelowThresholdDetector,
    DetectorKind.ABOVE: AboveThresholdDetector,
}


def create_detector(
    kind: DetectorKind | str, policy: PolicyConfig, metric_name: str
) -> ThresholdDetector:
    """Build a registered detector for metric_name."""
    try:
        detector_cls = DETECTORS[DetectorKind(kind)]
    except (KeyError, ValueError) as exc:
        raise UnknownDetectorError(f"Unknown detector kind: {kind}") from exc
    return detector_cls(policy, metric_name)


LOW_THRESHOLD_CONF = BelowThresholdDetector.CONF_PREFIX
HIGH_THRESHOLD_CONF = AboveThresholdDetector.CONF_PREFIX
