"""Enumerations for vigil detection models."""

from enum import Enum


class SymptomKind(str, Enum):
    """Symptom kind, the first half of a composite symptom type."""

    LOW = "LOW"
    HIGH = "HIGH"


class DetectorKind(str, Enum):
    """Threshold detector variants available through the registry."""

    BELOW = "below"
    ABOVE = "above"
