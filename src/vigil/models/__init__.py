"""Vigil data models."""

from vigil.models.observation import (
    COMPOSITE_SEPARATOR,
    Measurement,
    Symptom,
    composite_name,
    split_composite_name,
)
from vigil.models.enums import DetectorKind, SymptomKind

__all__ = [
    "SymptomKind",
    "DetectorKind",
    "Measurement",
    "Symptom",
    "COMPOSITE_SEPARATOR",
    "composite_name",
    "split_composite_name",
]
