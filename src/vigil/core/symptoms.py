"""Read-only symptom index queryable by symptom type and instance assignment."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime

from vigil.models.observation import Symptom


class SymptomsTableView:
    """An immutable, ordered selection of symptoms.

    Filters return new views and never modify the view they are called on.
    """

    __slots__ = ("_symptoms", "_by_type", "_by_instance")

    def __init__(self, symptoms: Iterable[Symptom] = ()) -> None:
        self._symptoms: tuple[Symptom, ...] = tuple(symptoms)
        by_type: dict[str, list[Symptom]] = {}
        by_instance: dict[str, list[Symptom]] = {}
        for s in self._symptoms:
            by_type.setdefault(s.symptom_type, []).append(s)
            by_instance.setdefault(s.instance_id, []).append(s)
        self._by_type = {k: tuple(v) for k, v in by_type.items()}
        self._by_instance = {k: tuple(v) for k, v in by_instance.items()}

    def size(self) -> int:
        return len(self._symptoms)

    def type(self, symptom_type: str) -> SymptomsTableView:
        """Symptoms of the given composite type. Unknown types give an empty view."""
        return SymptomsTableView(self._by_type.get(symptom_type, ()))

    def assignment(self, instance_id: str) -> tuple[Symptom, ...]:
        """Symptoms in this view assigned to instance_id, in insertion order."""
        return self._by_instance.get(instance_id, ())

    def between(self, start: datetime, end: datetime) -> SymptomsTableView:
        """Symptoms assigned within [start, end]."""
        return SymptomsTableView(
            s for s in self._symptoms if start <= s.assigned_at <= end
        )

    def first(self) -> Symptom | None:
        """Earliest assigned symptom; ties keep insertion order."""
        if not self._symptoms:
            return None
        return min(self._symptoms, key=lambda s: s.assigned_at)

    def last(self) -> Symptom | None:
        """Latest assigned symptom; ties resolve to the last inserted."""
        if not self._symptoms:
            return None
        return max(reversed(self._symptoms), key=lambda s: s.assigned_at)

    def types(self) -> list[str]:
        return list(self._by_type)

    def instances(self) -> list[str]:
        return list(self._by_instance)

    def __len__(self) -> int:
        return len(self._symptoms)

    def __iter__(self) -> Iterator[Symptom]:
        return iter(self._symptoms)

    def __bool__(self) -> bool:
        return bool(self._symptoms)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self._symptoms)})"


class SymptomsTable(SymptomsTableView):
    """Index over all symptoms of one detection pass."""

    __slots__ = ()

    @classmethod
    def of(cls, symptoms: Iterable[Symptom]) -> SymptomsTable:
        return cls(symptoms)
