"""
Assumption Set
==============

Flat, immutable mapping of named scalar parameters that drives a projection.

Inputs are permissive: every value is coerced to a float and anything that
cannot be read as a number becomes ``0.0``. Nothing in this module raises for
bad numeric input; a negative price or a 300% churn rate simply produces an
arithmetically valid projection.

Percent-valued parameters (growth, churn, tier mix, fill rate, ...) are stored
as percentages, exactly as they are typed (``25`` means 25%). Use ``rate()``
to read them as fractions.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


def coerce_number(value: Any) -> float:
    """Read ``value`` as a finite float, falling back to 0.0."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class AssumptionSet(Mapping[str, float]):
    """
    Immutable parameter set.

    Edits never mutate the instance; ``with_override`` / ``with_overrides``
    return a fresh copy. Instances hash by value, so they can key a cache of
    projection results.
    """

    __slots__ = ("_values", "_hash")

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        coerced: Dict[str, float] = {}
        for name, value in (values or {}).items():
            coerced[str(name)] = coerce_number(value)
        self._values = coerced
        self._hash: Optional[int] = None

    # Mapping protocol
    def __getitem__(self, name: str) -> float:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(self._frozen_items())
        return self._hash

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AssumptionSet):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        return f"AssumptionSet({self._values!r})"

    def _frozen_items(self) -> Tuple[Tuple[str, float], ...]:
        return tuple(sorted(self._values.items()))

    def get(self, name: str, default: float = 0.0) -> float:  # type: ignore[override]
        """Value of ``name``; missing parameters read as ``default`` (0.0)."""
        return self._values.get(name, coerce_number(default))

    def rate(self, name: str) -> float:
        """Percentage parameter ``name`` as a fraction (``25`` -> ``0.25``)."""
        return self.get(name) / 100.0

    def with_override(self, name: str, value: Any) -> "AssumptionSet":
        updated = dict(self._values)
        updated[name] = coerce_number(value)
        return AssumptionSet(updated)

    def with_overrides(self, overrides: Optional[Mapping[str, Any]]) -> "AssumptionSet":
        if not overrides:
            return self
        updated: Dict[str, Any] = dict(self._values)
        updated.update(overrides)
        return AssumptionSet(updated)

    def to_dict(self) -> Dict[str, float]:
        """Plain dict copy, suitable for JSON snapshots."""
        return dict(self._values)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AssumptionSet":
        return cls(data)
