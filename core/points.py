"""
Category point table.

Maps a category (video type) code to the point weight credited per unit.
The table is fixed for the lifetime of a process; changing a weight is a
deployment-time configuration change (see ``CATEGORY_POINTS`` in core.config).
"""

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional


DEFAULT_CATEGORY_POINTS: Dict[str, float] = {
    "S1": 3,
    "S2A": 2,
    "S2B": 2.5,
    "S3A": 2,
    "S3B": 5,
    "S4": 5,
    "S5": 6,
    "S6": 7,
    "S7": 10,
    "S8": 48,
    "S9A": 2.5,
    "S9B": 4,
    "S9C": 7,
}


class CategoryPointTable(Mapping[str, float]):
    """
    Read-only mapping of category code -> point weight.

    Lookups are tolerant of surrounding whitespace and letter case, so a
    label such as " s2a" resolves to the "S2A" weight.
    """

    def __init__(self, weights: Optional[Mapping[str, float]] = None):
        source = DEFAULT_CATEGORY_POINTS if weights is None else weights
        table = {}
        for code, weight in source.items():
            weight = float(weight)
            if weight <= 0:
                raise ValueError(f"Point weight for {code!r} must be positive, got {weight}")
            table[self._key(code)] = weight
        self._weights = MappingProxyType(table)

    @staticmethod
    def _key(code: str) -> str:
        return str(code).strip().upper()

    def __getitem__(self, code: str) -> float:
        return self._weights[self._key(code)]

    def __contains__(self, code: object) -> bool:
        if not isinstance(code, str):
            return False
        return self._key(code) in self._weights

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def weight_for(self, code: Optional[str]) -> Optional[float]:
        """Weight for a category, or None when the category is absent or unmapped."""
        if not code or code not in self:
            return None
        return self[code]

    def canonical(self, code: Optional[str]) -> Optional[str]:
        """Table spelling of a mapped code ("s2a " -> "S2A"), None when unmapped."""
        if not code or code not in self:
            return None
        return self._key(code)

    def points_for(self, code: Optional[str], quantity: int) -> float:
        """
        Points credited for ``quantity`` units of ``code``.

        Unmapped or missing categories score zero rather than failing.
        """
        weight = self.weight_for(code)
        if weight is None:
            return 0.0
        return weight * quantity

    def codes(self):
        """Category codes in declaration order."""
        return list(self._weights.keys())
