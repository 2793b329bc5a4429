"""Per-conversion skip counters.

Recoverable problems (a bad coordinate tuple, an unresolved style, a
blank BOQ row) never raise. They are tallied here so a smaller-than-
expected result can be explained when debugging.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ConversionDiagnostics:
    """Immutable snapshot of skip counts keyed by reason.

    Attributes:
        skipped: Mapping of reason (e.g. ``"blank_description"``) to count.
    """

    skipped: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_counter(cls, counter: Counter[str]) -> ConversionDiagnostics:
        return cls(skipped={k: v for k, v in sorted(counter.items()) if v})

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())

    def count(self, reason: str) -> int:
        return self.skipped.get(reason, 0)
