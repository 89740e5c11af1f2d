"""Coverage usage models.

A :class:`CoverageUsage` carries the six JaCoCo counter categories as
``(missed, total)`` pairs.  Values are additive: summing the usage of every
package in a dependency gives the dependency's usage, and summing dependency
usages gives subtree and project totals.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields

METRICS: tuple[str, ...] = (
    "instructions",
    "branches",
    "complexity",
    "lines",
    "methods",
    "classes",
)
"""Counter categories in report column order."""


def percentage(part: int, whole: int) -> int | None:
    """Return ``floor(100 * part / whole)``, or ``None`` when *whole* is zero."""
    if whole <= 0:
        return None
    return math.floor(100 * part / whole)


@dataclass(frozen=True)
class UsageCounter:
    """A single ``(missed, total)`` coverage counter."""

    missed: int = 0
    total: int = 0

    @property
    def covered(self) -> int:
        """Number of covered items."""
        return self.total - self.missed

    @property
    def covered_percentage(self) -> int | None:
        """Covered share as a floored percentage (``None`` for an empty counter)."""
        return percentage(self.covered, self.total)

    def __add__(self, other: UsageCounter) -> UsageCounter:
        if not isinstance(other, UsageCounter):
            return NotImplemented
        return UsageCounter(missed=self.missed + other.missed, total=self.total + other.total)


@dataclass(frozen=True)
class CoverageUsage:
    """Coverage counters attributed to a package, a dependency or a subtree."""

    instructions: UsageCounter = field(default_factory=UsageCounter)
    branches: UsageCounter = field(default_factory=UsageCounter)
    complexity: UsageCounter = field(default_factory=UsageCounter)
    lines: UsageCounter = field(default_factory=UsageCounter)
    methods: UsageCounter = field(default_factory=UsageCounter)
    classes: UsageCounter = field(default_factory=UsageCounter)

    @classmethod
    def zero(cls) -> CoverageUsage:
        """Return the additive identity."""
        return cls()

    @classmethod
    def from_values(cls, values: list[int]) -> CoverageUsage:
        """Build a usage from flat ``[missed, total, missed, total, ...]`` values.

        Missing trailing values count as zero.
        """
        padded = list(values) + [0] * (2 * len(METRICS) - len(values))
        counters = {
            name: UsageCounter(missed=padded[2 * idx], total=padded[2 * idx + 1])
            for idx, name in enumerate(METRICS)
        }
        return cls(**counters)

    def __add__(self, other: CoverageUsage) -> CoverageUsage:
        if not isinstance(other, CoverageUsage):
            return NotImplemented
        return CoverageUsage(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    @property
    def is_empty(self) -> bool:
        """True when every counter has a zero total and zero missed."""
        return self == CoverageUsage()

    def counters(self) -> dict[str, UsageCounter]:
        """Return counters keyed by metric name, in report column order."""
        return {name: getattr(self, name) for name in METRICS}

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Serialize to ``{metric: {"missed", "covered", "total"}}``."""
        return {
            name: {"missed": c.missed, "covered": c.covered, "total": c.total}
            for name, c in self.counters().items()
        }


def sum_usage(usages: list[CoverageUsage]) -> CoverageUsage:
    """Sum a list of usages (empty list gives zero)."""
    total = CoverageUsage()
    for usage in usages:
        total += usage
    return total
