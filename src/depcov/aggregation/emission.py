"""Per-node report views and the sinks that receive them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from depcov.models.usage import CoverageUsage


@dataclass(frozen=True)
class EmittedView:
    """Coverage of one dependency as rendered at one output path."""

    output_path: str
    dependency: str
    own_usage: CoverageUsage
    aggregate_usage: CoverageUsage
    denominator: CoverageUsage
    """Usage the view's bars and shares are drawn against."""
    packages: dict[str, CoverageUsage] = field(default_factory=dict)
    transitive_usage: CoverageUsage | None = None
    """Aggregate of the node's children, when it has any."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_path": self.output_path,
            "dependency": self.dependency,
            "own": self.own_usage.to_dict(),
            "aggregate": self.aggregate_usage.to_dict(),
            "denominator": self.denominator.to_dict(),
            "transitive": (
                self.transitive_usage.to_dict() if self.transitive_usage is not None else None
            ),
            "packages": {name: usage.to_dict() for name, usage in sorted(self.packages.items())},
        }


class EmissionSink(Protocol):
    """Receiver of emitted views (a renderer, a file writer, a collector).

    Any exception raised by ``write`` aborts emission and is re-raised as
    :class:`~depcov.errors.EmissionError` naming the dependency and output path.
    """

    def write(self, view: EmittedView) -> None: ...


class MemorySink:
    """Collects emitted views keyed by output path."""

    def __init__(self) -> None:
        self.views: dict[str, EmittedView] = {}
        self.writes = 0

    def write(self, view: EmittedView) -> None:
        self.writes += 1
        self.views[view.output_path] = view

    def __len__(self) -> int:
        return len(self.views)
