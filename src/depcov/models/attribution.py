"""Package attribution targets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from depcov.models.dependency import DependencyNode


class TargetKind(Enum):
    """What a package was attributed to."""

    DEPENDENCY = "dependency"
    PROJECT = "project"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ResolvedTarget:
    """Resolution outcome for a single package name."""

    kind: TargetKind
    node: DependencyNode | None = None

    @classmethod
    def dependency(cls, node: DependencyNode) -> ResolvedTarget:
        return cls(kind=TargetKind.DEPENDENCY, node=node)

    @property
    def label(self) -> str:
        """Human-readable target name for logs and reports."""
        if self.kind is TargetKind.DEPENDENCY and self.node is not None:
            return self.node.id
        return self.kind.value


PROJECT_TARGET = ResolvedTarget(kind=TargetKind.PROJECT)
UNRESOLVED_TARGET = ResolvedTarget(kind=TargetKind.UNRESOLVED)

PackageAttribution = dict[str, ResolvedTarget]
"""Package name to resolved target, for diagnostics and reporting."""
