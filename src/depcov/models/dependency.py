"""Dependency identity and DAG node models."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from depcov.errors import ManifestError
from depcov.models.usage import CoverageUsage

if TYPE_CHECKING:
    from collections.abc import Iterator

_COORDINATE_PARTS = 3

ROOT_PATH_PREFIX = "dependencies"
TRANSITIVE_SEGMENT = "transitive"


@dataclass(frozen=True, order=True)
class DependencyCoordinate:
    """``groupId:artifactId:version`` identity of a resolved dependency."""

    group_id: str
    artifact_id: str
    version: str

    @classmethod
    def parse(cls, dependency_id: str) -> DependencyCoordinate:
        """Parse a ``group:artifact:version`` string.

        Raises:
            ManifestError: If the id does not have exactly three non-empty parts.
        """
        parts = dependency_id.split(":")
        if len(parts) != _COORDINATE_PARTS or not all(p.strip() for p in parts):
            raise ManifestError(f"Malformed dependency id {dependency_id!r}")
        group_id, artifact_id, version = (p.strip() for p in parts)
        return cls(group_id=group_id, artifact_id=artifact_id, version=version)

    @property
    def dir_name(self) -> str:
        """Directory name used for this dependency in report output paths."""
        return (
            self.group_id.replace("-", ".")
            + "."
            + self.artifact_id.replace("-", ".")
            + "-v"
            + self.version
        )

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


def root_output_path(coordinate: DependencyCoordinate) -> str:
    """Output path of a direct (root) dependency."""
    return f"{ROOT_PATH_PREFIX}/{coordinate.dir_name}"


def child_output_path(parent_path: str, coordinate: DependencyCoordinate) -> str:
    """Output path of *coordinate* when reached through *parent_path*."""
    return f"{parent_path}/{TRANSITIVE_SEGMENT}/{coordinate.dir_name}"


def parent_output_path(output_path: str) -> str | None:
    """Return the parent chain's output path, or ``None`` for a root path."""
    head, sep, _ = output_path.rpartition(f"/{TRANSITIVE_SEGMENT}/")
    return head if sep else None


@dataclass(eq=False)
class DependencyNode:
    """A single dependency in the DAG.

    Children are held strongly; parents are weak back-references so the graph
    arena, not the nodes, owns node lifetimes.
    """

    coordinate: DependencyCoordinate
    scope: str = "compile"
    is_root: bool = False
    output_paths: list[str] = field(default_factory=list)
    own_usage: CoverageUsage = field(default_factory=CoverageUsage)
    package_usage: dict[str, CoverageUsage] = field(default_factory=dict)
    aggregate_usage: CoverageUsage | None = None
    children: dict[DependencyCoordinate, DependencyNode] = field(default_factory=dict)
    _parents: weakref.WeakValueDictionary[DependencyCoordinate, DependencyNode] = field(
        default_factory=weakref.WeakValueDictionary, repr=False
    )

    @property
    def id(self) -> str:
        return str(self.coordinate)

    @property
    def parents(self) -> list[DependencyNode]:
        """Live parent nodes, in the order they were attached."""
        return list(self._parents.values())

    def add_child(self, child: DependencyNode) -> bool:
        """Link *child* under this node.  Returns False if already linked."""
        if child.coordinate in self.children:
            return False
        self.children[child.coordinate] = child
        child._parents[self.coordinate] = self
        return True

    def add_output_path(self, path: str) -> bool:
        """Record *path* if new.  Returns False for a duplicate."""
        if path in self.output_paths:
            return False
        self.output_paths.append(path)
        return True

    def iter_descendants(self) -> Iterator[DependencyNode]:
        """Yield every node reachable below this one, each exactly once."""
        seen: set[DependencyCoordinate] = set()
        stack = list(reversed(self.children.values()))
        while stack:
            node = stack.pop()
            if node.coordinate in seen:
                continue
            seen.add(node.coordinate)
            yield node
            stack.extend(reversed(node.children.values()))

    def reset_usage(self) -> None:
        """Forget attributed and aggregated usage."""
        self.own_usage = CoverageUsage()
        self.package_usage = {}
        self.aggregate_usage = None

    def __repr__(self) -> str:
        return (
            f"DependencyNode({self.id!r}, scope={self.scope!r}, "
            f"children={[str(c) for c in self.children]}, "
            f"parents={[p.id for p in self.parents]})"
        )
