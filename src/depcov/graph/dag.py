"""Dependency DAG arena.

Nodes are stored once per coordinate in insertion (manifest) order.  Links
are kept on the nodes themselves; the graph only owns the node lifetimes and
the output-path index.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from depcov.errors import ManifestError
from depcov.models.dependency import (
    DependencyCoordinate,
    DependencyNode,
    child_output_path,
    root_output_path,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Arena of :class:`DependencyNode` keyed by coordinate."""

    def __init__(self) -> None:
        self._nodes: dict[DependencyCoordinate, DependencyNode] = {}
        self._paths: dict[str, DependencyNode] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, coordinate: object) -> bool:
        return coordinate in self._nodes

    def __iter__(self) -> Iterator[DependencyNode]:
        return iter(self._nodes.values())

    @property
    def nodes(self) -> list[DependencyNode]:
        """All nodes in manifest order."""
        return list(self._nodes.values())

    @property
    def roots(self) -> list[DependencyNode]:
        """Direct dependencies of the project, in manifest order."""
        return [node for node in self._nodes.values() if node.is_root]

    def get(self, coordinate: DependencyCoordinate) -> DependencyNode | None:
        return self._nodes.get(coordinate)

    def get_by_id(self, dependency_id: str) -> DependencyNode | None:
        """Look up a node by its ``group:artifact:version`` string."""
        return self._nodes.get(DependencyCoordinate.parse(dependency_id))

    def node_for_path(self, output_path: str) -> DependencyNode | None:
        """Return the node rendered at *output_path*."""
        return self._paths.get(output_path)

    def add_node(self, coordinate: DependencyCoordinate, scope: str) -> DependencyNode:
        """Create and register a node.

        Raises:
            ManifestError: If a node with this coordinate already exists.
        """
        if coordinate in self._nodes:
            raise ManifestError(f"Dependency {coordinate} registered twice")
        node = DependencyNode(coordinate=coordinate, scope=scope)
        self._nodes[coordinate] = node
        return node

    def mark_root(self, node: DependencyNode) -> None:
        """Flag *node* as a direct dependency and give it its root output path."""
        node.is_root = True
        self._add_path(node, root_output_path(node.coordinate))

    def link(self, parent: DependencyNode, child: DependencyNode) -> None:
        """Attach *child* under *parent* and fan out output paths.

        Every output path of *parent* yields one path for *child*, and each
        newly added path propagates to the child's existing descendants.

        Raises:
            ManifestError: If the link would introduce a cycle.
        """
        if child is parent or any(d is parent for d in child.iter_descendants()):
            raise ManifestError(
                f"Dependency cycle: {child.id} is already an ancestor of {parent.id}"
            )
        if parent.add_child(child):
            logger.debug("Linked %s -> %s", parent.id, child.id)
        for parent_path in list(parent.output_paths):
            self._add_path(child, child_output_path(parent_path, child.coordinate))

    def _add_path(self, node: DependencyNode, path: str) -> None:
        pending = [(node, path)]
        while pending:
            current, current_path = pending.pop()
            if not current.add_output_path(current_path):
                continue
            self._paths[current_path] = current
            pending.extend(
                (child, child_output_path(current_path, child.coordinate))
                for child in current.children.values()
            )

    def reset_usage(self) -> None:
        """Drop attributed and aggregated usage from every node."""
        for node in self._nodes.values():
            node.reset_usage()

    def clear(self) -> None:
        """Tear the graph down, releasing every node."""
        for node in self._nodes.values():
            node.children.clear()
        self._nodes.clear()
        self._paths.clear()

    def describe(self) -> str:
        """Render the graph as an indented tree (shared subtrees repeat)."""
        lines: list[str] = []
        stack: list[tuple[DependencyNode, int]] = [(root, 0) for root in reversed(self.roots)]
        while stack:
            node, depth = stack.pop()
            lines.append(f"{'  ' * depth}{node.id} ({node.scope})")
            stack.extend((child, depth + 1) for child in reversed(node.children.values()))
        return "\n".join(lines)
