"""Attribute package usage to dependencies and roll it up the DAG.

Three totals come out of an aggregation pass:

* ``aggregate(node)``: the node's own usage plus the aggregate of every
  child.  A dependency shared by several parents is counted under each of
  them, since every ancestor's view shows its full transitive footprint.
* ``grand_total()``: every dependency's own usage counted exactly once,
  however many parents reach it.
* ``project_usage``: usage of packages that belong to the project itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from depcov.aggregation.emission import EmittedView
from depcov.errors import AggregationError, EmissionError
from depcov.models.attribution import TargetKind
from depcov.models.dependency import parent_output_path
from depcov.models.usage import CoverageUsage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from depcov.aggregation.emission import EmissionSink
    from depcov.graph.dag import DependencyGraph
    from depcov.models.attribution import ResolvedTarget
    from depcov.models.dependency import DependencyCoordinate, DependencyNode

logger = logging.getLogger(__name__)


class Aggregator:
    """Run-scoped attribution, aggregation and emission state for one graph."""

    def __init__(self, graph: DependencyGraph) -> None:
        self.graph = graph
        self.project_usage = CoverageUsage()
        self.project_packages: dict[str, CoverageUsage] = {}
        self.unresolved_usage = CoverageUsage()
        self._memo: dict[DependencyCoordinate, CoverageUsage] = {}
        self._emitted: set[tuple[DependencyCoordinate, str]] = set()
        self._aggregating = False

    # ── Attribution ─────────────────────────────────────────────────

    def attribute(self, package: str, usage: CoverageUsage, target: ResolvedTarget) -> None:
        """Add a package's usage to the node (or project) it resolved to.

        Raises:
            AggregationError: If aggregation has already started.
        """
        if self._aggregating:
            raise AggregationError(
                f"Cannot attribute package {package} after aggregation has started"
            )

        if target.kind is TargetKind.DEPENDENCY and target.node is not None:
            node = target.node
            node.own_usage += usage
            node.package_usage[package] = node.package_usage.get(package, CoverageUsage()) + usage
        elif target.kind is TargetKind.PROJECT:
            self.project_usage += usage
            self.project_packages[package] = (
                self.project_packages.get(package, CoverageUsage()) + usage
            )
        else:
            self.unresolved_usage += usage

    # ── Aggregation ─────────────────────────────────────────────────

    def aggregate(self, node: DependencyNode) -> CoverageUsage:
        """Return *node*'s subtree total, computing each node at most once."""
        self._aggregating = True
        cached = self._memo.get(node.coordinate)
        if cached is not None:
            return cached

        stack: list[tuple[DependencyNode, bool]] = [(node, False)]
        while stack:
            current, expanded = stack.pop()
            if current.coordinate in self._memo:
                continue
            if not expanded:
                stack.append((current, True))
                stack.extend(
                    (child, False)
                    for child in reversed(current.children.values())
                    if child.coordinate not in self._memo
                )
                continue
            total = current.own_usage
            for child in current.children.values():
                total += self._memo[child.coordinate]
            self._memo[current.coordinate] = total
            current.aggregate_usage = total

        return self._memo[node.coordinate]

    def transitive_usage(self, node: DependencyNode) -> CoverageUsage | None:
        """Aggregate of *node*'s children, or ``None`` for a leaf."""
        if not node.children:
            return None
        total = CoverageUsage()
        for child in node.children.values():
            total += self.aggregate(child)
        return total

    def aggregate_all(self) -> dict[str, CoverageUsage]:
        """Aggregate every node; returns totals keyed by dependency id."""
        return {node.id: self.aggregate(node) for node in self.graph}

    def grand_total(self, roots: Iterable[DependencyNode] | None = None) -> CoverageUsage:
        """Sum the own usage of every node reachable from *roots* exactly once."""
        self._aggregating = True
        summed: set[DependencyCoordinate] = set()
        total = CoverageUsage()
        stack = list(reversed(list(roots if roots is not None else self.graph.roots)))
        while stack:
            node = stack.pop()
            if node.coordinate in summed:
                continue
            summed.add(node.coordinate)
            total += node.own_usage
            stack.extend(reversed(node.children.values()))
        return total

    def overall_total(self) -> CoverageUsage:
        """Project usage plus the de-duplicated dependency total."""
        return self.project_usage + self.grand_total()

    # ── Emission ────────────────────────────────────────────────────

    def emit(
        self,
        node: DependencyNode,
        sink: EmissionSink,
        *,
        relative_to_parent: bool = False,
    ) -> int:
        """Write one view per output path of *node*, each at most once.

        With ``relative_to_parent`` a transitive view is drawn against the
        aggregate of the parent that owns its path, otherwise against the
        node's own aggregate.  Returns the number of views written.

        Raises:
            EmissionError: If the sink fails to write a view.
        """
        aggregate = self.aggregate(node)
        transitive = self.transitive_usage(node)
        written = 0
        for path in node.output_paths:
            key = (node.coordinate, path)
            if key in self._emitted:
                continue
            view = EmittedView(
                output_path=path,
                dependency=node.id,
                own_usage=node.own_usage,
                aggregate_usage=aggregate,
                denominator=self._denominator(path, aggregate, relative_to_parent),
                packages=dict(node.package_usage),
                transitive_usage=transitive,
            )
            try:
                sink.write(view)
            except Exception as e:
                raise EmissionError(f"Failed to emit coverage of {node.id} to {path}: {e}") from e
            self._emitted.add(key)
            written += 1
        return written

    def emit_all(self, sink: EmissionSink, *, relative_to_parent: bool = False) -> int:
        """Emit every node of the graph; returns the number of views written."""
        written = sum(
            self.emit(node, sink, relative_to_parent=relative_to_parent) for node in self.graph
        )
        logger.info("Emitted %d dependency views", written)
        return written

    def is_emitted(self, node: DependencyNode, output_path: str) -> bool:
        return (node.coordinate, output_path) in self._emitted

    def _denominator(
        self, path: str, aggregate: CoverageUsage, relative_to_parent: bool
    ) -> CoverageUsage:
        if not relative_to_parent:
            return aggregate
        parent_path = parent_output_path(path)
        parent = self.graph.node_for_path(parent_path) if parent_path else None
        return self.aggregate(parent) if parent is not None else aggregate

    def reset(self) -> None:
        """Forget all attribution, aggregation and emission state."""
        self.project_usage = CoverageUsage()
        self.project_packages = {}
        self.unresolved_usage = CoverageUsage()
        self._memo.clear()
        self._emitted.clear()
        self._aggregating = False
        self.graph.reset_usage()
