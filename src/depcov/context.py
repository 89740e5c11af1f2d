"""Run-scoped state for one report-generation pass.

The coordinate→node arena, archive listings, package resolutions and
aggregation memos all live on a :class:`RunContext`.  A process producing
several reports (e.g. an XML pass followed by an HTML pass) uses one context
per pass, or calls :meth:`RunContext.reset` in between, so nothing leaks from
one run into the next.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from depcov.aggregation.aggregator import Aggregator
from depcov.graph.builder import build_graph, load_manifest
from depcov.graph.dag import DependencyGraph
from depcov.resolver.archives import ArchiveIndex
from depcov.resolver.packages import PackageResolver

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from depcov.models.attribution import PackageAttribution, ResolvedTarget
    from depcov.models.usage import CoverageUsage

logger = logging.getLogger(__name__)


class RunContext:
    """Owns every cache and memo of a single report-generation run."""

    def __init__(
        self,
        *,
        local_repo: str | Path | None = None,
        project_packages: dict[str, set[str]] | None = None,
        skip_test_dependencies: bool = True,
    ) -> None:
        self.skip_test_dependencies = skip_test_dependencies
        self.project_packages: dict[str, set[str]] = dict(project_packages or {})
        self.graph = DependencyGraph()
        self.archives = ArchiveIndex(local_repo)
        self.resolver = PackageResolver(self.archives)
        self.aggregator = Aggregator(self.graph)

    def __enter__(self) -> RunContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.reset()

    def load_manifest(self, manifest: dict[str, Any] | str | Path) -> DependencyGraph:
        """Build this run's graph from a decoded manifest or a manifest file."""
        self.reset()
        data = manifest if isinstance(manifest, dict) else load_manifest(manifest)
        build_graph(data, skip_test_dependencies=self.skip_test_dependencies, graph=self.graph)
        return self.graph

    def resolve(self, package: str) -> ResolvedTarget:
        """Resolve *package* against this run's graph and project packages."""
        return self.resolver.resolve(package, self.graph.nodes, self.project_packages)

    def attribute(self, package: str, usage: CoverageUsage) -> ResolvedTarget:
        """Resolve *package* and add its usage to the owning target."""
        target = self.resolve(package)
        self.aggregator.attribute(package, usage, target)
        return target

    @property
    def attribution(self) -> PackageAttribution:
        return self.resolver.attribution

    def reset(self) -> None:
        """Discard the graph and every cache so the context can start over."""
        self.aggregator.reset()
        self.resolver.clear()
        self.archives.clear()
        self.graph.clear()
        logger.debug("Run context reset")
