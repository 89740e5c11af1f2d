"""Report-generation pipeline: build, extract, attribute, aggregate, emit.

Each phase finishes before the next one starts; nothing runs concurrently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from depcov.adapters.coverage import extractor_for
from depcov.aggregation.emission import EmittedView, MemorySink
from depcov.context import RunContext
from depcov.errors import EmissionError
from depcov.models.attribution import TargetKind
from depcov.models.usage import CoverageUsage
from depcov.resolver.packages import scan_project_packages

if TYPE_CHECKING:
    from depcov.aggregation.emission import EmissionSink
    from depcov.config import DepcovConfig
    from depcov.models.attribution import PackageAttribution

logger = logging.getLogger(__name__)


@dataclass
class DependencySummary:
    """Totals of a single dependency, independent of where it is rendered."""

    dependency: str
    scope: str
    is_root: bool
    own_usage: CoverageUsage
    aggregate_usage: CoverageUsage
    children: list[str] = field(default_factory=list)
    output_paths: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependency": self.dependency,
            "scope": self.scope,
            "is_root": self.is_root,
            "own": self.own_usage.to_dict(),
            "aggregate": self.aggregate_usage.to_dict(),
            "children": list(self.children),
            "output_paths": list(self.output_paths),
        }


@dataclass
class ReportResult:
    """Everything the renderers need from one report-generation run."""

    project: str
    dependencies: list[DependencySummary] = field(default_factory=list)
    views: dict[str, EmittedView] = field(default_factory=dict)
    grand_total: CoverageUsage = field(default_factory=CoverageUsage)
    """Dependency usage with each dependency counted once."""
    project_usage: CoverageUsage = field(default_factory=CoverageUsage)
    project_packages: dict[str, CoverageUsage] = field(default_factory=dict)
    unresolved_usage: CoverageUsage = field(default_factory=CoverageUsage)
    attribution: PackageAttribution = field(default_factory=dict)
    report_total: CoverageUsage | None = None
    """Footer total of the raw coverage report, when it has one."""

    @property
    def overall_total(self) -> CoverageUsage:
        """Project plus dependencies."""
        return self.project_usage + self.grand_total

    @property
    def roots(self) -> list[DependencySummary]:
        return [d for d in self.dependencies if d.is_root]

    @property
    def unresolved_packages(self) -> list[str]:
        return sorted(
            name
            for name, target in self.attribution.items()
            if target.kind is TargetKind.UNRESOLVED
        )

    def dependency(self, dependency_id: str) -> DependencySummary | None:
        return next((d for d in self.dependencies if d.dependency == dependency_id), None)


def generate_report(
    context: RunContext,
    *,
    manifest: dict[str, Any] | str | Path,
    coverage_report: str | Path,
    report_format: str = "auto",
    relative_to_parent: bool = False,
    project: str = "project",
    sink: EmissionSink | None = None,
) -> ReportResult:
    """Run one full attribution and aggregation pass inside *context*.

    Raises:
        DepcovError: On any fatal condition (malformed manifest, package
            collision, unreadable archive or report, emission failure).
    """
    graph = context.load_manifest(manifest)

    report_path = Path(coverage_report)
    extractor = extractor_for(report_path, report_format)
    rows = list(extractor.extract(report_path))
    logger.info("Extracted %d rows from %s (%s)", len(rows), report_path, extractor.name)

    report_total: CoverageUsage | None = None
    for row in rows:
        if row.is_total:
            report_total = row.usage
            continue
        context.attribute(row.name, row.usage)

    aggregator = context.aggregator
    aggregator.aggregate_all()
    grand_total = aggregator.grand_total()

    collector = MemorySink()
    aggregator.emit_all(collector, relative_to_parent=relative_to_parent)
    if sink is not None:
        for view in collector.views.values():
            try:
                sink.write(view)
            except Exception as e:
                raise EmissionError(
                    f"Failed to emit coverage of {view.dependency} to {view.output_path}: {e}"
                ) from e

    result = ReportResult(
        project=project,
        dependencies=[
            DependencySummary(
                dependency=node.id,
                scope=node.scope,
                is_root=node.is_root,
                own_usage=node.own_usage,
                aggregate_usage=aggregator.aggregate(node),
                children=[str(c) for c in node.children],
                output_paths=list(node.output_paths),
            )
            for node in graph
        ],
        views=dict(collector.views),
        grand_total=grand_total,
        project_usage=aggregator.project_usage,
        project_packages=dict(aggregator.project_packages),
        unresolved_usage=aggregator.unresolved_usage,
        attribution=context.attribution,
        report_total=report_total,
    )
    _check_report_total(result)
    return result


def _check_report_total(result: ReportResult) -> None:
    """Warn when attributed counts do not add up to the report's own total."""
    if result.report_total is None:
        return
    accounted = result.overall_total + result.unresolved_usage
    if accounted != result.report_total:
        logger.warning(
            "Attributed coverage (%d/%d instructions missed) differs from the "
            "report total (%d/%d)",
            accounted.instructions.missed,
            accounted.instructions.total,
            result.report_total.instructions.missed,
            result.report_total.instructions.total,
        )


def run_from_config(
    config: DepcovConfig,
    *,
    sink: EmissionSink | None = None,
) -> ReportResult:
    """Generate a report with every input taken from *config*."""
    project_packages = scan_project_packages(config.resolve_path(config.project.classes_dir))
    with RunContext(
        local_repo=config.repository.local,
        project_packages=project_packages,
        skip_test_dependencies=config.manifest.skip_test_dependencies,
    ) as context:
        return generate_report(
            context,
            manifest=config.resolve_path(config.manifest.path),
            coverage_report=config.resolve_path(config.coverage.report),
            report_format=config.coverage.format,
            relative_to_parent=config.report.relative_to_parent,
            project=config.project.group_id or Path(config.project.root).name,
            sink=sink,
        )
