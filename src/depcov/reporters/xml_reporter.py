"""XML reporter producing JaCoCo-style counters per dependency.

The document mirrors the layout of a JaCoCo ``report.xml``: one ``<group>``
per dependency (holding its packages), one for the project itself, and the
overall ``<counter>`` elements at the end of the ``<report>`` root.  Counters
with an empty total are left out, as JaCoCo does.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from depcov.models.usage import CoverageUsage
    from depcov.orchestrator import ReportResult

logger = logging.getLogger(__name__)

# JaCoCo writes counters in this order.
COUNTER_ORDER: tuple[tuple[str, str], ...] = (
    ("INSTRUCTION", "instructions"),
    ("BRANCH", "branches"),
    ("LINE", "lines"),
    ("COMPLEXITY", "complexity"),
    ("METHOD", "methods"),
    ("CLASS", "classes"),
)


class XMLReporter:
    """Generate JaCoCo-style XML reports from a report-generation run."""

    def generate(self, result: ReportResult, output_path: Path) -> Path:
        """Write an XML report file.

        Args:
            result: Outcome of the report-generation run.
            output_path: Path to write the XML file.

        Returns:
            The path to the generated XML file.
        """
        root = _build_xml(result)
        tree = ET.ElementTree(root)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        ET.indent(tree, space="  ")
        tree.write(str(output_path), encoding="unicode", xml_declaration=True)
        logger.info("XML report written to %s", output_path)
        return output_path

    def generate_string(self, result: ReportResult) -> str:
        """Return the XML report as a string."""
        root = _build_xml(result)
        ET.indent(root, space="  ")
        return ET.tostring(root, encoding="unicode", xml_declaration=True)


def _add_counters(parent: ET.Element, usage: CoverageUsage) -> None:
    for counter_type, metric in COUNTER_ORDER:
        counter = getattr(usage, metric)
        if counter.total == 0:
            continue
        elem = ET.SubElement(parent, "counter")
        elem.set("type", counter_type)
        elem.set("missed", str(counter.missed))
        elem.set("covered", str(counter.covered))


def _add_packages(parent: ET.Element, packages: dict[str, CoverageUsage]) -> None:
    for name, usage in sorted(packages.items()):
        pkg = ET.SubElement(parent, "package")
        pkg.set("name", name.replace(".", "/"))
        _add_counters(pkg, usage)


def _build_xml(result: ReportResult) -> ET.Element:
    """Build the XML element tree from a ``ReportResult``."""
    report = ET.Element("report")
    report.set("name", result.project)

    project = ET.SubElement(report, "group")
    project.set("name", result.project)
    project.set("kind", "project")
    _add_packages(project, result.project_packages)
    _add_counters(project, result.project_usage)

    for summary in result.dependencies:
        group = ET.SubElement(report, "group")
        group.set("name", summary.dependency)
        group.set("kind", "dependency")
        group.set("scope", summary.scope)
        if summary.is_root:
            group.set("root", "true")
        view = next(
            (result.views[p] for p in summary.output_paths if p in result.views),
            None,
        )
        if view is not None:
            _add_packages(group, view.packages)
        _add_counters(group, summary.own_usage)

        transitive = ET.SubElement(group, "aggregate")
        _add_counters(transitive, summary.aggregate_usage)

    _add_counters(report, result.overall_total)
    return report
