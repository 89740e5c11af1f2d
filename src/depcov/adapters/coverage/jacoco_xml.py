"""JaCoCo XML report extractor.

JaCoCo XML reports carry ``<counter type=... missed=... covered=...>``
elements directly under each ``<package>`` and under the ``<report>`` root.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from defusedxml import DefusedXmlException, ElementTree
from defusedxml.ElementTree import ParseError as DefusedParseError

from depcov.adapters.coverage.base import ExtractedRow, ReportExtractor
from depcov.errors import ReportError
from depcov.models.usage import CoverageUsage, UsageCounter

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path
    from xml.etree.ElementTree import Element as XmlElement

logger = logging.getLogger(__name__)

COUNTER_TYPES: dict[str, str] = {
    "INSTRUCTION": "instructions",
    "BRANCH": "branches",
    "COMPLEXITY": "complexity",
    "LINE": "lines",
    "METHOD": "methods",
    "CLASS": "classes",
}


def _int_attr(element: XmlElement, key: str, *, context: str) -> int:
    value = element.get(key)
    if value is None:
        return 0
    try:
        return int(value)
    except ValueError:
        logger.warning("Cannot parse %s=%r in %s; using 0", key, value, context)
        return 0


def _counters_usage(element: XmlElement, *, context: str) -> CoverageUsage:
    """Build a usage from the direct ``<counter>`` children of *element*."""
    counters: dict[str, UsageCounter] = {}
    for counter in element.findall("counter"):
        metric = COUNTER_TYPES.get(counter.get("type", ""))
        if metric is None:
            logger.debug("Ignoring counter type %r in %s", counter.get("type"), context)
            continue
        missed = _int_attr(counter, "missed", context=context)
        covered = _int_attr(counter, "covered", context=context)
        counters[metric] = UsageCounter(missed=missed, total=missed + covered)
    return CoverageUsage(**counters)


class JacocoXmlExtractor(ReportExtractor):
    """Extract per-package usage from a JaCoCo ``jacoco.xml`` report."""

    @property
    def name(self) -> str:
        return "jacoco-xml"

    def detect(self, report: Path) -> bool:
        if report.suffix.lower() != ".xml" or not report.is_file():
            return False
        try:
            head = report.read_text(encoding="utf-8", errors="replace")[:2048]
        except OSError:
            return False
        return "<report" in head

    def extract(self, report: Path) -> Iterator[ExtractedRow]:
        try:
            tree = ElementTree.parse(report)
        except (DefusedParseError, DefusedXmlException, OSError) as e:
            raise ReportError(f"Failed to parse JaCoCo XML {report}: {e}") from e

        root = tree.getroot()
        if root.tag != "report":
            raise ReportError(f"JaCoCo XML root of {report} is <{root.tag}>, expected <report>")

        for package in root.iter("package"):
            raw_name = package.get("name", "")
            name = raw_name.replace("/", ".") if raw_name else "default"
            yield ExtractedRow(name=name, usage=_counters_usage(package, context=name))

        if root.find("counter") is not None:
            yield ExtractedRow(
                name="Total",
                usage=_counters_usage(root, context=f"{report} total"),
                is_total=True,
            )
