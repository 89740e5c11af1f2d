"""JSON reporter: generates a structured dependency coverage report.

Produces machine-readable JSON output for downstream tooling from a
:class:`~depcov.orchestrator.ReportResult`.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from depcov.orchestrator import ReportResult

logger = logging.getLogger(__name__)


class JSONReporter:
    """Generate structured JSON reports from a report-generation run.

    Serializes dependency totals, per-path views, project usage and the
    package attribution into a single JSON document.
    """

    def generate(self, result: ReportResult, output_path: Path) -> Path:
        """Write a JSON report file.

        Args:
            result: Outcome of the report-generation run.
            output_path: Path to write the JSON file.

        Returns:
            The path to the generated JSON file.
        """
        report = _build_report(result)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(report, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(self, result: ReportResult) -> str:
        """Return the JSON report as a string."""
        return json.dumps(_build_report(result), indent=2, ensure_ascii=False, default=str)


def _build_report(result: ReportResult) -> dict[str, Any]:
    """Build the JSON report structure."""
    report: dict[str, Any] = {
        "tool": "depcov",
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "project": result.project,
        "summary": {
            "project": result.project_usage.to_dict(),
            "dependencies": result.grand_total.to_dict(),
            "overall": result.overall_total.to_dict(),
            "unresolved": result.unresolved_usage.to_dict(),
        },
        "dependencies": [summary.to_dict() for summary in result.dependencies],
        "views": [result.views[path].to_dict() for path in sorted(result.views)],
        "project_packages": {
            name: usage.to_dict() for name, usage in sorted(result.project_packages.items())
        },
        "attribution": {
            name: target.label for name, target in sorted(result.attribution.items())
        },
    }

    if result.report_total is not None:
        report["summary"]["report_total"] = result.report_total.to_dict()

    return report
