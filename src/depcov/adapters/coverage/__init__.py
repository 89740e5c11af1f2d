"""Coverage report extractors."""

from __future__ import annotations

from pathlib import Path

from depcov.adapters.coverage.base import (
    ExtractedRow,
    ReportExtractor,
    parse_count,
    parse_fraction,
)
from depcov.adapters.coverage.jacoco_html import JacocoHtmlExtractor
from depcov.adapters.coverage.jacoco_xml import JacocoXmlExtractor
from depcov.errors import ReportError

_EXTRACTORS: dict[str, type[ReportExtractor]] = {
    "html": JacocoHtmlExtractor,
    "xml": JacocoXmlExtractor,
}


def extractor_for(report: str | Path, report_format: str = "auto") -> ReportExtractor:
    """Return the extractor for *report*.

    ``report_format`` is ``"html"``, ``"xml"`` or ``"auto"`` (``.xml`` files
    use the XML extractor, directories and ``.html`` files the HTML one).
    """
    if report_format != "auto":
        extractor_cls = _EXTRACTORS.get(report_format)
        if extractor_cls is None:
            raise ReportError(f"Unknown coverage report format {report_format!r}")
        return extractor_cls()

    path = Path(report)
    if path.suffix.lower() == ".xml":
        return JacocoXmlExtractor()
    return JacocoHtmlExtractor()


__all__ = [
    "ExtractedRow",
    "JacocoHtmlExtractor",
    "JacocoXmlExtractor",
    "ReportExtractor",
    "extractor_for",
    "parse_count",
    "parse_fraction",
]
