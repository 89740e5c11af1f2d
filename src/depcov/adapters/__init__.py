"""Adapters for reading coverage reports produced by other tools."""

from depcov.adapters.coverage import ExtractedRow, ReportExtractor, extractor_for

__all__ = [
    "ExtractedRow",
    "ReportExtractor",
    "extractor_for",
]
