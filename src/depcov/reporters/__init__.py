"""Reporters for outputting dependency coverage results."""

from __future__ import annotations

from depcov.reporters.json_reporter import JSONReporter
from depcov.reporters.terminal import CLIReporter, reporter
from depcov.reporters.xml_reporter import XMLReporter

__all__ = [
    "CLIReporter",
    "JSONReporter",
    "XMLReporter",
    "reporter",
]
