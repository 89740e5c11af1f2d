"""Base classes and parsing helpers for coverage report extractors."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from depcov.models.usage import CoverageUsage

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

logger = logging.getLogger(__name__)

# Thousands separators JaCoCo emits depending on the report locale.
_GROUPING_RE = re.compile(r"[,.'\s]")
_FRACTION_RE = re.compile(r"^\s*(.+?)\s+of\s+(.+?)\s*$")


def parse_count(text: str, *, context: str = "") -> int:
    """Parse an integer counter, ignoring grouping separators.

    Unparsable text is logged and counted as zero.
    """
    normalized = _GROUPING_RE.sub("", text)
    if not normalized:
        return 0
    try:
        return int(normalized)
    except ValueError:
        logger.warning("Cannot parse coverage number %r%s; using 0", text, _where(context))
        return 0


def parse_fraction(text: str, *, context: str = "") -> tuple[int, int]:
    """Parse a ``"<missed> of <total>"`` cell into ``(missed, total)``.

    A cell without ``of`` is read as a bare missed count with a zero total.
    """
    match = _FRACTION_RE.match(text)
    if match is None:
        return parse_count(text, context=context), 0
    return (
        parse_count(match.group(1), context=context),
        parse_count(match.group(2), context=context),
    )


def _where(context: str) -> str:
    return f" in {context}" if context else ""


@dataclass(frozen=True)
class ExtractedRow:
    """One row of a coverage report: a package, or the report-wide total."""

    name: str
    usage: CoverageUsage
    is_total: bool = False


class ReportExtractor(ABC):
    """Abstract base class for raw coverage report readers.

    Each concrete extractor knows one report layout produced by the external
    coverage tool and turns it into per-package :class:`CoverageUsage` rows.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Report format identifier (e.g. ``'jacoco-html'``)."""

    @abstractmethod
    def detect(self, report: Path) -> bool:
        """Return True if *report* looks like this extractor's format."""

    @abstractmethod
    def extract(self, report: Path) -> Iterator[ExtractedRow]:
        """Yield package rows, then the footer total row when present.

        Raises:
            ReportError: If the report cannot be read or parsed.
        """

    def package_rows(self, report: Path) -> list[ExtractedRow]:
        """Return only the per-package rows of *report*."""
        return [row for row in self.extract(report) if not row.is_total]
