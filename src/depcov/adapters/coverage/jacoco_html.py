"""JaCoCo HTML report extractor.

Reads the package overview table of a JaCoCo HTML report (``index.html``).
Cells are positional, after the element-name cell::

    instructions (bar), %, branches (bar), %, missed cxty, cxty,
    missed lines, lines, missed methods, methods, missed classes, classes

Bar cells hold either ``"<missed> of <total>"`` text (footer rows) or
red/green bar images whose titles carry the missed and covered counts
(body rows).  When a package has its own ``<package>/index.html`` page, that
page's footer row supplies the package numbers.
"""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from depcov.adapters.coverage.base import (
    ExtractedRow,
    ReportExtractor,
    parse_count,
    parse_fraction,
)
from depcov.errors import ReportError
from depcov.models.usage import CoverageUsage

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
EXPECTED_COLUMNS = 12

# Column positions (after the name cell) that hold bar / "x of y" fractions.
_FRACTION_COLUMNS = (0, 2)
# Percentage columns, derived by the report tool and recomputed on demand.
_IGNORED_COLUMNS = (1, 3)

_TBODY_RE = re.compile(r"<tbody[^>]*>(.*?)</tbody>", re.DOTALL | re.IGNORECASE)
_TFOOT_RE = re.compile(r"<tfoot[^>]*>(.*?)</tfoot>", re.DOTALL | re.IGNORECASE)
_ROW_RE = re.compile(r"<tr[^>]*>(.*?)</tr>", re.DOTALL | re.IGNORECASE)
_CELL_RE = re.compile(r"<td[^>]*>(.*?)</td>", re.DOTALL | re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BAR_RE = re.compile(
    r"<img[^>]*src=\"[^\"]*(red|green)bar\.gif\"[^>]*title=\"([^\"]*)\"",
    re.IGNORECASE,
)


def _cell_text(cell_html: str) -> str:
    return html.unescape(_TAG_RE.sub("", cell_html)).strip()


def _bar_fraction(cell_html: str, *, context: str) -> tuple[int, int]:
    """Read ``(missed, total)`` from a bar cell.

    Text such as ``"1,234 of 5,000"`` takes precedence; otherwise the red
    (missed) and green (covered) bar image titles are summed.
    """
    text = _cell_text(cell_html)
    if text:
        return parse_fraction(text, context=context)
    missed = covered = 0
    for colour, title in _BAR_RE.findall(cell_html):
        if colour.lower() == "red":
            missed += parse_count(title, context=context)
        else:
            covered += parse_count(title, context=context)
    return missed, missed + covered


def parse_row(cells: list[str], *, context: str = "") -> CoverageUsage:
    """Turn the 12 positional counter cells of a row into a usage.

    Rows with fewer cells log a warning and count the missing fields as zero.
    """
    if len(cells) < EXPECTED_COLUMNS:
        logger.warning(
            "Coverage row %s has %d of %d expected columns; missing counters count as 0",
            context or "<unnamed>",
            len(cells),
            EXPECTED_COLUMNS,
        )

    values: list[int] = []
    for idx, cell in enumerate(cells[:EXPECTED_COLUMNS]):
        if idx in _IGNORED_COLUMNS:
            continue
        if idx in _FRACTION_COLUMNS:
            values.extend(_bar_fraction(cell, context=context))
        else:
            values.append(parse_count(_cell_text(cell), context=context))
    return CoverageUsage.from_values(values)


def _split_rows(section_html: str) -> list[list[str]]:
    return [_CELL_RE.findall(row) for row in _ROW_RE.findall(section_html)]


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ReportError(f"Cannot read coverage report {path}: {e}") from e


def _footer_usage(page_html: str, *, context: str) -> CoverageUsage | None:
    footer = _TFOOT_RE.search(page_html)
    if footer is None:
        return None
    rows = [cells for cells in _split_rows(footer.group(1)) if cells]
    if not rows:
        return None
    return parse_row(rows[0][1:], context=context)


class JacocoHtmlExtractor(ReportExtractor):
    """Extract per-package usage from a JaCoCo HTML report directory."""

    @property
    def name(self) -> str:
        return "jacoco-html"

    @staticmethod
    def index_path(report: Path) -> Path:
        """Resolve a report directory or ``index.html`` path to the index file."""
        return report / INDEX_FILE if report.is_dir() else report

    def detect(self, report: Path) -> bool:
        index = self.index_path(report)
        if index.suffix.lower() not in {".html", ".htm"} or not index.is_file():
            return False
        try:
            head = index.read_text(encoding="utf-8", errors="replace")[:4096]
        except OSError:
            return False
        return "coveragetable" in head or "jacoco" in head.lower()

    def extract(self, report: Path) -> Iterator[ExtractedRow]:
        index = self.index_path(report)
        if not index.is_file():
            raise ReportError(f"Coverage report {index} does not exist")
        page = _read_text(index)

        body = _TBODY_RE.search(page)
        if body is None:
            logger.warning("Coverage report %s has no package table", index)
        else:
            for cells in _split_rows(body.group(1)):
                if not cells:
                    continue
                package = _cell_text(cells[0])
                if not package:
                    logger.warning("Skipping coverage row without a package name in %s", index)
                    continue
                yield ExtractedRow(name=package, usage=self._package_usage(index, package, cells))

        total = _footer_usage(page, context=f"{index} total")
        if total is not None:
            yield ExtractedRow(name="Total", usage=total, is_total=True)

    def _package_usage(self, index: Path, package: str, cells: list[str]) -> CoverageUsage:
        package_page = index.parent / package / INDEX_FILE
        if package_page.is_file():
            usage = _footer_usage(_read_text(package_page), context=package)
            if usage is not None:
                return usage
        return parse_row(cells[1:], context=package)
