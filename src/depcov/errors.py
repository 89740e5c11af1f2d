"""Exceptions raised by depcov.

Every fatal condition of a report-generation run derives from
:class:`DepcovError`; recoverable problems are logged instead of raised.
"""

from __future__ import annotations


class DepcovError(Exception):
    """Base class for errors that abort a report-generation run."""


class ManifestError(DepcovError):
    """The dependency manifest is malformed (dangling parent, bad id, cycle)."""


class ArchiveError(DepcovError):
    """A dependency archive could not be read while resolving packages."""


class PackageCollisionError(DepcovError):
    """A package name exists both in the project and in a dependency archive."""

    def __init__(self, package: str, dependency: str) -> None:
        super().__init__(
            f"Package {package} matches both the project and dependency {dependency}"
        )
        self.package = package
        self.dependency = dependency


class ReportError(DepcovError):
    """The raw coverage report could not be read or parsed."""


class AggregationError(DepcovError):
    """Attribution or aggregation was invoked out of phase order."""


class EmissionError(DepcovError):
    """A node's aggregated view could not be emitted."""
