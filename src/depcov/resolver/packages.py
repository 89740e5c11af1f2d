"""Map code packages to the dependency (or project) that owns them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from depcov.errors import PackageCollisionError
from depcov.models.attribution import (
    PROJECT_TARGET,
    UNRESOLVED_TARGET,
    PackageAttribution,
    ResolvedTarget,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from depcov.models.dependency import DependencyNode
    from depcov.resolver.archives import ArchiveIndex

logger = logging.getLogger(__name__)


def scan_project_packages(classes_dir: str | Path) -> dict[str, set[str]]:
    """Collect ``package -> {class names}`` from a compiled-classes directory.

    Classes in the default package are listed under ``""``.  A missing
    directory yields an empty mapping.
    """
    root = Path(classes_dir)
    packages: dict[str, set[str]] = {}
    if not root.is_dir():
        logger.warning("Project classes directory %s does not exist", root)
        return packages

    for class_file in sorted(root.rglob("*.class")):
        rel = class_file.relative_to(root)
        package = ".".join(rel.parent.parts)
        class_name = rel.stem.split("$", maxsplit=1)[0]
        packages.setdefault(package, set()).add(class_name)
    return packages


class PackageResolver:
    """Resolve package names by scanning dependency archives.

    Candidates are scanned in the order given (manifest order) and the first
    archive containing a class of the package wins.  Two archives shading the
    same package are not detected.
    """

    def __init__(self, archives: ArchiveIndex) -> None:
        self.archives = archives
        self._cache: PackageAttribution = {}

    @property
    def attribution(self) -> PackageAttribution:
        """Every package resolved so far, with its target."""
        return dict(self._cache)

    def find_archive(
        self, package: str, candidates: Iterable[DependencyNode]
    ) -> DependencyNode | None:
        """Return the first candidate whose archive contains *package*."""
        for node in candidates:
            if self.archives.contains_package(node.coordinate, package):
                return node
        return None

    def resolve(
        self,
        package: str,
        candidates: Iterable[DependencyNode],
        project_packages: Collection[str],
    ) -> ResolvedTarget:
        """Resolve *package* to a dependency node, the project, or nothing.

        Raises:
            PackageCollisionError: If both the project and a dependency
                archive contain the package.
            ArchiveError: If a candidate archive cannot be read.
        """
        cached = self._cache.get(package)
        if cached is not None:
            return cached

        matched = self.find_archive(package, candidates)
        in_project = package in project_packages

        if matched is not None and in_project:
            raise PackageCollisionError(package, matched.id)
        if matched is not None:
            logger.debug("Package %s resolved to %s", package, matched.id)
            target = ResolvedTarget.dependency(matched)
        elif in_project:
            target = PROJECT_TARGET
        else:
            # Typically a runtime dependency of a test-scope dependency that
            # the coverage tool picked up.
            logger.debug("Package %s does not match any dependency; dropping it", package)
            target = UNRESOLVED_TARGET

        self._cache[package] = target
        return target

    def clear(self) -> None:
        self._cache.clear()
