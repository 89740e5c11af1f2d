"""Dependency archive lookup in a local Maven repository."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path

from depcov.errors import ArchiveError
from depcov.models.dependency import DependencyCoordinate

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_REPO = Path.home() / ".m2" / "repository"


def default_local_repo() -> Path:
    """Local repository from ``DEPCOV_LOCAL_REPO``, else ``~/.m2/repository``."""
    env = os.environ.get("DEPCOV_LOCAL_REPO", "").strip()
    return Path(env).expanduser() if env else DEFAULT_LOCAL_REPO


class ArchiveIndex:
    """Lists the entries of dependency jars, caching each listing.

    The cache belongs to one report-generation run; call :meth:`clear`
    before reusing an index for another run.
    """

    def __init__(self, local_repo: str | Path | None = None) -> None:
        self.local_repo = Path(local_repo) if local_repo is not None else default_local_repo()
        self._entries: dict[DependencyCoordinate, tuple[str, ...] | None] = {}

    def archive_path(self, coordinate: DependencyCoordinate) -> Path:
        """Location of the jar for *coordinate* inside the local repository."""
        return (
            self.local_repo.joinpath(*coordinate.group_id.split("."))
            / coordinate.artifact_id
            / coordinate.version
            / f"{coordinate.artifact_id}-{coordinate.version}.jar"
        )

    def entries(self, coordinate: DependencyCoordinate) -> tuple[str, ...] | None:
        """Return the archive's entry names, or ``None`` if the jar is absent.

        Raises:
            ArchiveError: If the jar exists but cannot be read.
        """
        if coordinate in self._entries:
            return self._entries[coordinate]

        jar = self.archive_path(coordinate)
        listing: tuple[str, ...] | None
        if not jar.is_file():
            logger.debug("No archive for %s at %s", coordinate, jar)
            listing = None
        else:
            try:
                with zipfile.ZipFile(jar) as archive:
                    listing = tuple(archive.namelist())
            except (OSError, zipfile.BadZipFile) as e:
                raise ArchiveError(f"Cannot read archive {jar} of {coordinate}: {e}") from e
        self._entries[coordinate] = listing
        return listing

    def contains_package(self, coordinate: DependencyCoordinate, package: str) -> bool:
        """True if the archive holds a compiled class under *package*."""
        listing = self.entries(coordinate)
        if not listing:
            return False
        prefix = package.replace(".", "/") + "/"
        return any(name.startswith(prefix) and name.endswith(".class") for name in listing)

    def clear(self) -> None:
        self._entries.clear()
