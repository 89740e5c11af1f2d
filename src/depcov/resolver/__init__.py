"""Package-to-dependency resolution."""

from depcov.resolver.archives import ArchiveIndex, default_local_repo
from depcov.resolver.packages import PackageResolver, scan_project_packages

__all__ = [
    "ArchiveIndex",
    "PackageResolver",
    "default_local_repo",
    "scan_project_packages",
]
