"""Data models for depcov."""

from depcov.models.attribution import (
    PROJECT_TARGET,
    UNRESOLVED_TARGET,
    PackageAttribution,
    ResolvedTarget,
    TargetKind,
)
from depcov.models.dependency import DependencyCoordinate, DependencyNode
from depcov.models.usage import METRICS, CoverageUsage, UsageCounter, percentage

__all__ = [
    "METRICS",
    "PROJECT_TARGET",
    "UNRESOLVED_TARGET",
    "CoverageUsage",
    "DependencyCoordinate",
    "DependencyNode",
    "PackageAttribution",
    "ResolvedTarget",
    "TargetKind",
    "UsageCounter",
    "percentage",
]
