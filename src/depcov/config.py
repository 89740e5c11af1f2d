"""Configuration parsing from ``.depcov.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from depcov.resolver.archives import default_local_repo

logger = logging.getLogger(__name__)

CONFIG_FILE = ".depcov.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

VALID_REPORT_FORMATS = ("json", "xml", "terminal")
VALID_COVERAGE_FORMATS = ("auto", "html", "xml")


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    return value if isinstance(value, dict) else {}


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass
class ProjectConfig:
    """Project-level configuration."""

    root: str
    """Project root directory."""

    group_id: str = ""
    """Maven groupId of the project (used as a label in reports)."""

    classes_dir: str = "target/classes"
    """Compiled project classes, used to recognise project packages."""


@dataclass
class ManifestConfig:
    """Resolved dependency manifest settings."""

    path: str = "target/depcov/lockfile.json"
    """Path to the ``maven-lockfile`` JSON manifest."""

    skip_test_dependencies: bool = True
    """Prune test-scope dependencies from the graph."""


@dataclass
class CoverageReportConfig:
    """Raw coverage report settings."""

    report: str = "target/site/jacoco"
    """JaCoCo HTML report directory or ``jacoco.xml`` file."""

    format: str = "auto"
    """Report format: auto, html or xml."""


@dataclass
class RepositoryConfig:
    """Dependency archive location."""

    local: str = field(default_factory=lambda: str(default_local_repo()))
    """Local Maven repository holding the dependency jars."""


@dataclass
class ReportConfig:
    """Output configuration."""

    output_dir: str = "target/depcov-report"
    """Directory for JSON/XML report output."""

    formats: list[str] = field(default_factory=lambda: ["terminal"])
    """Output formats: any of json, xml, terminal."""

    relative_to_parent: bool = False
    """Draw transitive views against their parent's aggregate."""


@dataclass
class DepcovConfig:
    """Complete depcov configuration from ``.depcov.yml``."""

    project: ProjectConfig
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    coverage: CoverageReportConfig = field(default_factory=CoverageReportConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for extension/debugging."""

    def resolve_path(self, value: str) -> Path:
        """Resolve *value* against the project root (absolute paths kept)."""
        path = Path(value).expanduser()
        return path if path.is_absolute() else Path(self.project.root) / path


def load_config(root: str | Path) -> DepcovConfig:
    """Load and parse ``.depcov.yml`` under *root*.

    Falls back to defaults and environment variables when the file is
    missing or incomplete.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)

    project_raw = _section(raw, "project")
    project = ProjectConfig(
        root=str(project_raw.get("root", root_path)),
        group_id=str(project_raw.get("group_id", "")),
        classes_dir=str(project_raw.get("classes_dir", "target/classes")),
    )

    manifest_raw = _section(raw, "manifest")
    manifest = ManifestConfig(
        path=str(manifest_raw.get("path", ManifestConfig.path)),
        skip_test_dependencies=_as_bool(manifest_raw.get("skip_test_dependencies", True)),
    )

    coverage_raw = _section(raw, "coverage")
    coverage = CoverageReportConfig(
        report=str(coverage_raw.get("report", CoverageReportConfig.report)),
        format=str(coverage_raw.get("format", "auto")).lower(),
    )

    repository_raw = _section(raw, "repository")
    repository = RepositoryConfig(
        local=str(repository_raw.get("local", default_local_repo())),
    )

    report_raw = _section(raw, "report")
    formats_raw = report_raw.get("formats", ["terminal"])
    if isinstance(formats_raw, str):
        formats_raw = [formats_raw]
    report = ReportConfig(
        output_dir=str(report_raw.get("output_dir", ReportConfig.output_dir)),
        formats=[str(f).lower() for f in formats_raw] if isinstance(formats_raw, list) else [],
        relative_to_parent=_as_bool(report_raw.get("relative_to_parent", False)),
    )

    return DepcovConfig(
        project=project,
        manifest=manifest,
        coverage=coverage,
        repository=repository,
        report=report,
        raw=raw,
    )


def validate_config(config: DepcovConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.project.root:
        errors.append("project.root is required")

    if not config.manifest.path:
        errors.append("manifest.path is required")

    if config.coverage.format not in VALID_COVERAGE_FORMATS:
        errors.append(
            f"coverage.format must be one of: {', '.join(VALID_COVERAGE_FORMATS)} "
            f"(got: {config.coverage.format})"
        )

    if not config.report.formats:
        errors.append("report.formats must list at least one format")
    errors.extend(
        f"report.formats entries must be one of: {', '.join(VALID_REPORT_FORMATS)} (got: {fmt})"
        for fmt in config.report.formats
        if fmt not in VALID_REPORT_FORMATS
    )

    if not Path(config.repository.local).expanduser().is_dir():
        errors.append(f"repository.local does not exist: {config.repository.local}")

    return errors
