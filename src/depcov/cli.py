"""Command-line interface for depcov."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from depcov import __version__
from depcov.config import CONFIG_FILE, VALID_REPORT_FORMATS, load_config, validate_config
from depcov.errors import DepcovError
from depcov.orchestrator import run_from_config
from depcov.reporters import JSONReporter, XMLReporter, reporter

if TYPE_CHECKING:
    from pathlib import Path

    from depcov.config import DepcovConfig
    from depcov.orchestrator import ReportResult

logger = logging.getLogger(__name__)

console = Console()

JSON_REPORT_FILE = "depcov.json"
XML_REPORT_FILE = "depcov.xml"


def _configure_logging(*, verbose: bool) -> None:
    """Route library logging through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )


def _config_to_dict(config: DepcovConfig) -> dict[str, Any]:
    """Convert DepcovConfig to dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _load_config_or_abort(path: str) -> DepcovConfig:
    try:
        return load_config(path)
    except (OSError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e


def _write_reports(result: ReportResult, formats: list[str], output_dir: Path) -> None:
    if "terminal" in formats:
        reporter.print_dependency_report(result)
    if "json" in formats:
        path = JSONReporter().generate(result, output_dir / JSON_REPORT_FILE)
        reporter.print_success(f"JSON report written to {path}")
    if "xml" in formats:
        path = XMLReporter().generate(result, output_dir / XML_REPORT_FILE)
        reporter.print_success(f"XML report written to {path}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="depcov")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """depcov: coverage of third-party code, attributed per dependency."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose=verbose)


@cli.command()
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option("--manifest", "manifest_path", help="Dependency manifest (lockfile.json).")
@click.option("--coverage", "coverage_report", help="JaCoCo HTML report directory or XML file.")
@click.option("--repo", "local_repo", help="Local Maven repository holding dependency jars.")
@click.option("--classes", "classes_dir", help="Compiled project classes directory.")
@click.option(
    "--format",
    "formats",
    multiple=True,
    type=click.Choice(VALID_REPORT_FORMATS, case_sensitive=False),
    help="Output format (repeatable).",
)
@click.option("--output", "output_dir", help="Directory for JSON/XML reports.")
@click.option(
    "--relative-to-parent",
    is_flag=True,
    help="Draw transitive views against their parent's aggregate.",
)
@click.option(
    "--include-test-deps",
    is_flag=True,
    help="Keep test-scope dependencies in the graph.",
)
def report(
    path: str,
    manifest_path: str | None,
    coverage_report: str | None,
    local_repo: str | None,
    classes_dir: str | None,
    formats: tuple[str, ...],
    output_dir: str | None,
    *,
    relative_to_parent: bool,
    include_test_deps: bool,
) -> None:
    """Attribute a JaCoCo report to the project's dependencies.

    Settings come from `.depcov.yml`; command-line options override them.

    Example:
      depcov report --coverage target/site/jacoco --format json --format terminal
    """
    config = _load_config_or_abort(path)

    if manifest_path:
        config.manifest.path = manifest_path
    if coverage_report:
        config.coverage.report = coverage_report
    if local_repo:
        config.repository.local = local_repo
    if classes_dir:
        config.project.classes_dir = classes_dir
    if formats:
        config.report.formats = [f.lower() for f in formats]
    if output_dir:
        config.report.output_dir = output_dir
    if relative_to_parent:
        config.report.relative_to_parent = True
    if include_test_deps:
        config.manifest.skip_test_dependencies = False

    try:
        result = run_from_config(config)
        _write_reports(
            result, config.report.formats, config.resolve_path(config.report.output_dir)
        )
    except DepcovError as e:
        reporter.print_error(str(e))
        raise click.Abort from e
    except OSError as e:
        reporter.print_error(f"Failed to write report: {e}")
        raise click.Abort from e


@cli.group("config")
def config_group() -> None:
    """Inspect `.depcov.yml` configuration values."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration.

    Example:
      depcov config show
      depcov config show --json-output
    """
    config = _load_config_or_abort(path)
    config_dict = _config_to_dict(config)

    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        reporter.print_header("Configuration:")
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
def config_validate(path: str) -> None:
    """Validate `.depcov.yml`.

    Checks for invalid formats and missing directories.

    Example:
      depcov config validate
    """
    config = _load_config_or_abort(path)
    errors = validate_config(config)

    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    reporter.print_info(
        f"Fix these errors in {CONFIG_FILE} and run 'depcov config validate' again."
    )
    raise click.Abort


if __name__ == "__main__":
    cli()
