"""Integration tests: lockfile + local repository + JaCoCo HTML → dependency report.

Exercises the full pipeline on a real on-disk Maven layout:
1. load ``.depcov.yml``
2. scan project classes and index dependency jars
3. attribute the HTML report's packages
4. aggregate the diamond-shaped graph and emit every output path
5. render JSON and XML through the CLI
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner
from defusedxml import ElementTree

from depcov.aggregation import MemorySink
from depcov.cli import cli
from depcov.config import load_config
from depcov.models.attribution import UNRESOLVED_TARGET
from depcov.orchestrator import run_from_config

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.integration

DATABIND = "com.fasterxml.jackson.core:jackson-databind:2.15.2"
CORE = "com.fasterxml.jackson.core:jackson-core:2.15.2"
ANNOTATIONS = "com.fasterxml.jackson.core:jackson-annotations:2.15.2"
JSR310 = "com.fasterxml.jackson.datatype:jackson-datatype-jsr310:2.15.2"
JUNIT = "org.junit.jupiter:junit-jupiter-api:5.10.0"

DATABIND_PATH = "dependencies/com.fasterxml.jackson.core.jackson.databind-v2.15.2"
JSR310_PATH = "dependencies/com.fasterxml.jackson.datatype.jackson.datatype.jsr310-v2.15.2"


# ── Pipeline ─────────────────────────────────────────────────────


class TestPipeline:
    def test_attribution(self, maven_project: Path) -> None:
        result = run_from_config(load_config(maven_project))
        labels = {name: target.label for name, target in result.attribution.items()}
        assert labels == {
            "com.fasterxml.jackson.databind": DATABIND,
            "com.fasterxml.jackson.core": CORE,
            "com.fasterxml.jackson.annotation": ANNOTATIONS,
            "com.fasterxml.jackson.datatype.jsr310": JSR310,
            "com.acme.app": "project",
            "org.junit.jupiter.api": "unresolved",
        }
        assert result.attribution["org.junit.jupiter.api"] == UNRESOLVED_TARGET

    def test_shared_dependency_has_one_summary(self, maven_project: Path) -> None:
        result = run_from_config(load_config(maven_project))
        assert sorted(s.dependency for s in result.dependencies) == sorted(
            [DATABIND, CORE, ANNOTATIONS, JSR310]
        )
        databind = result.dependency(DATABIND)
        assert databind is not None
        assert databind.is_root is True
        assert sorted(databind.output_paths) == sorted(
            [DATABIND_PATH, f"{JSR310_PATH}/transitive/{DATABIND_PATH.split('/')[1]}"]
        )

    def test_aggregates(self, maven_project: Path) -> None:
        result = run_from_config(load_config(maven_project))
        databind = result.dependency(DATABIND)
        jsr310 = result.dependency(JSR310)
        assert databind is not None
        assert jsr310 is not None

        assert databind.own_usage.instructions.total == 1000
        assert databind.aggregate_usage.instructions.total == 1550
        assert databind.aggregate_usage.instructions.missed == 500
        assert jsr310.aggregate_usage.instructions.total == 1650
        assert jsr310.aggregate_usage.instructions.covered == 1100

    def test_grand_total_counts_each_dependency_once(self, maven_project: Path) -> None:
        result = run_from_config(load_config(maven_project))
        assert result.grand_total.instructions.total == 1650
        assert result.grand_total.instructions.missed == 550
        assert result.project_usage.instructions.total == 200
        assert result.unresolved_usage.instructions.total == 5
        assert result.overall_total.instructions.total == 1850

    def test_report_total_matches_attribution(
        self, maven_project: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        result = run_from_config(load_config(maven_project))
        assert result.report_total is not None
        assert result.report_total.instructions.total == 1855
        assert "differs from the report total" not in caplog.text

    def test_every_output_path_emitted(self, maven_project: Path) -> None:
        sink = MemorySink()
        run_from_config(load_config(maven_project), sink=sink)
        assert len(sink.views) == 7
        assert sink.writes == 7
        nested = f"{JSR310_PATH}/transitive/{DATABIND_PATH.split('/')[1]}"
        assert sink.views[nested].aggregate_usage == sink.views[DATABIND_PATH].aggregate_usage

    def test_test_dependencies_included(self, maven_project: Path) -> None:
        config = load_config(maven_project)
        config.manifest.skip_test_dependencies = False
        result = run_from_config(config)
        assert result.attribution["org.junit.jupiter.api"].label == JUNIT
        assert result.unresolved_usage.instructions.total == 0

    def test_relative_to_parent(self, maven_project: Path) -> None:
        config = load_config(maven_project)
        config.report.relative_to_parent = True
        result = run_from_config(config)
        annotations = result.views[f"{DATABIND_PATH}/transitive/"
                                   "com.fasterxml.jackson.core.jackson.annotations-v2.15.2"]
        assert annotations.denominator.instructions.total == 1550
        assert result.views[DATABIND_PATH].denominator.instructions.total == 1550


# ── CLI ──────────────────────────────────────────────────────────


class TestCliReport:
    def test_writes_configured_formats(self, maven_project: Path) -> None:
        result = CliRunner().invoke(cli, ["report", "--path", str(maven_project)])
        assert result.exit_code == 0, result.output

        out = maven_project / "target" / "depcov-report"
        data = json.loads((out / "depcov.json").read_text(encoding="utf-8"))
        assert data["project"] == "com.acme"
        assert data["summary"]["dependencies"]["instructions"]["total"] == 1650
        assert data["summary"]["report_total"]["instructions"]["total"] == 1855
        assert len(data["views"]) == 7

        root = ElementTree.parse(out / "depcov.xml").getroot()
        groups = {g.get("name"): g for g in root.findall("group[@kind='dependency']")}
        assert set(groups) == {DATABIND, CORE, ANNOTATIONS, JSR310}
        aggregate = groups[JSR310].find("aggregate")
        assert aggregate is not None
        instructions = aggregate.find("counter[@type='INSTRUCTION']")
        assert instructions is not None
        assert instructions.get("covered") == "1100"
        assert instructions.get("missed") == "550"
