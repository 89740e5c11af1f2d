"""Shared fixtures for integration tests."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import Any

import pytest
import yaml

# ── Marker registration ──────────────────────────────────────────


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``integration`` marker."""
    config.addinivalue_line("markers", "integration: integration tests")


# ── File creation helpers ────────────────────────────────────────


def write_file(root: Path, rel: str, content: str) -> None:
    """Write *content* to a file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def write_json(root: Path, rel: str, data: dict[str, Any]) -> None:
    """Write a JSON file under *root*."""
    write_file(root, rel, json.dumps(data, indent=2))


def make_jar(repo: Path, coordinate: str, packages: list[str]) -> None:
    """Create ``<repo>/<group path>/<artifact>/<version>/<artifact>-<version>.jar``."""
    group_id, artifact_id, version = coordinate.split(":")
    jar = repo.joinpath(*group_id.split(".")) / artifact_id / version / (
        f"{artifact_id}-{version}.jar"
    )
    jar.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(jar, "w") as archive:
        archive.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        for package in packages:
            archive.writestr(f"{package.replace('.', '/')}/Impl.class", b"\xca\xfe\xba\xbe")


def lock_entry(coordinate: str, scope: str = "compile", children: list[Any] | None = None) -> dict:
    """A ``maven-lockfile`` dependency entry."""
    group_id, artifact_id, version = coordinate.split(":")
    return {
        "groupId": group_id,
        "artifactId": artifact_id,
        "selectedVersion": version,
        "scope": scope,
        "id": coordinate,
        "children": children or [],
    }


def jacoco_row(name: str, missed: int, total: int) -> str:
    """A JaCoCo HTML package row with instruction bars and zero other counters."""
    covered = total - missed
    bar = (
        '<td class="bar">'
        f'<img src="../jacoco-resources/redbar.gif" width="10" height="10" title="{missed:,}" '
        f'alt="{missed:,}"/><img src="../jacoco-resources/greenbar.gif" width="10" height="10" '
        f'title="{covered:,}" alt="{covered:,}"/></td>'
    )
    zeros = '<td class="ctr1">0</td>' * 8
    return (
        f'<tr><td><a href="{name}/index.html" class="el_package">{name}</a></td>{bar}'
        '<td class="ctr2">-</td><td class="bar"></td><td class="ctr2">n/a</td>'
        f"{zeros}</tr>"
    )


def jacoco_page(rows: list[str], missed: int, total: int) -> str:
    """A JaCoCo HTML overview page with a footer total."""
    footer = (
        f'<tr><td>Total</td><td class="bar">{missed:,} of {total:,}</td><td class="ctr2">-</td>'
        '<td class="bar">0 of 0</td><td class="ctr2">n/a</td>'
        + '<td class="ctr1">0</td>' * 8
        + "</tr>"
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?><!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 '
        'Strict//EN" "http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd"><html><head>'
        '<meta http-equiv="Content-Type" content="text/html;charset=UTF-8"/>'
        '<link rel="stylesheet" href="jacoco-resources/report.css" type="text/css"/>'
        "<title>demo</title></head><body><h1>demo</h1>"
        '<table class="coverage" cellspacing="0" id="coveragetable"><thead><tr>'
        '<td class="sortable" id="a">Element</td><td class="down sortable bar" id="b">'
        "Missed Instructions</td><td>Cov.</td></tr></thead>"
        f"<tfoot>{footer}</tfoot><tbody>{''.join(rows)}</tbody></table>"
        '<div class="footer"><span class="right">Created with JaCoCo</span></div>'
        "</body></html>"
    )


# ── Project scaffolding fixtures ─────────────────────────────────

DATABIND = "com.fasterxml.jackson.core:jackson-databind:2.15.2"
CORE = "com.fasterxml.jackson.core:jackson-core:2.15.2"
ANNOTATIONS = "com.fasterxml.jackson.core:jackson-annotations:2.15.2"
JSR310 = "com.fasterxml.jackson.datatype:jackson-datatype-jsr310:2.15.2"
JUNIT = "org.junit.jupiter:junit-jupiter-api:5.10.0"

# package -> (missed, total) instructions
PACKAGE_USAGE: dict[str, tuple[int, int]] = {
    "com.fasterxml.jackson.databind": (400, 1000),
    "com.fasterxml.jackson.core": (100, 500),
    "com.fasterxml.jackson.annotation": (0, 50),
    "com.fasterxml.jackson.datatype.jsr310": (50, 100),
    "com.acme.app": (10, 200),
    "org.junit.jupiter.api": (5, 5),
}


@pytest.fixture()
def maven_project(tmp_path: Path) -> Path:
    """A Maven project with a resolved jackson graph, jars and a JaCoCo HTML report.

    ``jackson-databind`` is a direct dependency and also reached through
    ``jackson-datatype-jsr310``; JUnit is test-scoped.
    """
    project = tmp_path / "project"
    repo = tmp_path / "m2"

    make_jar(repo, DATABIND, ["com.fasterxml.jackson.databind"])
    make_jar(repo, CORE, ["com.fasterxml.jackson.core"])
    make_jar(repo, ANNOTATIONS, ["com.fasterxml.jackson.annotation"])
    make_jar(repo, JSR310, ["com.fasterxml.jackson.datatype.jsr310"])
    make_jar(repo, JUNIT, ["org.junit.jupiter.api"])

    databind = lock_entry(DATABIND, children=[lock_entry(ANNOTATIONS), lock_entry(CORE)])
    write_json(
        project,
        "target/depcov/lockfile.json",
        {
            "artifactId": "app",
            "groupId": "com.acme",
            "version": "1.0.0",
            "lockFileVersion": 1,
            "dependencies": [
                databind,
                lock_entry(JSR310, children=[databind]),
                lock_entry(JUNIT, scope="test"),
            ],
        },
    )

    write_file(project, "target/classes/com/acme/app/Main.class", "")
    write_file(project, "target/classes/com/acme/app/Main$1.class", "")

    rows = [jacoco_row(name, missed, total) for name, (missed, total) in PACKAGE_USAGE.items()]
    missed_sum = sum(m for m, _ in PACKAGE_USAGE.values())
    total_sum = sum(t for _, t in PACKAGE_USAGE.values())
    write_file(project, "target/site/jacoco/index.html", jacoco_page(rows, missed_sum, total_sum))
    write_file(
        project,
        "target/site/jacoco/com.fasterxml.jackson.databind/index.html",
        jacoco_page([], 400, 1000),
    )

    write_file(
        project,
        ".depcov.yml",
        yaml.dump(
            {
                "project": {"group_id": "com.acme"},
                "repository": {"local": str(repo)},
                "report": {"formats": ["json", "xml"]},
            }
        ),
    )
    return project
