"""Tests for run-scoped state (context.py)."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import Any

import pytest

from depcov.context import RunContext
from depcov.errors import PackageCollisionError
from depcov.models.attribution import TargetKind
from depcov.models.usage import CoverageUsage, UsageCounter

_MANIFEST: dict[str, Any] = {
    "dependencies": [
        {
            "id": "com.google.guava:guava:32.1.2-jre",
            "scope": "compile",
            "children": [
                {"id": "com.google.guava:failureaccess:1.0.1", "scope": "compile", "children": []}
            ],
        }
    ]
}


def _make_jar(repo: Path, rel: str, entries: list[str]) -> None:
    jar = repo / rel
    jar.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(jar, "w") as archive:
        for name in entries:
            archive.writestr(name, b"")


@pytest.fixture
def local_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repository"
    _make_jar(
        repo,
        "com/google/guava/guava/32.1.2-jre/guava-32.1.2-jre.jar",
        ["com/google/common/base/Strings.class"],
    )
    _make_jar(
        repo,
        "com/google/guava/failureaccess/1.0.1/failureaccess-1.0.1.jar",
        ["com/google/common/util/concurrent/internal/InternalFutures.class"],
    )
    return repo


def _usage(missed: int, total: int) -> CoverageUsage:
    return CoverageUsage(instructions=UsageCounter(missed, total))


class TestRunContext:
    def test_load_manifest_from_dict(self, local_repo: Path) -> None:
        context = RunContext(local_repo=local_repo)
        graph = context.load_manifest(_MANIFEST)
        assert len(graph) == 2

    def test_load_manifest_from_file(self, local_repo: Path, tmp_path: Path) -> None:
        path = tmp_path / "lockfile.json"
        path.write_text(json.dumps(_MANIFEST), encoding="utf-8")
        context = RunContext(local_repo=local_repo)
        assert len(context.load_manifest(path)) == 2

    def test_attribute_routes_usage(self, local_repo: Path) -> None:
        context = RunContext(local_repo=local_repo, project_packages={"com.acme": {"App"}})
        context.load_manifest(_MANIFEST)

        guava = context.attribute("com.google.common.base", _usage(1, 10))
        internal = context.attribute("com.google.common.util.concurrent.internal", _usage(2, 4))
        project = context.attribute("com.acme", _usage(0, 5))
        unknown = context.attribute("org.junit", _usage(3, 3))

        assert guava.label == "com.google.guava:guava:32.1.2-jre"
        assert internal.label == "com.google.guava:failureaccess:1.0.1"
        assert project.kind is TargetKind.PROJECT
        assert unknown.kind is TargetKind.UNRESOLVED
        assert context.aggregator.project_usage == _usage(0, 5)
        assert set(context.attribution) == {
            "com.google.common.base",
            "com.google.common.util.concurrent.internal",
            "com.acme",
            "org.junit",
        }

    def test_collision_propagates(self, local_repo: Path) -> None:
        context = RunContext(
            local_repo=local_repo, project_packages={"com.google.common.base": {"Mine"}}
        )
        context.load_manifest(_MANIFEST)
        with pytest.raises(PackageCollisionError):
            context.attribute("com.google.common.base", _usage(1, 1))

    def test_second_run_starts_clean(self, local_repo: Path) -> None:
        context = RunContext(local_repo=local_repo)
        context.load_manifest(_MANIFEST)
        context.attribute("com.google.common.base", _usage(1, 10))
        context.aggregator.aggregate_all()

        # Reloading resets the graph, caches and the aggregation phase.
        context.load_manifest(_MANIFEST)
        assert context.attribution == {}
        context.attribute("com.google.common.base", _usage(2, 20))
        root = context.graph.roots[0]
        assert context.aggregator.aggregate(root) == _usage(2, 20)

    def test_reload_after_empty_graph_starts_clean(self, local_repo: Path) -> None:
        test_only = {"dependencies": [{"id": "org.junit:junit:4.13", "scope": "test"}]}
        context = RunContext(local_repo=local_repo, project_packages={"com.acme": {"App"}})
        assert len(context.load_manifest(test_only)) == 0
        context.attribute("com.acme", _usage(1, 10))
        context.aggregator.aggregate_all()
        context.aggregator.grand_total()

        assert len(context.load_manifest({"dependencies": []})) == 0
        assert context.attribution == {}
        assert context.aggregator.project_usage == CoverageUsage()

        context.attribute("com.acme", _usage(2, 20))
        assert context.aggregator.project_usage == _usage(2, 20)

    def test_context_manager_resets_on_exit(self, local_repo: Path) -> None:
        with RunContext(local_repo=local_repo) as context:
            context.load_manifest(_MANIFEST)
            context.attribute("com.google.common.base", _usage(1, 10))
        assert len(context.graph) == 0
        assert context.attribution == {}

    def test_contexts_are_independent(self, local_repo: Path) -> None:
        first = RunContext(local_repo=local_repo)
        second = RunContext(local_repo=local_repo)
        first.load_manifest(_MANIFEST)
        first.attribute("com.google.common.base", _usage(1, 10))
        assert len(second.graph) == 0
        assert second.attribution == {}
