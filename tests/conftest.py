"""Shared fixtures for reporter tests."""

from __future__ import annotations

import pytest

from depcov.aggregation.emission import EmittedView
from depcov.models.attribution import PROJECT_TARGET, UNRESOLVED_TARGET, ResolvedTarget
from depcov.models.dependency import DependencyCoordinate, DependencyNode
from depcov.models.usage import CoverageUsage, UsageCounter
from depcov.orchestrator import DependencySummary, ReportResult

ROOT_ID = "com.google.guava:guava:32.1.2-jre"
CHILD_ID = "com.google.guava:failureaccess:1.0.1"
ROOT_PATH = "dependencies/com.google.guava.guava-v32.1.2-jre"
CHILD_PATH = f"{ROOT_PATH}/transitive/com.google.guava.failureaccess-v1.0.1"


def usage(missed: int, total: int, branches: tuple[int, int] = (0, 0)) -> CoverageUsage:
    return CoverageUsage(
        instructions=UsageCounter(missed, total),
        branches=UsageCounter(*branches),
    )


@pytest.fixture
def sample_result() -> ReportResult:
    """Guava with one transitive child, a project package and an unresolved one."""
    root_own = usage(1200, 1500, (10, 40))
    child_own = usage(20, 100)
    root_agg = root_own + child_own
    base = {"com.google.common.base": root_own}
    internal = {"com.google.common.util.concurrent.internal": child_own}
    node = DependencyNode(coordinate=DependencyCoordinate.parse(ROOT_ID), is_root=True)

    return ReportResult(
        project="com.acme",
        dependencies=[
            DependencySummary(
                dependency=ROOT_ID,
                scope="compile",
                is_root=True,
                own_usage=root_own,
                aggregate_usage=root_agg,
                children=[CHILD_ID],
                output_paths=[ROOT_PATH],
            ),
            DependencySummary(
                dependency=CHILD_ID,
                scope="compile",
                is_root=False,
                own_usage=child_own,
                aggregate_usage=child_own,
                output_paths=[CHILD_PATH],
            ),
        ],
        views={
            ROOT_PATH: EmittedView(
                output_path=ROOT_PATH,
                dependency=ROOT_ID,
                own_usage=root_own,
                aggregate_usage=root_agg,
                denominator=root_agg,
                packages=base,
                transitive_usage=child_own,
            ),
            CHILD_PATH: EmittedView(
                output_path=CHILD_PATH,
                dependency=CHILD_ID,
                own_usage=child_own,
                aggregate_usage=child_own,
                denominator=child_own,
                packages=internal,
            ),
        },
        grand_total=root_agg,
        project_usage=usage(10, 100, (1, 4)),
        project_packages={"com.acme": usage(10, 100, (1, 4))},
        unresolved_usage=usage(1, 1),
        attribution={
            "com.google.common.base": ResolvedTarget.dependency(node),
            "com.acme": PROJECT_TARGET,
            "org.junit": UNRESOLVED_TARGET,
        },
        report_total=usage(1231, 1701, (11, 44)),
    )
