"""Build the dependency DAG from a resolved dependency manifest.

The manifest is the ``lockfile.json`` written by ``maven-lockfile``
(``-Dreduced=true``)::

    {"dependencies": [
        {"id": "g:a:1.0", "groupId": "g", "artifactId": "a",
         "selectedVersion": "1.0", "scope": "compile",
         "children": [{"id": "g:b:2.0", ..., "children": []}]}
    ]}

Nested entries are children of the enclosing entry; a top-level entry may
instead name its parent through ``"parent": "<id>"``.  A dependency that is
reachable through several parents is listed once per parent and resolves to
a single shared node.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from depcov.errors import ManifestError
from depcov.graph.dag import DependencyGraph
from depcov.models.dependency import DependencyCoordinate, DependencyNode

logger = logging.getLogger(__name__)

_PROVIDED_SCOPE = "provided"
_TEST_SCOPE = "test"
_DEFAULT_SCOPE = "compile"


def load_manifest(path: str | Path) -> dict[str, Any]:
    """Read and decode a manifest file.

    Raises:
        ManifestError: If the file is missing, unreadable or not a JSON object.
    """
    manifest_path = Path(path)
    try:
        raw = json.loads(manifest_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Cannot read dependency manifest {manifest_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Dependency manifest {manifest_path} is not valid JSON: {e}") from e
    except RecursionError as e:
        raise ManifestError(f"Dependency manifest {manifest_path} is nested too deeply") from e
    if not isinstance(raw, dict):
        raise ManifestError(f"Dependency manifest {manifest_path} must be a JSON object")
    return raw


def _entry_coordinate(entry: dict[str, Any]) -> DependencyCoordinate:
    dependency_id = entry.get("id")
    if isinstance(dependency_id, str) and dependency_id:
        return DependencyCoordinate.parse(dependency_id)

    group_id = entry.get("groupId")
    artifact_id = entry.get("artifactId")
    version = entry.get("selectedVersion", entry.get("version"))
    if not (group_id and artifact_id and version):
        raise ManifestError(f"Manifest entry has no usable id: {entry!r}")
    return DependencyCoordinate(str(group_id), str(artifact_id), str(version))


class GraphBuilder:
    """Depth-first manifest reader.

    Args:
        skip_test_dependencies: Prune ``test``-scope entries (``provided`` is
            always pruned).
        graph: Arena to populate; a fresh one is created when omitted.
    """

    def __init__(
        self,
        *,
        skip_test_dependencies: bool = True,
        graph: DependencyGraph | None = None,
    ) -> None:
        self.skip_test_dependencies = skip_test_dependencies
        self.graph = graph if graph is not None else DependencyGraph()
        self._visited: set[DependencyCoordinate] = set()

    def build(self, manifest: dict[str, Any]) -> DependencyGraph:
        """Populate the graph from a decoded manifest and return it."""
        entries = manifest.get("dependencies", [])
        if not isinstance(entries, list):
            raise ManifestError("Manifest 'dependencies' must be a list")
        for entry in entries:
            self._parse_entry(entry, parent=None)
        logger.info(
            "Dependency graph built: %d nodes, %d direct",
            len(self.graph),
            len(self.graph.roots),
        )
        return self.graph

    def _is_pruned(self, scope: str) -> bool:
        if scope == _PROVIDED_SCOPE:
            return True
        return self.skip_test_dependencies and scope == _TEST_SCOPE

    def _resolve_parent(
        self, entry: dict[str, Any], coordinate: DependencyCoordinate
    ) -> DependencyNode | None:
        parent_id = entry.get("parent")
        if not parent_id:
            return None
        parent = self.graph.get_by_id(str(parent_id))
        if parent is None:
            raise ManifestError(
                f"Dependency {coordinate} declares parent {parent_id}, "
                "which is not in the manifest"
            )
        return parent

    def _parse_entry(
        self, entry: object, parent: DependencyNode | None
    ) -> DependencyNode | None:
        """Add *entry* and everything nested below it, depth first.

        Entries are visited in manifest order with an explicit stack, so
        deeply nested manifests do not hit the interpreter's recursion limit.
        Returns the node for *entry*, or ``None`` when its scope is pruned.
        """
        top: DependencyNode | None = None
        stack: list[tuple[object, DependencyNode | None, bool]] = [(entry, parent, True)]
        while stack:
            current, current_parent, is_top = stack.pop()
            node, children = self._add_entry(current, current_parent)
            if is_top:
                top = node
            if node is not None:
                stack.extend((child, node, False) for child in reversed(children))
        return top

    def _add_entry(
        self, entry: object, parent: DependencyNode | None
    ) -> tuple[DependencyNode | None, list[Any]]:
        if not isinstance(entry, dict):
            raise ManifestError(f"Manifest entry must be an object, got {type(entry).__name__}")

        coordinate = _entry_coordinate(entry)
        scope = str(entry.get("scope") or _DEFAULT_SCOPE)
        if self._is_pruned(scope):
            logger.debug("Skipping %s-scope dependency %s", scope, coordinate)
            return None, []

        if parent is None:
            parent = self._resolve_parent(entry, coordinate)

        if coordinate in self._visited:
            node = self.graph.get(coordinate)
            if node is None:
                raise ManifestError(f"Dependency {coordinate} visited but not registered")
            logger.debug("Dependency %s shared by another parent", coordinate)
        else:
            self._visited.add(coordinate)
            node = self.graph.add_node(coordinate, scope)

        if parent is None:
            self.graph.mark_root(node)
        else:
            self.graph.link(parent, node)

        children = entry.get("children") or []
        if not isinstance(children, list):
            raise ManifestError(f"Children of {coordinate} must be a list")
        return node, children


def build_graph(
    manifest: dict[str, Any],
    *,
    skip_test_dependencies: bool = True,
    graph: DependencyGraph | None = None,
) -> DependencyGraph:
    """Build a :class:`DependencyGraph` from a decoded manifest."""
    builder = GraphBuilder(skip_test_dependencies=skip_test_dependencies, graph=graph)
    return builder.build(manifest)
