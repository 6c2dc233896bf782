"""Integration tests for archmap.orchestrator."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from archmap.errors import InvalidPath, ScanCancelled
from archmap.models import FileNode, FolderNode
from archmap.orchestrator import Orchestrator, scan


def _sample_tree(repo_builder) -> None:
    repo_builder.write(
        {
            "src/index.ts": """
                import { total } from "./lib/math";
                export { total };
            """,
            "src/lib/math.ts": """
                export function total(values: number[]) {
                    let sum = 0;
                    for (const value of values) {
                        if (value > 0) {
                            sum += value;
                        }
                    }
                    return sum;
                }
            """,
            "src/components/Panel.tsx": """
                import { total } from "../lib/math";
                export function Panel() {
                    return <div>{total([1, 2])}</div>;
                }
            """,
            "tests/test_math.py": """
                def test_total():
                    assert True
            """,
        }
    )


def test_scan_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(InvalidPath):
        Orchestrator().scan(tmp_path / "nope")


def test_scan_file_path_raises(tmp_path: Path) -> None:
    target = tmp_path / "a.ts"
    target.write_text("export const a = 1;\n", encoding="utf-8")
    with pytest.raises(InvalidPath):
        Orchestrator().scan(target)


def test_scan_blank_path_raises() -> None:
    with pytest.raises(InvalidPath):
        Orchestrator().scan("  ")


def test_empty_directory_yields_empty_result(tmp_path: Path) -> None:
    result = Orchestrator().scan(tmp_path)
    assert result.nodes == []
    assert result.edges == []
    assert result.stats.total_files == 0
    assert result.stats.average_complexity == 0
    assert result.stats.top_complex_files == []


def test_scan_builds_graph_and_stats(repo_builder) -> None:
    _sample_tree(repo_builder)

    result = repo_builder.scan()

    assert result.root == repo_builder.path()
    files = {node.id: node for node in result.file_nodes}
    assert set(files) == {
        repo_builder.path("src/components/Panel.tsx"),
        repo_builder.path("src/index.ts"),
        repo_builder.path("src/lib/math.ts"),
        repo_builder.path("tests/test_math.py"),
    }
    edges = {(edge.source, edge.target) for edge in result.edges}
    math = repo_builder.path("src/lib/math.ts")
    assert edges == {
        (repo_builder.path("src/index.ts"), math),
        (repo_builder.path("src/components/Panel.tsx"), math),
    }

    stats = result.stats
    assert stats.total_files == len(files)
    assert stats.total_loc == sum(node.analysis.line_count for node in files.values())
    expected_average = sum(node.analysis.complexity for node in files.values()) / len(files)
    assert stats.average_complexity == pytest.approx(expected_average)
    assert sum(stats.layer_breakdown.values()) == stats.total_files
    assert stats.layer_breakdown["Verification"] == 1
    assert stats.layer_breakdown["Presentation"] == 1
    assert stats.top_complex_files[0].node_id == math
    assert stats.top_complex_files[0].name == "math.ts"


def test_every_edge_and_parent_points_at_a_node(repo_builder) -> None:
    _sample_tree(repo_builder)

    result = repo_builder.scan()

    ids = {node.id for node in result.nodes}
    folders = {node.id for node in result.nodes if isinstance(node, FolderNode)}
    for edge in result.edges:
        assert edge.source in ids and edge.target in ids
        assert edge.source != edge.target
    for node in result.nodes:
        if isinstance(node, FileNode):
            assert node.parent_id in folders


def test_scans_are_deterministic(repo_builder) -> None:
    _sample_tree(repo_builder)

    first = repo_builder.scan().to_payload()
    second = Orchestrator(workers=4).scan(repo_builder.path()).to_payload()

    assert first == second


def test_top_n_from_config(repo_builder) -> None:
    repo_builder.write({f"m{index}.ts": f"export const v{index} = {index};\n" for index in range(4)})
    repo_builder.write({".archmap.yml": "scan:\n  top_n: 2\n"})

    assert len(repo_builder.scan().stats.top_complex_files) == 2
    overridden = Orchestrator(top_n=3).scan(repo_builder.path())
    assert len(overridden.stats.top_complex_files) == 3


def test_config_exclusions_apply(repo_builder) -> None:
    repo_builder.write(
        {
            "keep.ts": "export const a = 1;\n",
            "generated/skip.ts": "export const b = 2;\n",
            ".archmap.yml": "exclude_paths:\n  - generated/\n",
        }
    )

    result = repo_builder.scan()

    assert [node.label for node in result.file_nodes] == ["keep.ts"]


def test_payload_shape(repo_builder) -> None:
    _sample_tree(repo_builder)

    payload = scan(repo_builder.path()).to_payload()

    assert set(payload) == {"nodes", "edges", "stats"}
    folder = next(node for node in payload["nodes"] if node["type"] == "folder")
    assert folder["hash"] == "folder"
    assert folder["fileSize"] == 0
    file_node = next(
        node for node in payload["nodes"] if node["id"] == repo_builder.path("src/lib/math.ts")
    )
    assert file_node["type"] == "file"
    assert file_node["label"] == "math.ts"
    assert file_node["parentId"] == repo_builder.path("src/lib")
    assert file_node["data"]["functions"] == ["total"]
    assert file_node["data"]["exportCount"] == 1
    assert file_node["data"]["dependencyCount"] == 0
    assert file_node["data"]["architectureRole"] == "Service/Logic"
    assert set(payload["stats"]) == {
        "totalLoc",
        "totalFiles",
        "averageComplexity",
        "topComplexFiles",
        "layerBreakdown",
    }
    assert set(payload["stats"]["topComplexFiles"][0]) == {"id", "name", "score"}


def test_module_scan_forwards_cancel_event(repo_builder) -> None:
    repo_builder.write({"a.ts": "export const a = 1;\n"})
    event = threading.Event()
    event.set()

    with pytest.raises(ScanCancelled):
        scan(repo_builder.path(), cancel_event=event)
