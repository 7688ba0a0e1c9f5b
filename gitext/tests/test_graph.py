"""Unit tests for building the branch graph and measuring depth."""

import itertools
from typing import List, Optional

import pytest

from gitext.branches import BranchDescriptor, parse_branch_listing
from gitext.branches.graph import build_graph
from gitext.typing import CycleDetected

EXAMPLE_LISTING = [
    "* feat-b  abc123 [feat-a: ahead 2] add widget",
    "  feat-a  def456 [main] base work",
    "  main    ghi789 init",
]


def branch(name: str, upstream: Optional[str] = None) -> BranchDescriptor:
    return BranchDescriptor(name=name, commit_hash=f"{name}-sha", upstream=upstream, message=name)


class TestBuildGraph:
    """Tests for build_graph."""

    def test_example_listing(self) -> None:
        graph = build_graph(parse_branch_listing("\n".join(EXAMPLE_LISTING)))
        assert [n.name for n in graph.roots()] == ["main"]
        assert graph["main"].downstream == ["feat-a"]
        assert graph["feat-a"].downstream == ["feat-b"]
        assert graph["feat-b"].downstream == []
        assert graph.depth_of("feat-b") == 2
        assert graph["feat-b"].is_current

    def test_keys_match_descriptor_names(self) -> None:
        graph = build_graph(parse_branch_listing("\n".join(EXAMPLE_LISTING)))
        for name, node in graph.nodes.items():
            assert name == node.name

    def test_upstream_listed_after_child(self) -> None:
        """A branch may name an upstream before that upstream is parsed."""
        graph = build_graph([branch("child", "parent"), branch("parent")])
        assert graph["parent"].downstream == ["child"]
        assert not graph.is_root("child")

    def test_remote_and_deleted_upstreams_are_roots(self) -> None:
        graph = build_graph([
            branch("main", "origin/main"),
            branch("orphan", "deleted-branch"),
            branch("solo"),
        ])
        assert [n.name for n in graph.roots()] == ["main", "orphan", "solo"]
        assert graph["orphan"].has_upstream()
        assert "deleted-branch" not in graph

    def test_roots_sorted_by_name(self) -> None:
        graph = build_graph([branch("zeta"), branch("alpha"), branch("mu")])
        assert [n.name for n in graph.roots()] == ["alpha", "mu", "zeta"]

    def test_downstream_keeps_listing_order(self) -> None:
        graph = build_graph([branch("main"), branch("b", "main"), branch("a", "main"), branch("c", "main")])
        assert graph["main"].downstream == ["b", "a", "c"]

    def test_downstream_is_inverse_of_upstream(self) -> None:
        descs = [branch("main"), branch("a", "main"), branch("b", "a"), branch("c", "a"), branch("d", "origin/x")]
        graph = build_graph(descs)
        edges = {(child, node.name) for node in graph for child in node.downstream}
        expected = {(d.name, d.upstream) for d in descs if d.upstream in graph}
        assert edges == expected

    def test_order_independent_sets(self) -> None:
        descs = [branch("main"), branch("a", "main"), branch("b", "main"), branch("c", "a"), branch("r", "origin/r")]
        reference = build_graph(descs)
        for perm in itertools.permutations(descs):
            graph = build_graph(list(perm))
            assert {n.name for n in graph.roots()} == {n.name for n in reference.roots()}
            for node in graph:
                assert set(node.downstream) == set(reference[node.name].downstream)

    def test_empty_listing(self) -> None:
        graph = build_graph([])
        assert len(graph) == 0
        assert graph.roots() == []


class TestDepthOf:
    """Tests for BranchGraph.depth_of and cycle handling."""

    def test_roots_have_depth_zero(self) -> None:
        graph = build_graph([branch("main"), branch("remote-based", "origin/main"), branch("orphan", "gone")])
        for root in graph.roots():
            assert graph.depth_of(root.name) == 0

    @pytest.mark.parametrize("length", [1, 2, 5, 50])
    def test_depth_equals_chain_length(self, length: int) -> None:
        names: List[str] = [f"b{i}" for i in range(length + 1)]
        descs = [branch(names[0], "origin/main")]
        descs += [branch(names[i], names[i - 1]) for i in range(1, length + 1)]
        graph = build_graph(descs)
        assert graph.depth_of(names[-1]) == length
        assert graph.upstream_chain(names[-1]) == list(reversed(names))

    def test_unknown_name_has_depth_zero(self) -> None:
        assert build_graph([branch("main")]).depth_of("nope") == 0

    def test_cycle_detected(self) -> None:
        graph = build_graph([branch("a", "b"), branch("b", "c"), branch("c", "a"), branch("main")])
        assert [n.name for n in graph.roots()] == ["main"]
        with pytest.raises(CycleDetected) as exc_info:
            graph.depth_of("a")
        assert exc_info.value.chain == ["a", "b", "c", "a"]

    def test_check_acyclic(self) -> None:
        build_graph([branch("main"), branch("a", "main")]).check_acyclic()
        with pytest.raises(CycleDetected):
            build_graph([branch("x", "x")]).check_acyclic()
