"""Branch dependency graph built from one branch listing."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from . import BranchDescriptor
from ..typing import CycleDetected

logger = logging.getLogger(__name__)


@dataclass
class BranchNode:
    """A descriptor plus the local branches that track it."""
    descriptor: BranchDescriptor
    downstream: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def upstream(self) -> Optional[str]:
        return self.descriptor.upstream

    @property
    def is_current(self) -> bool:
        return self.descriptor.is_current

    def has_upstream(self) -> bool:
        return self.descriptor.upstream is not None


class BranchGraph:
    """Mapping of branch name to node.

    Built fresh for each command and thrown away afterwards. Upstreams
    that are not local branches (remote refs, deleted branches) leave
    their node as a root.
    """

    def __init__(self, nodes: Dict[str, BranchNode]):
        self.nodes = nodes

    def __contains__(self, name: object) -> bool:
        return name in self.nodes

    def __getitem__(self, name: str) -> BranchNode:
        return self.nodes[name]

    def __iter__(self) -> Iterator[BranchNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def is_root(self, name: str) -> bool:
        node = self.nodes[name]
        return not node.has_upstream() or node.upstream not in self.nodes

    def roots(self) -> List[BranchNode]:
        """Root nodes sorted by name."""
        return sorted((n for n in self.nodes.values() if self.is_root(n.name)), key=lambda n: n.name)

    def upstream_chain(self, name: str) -> List[str]:
        """Names from `name` up to its root, following local upstreams.

        Raises:
            CycleDetected: A name repeats while climbing.
        """
        chain = [name]
        node = self.nodes.get(name)
        while node is not None and node.upstream is not None and node.upstream in self.nodes:
            upstream = node.upstream
            if upstream in chain:
                raise CycleDetected(chain + [upstream])
            chain.append(upstream)
            node = self.nodes[upstream]
        return chain

    def depth_of(self, name: str) -> int:
        """Number of local upstream hops from `name` to its root.

        0 for roots and for names not in the graph.
        """
        return len(self.upstream_chain(name)) - 1

    def check_acyclic(self) -> None:
        """Raise CycleDetected if any upstream chain loops."""
        for name in self.nodes:
            self.upstream_chain(name)


def build_graph(descriptors: Sequence[BranchDescriptor]) -> BranchGraph:
    """Link descriptors into a graph.

    First pass makes one node per descriptor, second pass records each
    branch as downstream of its upstream when that upstream is local.
    Downstream lists keep listing order.
    """
    nodes: Dict[str, BranchNode] = {}
    for desc in descriptors:
        if desc.name in nodes:
            logger.warning(f"Branch {desc.name} listed twice, keeping the last entry")
        nodes[desc.name] = BranchNode(descriptor=desc)

    for node in nodes.values():
        upstream = node.upstream
        if upstream is None or upstream not in nodes:
            continue
        downstream = nodes[upstream].downstream
        if node.name not in downstream:
            downstream.append(node.name)

    return BranchGraph(nodes)
