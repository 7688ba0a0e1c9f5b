"""Tree rows for `show-tree` and their text layout."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence
import click

from ..branches.graph import BranchGraph, BranchNode
from ..config.models import TreeConfig

MISSING_SUFFIX = " [missing]"


class RowKind(str, Enum):
    BRANCH = "branch"
    REMOTE = "remote"  # phantom row for a remote-tracking upstream
    MISSING = "missing"  # phantom row for a local upstream that no longer exists


@dataclass(frozen=True)
class TreeRow:
    """One display row. Phantom rows leave the commit columns blank."""
    kind: RowKind
    depth: int
    label: str
    commit_hash: str = ""
    ahead: str = ""
    behind: str = ""
    message: str = ""
    is_current: bool = False

    def columns(self) -> List[str]:
        return [self.label, self.commit_hash, self.ahead, self.behind, self.message]


def prefix_for_depth(depth: int, tree: Optional[TreeConfig] = None) -> str:
    tree = tree or TreeConfig()
    if depth <= 0:
        return ""
    return " " * (tree.indent * depth) + tree.connector


def is_remote_ref(name: str, remote_names: Sequence[str]) -> bool:
    return any(name.startswith(f"{remote}/") for remote in remote_names)


def _phantom_row(node: BranchNode, depth: int, graph: BranchGraph,
                 remote_names: Sequence[str], tree: TreeConfig) -> Optional[TreeRow]:
    upstream = node.upstream
    if upstream is None:
        return None
    prefix = prefix_for_depth(depth - 1, tree)
    if is_remote_ref(upstream, remote_names):
        return TreeRow(kind=RowKind.REMOTE, depth=depth - 1, label=prefix + upstream)
    if upstream not in graph:
        return TreeRow(kind=RowKind.MISSING, depth=depth - 1, label=prefix + upstream + MISSING_SUFFIX)
    return None


def _branch_row(node: BranchNode, depth: int, tree: TreeConfig) -> TreeRow:
    desc = node.descriptor
    prefix = prefix_for_depth(depth, tree) + (tree.current_marker if desc.is_current else "")
    status = desc.status
    ahead = f"+{status.ahead}" if status is not None and status.ahead is not None else ""
    behind = f"-{status.behind}" if status is not None and status.behind is not None else ""
    return TreeRow(
        kind=RowKind.BRANCH,
        depth=depth,
        label=prefix + desc.name,
        commit_hash=desc.commit_hash,
        ahead=ahead,
        behind=behind,
        message=desc.message,
        is_current=desc.is_current,
    )


def render_tree(graph: BranchGraph, remote_names: Sequence[str] = ("origin",),
                tree: Optional[TreeConfig] = None) -> List[TreeRow]:
    """Pre-order rows for every root in name order.

    Each node is preceded by a phantom row when its upstream is a remote
    ref or a local branch missing from the graph. Children follow in the
    order the graph recorded them.

    Raises:
        CycleDetected: Some upstream chain loops, so part of the graph
            has no root to start from.
    """
    tree = tree or TreeConfig()
    graph.check_acyclic()

    rows: List[TreeRow] = []
    pending: List[BranchNode] = list(reversed(graph.roots()))
    while pending:
        node = pending.pop()
        depth = graph.depth_of(node.name)
        phantom = _phantom_row(node, depth, graph, remote_names, tree)
        if phantom is not None:
            rows.append(phantom)
        rows.append(_branch_row(node, depth, tree))
        pending.extend(graph[name] for name in reversed(node.downstream))
    return rows


def _style(text: str, row: TreeRow, column: int) -> str:
    if row.kind is RowKind.REMOTE:
        return click.style(text, fg="blue") if column == 0 else text
    if row.kind is RowKind.MISSING:
        return click.style(text, fg="red") if column == 0 else text
    if column == 2 and row.ahead:
        return click.style(text, fg="green")
    if column == 3 and row.behind:
        return click.style(text, fg="red")
    if column == 4 and row.is_current:
        return click.style(text, fg="green")
    return text


def format_rows(rows: Sequence[TreeRow], color: bool = False) -> str:
    """Lay rows out as aligned columns.

    Name and message are left aligned, hash and counts right aligned.
    """
    if not rows:
        return ""
    widths = [max(len(r.columns()[i]) for r in rows) for i in range(5)]
    right_aligned = {1, 2, 3}

    lines: List[str] = []
    for row in rows:
        cells: List[str] = []
        for i, text in enumerate(row.columns()):
            padded = text.rjust(widths[i]) if i in right_aligned else text.ljust(widths[i])
            cells.append(_style(padded, row, i) if color else padded)
        lines.append(" ".join(cells).rstrip())
    return "\n".join(lines)
