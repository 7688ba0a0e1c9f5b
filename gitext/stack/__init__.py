"""Stack reconciliation: moving branches and whole branch chains onto their upstreams."""

import re
import sys
import logging
from typing import Callable, List, Optional, TextIO

from ..config.models import GitExtConfig
from ..git import (
    checkout, cherry_pick, current_branch, delete_branch, ensure_clean, force_push,
    get_upstream, get_upstream_ref, handle_submodules, last_hash, reset_hard,
    set_upstream, short_ref,
)
from ..typing import BranchName, CycleDetected, GitInterface, MissingUpstreamFailure, VcsFailure

logger = logging.getLogger(__name__)

LOCAL_BRANCH_REF = "refs/heads/"

ConfirmFn = Callable[[str], bool]


class StackManager:
    """Restacks branches against whatever their upstreams point at now.

    Every branch in a stack is assumed to hold exactly one commit on top
    of its upstream. Restacking replays that single commit; a branch with
    more commits keeps only the content of its tip commit.
    """

    def __init__(self, config: GitExtConfig, git_cmd: GitInterface, verbose: bool = False,
                 confirm: Optional[ConfirmFn] = None, output: Optional[TextIO] = None):
        """Initialize with config and git gateway.

        Args:
            confirm: Asked before purge deletes anything. Without one, purge
                only proceeds when confirmation is bypassed.
            output: Where user-facing results are printed (default stdout)
        """
        self.config = config
        self.git_cmd = git_cmd
        self.verbose = verbose
        self.confirm = confirm
        self.output = output if output is not None else sys.stdout

    @property
    def remote(self) -> str:
        return self.config.repo.remote

    def fix_upstream(self, upstream: str) -> None:
        """Move the current branch's tip commit onto `upstream`.

        Sets `upstream` as the tracked branch, hard resets onto it and
        cherry-picks the old tip back. A conflicting cherry-pick raises
        VcsFailure and is left for the user to resolve.
        """
        commit = last_hash(self.git_cmd, self.verbose)
        logger.debug(f"Replaying {commit} onto {upstream}")
        set_upstream(self.git_cmd, upstream, True)
        ensure_clean(self.git_cmd)
        reset_hard(self.git_cmd, upstream, True)
        handle_submodules(self.git_cmd, True)
        cherry_pick(self.git_cmd, commit, True)
        handle_submodules(self.git_cmd, True)

    def fix_up(self) -> None:
        """Restack the current branch onto the upstream it already tracks."""
        self.fix_upstream(get_upstream(self.git_cmd, self.verbose))

    def climb(self, terminal: str) -> List[BranchName]:
        """Check out upstreams from the current branch until `terminal` is reached.

        Returns the branches left behind, the one nearest `terminal` first
        and the starting branch last.

        Raises:
            MissingUpstreamFailure: A branch on the way has no upstream, or
                tracks something that is not a local branch.
            CycleDetected: The upstreams loop without reaching `terminal`.
        """
        work: List[BranchName] = []
        branch = current_branch(self.git_cmd, self.verbose)
        chain: List[str] = [branch]
        while branch != terminal:
            try:
                upstream_ref = get_upstream_ref(self.git_cmd, self.verbose)
            except VcsFailure as e:
                raise MissingUpstreamFailure(branch, terminal=terminal) from e
            if not upstream_ref.startswith(LOCAL_BRANCH_REF):
                raise MissingUpstreamFailure(branch, short_ref(upstream_ref), terminal)

            upstream = BranchName(upstream_ref[len(LOCAL_BRANCH_REF):])
            if upstream in chain:
                raise CycleDetected(chain + [upstream])
            chain.append(upstream)

            checkout(self.git_cmd, upstream, self.verbose)
            work.insert(0, branch)
            branch = upstream
        logger.debug(f"Reached {terminal} via {' -> '.join(chain)}")
        return work

    def recursive_fix_up(self, terminal: str, push: bool = False) -> List[BranchName]:
        """Restack every branch between the current one and `terminal`.

        Branches are restacked nearest `terminal` first, so each one is
        replayed after its own upstream has moved. Returns that order.
        """
        work = self.climb(terminal)
        for branch in work:
            checkout(self.git_cmd, branch, True)
            self.fix_upstream(get_upstream(self.git_cmd))
            if push:
                self.push_origin()
        return work

    def commit_onto_new_branch(self, name: str) -> None:
        """Split the tip commit off into a new branch tracking the current one."""
        self.git_cmd.run(["branch", name], True)
        ensure_clean(self.git_cmd)
        reset_hard(self.git_cmd, "HEAD~1", True)
        parent = current_branch(self.git_cmd, self.verbose)
        self.git_cmd.run(["checkout", name], True)
        set_upstream(self.git_cmd, parent, True)
        handle_submodules(self.git_cmd, True)

    def push_origin(self) -> BranchName:
        return force_push(self.git_cmd, self.remote, self.verbose)

    def add_amend_push(self) -> BranchName:
        """Fold every working tree change into HEAD and force push."""
        self.git_cmd.run(["add", "."], True)
        self.git_cmd.run(["commit", "--amend", "--no-edit"], True)
        return self.push_origin()

    def rebase_onto_latest(self, branch: Optional[str] = None) -> None:
        """Fast-forward `branch` from its remote, then restack the current branch onto it."""
        base = branch or self.config.repo.default_branch
        original = current_branch(self.git_cmd)
        self.git_cmd.run(["checkout", base], True)
        self.git_cmd.run(["pull", "--ff-only"], True)
        self.git_cmd.run(["checkout", original], True)
        self.fix_upstream(base)

    def reset_hard_to_remote(self) -> None:
        """Discard local history and match the same-named remote branch."""
        branch = current_branch(self.git_cmd, self.verbose)
        ensure_clean(self.git_cmd)
        self.git_cmd.run(["fetch", self.remote], True)
        reset_hard(self.git_cmd, f"{self.remote}/{branch}", True)

    def purge_candidates(self, prefix: str) -> List[str]:
        """Local names of `prefix/...` branches that `remote prune` would remove."""
        pattern = re.compile(rf"{re.escape(self.remote)}/{re.escape(prefix)}/(\S+)$")
        report = self.git_cmd.run(["remote", "prune", self.remote, "-n"], self.verbose)
        candidates: List[str] = []
        for line in report.splitlines():
            match = pattern.search(line.strip())
            if match:
                candidates.append(f"{prefix}/{match.group(1)}")
        return candidates

    def purge(self, prefix: str, assume_yes: bool = False) -> List[str]:
        """Delete local branches whose `prefix/...` remote branch is gone.

        Deletion failures are logged and skipped. Returns the branches
        that were proposed, whether or not they were deleted.
        """
        candidates = self.purge_candidates(prefix)
        if not candidates:
            print("No branches to purge.", file=self.output)
            return candidates

        print("I'm going to purge the following branches:", file=self.output)
        for branch in candidates:
            print(branch, file=self.output)

        bypass = assume_yes or not self.config.user.confirm_purge
        if not bypass and (self.confirm is None or not self.confirm("Ok?")):
            print("Cancelling.", file=self.output)
            return candidates

        for branch in candidates:
            try:
                delete_branch(self.git_cmd, branch, True)
            except VcsFailure as e:
                logger.warning(f"Warning: ignoring error deleting branch {branch}: {e}")
        self.git_cmd.run(["remote", "prune", self.remote], self.verbose)
        return candidates
