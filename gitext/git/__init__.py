"""Git gateway and the git queries built on top of it."""

import os
import logging
from typing import List, Optional, Sequence
import git
from git.exc import GitCommandNotFound

from ..typing import BranchName, CommitHash, GitInterface, VcsFailure, EncodingFailure, DirtyTreeFailure
from ..config.models import GitExtConfig

# Get module logger
logger = logging.getLogger(__name__)

class RealGit:
    """Real Git implementation.

    Every call blocks until git exits. There are no retries and no
    timeouts; a failing command raises immediately.
    """
    def __init__(self, config: GitExtConfig, working_dir: Optional[str] = None, verbose: bool = False):
        """Initialize with config and the directory git runs in.

        With `verbose` every call is echoed, whatever the caller asks for.
        """
        self.config: GitExtConfig = config
        self.verbose = verbose
        self.working_dir = working_dir or os.getcwd()
        self._git = git.Git(self.working_dir)

    def run(self, args: Sequence[str], verbose: bool = False) -> str:
        """Run git with an argument list and return stdout without surrounding whitespace.

        Args:
            args: Arguments after `git`, one element per argument
            verbose: Echo the command line and its output at INFO level

        Raises:
            VcsFailure: git exited non-zero (stderr is logged first)
            EncodingFailure: stdout was not valid UTF-8
        """
        args = list(args)
        echo = verbose or self.verbose or self.config.user.log_git_commands
        log = logger.info if echo else logger.debug
        log(f"> git {' '.join(args)}")

        try:
            status, stdout, stderr = self._git.execute(
                ["git", *args],
                with_extended_output=True,
                with_exceptions=False,
                stdout_as_string=False,
            )
        except GitCommandNotFound as e:
            raise VcsFailure(args, 127, str(e)) from e

        if status != 0:
            if stderr:
                logger.error(stderr)
            raise VcsFailure(args, status, stderr)

        try:
            output = stdout.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise EncodingFailure(args) from e

        if output:
            log(output)
        return output


def last_hash(git_cmd: GitInterface, verbose: bool = False) -> CommitHash:
    """Full hash of the commit HEAD points at."""
    return CommitHash(git_cmd.run(["log", "-n", "1", "--pretty=format:%H"], verbose))

def current_branch(git_cmd: GitInterface, verbose: bool = False) -> BranchName:
    return BranchName(git_cmd.run(["rev-parse", "--abbrev-ref", "HEAD"], verbose))

def get_upstream(git_cmd: GitInterface, verbose: bool = False) -> str:
    """Short name of the current branch's upstream, e.g. `main` or `origin/main`."""
    return git_cmd.run(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"], verbose)

def get_upstream_ref(git_cmd: GitInterface, verbose: bool = False) -> str:
    """Full ref of the current branch's upstream, e.g. `refs/heads/main`."""
    return git_cmd.run(["rev-parse", "--symbolic-full-name", "@{u}"], verbose)

def short_ref(ref: str) -> str:
    for prefix in ("refs/heads/", "refs/remotes/", "refs/tags/", "refs/"):
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return ref

def working_tree_status(git_cmd: GitInterface) -> str:
    return git_cmd.run(["status"])

def ensure_clean(git_cmd: GitInterface) -> None:
    """Raise DirtyTreeFailure with the status text if anything is modified or untracked."""
    # Porcelain output is stable across git versions and locales
    if git_cmd.run(["status", "--porcelain"]):
        raise DirtyTreeFailure(working_tree_status(git_cmd))

def handle_submodules(git_cmd: GitInterface, verbose: bool = False) -> None:
    """Bring nested submodules in line with the checked out commit."""
    git_cmd.run(["submodule", "init"], verbose)
    git_cmd.run(["submodule", "update", "--recursive"], verbose)

def checkout(git_cmd: GitInterface, branch: str, verbose: bool = False) -> None:
    git_cmd.run(["checkout", branch], verbose)
    handle_submodules(git_cmd, verbose)

def set_upstream(git_cmd: GitInterface, upstream: str, verbose: bool = False) -> None:
    git_cmd.run(["branch", "--set-upstream-to", upstream], verbose)

def reset_hard(git_cmd: GitInterface, target: str, verbose: bool = False) -> None:
    # Trailing "--" keeps a target that is also a file name from being read as a path
    git_cmd.run(["reset", "--hard", target, "--"], verbose)

def cherry_pick(git_cmd: GitInterface, commit: str, verbose: bool = False) -> None:
    """Replay one commit onto HEAD. Conflicts surface as VcsFailure and are left in place."""
    git_cmd.run(["cherry-pick", commit], verbose)

def force_push(git_cmd: GitInterface, remote: str, verbose: bool = False) -> BranchName:
    """Force push the current branch to the same-named branch on remote."""
    branch = current_branch(git_cmd, verbose)
    git_cmd.run(["push", "-f", remote, branch], True)
    return branch

def delete_branch(git_cmd: GitInterface, branch: str, verbose: bool = False) -> None:
    git_cmd.run(["branch", "-D", branch], verbose)

def branch_listing(git_cmd: GitInterface, verbose: bool = False) -> str:
    """Raw `git branch -vv` report."""
    return git_cmd.run(["branch", "-vv", "--no-color"], verbose)

def remotes(git_cmd: GitInterface, verbose: bool = False) -> List[str]:
    return git_cmd.run(["remote"], verbose).split()
