"""Common types used across the codebase."""

from typing import List, Optional, Protocol, Sequence, NewType

# NewTypes for git identifiers
BranchName = NewType('BranchName', str)
CommitHash = NewType('CommitHash', str)


class GitInterface(Protocol):
    """What the rest of gitext expects from a git gateway."""

    def run(self, args: Sequence[str], verbose: bool = False) -> str:
        """Run git with an argument list and return stripped stdout."""
        ...


class GitExtError(Exception):
    """Base class for every failure gitext reports to the user."""


class VcsFailure(GitExtError):
    """git exited with a non-zero status."""

    def __init__(self, args: Sequence[str], exit_code: int, stderr: str = ""):
        self.args_list: List[str] = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"git exited with status {exit_code}")


class EncodingFailure(GitExtError):
    """git produced output that is not valid UTF-8."""

    def __init__(self, args: Sequence[str], stream: str = "stdout"):
        self.args_list: List[str] = list(args)
        self.stream = stream
        super().__init__(f"git {' '.join(args)} produced non-UTF-8 {stream}")


class ParseFailure(GitExtError):
    """A line of `git branch -vv` did not have the expected shape."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Unexpectedly unable to parse branch line {line} ({reason})")


class DirtyTreeFailure(GitExtError):
    """The working tree has changes and the operation would discard them."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(status)


class MissingUpstreamFailure(GitExtError):
    """A branch has no upstream, or its upstream is not a local branch."""

    def __init__(self, branch: str, upstream: Optional[str] = None, terminal: Optional[str] = None):
        self.branch = branch
        self.upstream = upstream
        self.terminal = terminal
        if upstream is None:
            msg = f"Branch '{branch}' has no upstream"
        else:
            msg = f"Upstream '{upstream}' of branch '{branch}' is not a local branch"
        if terminal is not None:
            msg += f"; cannot reach '{terminal}'"
        super().__init__(msg)


class CycleDetected(GitExtError):
    """Following upstreams came back to a branch already visited."""

    def __init__(self, chain: Sequence[str]):
        self.chain: List[str] = list(chain)
        super().__init__(f"Upstream cycle detected: {' -> '.join(chain)}")


class ConfigFailure(GitExtError):
    """A config file could not be read or holds invalid settings."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid gitext config: {detail}")
