"""Parsing of `git branch -vv` output.

This is the only place that knows the shape of git's human readable
branch report. A line looks like::

    * feat-b  abc123 [feat-a: ahead 2, behind 1] add widget

with the `*` marking the checked out branch and the bracketed
annotation present only when the branch tracks something.
"""

import re
from typing import List, Optional
from pydantic import BaseModel, Field

from ..typing import ParseFailure

WHITESPACE = re.compile(r"\s+")
# Optional "[upstream: status] " annotation, then the message
REST_PATTERN = re.compile(r"(?:\[([^\]]*)\] )?(.*)")
STATUS_PATTERN = re.compile(r"(?:ahead (\d+))?(?:, )?(?:behind (\d+))?")
UPSTREAM_SEPARATOR = ": "
CURRENT_MARKER = "*"


class BranchStatus(BaseModel):
    """Divergence from the tracked upstream. None means git did not report it."""
    ahead: Optional[int] = Field(default=None, ge=0)
    behind: Optional[int] = Field(default=None, ge=0)

    class Config:
        """Pydantic config."""
        frozen = True

    @classmethod
    def parse(cls, text: str) -> "BranchStatus":
        """Pull `ahead N` and `behind N` out of a status annotation.

        Either, both or neither may be present. Anything else, such as
        git's `gone`, leaves both counts unset.
        """
        match = STATUS_PATTERN.search(text)
        if match is None:
            return cls()
        ahead, behind = match.groups()
        return cls(
            ahead=int(ahead) if ahead is not None else None,
            behind=int(behind) if behind is not None else None,
        )


class BranchDescriptor(BaseModel):
    """One local branch as reported by a single listing."""
    name: str = Field(min_length=1)
    is_current: bool = False
    commit_hash: str
    upstream: Optional[str] = None
    status: Optional[BranchStatus] = None
    message: str = ""

    class Config:
        """Pydantic config."""
        frozen = True


def parse_branch_entry(line: str) -> BranchDescriptor:
    """Parse one line of `git branch -vv` into a descriptor.

    Raises:
        ParseFailure: The line does not have name, hash and rest fields,
            or the rest does not match the annotation/message shape.
    """
    trimmed = line.strip()
    is_current = trimmed.startswith(CURRENT_MARKER)
    if is_current:
        trimmed = trimmed[len(CURRENT_MARKER):].strip()

    parts = WHITESPACE.split(trimmed, maxsplit=2)
    if len(parts) != 3:
        raise ParseFailure(line, "wrong number of parts")
    name, commit_hash, rest = parts

    match = REST_PATTERN.match(rest)
    if match is None:
        raise ParseFailure(line, "failed to capture")
    annotation, message = match.groups()
    if message is None:
        raise ParseFailure(line, "no message")

    upstream: Optional[str] = None
    status: Optional[BranchStatus] = None
    if annotation is not None:
        upstream_and_status = annotation.split(UPSTREAM_SEPARATOR, 1)
        upstream = upstream_and_status[0]
        if len(upstream_and_status) > 1:
            status = BranchStatus.parse(upstream_and_status[1])

    return BranchDescriptor(
        name=name,
        is_current=is_current,
        commit_hash=commit_hash,
        upstream=upstream,
        status=status,
        message=message,
    )


def parse_branch_listing(listing: str) -> List[BranchDescriptor]:
    """Parse a whole `git branch -vv` report, skipping blank lines."""
    return [parse_branch_entry(line) for line in listing.splitlines() if line.strip()]
