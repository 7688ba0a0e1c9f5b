"""Configuration for pytest."""

import logging
from typing import Generator
import pytest

from gitext.tests.e2e.repo_helpers import RepoContext, create_repo_context

logger = logging.getLogger(__name__)

@pytest.fixture
def repo_ctx() -> Generator[RepoContext, None, None]:
    """Fresh clone with `main` pushed to a bare origin."""
    yield from create_repo_context()

@pytest.fixture
def stack_ctx(repo_ctx: RepoContext) -> RepoContext:
    """Clone holding the stack `leaf -> mid -> main`, one commit per branch, `leaf` checked out."""
    repo_ctx.new_branch("mid", "main")
    repo_ctx.make_commit("mid.txt", "mid work", "mid work")
    repo_ctx.new_branch("leaf", "mid")
    repo_ctx.make_commit("leaf.txt", "leaf work", "leaf work")
    return repo_ctx
