"""Unit tests for parsing `git branch -vv` lines."""

import pytest

from gitext.branches import BranchStatus, parse_branch_entry, parse_branch_listing
from gitext.typing import ParseFailure


class TestParseBranchEntry:
    """Tests for parse_branch_entry."""

    def test_current_branch_with_upstream_and_ahead(self) -> None:
        desc = parse_branch_entry("* feat-b  abc123 [feat-a: ahead 2] add widget")
        assert desc.is_current
        assert desc.name == "feat-b"
        assert desc.commit_hash == "abc123"
        assert desc.upstream == "feat-a"
        assert desc.status == BranchStatus(ahead=2, behind=None)
        assert desc.message == "add widget"

    def test_upstream_without_status(self) -> None:
        desc = parse_branch_entry("  feat-a  def456 [main] base work")
        assert not desc.is_current
        assert desc.upstream == "main"
        assert desc.status is None
        assert desc.message == "base work"

    def test_no_upstream(self) -> None:
        desc = parse_branch_entry("  main    ghi789 init")
        assert desc.upstream is None
        assert desc.status is None
        assert desc.message == "init"

    def test_ahead_and_behind(self) -> None:
        desc = parse_branch_entry("  topic 1a2b3c4 [origin/topic: ahead 3, behind 12] fix the thing")
        assert desc.upstream == "origin/topic"
        assert desc.status == BranchStatus(ahead=3, behind=12)

    def test_behind_only(self) -> None:
        desc = parse_branch_entry("  topic 1a2b3c4 [origin/topic: behind 4] fix the thing")
        assert desc.status is not None
        assert desc.status.ahead is None
        assert desc.status.behind == 4

    def test_gone_upstream_reports_neither_count(self) -> None:
        """git marks deleted remote branches as gone, which carries no counts."""
        desc = parse_branch_entry("  old 1a2b3c4 [origin/old: gone] stale work")
        assert desc.upstream == "origin/old"
        assert desc.status == BranchStatus()

    def test_message_keeps_inner_whitespace(self) -> None:
        desc = parse_branch_entry("  main ghi789 [origin/main] Merge  branch 'x'   into main")
        assert desc.message == "Merge  branch 'x'   into main"

    def test_slashes_in_names(self) -> None:
        desc = parse_branch_entry("* user/feature/x 0badcafe [user/feature/base: ahead 1] wip")
        assert desc.name == "user/feature/x"
        assert desc.upstream == "user/feature/base"

    def test_leading_whitespace_before_marker(self) -> None:
        desc = parse_branch_entry("   * main ghi789 init")
        assert desc.is_current
        assert desc.name == "main"

    @pytest.mark.parametrize("line", [
        "",
        "main",
        "* main",
        "  main   ghi789  ",
    ])
    def test_too_few_fields_raises(self, line: str) -> None:
        with pytest.raises(ParseFailure) as exc_info:
            parse_branch_entry(line)
        assert exc_info.value.reason == "wrong number of parts"
        assert exc_info.value.line == line

    def test_failure_message_names_line(self) -> None:
        with pytest.raises(ParseFailure) as exc_info:
            parse_branch_entry("lonely")
        assert "lonely" in str(exc_info.value)
        assert "wrong number of parts" in str(exc_info.value)

    def test_descriptor_is_immutable(self) -> None:
        desc = parse_branch_entry("  main ghi789 init")
        with pytest.raises(Exception):
            desc.name = "other"  # type: ignore[misc]


class TestBranchStatus:
    """Tests for BranchStatus.parse."""

    @pytest.mark.parametrize("text,ahead,behind", [
        ("ahead 2", 2, None),
        ("behind 7", None, 7),
        ("ahead 1, behind 1", 1, 1),
        ("gone", None, None),
        ("", None, None),
    ])
    def test_parse(self, text: str, ahead: int, behind: int) -> None:
        status = BranchStatus.parse(text)
        assert status.ahead == ahead
        assert status.behind == behind


class TestParseBranchListing:
    """Tests for parse_branch_listing."""

    def test_parses_every_nonblank_line(self) -> None:
        listing = "\n".join([
            "* feat-b  abc123 [feat-a: ahead 2] add widget",
            "  feat-a  def456 [main] base work",
            "",
            "  main    ghi789 init",
        ])
        names = [d.name for d in parse_branch_listing(listing)]
        assert names == ["feat-b", "feat-a", "main"]

    def test_one_bad_line_fails_the_listing(self) -> None:
        with pytest.raises(ParseFailure):
            parse_branch_listing("  main ghi789 init\n  broken\n")
