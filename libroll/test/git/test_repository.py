"""Tests for git/repository.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from libroll.core.result import Err, Ok
from libroll.git.repository import GitStatus, Repository, StatusEntry

# =============================================================================
# StatusEntry / GitStatus Tests
# =============================================================================


class TestGitStatus:
    """Tests for GitStatus dataclass."""

    def test_clean_status(self) -> None:
        assert GitStatus(branch="develop").is_clean is True

    def test_untracked_counts_as_dirty(self) -> None:
        status = GitStatus(branch="develop", entries=(StatusEntry(xy="??", path="new.txt"),))
        assert status.is_clean is False


# =============================================================================
# Repository Tests - Mocked subprocess
# =============================================================================


def make_completed_process(
    stdout: str = "",
    stderr: str = "",
    returncode: int = 0,
) -> subprocess.CompletedProcess[str]:
    """Create a mock CompletedProcess."""
    return subprocess.CompletedProcess(
        args=["git"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


def git_args(mock_run: MagicMock, index: int = -1) -> list[str]:
    """Arguments after ``git -C <path>`` for a recorded call."""
    cmd = mock_run.call_args_list[index].args[0]
    return cmd[3:]


class TestRepository:
    """Tests for Repository class."""

    @patch("subprocess.run")
    def test_status_with_changes(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stdout="## develop...origin/develop [ahead 1, behind 2]\nM  pom.xml\n?? new.txt\n"
        )

        result = Repository(tmp_path).status()

        assert isinstance(result, Ok)
        status = result.value
        assert status.branch == "develop"
        assert [e.path for e in status.entries] == ["pom.xml", "new.txt"]
        assert status.entries[1].xy == "??"

    @patch("subprocess.run")
    def test_is_dirty(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="## develop\n?? scratch.txt\n")
        assert Repository(tmp_path).is_dirty() == Ok(True)

        mock_run.return_value = make_completed_process(stdout="## develop\n")
        assert Repository(tmp_path).is_dirty() == Ok(False)

    @patch("subprocess.run")
    def test_is_dirty_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: not a git repository"
        )

        result = Repository(tmp_path).is_dirty()

        assert isinstance(result, Err)
        assert result.error.command == "status"
        assert "not a git repository" in result.error.message

    @patch("subprocess.run")
    def test_current_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="develop\n")
        assert Repository(tmp_path).current_branch() == "develop"

    @patch("subprocess.run")
    def test_current_branch_detached(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="HEAD\n")
        assert Repository(tmp_path).current_branch() is None

    @patch("subprocess.run")
    def test_fetch_uses_remote(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        result = Repository(tmp_path, remote="upstream", network_timeout=99.0).fetch()

        assert isinstance(result, Ok)
        assert git_args(mock_run) == ["fetch", "upstream"]
        assert mock_run.call_args.kwargs["timeout"] == 99.0

    @patch("subprocess.run")
    def test_has_remote_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="abc123\trefs/heads/release\n")
        repo = Repository(tmp_path)

        assert repo.has_remote_branch("release") == Ok(True)
        assert git_args(mock_run) == ["ls-remote", "--heads", "origin", "refs/heads/release"]

        mock_run.return_value = make_completed_process(stdout="")
        assert repo.has_remote_branch("release") == Ok(False)

    @patch("subprocess.run")
    def test_has_remote_branch_network_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: unable to access remote"
        )

        result = Repository(tmp_path).has_remote_branch("develop")

        assert isinstance(result, Err)
        assert result.error.command == "ls-remote origin develop"

    @patch("subprocess.run")
    def test_has_local_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="abc123\n")
        assert Repository(tmp_path).has_local_branch("x-updates") is True

        mock_run.return_value = make_completed_process(returncode=1)
        assert Repository(tmp_path).has_local_branch("x-updates") is False

    @patch("subprocess.run")
    def test_pull_is_fast_forward_only(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            returncode=128, stderr="fatal: Not possible to fast-forward, aborting."
        )

        result = Repository(tmp_path).pull("develop")

        assert isinstance(result, Err)
        assert git_args(mock_run) == ["pull", "--ff-only", "origin", "develop"]
        assert "fast-forward" in result.error.message

    @patch("subprocess.run")
    def test_create_and_delete_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        repo = Repository(tmp_path)

        assert repo.create_branch("lib-1.0.0-updates") == Ok(None)
        assert git_args(mock_run) == ["checkout", "-b", "lib-1.0.0-updates"]
        assert repo.delete_branch("lib-1.0.0-updates") == Ok(None)
        assert git_args(mock_run) == ["branch", "-D", "lib-1.0.0-updates"]

    @patch("subprocess.run")
    def test_commit_all_stages_everything(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        result = Repository(tmp_path).commit_all("Stash: Uncommitted changes before lib update")

        assert isinstance(result, Ok)
        assert git_args(mock_run, 0) == ["add", "-A"]
        assert git_args(mock_run, 1) == [
            "commit",
            "-m",
            "Stash: Uncommitted changes before lib update",
        ]

    @patch("subprocess.run")
    def test_commit_paths_uses_relative_paths(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        result = Repository(tmp_path).commit_paths(
            [tmp_path / "pom.xml", tmp_path / "release.txt"], "Update lib"
        )

        assert isinstance(result, Ok)
        assert git_args(mock_run, 0) == ["add", "-A", "--", "pom.xml", "release.txt"]

    @patch("subprocess.run")
    def test_commit_failure_explains_identity(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = [
            make_completed_process(),
            make_completed_process(returncode=128),
        ]

        result = Repository(tmp_path).commit_all("msg")

        assert isinstance(result, Err)
        assert result.error.command == "commit"
        assert "user.name" in result.error.message

    @patch("subprocess.run")
    def test_push_sets_upstream(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        assert Repository(tmp_path).push("lib-1.0.0-updates") == Ok(None)
        assert git_args(mock_run) == ["push", "-u", "origin", "lib-1.0.0-updates"]

    @patch("subprocess.run")
    def test_push_timeout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["git", "push"], timeout=1.0)

        result = Repository(tmp_path, network_timeout=1.0).push("x-updates")

        assert isinstance(result, Err)
        assert result.error.timed_out is True
        assert result.error.command == "push -u origin x-updates"

    @patch("subprocess.run")
    def test_discard_changes(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        assert Repository(tmp_path).discard_changes() == Ok(None)
        assert git_args(mock_run, 0) == ["reset", "--hard", "HEAD"]
        assert git_args(mock_run, 1) == ["clean", "-fd"]

    @patch("subprocess.run")
    def test_local_commands_use_short_timeout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        Repository(tmp_path, timeout=7.0, network_timeout=70.0).checkout("develop")

        assert mock_run.call_args.kwargs["timeout"] == 7.0
