"""Git repository abstraction.

This module provides the Repository class used by the rollout workflow.
All operations that can fail return Result types; nothing here raises on a
git error.

Usage:
    repo = Repository(Path("/path/to/service"), remote="origin")

    match repo.has_remote_branch("develop"):
        case Ok(True):
            repo.checkout("develop")
        case Ok(False):
            print("develop is not on the remote")
        case Err(e):
            print(f"ls-remote failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from libroll.core.result import Err, Ok, Result
from libroll.platform.process import ProcessError
from libroll.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "ls-remote", "clone"})

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "RepositoryClient",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed (e.g. "push origin x-updates")
        message: Error message
        returncode: Process return code (-1 on timeout)
        timed_out: True if the command was killed after its timeout
    """

    command: str
    message: str
    returncode: int = 1
    timed_out: bool = False


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1 -b`` output.

    Attributes:
        branch: Current branch name
        entries: All status entries (staged, unstaged, untracked)
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if working tree has no changes, untracked files included."""
        return len(self.entries) == 0


class RepositoryClient(Protocol):
    """Capability the rollout workflow needs from a version-control checkout.

    ``Repository`` implements it with the git CLI; tests use in-memory fakes.
    """

    remote: str

    @property
    def path(self) -> Path: ...

    def fetch(self) -> Result[str, GitError]: ...

    def has_remote_branch(self, name: str) -> Result[bool, GitError]: ...

    def has_local_branch(self, name: str) -> bool: ...

    def checkout(self, name: str) -> Result[None, GitError]: ...

    def pull(self, branch: str) -> Result[str, GitError]: ...

    def create_branch(self, name: str) -> Result[None, GitError]: ...

    def delete_branch(self, name: str) -> Result[None, GitError]: ...

    def is_dirty(self) -> Result[bool, GitError]: ...

    def commit_all(self, message: str) -> Result[None, GitError]: ...

    def commit_paths(self, paths: list[Path], message: str) -> Result[None, GitError]: ...

    def push(self, branch: str) -> Result[None, GitError]: ...

    def current_branch(self) -> str | None: ...

    def discard_changes(self) -> Result[None, GitError]: ...


class Repository:
    """Git repository driven through the git CLI.

    Attributes:
        path: Path to the repository root
        remote: Name of the remote branches are fetched from and pushed to
    """

    def __init__(
        self,
        path: Path,
        *,
        remote: str = "origin",
        timeout: float = _GIT_TIMEOUT_SECONDS,
        network_timeout: float = _GIT_NETWORK_TIMEOUT_SECONDS,
    ) -> None:
        self._path = path
        self.remote = remote
        self._timeout = timeout
        self._network_timeout = network_timeout

    @property
    def path(self) -> Path:
        return self._path

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status.

        Runs `git status --porcelain=v1 -b` and parses the output.
        """
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(self._error("status", e))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def is_dirty(self) -> Result[bool, GitError]:
        """True if the tree has uncommitted changes, untracked files included."""
        match self.status():
            case Err(e):
                return Err(e)
            case Ok(status):
                return Ok(not status.is_clean)

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def fetch(self) -> Result[str, GitError]:
        result = self._run(["fetch", self.remote])
        match result:
            case Err(e):
                return Err(self._error(f"fetch {self.remote}", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def has_remote_branch(self, name: str) -> Result[bool, GitError]:
        """Ask the remote whether ``refs/heads/<name>`` exists."""
        result = self._run(["ls-remote", "--heads", self.remote, f"refs/heads/{name}"])
        match result:
            case Err(e):
                return Err(self._error(f"ls-remote {self.remote} {name}", e))
            case Ok(stdout):
                return Ok(stdout.strip() != "")

    def has_local_branch(self, name: str) -> bool:
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/heads/{name}"])
        return isinstance(result, Ok)

    def checkout(self, name: str) -> Result[None, GitError]:
        return self._simple(["checkout", name], label=f"checkout {name}")

    def pull(self, branch: str) -> Result[str, GitError]:
        """Fast-forward ``branch`` from the remote.

        Returns:
            Ok(output) on success
            Err(GitError) on failure (diverged history, network, etc.)
        """
        result = self._run(["pull", "--ff-only", self.remote, branch])
        match result:
            case Err(e):
                return Err(self._error(f"pull --ff-only {self.remote} {branch}", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def create_branch(self, name: str) -> Result[None, GitError]:
        """Create ``name`` from HEAD and switch to it."""
        return self._simple(["checkout", "-b", name], label=f"checkout -b {name}")

    def delete_branch(self, name: str) -> Result[None, GitError]:
        """Force-delete a local branch (it must not be checked out)."""
        return self._simple(["branch", "-D", name], label=f"branch -D {name}")

    def commit_all(self, message: str) -> Result[None, GitError]:
        """Stage every change (untracked files included) and commit."""
        added = self._simple(["add", "-A"], label="add -A")
        if isinstance(added, Err):
            return added
        return self._commit(message)

    def commit_paths(self, paths: list[Path], message: str) -> Result[None, GitError]:
        """Stage only ``paths`` and commit."""
        rels = [str(p.relative_to(self.path)) if p.is_absolute() else str(p) for p in paths]
        added = self._simple(["add", "-A", "--", *rels], label=f"add {' '.join(rels)}")
        if isinstance(added, Err):
            return added
        return self._commit(message)

    def push(self, branch: str) -> Result[None, GitError]:
        """Push ``branch`` and set its upstream. A timeout is an error."""
        return self._simple(
            ["push", "-u", self.remote, branch],
            label=f"push -u {self.remote} {branch}",
        )

    def discard_changes(self) -> Result[None, GitError]:
        """Drop uncommitted changes: reset tracked files, remove untracked ones.

        Ignored files are left alone.
        """
        reset = self._simple(["reset", "--hard", "HEAD"], label="reset --hard HEAD")
        if isinstance(reset, Err):
            return reset
        return self._simple(["clean", "-fd"], label="clean -fd")

    def _commit(self, message: str) -> Result[None, GitError]:
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command="commit",
                    message=e.stderr.strip()
                    or e.stdout.strip()
                    or "git commit failed (check user.name/user.email)",
                    returncode=e.returncode,
                    timed_out=e.timed_out,
                )
            )
        return Ok(None)

    def _simple(self, args: list[str], *, label: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(label, result.error))
        return Ok(None)

    def _error(self, label: str, e: ProcessError) -> GitError:
        return GitError(
            command=label,
            message=e.stderr.strip() or e.stdout.strip() or f"git {label} failed",
            returncode=e.returncode,
            timed_out=e.timed_out,
        )

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = self._network_timeout if command in _NETWORK_COMMANDS else self._timeout
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _parse_status(self, output: str) -> GitStatus:
        """Parse git status --porcelain=v1 -b output."""
        lines = [ln for ln in output.splitlines() if ln.strip()]

        if not lines:
            return GitStatus(branch="")

        # First line is branch info: ## branch...upstream [ahead N, behind M]
        branch = self._parse_branch_line(lines[0])

        entries: list[StatusEntry] = []
        for line in lines[1:]:
            entry = self._parse_entry(line)
            if entry:
                entries.append(entry)

        return GitStatus(branch=branch, entries=tuple(entries))

    def _parse_branch_line(self, line: str) -> str:
        s = line.strip()
        if s.startswith("##"):
            s = s[2:].lstrip()

        s = s.split(" [", 1)[0].strip()
        return s.split("...", 1)[0].strip()

    def _parse_entry(self, line: str) -> StatusEntry | None:
        if len(line) < 4:
            return None

        if line.startswith("?? "):
            return StatusEntry(xy="??", path=line[3:])

        return StatusEntry(xy=line[:2], path=line[3:])
