from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from libroll.core.result import Err, Ok, Result
from libroll.git.repository import GitError

SERVICE_POM = """<?xml version="1.0" encoding="UTF-8"?>
<project>
    <groupId>com.example</groupId>
    <artifactId>{name}</artifactId>
    <version>{version}</version>
    <dependencies>
        <dependency>
            <groupId>com.example</groupId>
            <artifactId>common-lib</artifactId>
            <version>1.9.0-SNAPSHOT</version>
        </dependency>
    </dependencies>
</project>
"""


class FakeRepository:
    """In-memory stand-in for a git checkout.

    Branch state and commits live in memory; the working tree is a real
    directory so manifest edits can be asserted on disk.
    """

    def __init__(
        self,
        path: Path,
        *,
        remote_branches: Iterable[str] = ("develop", "release"),
        current: str = "develop",
        dirty: bool = False,
        remote: str = "origin",
    ) -> None:
        self._path = path
        self.remote = remote
        self.remote_branches = set(remote_branches)
        self.local_branches = {current}
        self.current = current
        self.dirty = dirty
        self.commits: list[tuple[str, str, tuple[str, ...]]] = []
        self.pushed: list[str] = []
        self.deleted: list[str] = []
        self.discarded = 0
        self.calls: list[str] = []
        self._failures: dict[str, GitError] = {}

    @property
    def path(self) -> Path:
        return self._path

    def fail(self, operation: str, message: str = "boom", *, timed_out: bool = False) -> None:
        self._failures[operation] = GitError(
            command=operation, message=message, timed_out=timed_out
        )

    def recover(self, operation: str) -> None:
        self._failures.pop(operation, None)

    def _failure(self, operation: str) -> Err[GitError] | None:
        self.calls.append(operation)
        error = self._failures.get(operation)
        return Err(error) if error is not None else None

    def fetch(self) -> Result[str, GitError]:
        failure = self._failure("fetch")
        if failure is not None:
            return failure
        return Ok("")

    def has_remote_branch(self, name: str) -> Result[bool, GitError]:
        failure = self._failure("ls-remote")
        if failure is not None:
            return failure
        return Ok(name in self.remote_branches)

    def has_local_branch(self, name: str) -> bool:
        self.calls.append("rev-parse")
        return name in self.local_branches

    def checkout(self, name: str) -> Result[None, GitError]:
        failure = self._failure("checkout")
        if failure is not None:
            return failure
        if name not in self.local_branches:
            if name not in self.remote_branches:
                return Err(GitError(command=f"checkout {name}", message="pathspec did not match"))
            self.local_branches.add(name)
        self.current = name
        return Ok(None)

    def pull(self, branch: str) -> Result[str, GitError]:
        failure = self._failure("pull")
        if failure is not None:
            return failure
        return Ok("Already up to date.")

    def create_branch(self, name: str) -> Result[None, GitError]:
        failure = self._failure("create_branch")
        if failure is not None:
            return failure
        if name in self.local_branches:
            return Err(GitError(command=f"checkout -b {name}", message="already exists"))
        self.local_branches.add(name)
        self.current = name
        return Ok(None)

    def delete_branch(self, name: str) -> Result[None, GitError]:
        failure = self._failure("delete_branch")
        if failure is not None:
            return failure
        if name == self.current:
            return Err(GitError(command=f"branch -D {name}", message="checked out"))
        self.local_branches.discard(name)
        self.deleted.append(name)
        return Ok(None)

    def is_dirty(self) -> Result[bool, GitError]:
        failure = self._failure("status")
        if failure is not None:
            return failure
        return Ok(self.dirty)

    def commit_all(self, message: str) -> Result[None, GitError]:
        failure = self._failure("commit")
        if failure is not None:
            return failure
        self.commits.append((self.current, message, ("*",)))
        self.dirty = False
        return Ok(None)

    def commit_paths(self, paths: list[Path], message: str) -> Result[None, GitError]:
        # The edited files sit in the tree until the commit succeeds.
        self.dirty = True
        failure = self._failure("commit")
        if failure is not None:
            return failure
        self.commits.append((self.current, message, tuple(p.name for p in paths)))
        self.dirty = False
        return Ok(None)

    def push(self, branch: str) -> Result[None, GitError]:
        failure = self._failure("push")
        if failure is not None:
            return failure
        self.remote_branches.add(branch)
        self.pushed.append(branch)
        return Ok(None)

    def current_branch(self) -> str | None:
        return self.current

    def discard_changes(self) -> Result[None, GitError]:
        failure = self._failure("discard")
        if failure is not None:
            return failure
        self.discarded += 1
        self.dirty = False
        return Ok(None)


def write_service(root: Path, name: str, version: str = "1.0.5-SNAPSHOT-1") -> Path:
    path = root / name
    path.mkdir(parents=True, exist_ok=True)
    (path / ".git").mkdir(exist_ok=True)
    (path / "pom.xml").write_text(SERVICE_POM.format(name=name, version=version), encoding="utf-8")
    (path / "release.txt").write_text(f"{version}\n", encoding="utf-8")
    (path / "release_notes.txt").write_text("Initial release\n", encoding="utf-8")
    return path


@pytest.fixture
def make_service() -> Callable[..., Path]:
    return write_service


@pytest.fixture
def make_repo() -> Callable[..., FakeRepository]:
    return FakeRepository
