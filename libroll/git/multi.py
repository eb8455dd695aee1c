"""Multi-repository discovery.

A base directory holds one checkout per service. Only the immediate
children are considered; anything deeper is never scanned.

Usage:
    from libroll.git.multi import find_repos

    scan = find_repos(Path("~/services").expanduser())
    for path in scan.repos:
        print(path.name)
    for path in scan.skipped:
        print(f"not a git repository: {path.name}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

__all__ = [
    "RepoScan",
    "find_repos",
    "is_git_repo",
]


def _empty_paths() -> list[Path]:
    return []


@dataclass(frozen=True, slots=True)
class RepoScan:
    """Result of scanning a base directory.

    Attributes:
        repos: Subdirectories holding a ``.git`` marker, sorted by name
        skipped: Subdirectories without one, sorted by name
    """

    repos: list[Path] = field(default_factory=_empty_paths)
    skipped: list[Path] = field(default_factory=_empty_paths)


def is_git_repo(path: Path) -> bool:
    """True if ``path`` has a ``.git`` directory or worktree file."""
    return (path / ".git").exists()


def find_repos(base: Path) -> RepoScan:
    """Split the immediate subdirectories of ``base`` into repos and non-repos.

    Hidden directories (``.git``, ``.idea``...) are ignored entirely.

    Args:
        base: Directory to search

    Returns:
        RepoScan with both lists sorted case-insensitively
    """
    if not base.is_dir():
        return RepoScan()

    repos: list[Path] = []
    skipped: list[Path] = []

    for child in base.iterdir():
        if not child.is_dir() or child.name.startswith("."):
            continue
        if is_git_repo(child):
            repos.append(child)
        else:
            skipped.append(child)

    def by_name(p: Path) -> str:
        return p.name.lower()

    return RepoScan(repos=sorted(repos, key=by_name), skipped=sorted(skipped, key=by_name))
