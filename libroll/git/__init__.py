"""Git operations module.

- Repository: single checkout operations used by the rollout workflow
- find_repos: discovery of service checkouts under a base directory

Usage:
    from libroll.git import Repository, find_repos

    for path in find_repos(base).repos:
        repo = Repository(path)
        print(path.name, repo.current_branch())
"""

from libroll.git.multi import RepoScan, find_repos, is_git_repo
from libroll.git.repository import (
    GitError,
    GitStatus,
    Repository,
    RepositoryClient,
    StatusEntry,
)

__all__ = [
    # Repository
    "GitError",
    "GitStatus",
    "Repository",
    "RepositoryClient",
    "StatusEntry",
    # Multi
    "RepoScan",
    "find_repos",
    "is_git_repo",
]
