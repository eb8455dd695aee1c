"""Drive one service repository through one track of a rollout.

fetch -> remote branch check -> preserve local changes -> checkout + pull
-> compute versions -> update branch -> edit -> commit -> push -> review
request, with the base branch restored on the way out.

Every step returns early with an outcome; nothing here raises on a git,
manifest or hosting error. Once the checkout has been attempted, cleanup
runs on every path.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from libroll.core.result import Err, Ok, Result
from libroll.git.repository import GitError, RepositoryClient
from libroll.output.console import ConsoleProtocol, Style
from libroll.services.rollout.changelog import (
    prepend_release_note,
    release_note_for,
    write_current_version_marker,
)
from libroll.services.rollout.manifest import (
    read_project_version,
    write_dependency_version,
    write_project_version,
)
from libroll.services.rollout.model import (
    DependencyRequest,
    Failed,
    Service,
    SkippedBranchMissing,
    SkippedNoManifest,
    StashRecord,
    Track,
    Updated,
    UpdateOutcome,
)
from libroll.services.rollout.naming import (
    UpdateBranchScope,
    stash_branch_name,
    update_branch_name,
)
from libroll.services.rollout.publisher import Publisher
from libroll.services.rollout.versioning import (
    KindPolicy,
    PassThrough,
    ServiceVersion,
    UnparseablePolicy,
    build_dependency_version,
    kind_mismatch,
    next_version,
    parse_service_version,
)


@dataclass(frozen=True, slots=True)
class WorkflowSettings:
    manifest: str = "pom.xml"
    marker: str = "release.txt"
    notes: str = "release_notes.txt"
    scope: UpdateBranchScope = UpdateBranchScope.VERSION
    kind_policy: KindPolicy = KindPolicy.FOLLOW_TRACK
    unparseable_policy: UnparseablePolicy = UnparseablePolicy.KEEP


@dataclass(slots=True)
class _Progress:
    update_branch: str | None = None  # set once the branch exists locally
    pushed: bool = False


def _git_failed(e: GitError) -> Failed:
    reason = f"git {e.command} timed out" if e.timed_out else f"git {e.command} failed"
    return Failed(reason=reason, hint=e.message or None)


def commit_message(
    request: DependencyRequest,
    dependency_version: str,
    service_version: str,
) -> str:
    return (
        f"Update {request.artifact_id} to version {dependency_version}\n"
        "\n"
        f"- Updated {request.artifact_id} dependency version\n"
        f"- Incremented service version to {service_version}\n"
        "- Updated release notes"
    )


def review_body(
    request: DependencyRequest,
    dependency_version: str,
    service_version: str,
    *,
    manifest: str,
    marker: str,
    notes: str,
    stash: StashRecord | None,
) -> str:
    lines = [
        f"This PR updates the {request.artifact_id} dependency to version {dependency_version}.",
        "",
        "Changes:",
        f"- Updated {request.artifact_id} version in {manifest}",
        f"- Incremented service version to {service_version}",
        f"- Updated {marker} and {notes}",
    ]
    if stash is not None:
        lines += ["", f"Note: Uncommitted changes were saved to branch: {stash.branch}"]
    return "\n".join(lines)


class WorkflowController:
    """Applies one ``DependencyRequest`` to a repository, one track at a time.

    The controller keeps no state between calls; a repository must not be
    handed to two calls at once.
    """

    def __init__(
        self,
        *,
        request: DependencyRequest,
        console: ConsoleProtocol,
        settings: WorkflowSettings | None = None,
    ) -> None:
        self._request = request
        self._console = console
        self._settings = settings or WorkflowSettings()

    def run(
        self,
        service: Service,
        repo: RepositoryClient,
        track: Track,
        publisher: Publisher,
    ) -> UpdateOutcome:
        self._console.info(f"Processing service: {service.name} on branch: {track.branch}")

        fetched = repo.fetch()
        if isinstance(fetched, Err):
            return _git_failed(fetched.error)

        exists = repo.has_remote_branch(track.branch)
        if isinstance(exists, Err):
            return _git_failed(exists.error)
        if not exists.value:
            self._console.warning(f"Branch {track.branch} does not exist in remote")
            return SkippedBranchMissing(branch=track.branch)

        stash = self._preserve_local_changes(repo, track)
        if isinstance(stash, Err):
            return stash.error

        progress = _Progress()
        try:
            return self._update(service, repo, track, publisher, stash.value, progress)
        finally:
            self._restore(service, repo, track, progress)

    def _preserve_local_changes(
        self,
        repo: RepositoryClient,
        track: Track,
    ) -> Result[StashRecord | None, Failed]:
        dirty = repo.is_dirty()
        if isinstance(dirty, Err):
            return Err(_git_failed(dirty.error))
        if not dirty.value:
            return Ok(None)

        branch = stash_branch_name(self._request, track)
        if repo.has_local_branch(branch):
            return Err(
                Failed(
                    reason=f"stash branch {branch} already exists",
                    hint="Uncommitted changes were left in place; remove the branch and retry.",
                )
            )

        previous = repo.current_branch()
        self._console.warning("Uncommitted changes detected. Creating stash branch...")
        self._console.print(f"git checkout -b {branch}", Style.DIM)
        created = repo.create_branch(branch)
        if isinstance(created, Err):
            return Err(_git_failed(created.error))

        message = f"Stash: Uncommitted changes before {self._request.artifact_id} update"
        committed = repo.commit_all(message)
        if isinstance(committed, Err):
            self._drop_stash_branch(repo, branch, previous)
            return Err(_git_failed(committed.error))

        self._console.success(f"Changes saved to branch: {branch}")
        return Ok(StashRecord(branch=branch, message=message))

    def _drop_stash_branch(self, repo: RepositoryClient, branch: str, previous: str | None) -> None:
        """Undo a stash branch whose commit failed; the changes stay in the tree."""
        if previous is None:
            self._console.warning(f"HEAD was detached; leaving stash branch {branch} checked out")
            return

        back = repo.checkout(previous)
        if isinstance(back, Err):
            self._console.warning(f"failed to return to {previous}: {back.error.message}")
            return

        deleted = repo.delete_branch(branch)
        if isinstance(deleted, Err):
            self._console.warning(f"could not delete {branch}: {deleted.error.message}")

    def _update(
        self,
        service: Service,
        repo: RepositoryClient,
        track: Track,
        publisher: Publisher,
        stash: StashRecord | None,
        progress: _Progress,
    ) -> UpdateOutcome:
        settings = self._settings
        request = self._request

        self._console.print(f"git checkout {track.branch}", Style.DIM)
        checked_out = repo.checkout(track.branch)
        if isinstance(checked_out, Err):
            return _git_failed(checked_out.error)
        self._console.print(f"git pull --ff-only {repo.remote} {track.branch}", Style.DIM)
        pulled = repo.pull(track.branch)
        if isinstance(pulled, Err):
            return _git_failed(pulled.error)

        manifest = repo.path / settings.manifest
        if not manifest.is_file():
            self._console.warning(f"No {settings.manifest} found, skipping...")
            return SkippedNoManifest(manifest=manifest)

        current = read_project_version(manifest)
        if isinstance(current, Err):
            return Failed(reason=current.error.message)
        self._console.info(f"Current service version: {current.value}")

        service_version = self._next_service_version(current.value, track)
        if isinstance(service_version, Err):
            return service_version.error
        self._console.info(f"New service version: {service_version.value}")

        dependency_version = build_dependency_version(request, track)
        update_branch = update_branch_name(request, track, scope=settings.scope)

        free = self._ensure_branch_is_new(repo, update_branch)
        if isinstance(free, Err):
            return free.error

        self._console.print(f"git checkout -b {update_branch}", Style.DIM)
        created = repo.create_branch(update_branch)
        if isinstance(created, Err):
            return _git_failed(created.error)

        progress.update_branch = update_branch
        touched = self._apply_edits(manifest, repo.path, dependency_version, service_version.value)
        if isinstance(touched, Err):
            return touched.error

        rels = " ".join(p.name for p in touched.value)
        self._console.print(f"git add -A -- {rels}", Style.DIM)
        committed = repo.commit_paths(
            touched.value,
            commit_message(request, dependency_version, service_version.value),
        )
        if isinstance(committed, Err):
            return _git_failed(committed.error)

        self._console.print(f"git push -u {repo.remote} {update_branch}", Style.DIM)
        pushed = repo.push(update_branch)
        if isinstance(pushed, Err):
            return _git_failed(pushed.error)
        progress.pushed = True

        review = publisher.request_review(
            head=update_branch,
            base=track.branch,
            title=f"Update {request.artifact_id} to {dependency_version}",
            body=review_body(
                request,
                dependency_version,
                service_version.value,
                manifest=settings.manifest,
                marker=settings.marker,
                notes=settings.notes,
                stash=stash,
            ),
        )
        if isinstance(review, Err):
            return Failed(reason=review.error.message, hint=review.error.hint)

        self._console.success(f"Service {service.name} processed successfully")
        return Updated(
            service_version=service_version.value,
            dependency_version=dependency_version,
            update_branch=update_branch,
            review=review.value,
            stash=stash,
        )

    def _next_service_version(self, raw: str, track: Track) -> Result[str, Failed]:
        parsed = parse_service_version(raw)

        mismatch = kind_mismatch(parsed, track, self._settings.kind_policy)
        if mismatch is not None:
            return Err(Failed(reason=mismatch, hint="kind_mismatch = \"fail\" is configured"))

        match next_version(parsed, track):
            case ServiceVersion() as advanced:
                return Ok(advanced.format())
            case PassThrough(raw=kept):
                if self._settings.unparseable_policy is UnparseablePolicy.FAIL:
                    return Err(Failed(reason=f"Unable to parse version: {kept}"))
                self._console.warning(f"Unable to parse version: {kept} (kept unchanged)")
                return Ok(kept)

    def _ensure_branch_is_new(self, repo: RepositoryClient, branch: str) -> Result[None, Failed]:
        if repo.has_local_branch(branch):
            return Err(
                Failed(
                    reason=f"update branch {branch} already exists locally",
                    hint="A previous run may have created it; delete it or pick another version.",
                )
            )
        remote = repo.has_remote_branch(branch)
        if isinstance(remote, Err):
            return Err(_git_failed(remote.error))
        if remote.value:
            return Err(
                Failed(
                    reason=f"update branch {branch} already exists on the remote",
                    hint="An update for this version was already pushed.",
                )
            )
        return Ok(None)

    def _apply_edits(
        self,
        manifest: Path,
        root: Path,
        dependency_version: str,
        service_version: str,
    ) -> Result[list[Path], Failed]:
        request = self._request

        dep = write_dependency_version(manifest, request.artifact_id, dependency_version)
        if isinstance(dep, Err):
            return Err(Failed(reason=dep.error.message))
        if dep.value == 0:
            self._console.warning(
                f"{request.artifact_id} has no explicit version in {manifest.name}; left as is"
            )

        own = write_project_version(manifest, service_version)
        if isinstance(own, Err):
            return Err(Failed(reason=own.error.message))

        marker = root / self._settings.marker
        written = write_current_version_marker(marker, service_version)
        if isinstance(written, Err):
            return Err(Failed(reason=written.error.message))

        notes = root / self._settings.notes
        noted = prepend_release_note(notes, release_note_for(request, dependency_version))
        if isinstance(noted, Err):
            return Err(Failed(reason=noted.error.message))

        return Ok([manifest, marker, notes])

    def _restore(
        self,
        service: Service,
        repo: RepositoryClient,
        track: Track,
        progress: _Progress,
    ) -> None:
        if progress.update_branch is not None:
            dirty = repo.is_dirty()
            if isinstance(dirty, Ok) and dirty.value:
                discarded = repo.discard_changes()
                if isinstance(discarded, Err):
                    self._console.warning(
                        f"{service.name}: could not discard partial edits: "
                        f"{discarded.error.message}"
                    )

        if repo.current_branch() != track.branch:
            dirty = repo.is_dirty()
            if not isinstance(dirty, Ok) or dirty.value:
                self._console.warning(
                    f"{service.name}: working tree not clean, staying on {repo.current_branch()}"
                )
                return

            back = repo.checkout(track.branch)
            if isinstance(back, Err):
                self._console.warning(
                    f"{service.name}: failed to return to {track.branch}: {back.error.message}"
                )
                return

        # An unpushed update branch would block the next run with the same request.
        if progress.update_branch is not None and not progress.pushed:
            deleted = repo.delete_branch(progress.update_branch)
            if isinstance(deleted, Err):
                self._console.warning(
                    f"{service.name}: could not delete {progress.update_branch}: "
                    f"{deleted.error.message}"
                )
