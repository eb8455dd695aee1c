from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from libroll.core.config import Config
from libroll.core.result import Err
from libroll.git.multi import find_repos
from libroll.git.repository import Repository, RepositoryClient
from libroll.output.console import ConsoleProtocol, Style
from libroll.services.rollout.gh import GhHostingClient, ensure_gh_available
from libroll.services.rollout.model import (
    DependencyRequest,
    Failed,
    ManualActionRequired,
    ReviewCreated,
    RolloutSummary,
    Service,
    ServiceReport,
    SkippedBranchMissing,
    SkippedNoManifest,
    TrackResult,
    TrackSelection,
    Updated,
)
from libroll.services.rollout.naming import resolve_scope
from libroll.services.rollout.publisher import Publisher
from libroll.services.rollout.versioning import KindPolicy, UnparseablePolicy
from libroll.services.rollout.workflow import WorkflowController, WorkflowSettings

RepositoryFactory = Callable[[Path], RepositoryClient]
PublisherFactory = Callable[[Path], Publisher]


def discover_services(
    base: Path,
    *,
    manifest_name: str,
    console: ConsoleProtocol,
) -> tuple[list[Service], list[Path]]:
    """Immediate subdirectories of ``base`` that are git checkouts.

    Returns the services and the directories skipped for lacking ``.git``.
    """
    scan = find_repos(base)
    for path in scan.skipped:
        console.warning(f"Skipping {path.name} (not a git repository)")

    services = [
        Service(path=path, name=path.name, has_manifest=(path / manifest_name).is_file())
        for path in scan.repos
    ]
    return services, scan.skipped


class RolloutService:
    """Roll one dependency version across every service under a base directory.

    Policy:
    - Services and tracks run strictly one after another.
    - A failed track never stops the remaining tracks or services.
    - A service counts as processed only if no track failed.
    """

    def __init__(
        self,
        *,
        base_dir: Path,
        request: DependencyRequest,
        selection: TrackSelection,
        console: ConsoleProtocol,
        config: Config | None = None,
        repository_factory: RepositoryFactory | None = None,
        publisher_factory: PublisherFactory | None = None,
    ) -> None:
        self._base_dir = base_dir
        self._request = request
        self._selection = selection
        self._console = console
        self._config = config or Config()
        self._repository_factory = repository_factory or self._git_repository
        self._publisher_factory = publisher_factory or self._gh_publisher

    def run(self) -> RolloutSummary:
        rollout = self._config.rollout
        self._console.info("Starting update process...")
        self._console.info(f"Artifact ID: {self._request.artifact_id}")
        self._console.info(f"New Version: {self._request.target_version}")
        self._console.info(f"Target Branches: {self._selection}")
        self._console.info(f"Base Directory: {self._base_dir}")

        services, skipped = discover_services(
            self._base_dir,
            manifest_name=rollout.manifest,
            console=self._console,
        )
        controller = WorkflowController(
            request=self._request,
            console=self._console,
            settings=self._settings(),
        )

        reports: list[ServiceReport] = []
        for service in services:
            self._console.header(service.name)
            if not service.has_manifest:
                self._console.print(
                    f"no {rollout.manifest} in current checkout; checking each branch", Style.DIM
                )
            repo = self._repository_factory(service.path)
            publisher = self._publisher_factory(service.path)

            results: list[TrackResult] = []
            for track in self._selection.tracks:
                outcome = controller.run(service, repo, track, publisher)
                result = TrackResult(track=track, outcome=outcome)
                results.append(result)
                self._report_track(service, result)

            reports.append(ServiceReport(service=service, results=tuple(results)))

        failed = sum(1 for r in reports if r.failed)
        summary = RolloutSummary(
            total=len(reports),
            processed=len(reports) - failed,
            failed=failed,
            reports=tuple(reports),
            skipped_dirs=tuple(skipped),
        )
        self._print_summary(summary)
        return summary

    def _settings(self) -> WorkflowSettings:
        rollout = self._config.rollout
        return WorkflowSettings(
            manifest=rollout.manifest,
            marker=rollout.marker,
            notes=rollout.notes,
            scope=resolve_scope(rollout.update_branch_scope, self._selection),
            kind_policy=KindPolicy(rollout.kind_mismatch),
            unparseable_policy=UnparseablePolicy(rollout.unparseable_version),
        )

    def _git_repository(self, path: Path) -> RepositoryClient:
        timeouts = self._config.timeouts
        return Repository(
            path,
            remote=self._config.rollout.remote,
            timeout=timeouts.git_seconds,
            network_timeout=timeouts.git_network_seconds,
        )

    def _gh_publisher(self, path: Path) -> Publisher:
        if not self._config.rollout.pull_requests:
            return Publisher(
                client=None,
                console=self._console,
                unavailable_reason="pull requests disabled",
            )
        if isinstance(ensure_gh_available(), Err):
            return Publisher(
                client=None,
                console=self._console,
                unavailable_reason="GitHub CLI not found",
            )
        client = GhHostingClient(
            repo_root=path,
            console=self._console,
            timeout=self._config.timeouts.hosting_seconds,
        )
        return Publisher(client=client, console=self._console)

    def _report_track(self, service: Service, result: TrackResult) -> None:
        label = f"{service.name} [{result.track}]"
        match result.outcome:
            case Updated(update_branch=branch, review=ReviewCreated(url=url)):
                self._console.print(f"{label}: pushed {branch}, PR {url}", Style.DIM)
            case Updated(update_branch=branch, review=ManualActionRequired()):
                self._console.print(f"{label}: pushed {branch}, PR not created", Style.DIM)
            case SkippedBranchMissing(branch=branch):
                self._console.print(f"{label}: skipped, no {branch} branch on remote", Style.DIM)
            case SkippedNoManifest(manifest=manifest):
                self._console.print(f"{label}: skipped, no {manifest.name}", Style.DIM)
            case Failed(reason=reason, hint=hint):
                self._console.error(f"{label}: {reason}")
                if hint:
                    self._console.print(f"hint: {hint}", Style.DIM)

    def _print_summary(self, summary: RolloutSummary) -> None:
        self._console.newline()
        self._console.header("Update Summary")
        self._console.info(f"Total services found: {summary.total}")
        self._console.success(f"Successfully processed: {summary.processed}")
        if summary.failed > 0:
            self._console.error(f"Failed: {summary.failed}")
        else:
            self._console.info("Failed: 0")
