from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum
from pathlib import Path


class VersionKind(StrEnum):
    """Suffix token of a service version."""

    SNAPSHOT = "SNAPSHOT"
    RC = "RC"


class Track(Enum):
    """A release line: its base branch and the version kind it publishes."""

    DEVELOP = ("develop", VersionKind.SNAPSHOT)
    RELEASE = ("release", VersionKind.RC)

    @property
    def branch(self) -> str:
        return self.value[0]

    @property
    def kind(self) -> VersionKind:
        return self.value[1]

    def __str__(self) -> str:
        return self.branch


class TrackSelection(StrEnum):
    """Operator choice for ``-b``."""

    develop = "develop"
    release = "release"
    both = "both"

    @property
    def tracks(self) -> tuple[Track, ...]:
        match self:
            case TrackSelection.develop:
                return (Track.DEVELOP,)
            case TrackSelection.release:
                return (Track.RELEASE,)
            case TrackSelection.both:
                return (Track.DEVELOP, Track.RELEASE)


@dataclass(frozen=True, slots=True)
class DependencyRequest:
    """The shared-library version being rolled out in this invocation."""

    artifact_id: str
    target_version: str


@dataclass(frozen=True, slots=True)
class Service:
    path: Path
    name: str
    has_manifest: bool


@dataclass(frozen=True, slots=True)
class StashRecord:
    """Side branch holding the changes found in a dirty working tree."""

    branch: str
    message: str


@dataclass(frozen=True, slots=True)
class ReviewCreated:
    url: str


@dataclass(frozen=True, slots=True)
class ManualActionRequired:
    """No pull request was opened; the operator has to open one for ``head``."""

    head: str
    reason: str


ReviewResult = ReviewCreated | ManualActionRequired


@dataclass(frozen=True, slots=True)
class Updated:
    service_version: str
    dependency_version: str
    update_branch: str
    review: ReviewResult
    stash: StashRecord | None = None


@dataclass(frozen=True, slots=True)
class SkippedNoManifest:
    manifest: Path


@dataclass(frozen=True, slots=True)
class SkippedBranchMissing:
    branch: str


@dataclass(frozen=True, slots=True)
class Failed:
    reason: str
    hint: str | None = None


UpdateOutcome = Updated | SkippedNoManifest | SkippedBranchMissing | Failed


@dataclass(frozen=True, slots=True)
class TrackResult:
    track: Track
    outcome: UpdateOutcome


@dataclass(frozen=True, slots=True)
class ServiceReport:
    service: Service
    results: tuple[TrackResult, ...]

    @property
    def failed(self) -> bool:
        """A single failed track fails the whole service."""
        return any(isinstance(r.outcome, Failed) for r in self.results)


@dataclass(frozen=True, slots=True)
class RolloutSummary:
    total: int
    processed: int
    failed: int
    reports: tuple[ServiceReport, ...] = ()
    skipped_dirs: tuple[Path, ...] = ()
