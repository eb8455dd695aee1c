"""Roll a shared library version across service repositories."""

from libroll.services.rollout.model import (
    DependencyRequest,
    Failed,
    ManualActionRequired,
    ReviewCreated,
    RolloutSummary,
    Service,
    SkippedBranchMissing,
    SkippedNoManifest,
    Track,
    TrackSelection,
    Updated,
    UpdateOutcome,
    VersionKind,
)
from libroll.services.rollout.orchestrator import RolloutService, discover_services
from libroll.services.rollout.versioning import (
    PassThrough,
    ServiceVersion,
    Unparseable,
    build_dependency_version,
    next_version,
    parse_service_version,
)
from libroll.services.rollout.workflow import WorkflowController, WorkflowSettings

__all__ = [
    # model
    "DependencyRequest",
    "Failed",
    "ManualActionRequired",
    "ReviewCreated",
    "RolloutSummary",
    "Service",
    "SkippedBranchMissing",
    "SkippedNoManifest",
    "Track",
    "TrackSelection",
    "Updated",
    "UpdateOutcome",
    "VersionKind",
    # versioning
    "PassThrough",
    "ServiceVersion",
    "Unparseable",
    "build_dependency_version",
    "next_version",
    "parse_service_version",
    # services
    "RolloutService",
    "WorkflowController",
    "WorkflowSettings",
    "discover_services",
]
