"""Branch naming contract.

Branch names are pure functions of the request and the track, so two runs
with the same arguments always target the same branches. The workflow
refuses to reuse a name that already exists instead of overwriting it.
"""

from __future__ import annotations

from enum import Enum

from libroll.services.rollout.model import DependencyRequest, Track, TrackSelection

STASH_SUFFIX = "unneeded-changes"
UPDATE_SUFFIX = "updates"


class UpdateBranchScope(Enum):
    """VERSION: one update branch per artifact+version, shared by tracks.
    TRACK: the track kind is part of the name.
    """

    VERSION = "version"
    TRACK = "track"


def resolve_scope(setting: str, selection: TrackSelection) -> UpdateBranchScope:
    """Map the ``update_branch_scope`` setting to a concrete scope.

    ``auto`` gives each track its own branch only when both run in the same
    invocation; otherwise the shared ``<artifact>-<version>-updates`` name is
    used.
    """
    match setting:
        case "version":
            return UpdateBranchScope.VERSION
        case "track":
            return UpdateBranchScope.TRACK
        case "auto":
            if selection is TrackSelection.both:
                return UpdateBranchScope.TRACK
            return UpdateBranchScope.VERSION
        case _:
            raise ValueError(f"unknown update branch scope: {setting}")


def stash_branch_name(request: DependencyRequest, track: Track) -> str:
    return f"{request.artifact_id}-{request.target_version}-{track.kind}-{STASH_SUFFIX}"


def update_branch_name(
    request: DependencyRequest,
    track: Track,
    *,
    scope: UpdateBranchScope = UpdateBranchScope.VERSION,
) -> str:
    if scope is UpdateBranchScope.TRACK:
        return f"{request.artifact_id}-{request.target_version}-{track.kind}-{UPDATE_SUFFIX}"
    return f"{request.artifact_id}-{request.target_version}-{UPDATE_SUFFIX}"
