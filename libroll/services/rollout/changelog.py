from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from libroll.core.result import Err, Ok, Result
from libroll.platform.files import atomic_write_text, read_text_if_exists
from libroll.services.rollout.model import DependencyRequest


@dataclass(frozen=True, slots=True)
class ChangelogError:
    message: str
    path: Path


def release_note_for(request: DependencyRequest, dependency_version: str) -> str:
    return f"Update {request.artifact_id} version to {dependency_version}"


def write_current_version_marker(path: Path, version: str) -> Result[None, ChangelogError]:
    """Replace the marker file with ``version``; a missing file is created."""
    try:
        atomic_write_text(path, f"{version}\n")
    except OSError as e:
        return Err(ChangelogError(f"failed to write version marker: {e}", path))
    return Ok(None)


def prepend_release_note(path: Path, note: str) -> Result[None, ChangelogError]:
    """Put ``note`` on top of the notes file, keeping every previous line."""
    try:
        previous = read_text_if_exists(path)
    except (OSError, UnicodeDecodeError) as e:
        return Err(ChangelogError(f"failed to read release notes: {e}", path))

    content = note if previous is None else f"{note}\n{previous}"
    try:
        atomic_write_text(path, content)
    except OSError as e:
        return Err(ChangelogError(f"failed to write release notes: {e}", path))
    return Ok(None)
