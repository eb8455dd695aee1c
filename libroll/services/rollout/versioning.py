"""Service version grammar and the per-track version state machine.

A service version looks like ``1.0.5-SNAPSHOT-2``: three numeric parts, the
kind of the track it was built for, and a sequence counter bumped on every
rollout. Strings outside that grammar are never repaired or guessed; they
travel through as ``Unparseable`` / ``PassThrough`` and the caller decides.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from libroll.services.rollout.model import DependencyRequest, Track, VersionKind

_SERVICE_VERSION_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)-(SNAPSHOT|RC)-([0-9]+)$")


class KindPolicy(Enum):
    """What to do when a service's recorded kind does not match its track.

    FOLLOW_TRACK: the branch is the authority; the kind is corrected silently.
    REJECT_MISMATCH: the mismatch is reported and the track is not updated.
    """

    FOLLOW_TRACK = "follow-track"
    REJECT_MISMATCH = "fail"


class UnparseablePolicy(Enum):
    """What to do when a service's own version is outside the grammar.

    KEEP: keep the original string, warn, and still inject the dependency.
    FAIL: report the track as failed.
    """

    KEEP = "keep"
    FAIL = "fail"


@dataclass(frozen=True, slots=True, order=True)
class ServiceVersion:
    major: int
    minor: int
    patch: int
    kind: VersionKind
    sequence: int

    def format(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}-{self.kind}-{self.sequence}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True, slots=True)
class Unparseable:
    raw: str


@dataclass(frozen=True, slots=True)
class PassThrough:
    """Instruction to keep ``raw`` verbatim instead of a computed version."""

    raw: str


def parse_service_version(text: str) -> ServiceVersion | Unparseable:
    m = _SERVICE_VERSION_RE.match(text.strip())
    if m is None:
        return Unparseable(text)
    return ServiceVersion(
        major=int(m.group(1)),
        minor=int(m.group(2)),
        patch=int(m.group(3)),
        kind=VersionKind(m.group(4)),
        sequence=int(m.group(5)),
    )


def kind_mismatch(
    current: ServiceVersion | Unparseable,
    track: Track,
    policy: KindPolicy,
) -> str | None:
    """Describe a kind/track mismatch the policy refuses, else None."""
    if policy is KindPolicy.FOLLOW_TRACK or not isinstance(current, ServiceVersion):
        return None
    if current.kind == track.kind:
        return None
    return f"version {current} carries {current.kind} but track {track} expects {track.kind}"


def next_version(
    current: ServiceVersion | Unparseable,
    track: Track,
) -> ServiceVersion | PassThrough:
    """Advance ``current`` by one step on ``track``.

    The sequence goes up by exactly one and the kind becomes the track's kind,
    whatever kind ``current`` carried (see ``KindPolicy.FOLLOW_TRACK``).
    """
    match current:
        case Unparseable(raw=raw):
            return PassThrough(raw)
        case ServiceVersion():
            return ServiceVersion(
                major=current.major,
                minor=current.minor,
                patch=current.patch,
                kind=track.kind,
                sequence=current.sequence + 1,
            )


def build_dependency_version(request: DependencyRequest, track: Track) -> str:
    """Version to inject for the shared library, e.g. ``2.0.0-RC``."""
    return f"{request.target_version}-{track.kind}"
