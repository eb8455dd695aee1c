from __future__ import annotations

import pytest

from libroll.services.rollout.model import DependencyRequest, Track, VersionKind
from libroll.services.rollout.versioning import (
    KindPolicy,
    PassThrough,
    ServiceVersion,
    Unparseable,
    build_dependency_version,
    kind_mismatch,
    next_version,
    parse_service_version,
)


def test_parse_snapshot_version() -> None:
    assert parse_service_version("1.0.5-SNAPSHOT-1") == ServiceVersion(
        1, 0, 5, VersionKind.SNAPSHOT, 1
    )


def test_parse_rc_version_trims_whitespace() -> None:
    assert parse_service_version("  2.10.0-RC-12\n") == ServiceVersion(2, 10, 0, VersionKind.RC, 12)


@pytest.mark.parametrize(
    "text",
    [
        "1.0.5",
        "1.0.5-SNAPSHOT",
        "1.0-SNAPSHOT-1",
        "1.0.5-snapshot-1",
        "1.0.5-BETA-1",
        "1.0.5-SNAPSHOT-1-extra",
        "v1.0.5-RC-1",
        "1.0.5-RC--1",
        "١.2.3-RC-4",
        "1.2.3-RC-٤",
        "",
    ],
)
def test_parse_rejects_anything_outside_the_grammar(text: str) -> None:
    assert parse_service_version(text) == Unparseable(text)


@pytest.mark.parametrize(
    "version",
    [
        ServiceVersion(0, 0, 0, VersionKind.SNAPSHOT, 0),
        ServiceVersion(1, 2, 3, VersionKind.RC, 4),
        ServiceVersion(10, 20, 30, VersionKind.SNAPSHOT, 999),
    ],
)
def test_format_parse_roundtrip(version: ServiceVersion) -> None:
    assert parse_service_version(version.format()) == version
    assert str(version) == version.format()


@pytest.mark.parametrize("track", [Track.DEVELOP, Track.RELEASE])
def test_next_version_increments_sequence_by_one(track: Track) -> None:
    current = ServiceVersion(1, 0, 5, track.kind, 7)
    advanced = next_version(current, track)
    assert isinstance(advanced, ServiceVersion)
    assert advanced.sequence == 8
    assert (advanced.major, advanced.minor, advanced.patch) == (1, 0, 5)


def test_next_version_takes_kind_from_track() -> None:
    current = parse_service_version("1.2.3-RC-4")
    assert next_version(current, Track.DEVELOP) == ServiceVersion(
        1, 2, 3, VersionKind.SNAPSHOT, 5
    )


def test_next_version_release_track_yields_rc() -> None:
    current = parse_service_version("1.0.5-SNAPSHOT-2")
    advanced = next_version(current, Track.RELEASE)
    assert isinstance(advanced, ServiceVersion)
    assert advanced.format() == "1.0.5-RC-3"


def test_next_version_passes_unparseable_through() -> None:
    assert next_version(Unparseable("1.0-custom"), Track.DEVELOP) == PassThrough("1.0-custom")


def test_kind_mismatch_is_ignored_when_following_track() -> None:
    current = parse_service_version("1.2.3-RC-4")
    assert kind_mismatch(current, Track.DEVELOP, KindPolicy.FOLLOW_TRACK) is None


def test_kind_mismatch_reported_when_rejecting() -> None:
    current = parse_service_version("1.2.3-RC-4")
    message = kind_mismatch(current, Track.DEVELOP, KindPolicy.REJECT_MISMATCH)
    assert message is not None
    assert "SNAPSHOT" in message


def test_kind_mismatch_none_for_matching_or_unparseable() -> None:
    matching = parse_service_version("1.2.3-SNAPSHOT-4")
    assert kind_mismatch(matching, Track.DEVELOP, KindPolicy.REJECT_MISMATCH) is None
    assert kind_mismatch(Unparseable("x"), Track.DEVELOP, KindPolicy.REJECT_MISMATCH) is None


def test_build_dependency_version() -> None:
    request = DependencyRequest(artifact_id="common-lib", target_version="2.0.0")
    assert build_dependency_version(request, Track.RELEASE) == "2.0.0-RC"
    assert build_dependency_version(request, Track.DEVELOP) == "2.0.0-SNAPSHOT"
