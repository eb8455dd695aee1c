"""Update command - roll a dependency version across service repositories."""

from __future__ import annotations

from pathlib import Path

import typer

from libroll.cli.context import build_context
from libroll.core.errors import ErrorCode
from libroll.services.rollout import DependencyRequest, RolloutService, TrackSelection


def _non_empty(value: str) -> str:
    if not value.strip():
        raise typer.BadParameter("must not be empty")
    return value.strip()


def update(
    artifact: str = typer.Option(
        ...,
        "-a",
        "--artifact",
        help="Artifact ID to update (e.g., common-lib)",
        callback=_non_empty,
    ),
    new_version: str = typer.Option(
        ...,
        "-v",
        "--new-version",
        help="New version (e.g., 1.2.3)",
        callback=_non_empty,
    ),
    branches: TrackSelection = typer.Option(
        ...,
        "-b",
        "--branches",
        help="Target branches: develop, release, or both",
        case_sensitive=False,
    ),
    base_dir: Path = typer.Option(
        Path("."),
        "-d",
        "--dir",
        help="Base directory containing services",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: <dir>/libroll.toml if present)",
    ),
    remote: str | None = typer.Option(None, "--remote", help="Git remote to use"),
    no_pr: bool = typer.Option(False, "--no-pr", help="Push branches without opening PRs"),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit non-zero when any service failed",
    ),
) -> None:
    """Update a shared artifact version in every service under a directory.

    Examples:

        libroll -a common-lib -v 1.2.3 -b both

        libroll -a common-lib -v 1.2.3 -b develop -d /path/to/services
    """
    ctx = build_context(base_dir, config_path)
    config = ctx.config.with_overrides(
        remote=remote,
        pull_requests=False if no_pr else None,
        fail_on_errors=True if strict else None,
    )

    summary = RolloutService(
        base_dir=ctx.base_dir,
        request=DependencyRequest(artifact_id=artifact, target_version=new_version),
        selection=branches,
        console=ctx.console,
        config=config,
    ).run()

    if summary.failed > 0 and config.rollout.fail_on_errors:
        raise typer.Exit(code=int(ErrorCode.ROLLOUT_FAILED))
