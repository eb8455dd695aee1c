"""Typed configuration loading and access.

The config file is optional. When present (``libroll.toml`` in the base
directory, or the path given with ``--config``) it overrides the defaults
below. Unknown keys are ignored; known keys with invalid values are errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, cast

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_number, get_str, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "RolloutConfig",
    "TimeoutsConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "libroll.toml"

BranchScope = Literal["auto", "version", "track"]
KindMismatch = Literal["follow-track", "fail"]
UnparseableVersion = Literal["keep", "fail"]

_BRANCH_SCOPES: tuple[str, ...] = ("auto", "version", "track")
_KIND_MISMATCH: tuple[str, ...] = ("follow-track", "fail")
_UNPARSEABLE: tuple[str, ...] = ("keep", "fail")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class TimeoutsConfig:
    """Upper bounds (seconds) for external commands."""

    git_seconds: float = 30.0
    git_network_seconds: float = 3 * 60.0
    hosting_seconds: float = 60.0


@dataclass(frozen=True, slots=True)
class RolloutConfig:
    """File names and policies used for every service."""

    remote: str = "origin"
    manifest: str = "pom.xml"
    marker: str = "release.txt"
    notes: str = "release_notes.txt"
    update_branch_scope: BranchScope = "auto"
    kind_mismatch: KindMismatch = "follow-track"
    unparseable_version: UnparseableVersion = "keep"
    pull_requests: bool = True
    fail_on_errors: bool = False


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    rollout: RolloutConfig = field(default_factory=RolloutConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a policy key holds an unsupported value.
        """
        rollout: StrDict = get_table(data, "rollout") or {}
        timeouts: StrDict = get_table(data, "timeouts") or {}
        defaults = RolloutConfig()
        default_timeouts = TimeoutsConfig()

        return cls(
            rollout=RolloutConfig(
                remote=get_str(rollout, "remote") or defaults.remote,
                manifest=get_str(rollout, "manifest") or defaults.manifest,
                marker=get_str(rollout, "marker") or defaults.marker,
                notes=get_str(rollout, "notes") or defaults.notes,
                update_branch_scope=cast(
                    BranchScope,
                    _choice(rollout, "update_branch_scope", _BRANCH_SCOPES)
                    or defaults.update_branch_scope,
                ),
                kind_mismatch=cast(
                    KindMismatch,
                    _choice(rollout, "kind_mismatch", _KIND_MISMATCH) or defaults.kind_mismatch,
                ),
                unparseable_version=cast(
                    UnparseableVersion,
                    _choice(rollout, "unparseable_version", _UNPARSEABLE)
                    or defaults.unparseable_version,
                ),
                pull_requests=_bool_or(rollout, "pull_requests", defaults.pull_requests),
                fail_on_errors=_bool_or(rollout, "fail_on_errors", defaults.fail_on_errors),
            ),
            timeouts=TimeoutsConfig(
                git_seconds=get_number(timeouts, "git_seconds") or default_timeouts.git_seconds,
                git_network_seconds=get_number(timeouts, "git_network_seconds")
                or default_timeouts.git_network_seconds,
                hosting_seconds=get_number(timeouts, "hosting_seconds")
                or default_timeouts.hosting_seconds,
            ),
        )

    def with_overrides(
        self,
        *,
        remote: str | None = None,
        pull_requests: bool | None = None,
        fail_on_errors: bool | None = None,
    ) -> Config:
        """Return a copy with CLI flag values applied on top of the file."""
        rollout = self.rollout
        if remote is not None:
            rollout = replace(rollout, remote=remote)
        if pull_requests is not None:
            rollout = replace(rollout, pull_requests=pull_requests)
        if fail_on_errors is not None:
            rollout = replace(rollout, fail_on_errors=fail_on_errors)
        return replace(self, rollout=rollout)


def _choice(table: Mapping[str, object], key: str, allowed: tuple[str, ...]) -> str | None:
    value = get_str(table, key)
    if value is None:
        return None
    if value not in allowed:
        raise ValueError(f"{key} must be one of: {', '.join(allowed)} (got {value!r})")
    return value


def _bool_or(table: Mapping[str, object], key: str, default: bool) -> bool:
    value = get_bool(table, key)
    return default if value is None else value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to libroll.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, defaults otherwise.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
