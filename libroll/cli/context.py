from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from libroll.core.config import CONFIG_FILE_NAME, Config, load_config, load_config_or_default
from libroll.core.errors import ErrorCode
from libroll.core.result import Err
from libroll.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    base_dir: Path
    config: Config
    console: ConsoleProtocol


def build_context(base_dir: Path, config_path: Path | None = None) -> CLIContext:
    """Resolve the base directory and load config; exit before any repo is touched."""
    console = RichConsole()

    try:
        root = base_dir.expanduser().resolve()
    except OSError as e:
        console.error(f"invalid base directory: {e}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        console.error(f"base directory not found: {root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if config_path is not None:
        config_result = load_config(config_path.expanduser())
    else:
        config_result = load_config_or_default(root / CONFIG_FILE_NAME)

    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(base_dir=root, config=config_result.value, console=console)
