from __future__ import annotations

import typer

from libroll.cli.commands.update import update

_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    context_settings=_CONTEXT_SETTINGS,
)

# Single command: typer runs it directly, `libroll -a ... -v ... -b ...`.
app.command(context_settings=_CONTEXT_SETTINGS)(update)


def main() -> None:
    app()
