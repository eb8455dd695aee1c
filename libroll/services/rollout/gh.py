from __future__ import annotations

import shutil
from pathlib import Path

from libroll.core.result import Err, Ok, Result
from libroll.output.console import ConsoleProtocol, Style
from libroll.platform.process import run as run_process
from libroll.services.rollout.errors import RolloutError

GH_TIMEOUT_SECONDS = 60.0


def ensure_gh_available() -> Result[None, RolloutError]:
    if shutil.which("gh") is None:
        return Err(
            RolloutError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


class GhHostingClient:
    """Opens pull requests with ``gh pr create`` from inside the checkout.

    gh infers the GitHub repository from the checkout's remote, so the client
    only needs the working directory.
    """

    def __init__(
        self,
        *,
        repo_root: Path,
        console: ConsoleProtocol,
        timeout: float = GH_TIMEOUT_SECONDS,
    ) -> None:
        self._repo_root = repo_root
        self._console = console
        self._timeout = timeout

    def create_pull_request(
        self,
        *,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> Result[str, RolloutError]:
        cmd = [
            "gh",
            "pr",
            "create",
            "--base",
            base,
            "--head",
            head,
            "--title",
            title,
            "--body",
            body,
        ]
        self._console.print(f"gh pr create --base {base} --head {head}", Style.DIM)

        result = run_process(cmd, cwd=self._repo_root, timeout=self._timeout)
        if isinstance(result, Err):
            e = result.error
            return Err(
                RolloutError(
                    kind="pr_failed",
                    message=f"failed to create PR {head} -> {base}",
                    hint=e.stderr.strip() or None,
                )
            )

        # gh prints the PR URL last; warnings may precede it.
        lines = [ln.strip() for ln in result.value.splitlines() if ln.strip()]
        url = lines[-1] if lines else ""
        if not url.startswith("https://"):
            return Err(
                RolloutError(
                    kind="pr_failed",
                    message="unexpected gh pr create output",
                    hint=url or None,
                )
            )
        return Ok(url)
