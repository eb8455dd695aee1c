from __future__ import annotations

from typing import Protocol

from libroll.core.result import Err, Ok, Result
from libroll.output.console import ConsoleProtocol
from libroll.services.rollout.errors import RolloutError
from libroll.services.rollout.model import ManualActionRequired, ReviewCreated, ReviewResult


class HostingClient(Protocol):
    def create_pull_request(
        self,
        *,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> Result[str, RolloutError]: ...


class Publisher:
    """Requests review of a pushed update branch.

    Without a hosting client the branch is still pushed; the operator is told
    which branch needs a manual pull request and the track is not failed.
    """

    def __init__(
        self,
        *,
        client: HostingClient | None,
        console: ConsoleProtocol,
        unavailable_reason: str = "no hosting client configured",
    ) -> None:
        self._client = client
        self._console = console
        self._unavailable_reason = unavailable_reason

    def request_review(
        self,
        *,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> Result[ReviewResult, RolloutError]:
        if self._client is None:
            self._console.warning(
                f"{self._unavailable_reason}; create a PR manually for branch: {head} -> {base}"
            )
            return Ok(ManualActionRequired(head=head, reason=self._unavailable_reason))

        created = self._client.create_pull_request(head=head, base=base, title=title, body=body)
        if isinstance(created, Err):
            return created

        self._console.success(f"PR created: {created.value}")
        return Ok(ReviewCreated(url=created.value))
