from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class RolloutError:
    kind: Literal[
        "gh_missing",
        "pr_failed",
    ]
    message: str
    hint: str | None = None
