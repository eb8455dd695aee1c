"""Error codes for CLI exit status.

The rollout itself reports per-track failures in its summary and exits 0 by
default. The codes below cover the cases where the process must stop or
where strict mode turns failed services into a non-zero exit.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the ``libroll`` command.

    These values are used as process exit codes and should remain stable:
    - 0: Success (also used when services failed outside strict mode)
    - 1: User error (invalid base directory, unreadable config)
    - 2: Usage error (missing or invalid flags, raised by typer itself)
    - 3: Rollout failed (strict mode and at least one service failed)
    """

    OK = 0
    USER_ERROR = 1
    USAGE_ERROR = 2
    ROLLOUT_FAILED = 3
