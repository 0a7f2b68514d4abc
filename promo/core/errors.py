"""Exit codes for the promo CLI.

The CI host only sees the process exit status, so these values are the
contract between a promotion run and the pipeline that invoked it.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Promotion succeeded or was deliberately skipped by the gate
    - 1: User error (malformed branch name, bad option)
    - 2: Environment error (unreadable config, git missing)
    - 3: Promotion failed on a local step (changelog, checkout, merge, tag)
    - 4: Network error (push rejected by the remote)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    PROMOTION_FAILED = 3
    NETWORK_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
