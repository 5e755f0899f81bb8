"""Error codes for CLI exit status.

The numeric values are process exit codes and should remain stable:
- 0: Success
- 1: User error (bad tag, rejected confirmation)
- 2: Environment error (missing token, missing git or go)
- 3: Release error (smoke tests failed, git push rejected)
- 4: Network error (GitHub API or module proxy unreachable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_ERROR = 3
    NETWORK_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
