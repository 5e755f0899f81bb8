"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gr.core.errors import ErrorCode
from gr.output.console import Style
from gr.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from gr.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error to console with appropriate formatting."""
    match error.kind:
        case "test_failed":
            console.error(f"{error.message} (see the test output above)")
        case "not_confirmed":
            console.error(f"{error.message}, release aborted")
        case _:
            console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "not_confirmed" | "choice_failed" | "invalid_tag":
            return int(ErrorCode.USER_ERROR)
        case "token_missing":
            return int(ErrorCode.ENV_ERROR)
        case "github_failed" | "proxy_failed" | "version_not_found":
            return int(ErrorCode.NETWORK_ERROR)
        case "command_failed" | "test_failed":
            return int(ErrorCode.RELEASE_ERROR)
    return int(ErrorCode.RELEASE_ERROR)
