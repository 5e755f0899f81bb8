"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from gr.core.result import Err, Result
from gr.output.errors import print_release_error, release_error_exit_code
from gr.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from gr.cli.context import CLIContext

T = TypeVar("T")


def exit_on_error(result: Result[T, ReleaseError], ctx: CLIContext) -> None:
    """Exit with the mapped error code if result is Err, otherwise return.

    Replaces the pattern:
        match result:
            case Err(e):
                print_release_error(e, ctx.console)
                raise typer.Exit(code=release_error_exit_code(e))
            case Ok(_):
                pass
    """
    if isinstance(result, Err):
        ctx.console.newline()
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))
