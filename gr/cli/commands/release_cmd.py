from __future__ import annotations

import typer

from gr.cli.commands._helpers import exit_on_error
from gr.cli.context import CLIContext, build_context
from gr.cli.prompts import TyperPrompter
from gr.git.repository import GitCli
from gr.services.release.config import repository_set
from gr.services.release.flows import Release
from gr.services.release.github import RestGitHub
from gr.services.release.gomod import GoCli


release_app = typer.Typer(add_completion=False, no_args_is_help=True)


def _release(ctx: CLIContext, *, real: bool) -> Release:
    config = ctx.config
    return Release(
        github=RestGitHub(ctx.http, token=ctx.token, api_url=config.github.api_url),
        http=ctx.http,
        vcs=GitCli(ctx.console),
        go=GoCli(ctx.console),
        prompter=TyperPrompter(),
        console=ctx.console,
        repos=repository_set(config),
        real=real,
        workdir=ctx.workdir,
        raw_url=config.github.raw_url,
        proxy=config.go.proxy,
    )


@release_app.command("major")
def major_cmd(
    tag: str = typer.Argument(..., help="Tag to release, e.g. v1.17.0"),
    real: bool = typer.Option(False, "--real", "-r", help="Real release"),
    refresh: bool = typer.Option(
        False, "--refresh", help="Refresh Go module proxy cache before release"
    ),
) -> None:
    """Release major version: framework, installer, packages and applications."""
    ctx = build_context()
    exit_on_error(_release(ctx, real=real).major(tag, refresh=refresh), ctx)


@release_app.command("patch")
def patch_cmd(
    tag: str = typer.Argument(..., help="Tag to release, e.g. v1.16.3"),
    real: bool = typer.Option(False, "--real", "-r", help="Real release"),
) -> None:
    """Release patch version: framework and goravel-lite."""
    ctx = build_context()
    exit_on_error(_release(ctx, real=real).patch(tag), ctx)


@release_app.command("preview")
def preview_cmd(
    tag: str = typer.Argument(..., help="Tag to preview"),
    packages: bool = typer.Option(
        False, "--packages", "-p", help="Whether to preview all packages' changes."
    ),
) -> None:
    """Release preview, will list all repositories' changes."""
    ctx = build_context()
    exit_on_error(_release(ctx, real=False).preview(tag, packages=packages), ctx)
