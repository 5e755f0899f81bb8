from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from gr.core.config import TOKEN_ENV_VAR, Config, load_config
from gr.core.errors import ErrorCode
from gr.core.result import Err, Ok, Result
from gr.output.console import ConsoleProtocol, RichConsole
from gr.output.errors import print_release_error, release_error_exit_code
from gr.platform.http import HttpClient, RealHttpClient
from gr.services.release.errors import ReleaseError

CONFIG_ENV_VAR = "GR_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    token: str
    console: ConsoleProtocol
    http: HttpClient
    workdir: Path


def require_token(config: Config) -> Result[str, ReleaseError]:
    if config.token is None:
        return Err(
            ReleaseError(
                kind="token_missing",
                message="github token is not set",
                hint=f"export {TOKEN_ENV_VAR}=<personal access token>",
            )
        )
    return Ok(config.token)


def build_context() -> CLIContext:
    override = os.environ.get(CONFIG_ENV_VAR)
    config_result = load_config(Path(override) if override else None)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    config = config_result.value

    console = RichConsole()
    token = require_token(config)
    if isinstance(token, Err):
        print_release_error(token.error, console)
        raise typer.Exit(code=release_error_exit_code(token.error))

    return CLIContext(
        config=config,
        token=token.value,
        console=console,
        http=RealHttpClient(),
        workdir=Path(config.paths.workdir).expanduser().resolve(),
    )
