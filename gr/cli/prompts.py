from __future__ import annotations

from collections.abc import Sequence

import click
import typer

from gr.core.result import Err, Ok, Result
from gr.output.prompts import PromptError


class TyperPrompter:
    """Prompter reading answers from the terminal."""

    def confirm(self, question: str) -> Result[bool, PromptError]:
        try:
            return Ok(typer.confirm(question, default=False))
        except (typer.Abort, EOFError) as e:
            return Err(PromptError(question, str(e) or "aborted"))

    def choice(self, question: str, options: Sequence[str]) -> Result[str, PromptError]:
        try:
            answer: str = typer.prompt(
                question,
                type=click.Choice(list(options)),
                default=options[0] if options else None,
            )
        except (typer.Abort, EOFError) as e:
            return Err(PromptError(question, str(e) or "aborted"))
        return Ok(answer)
