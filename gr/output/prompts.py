"""Operator prompts.

``Prompter`` is the protocol the release flows ask questions through. The
terminal implementation lives in ``gr.cli.prompts``; ``ScriptedPrompter``
answers from a script for tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from gr.core.result import Err, Ok, Result

__all__ = ["Prompter", "PromptError", "ScriptedPrompter"]


@dataclass(frozen=True, slots=True)
class PromptError:
    """The answer could not be read (aborted, closed stdin, no such option)."""

    question: str
    message: str


class Prompter(Protocol):
    def confirm(self, question: str) -> Result[bool, PromptError]: ...

    def choice(self, question: str, options: Sequence[str]) -> Result[str, PromptError]:
        """Ask for one of ``options``."""
        ...


def _empty_answers() -> dict[str, bool]:
    return {}


def _empty_choices() -> list[str | None]:
    return []


def _empty_asked() -> list[str]:
    return []


@dataclass
class ScriptedPrompter:
    """Prompter that answers from a script.

    Confirmations come from ``confirms`` (keyed by question) and fall back to
    ``default_confirm``. Choices are consumed in order from ``choices``; a
    ``None`` entry or an exhausted script yields a PromptError.
    """

    default_confirm: bool = True
    confirms: dict[str, bool] = field(default_factory=_empty_answers)
    choices: list[str | None] = field(default_factory=_empty_choices)
    asked: list[str] = field(default_factory=_empty_asked)

    def confirm(self, question: str) -> Result[bool, PromptError]:
        self.asked.append(question)
        return Ok(self.confirms.get(question, self.default_confirm))

    def choice(self, question: str, options: Sequence[str]) -> Result[str, PromptError]:
        self.asked.append(question)
        if not self.choices:
            return Err(PromptError(question, "no scripted answer left"))
        answer = self.choices.pop(0)
        if answer is None:
            return Err(PromptError(question, "input closed"))
        if answer not in options:
            return Err(PromptError(question, f"invalid option: {answer}"))
        return Ok(answer)
