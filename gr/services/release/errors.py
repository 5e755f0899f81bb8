from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

ReleaseErrorKind: TypeAlias = Literal[
    "not_confirmed",
    "choice_failed",
    "github_failed",
    "command_failed",
    "test_failed",
    "version_not_found",
    "invalid_tag",
    "proxy_failed",
    "token_missing",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
