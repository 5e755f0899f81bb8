"""Result type for explicit error handling.

Release steps return ``Ok(value)`` or ``Err(error)`` instead of raising, so
every stage of a flow has to decide what a failure of the previous stage
means.

Usage:
    def latest_tag(repo: str) -> Result[str, ReleaseError]:
        if repo not in known:
            return Err(ReleaseError(kind="invalid_input", message=repo))
        return Ok("v1.16.0")

    match latest_tag("gin"):
        case Ok(tag):
            print(tag)
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Union[Ok[T], Err[E]]
