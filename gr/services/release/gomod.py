"""Go toolchain operations used by smoke tests and upgrade PRs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TypeAlias

from gr.core.result import Err, Ok, Result
from gr.output.console import Style
from gr.platform.process import ProcessError, run as run_process, run_streaming

if TYPE_CHECKING:
    from collections.abc import Sequence

    from gr.output.console import ConsoleProtocol

GO_TIMEOUT_SECONDS = 5 * 60.0

__all__ = ["GoCli", "GoToolchain", "MockGoToolchain", "Requirement"]


# (module path, version)
Requirement: TypeAlias = tuple[str, str]


class GoToolchain(Protocol):
    def get(self, path: Path, requirements: Sequence[Requirement]) -> Result[None, ProcessError]:
        """Run ``go get module@version`` for each requirement, in order."""
        ...

    def tidy(self, path: Path) -> Result[None, ProcessError]: ...

    def test(self, path: Path, *, fail_marker: str) -> Result[None, ProcessError]:
        """Run ``go test ./...`` streaming the output."""
        ...


class GoCli:
    """GoToolchain backed by the go executable."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def get(self, path: Path, requirements: Sequence[Requirement]) -> Result[None, ProcessError]:
        for module, version in requirements:
            result = self._run(path, ["go", "get", f"{module}@{version}"])
            if isinstance(result, Err):
                return result
        return Ok(None)

    def tidy(self, path: Path) -> Result[None, ProcessError]:
        return self._run(path, ["go", "mod", "tidy"])

    def test(self, path: Path, *, fail_marker: str) -> Result[None, ProcessError]:
        cmd = ["go", "test", "./..."]
        self._echo(path, cmd)
        return run_streaming(
            cmd,
            cwd=path,
            on_line=lambda line: self._console.print(line, Style.DIM),
            fail_marker=fail_marker,
        )

    def _run(self, path: Path, cmd: list[str]) -> Result[None, ProcessError]:
        self._echo(path, cmd)
        result = run_process(cmd, cwd=path, timeout=GO_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def _echo(self, path: Path, cmd: list[str]) -> None:
        self._console.print(f"$ (cd {path.name} && {' '.join(cmd)})", Style.DIM)


def _empty_calls() -> list[tuple[str, ...]]:
    return []


@dataclass
class MockGoToolchain:
    """GoToolchain that records calls; ``failing`` names the call that fails."""

    failing: str | None = None
    calls: list[tuple[str, ...]] = field(default_factory=_empty_calls)

    def get(self, path: Path, requirements: Sequence[Requirement]) -> Result[None, ProcessError]:
        self.calls.append(("get", path.name, *(f"{m}@{v}" for m, v in requirements)))
        return self._answer("get", ["go", "get"])

    def tidy(self, path: Path) -> Result[None, ProcessError]:
        self.calls.append(("tidy", path.name))
        return self._answer("tidy", ["go", "mod", "tidy"])

    def test(self, path: Path, *, fail_marker: str) -> Result[None, ProcessError]:
        self.calls.append(("test", path.name))
        return self._answer("test", ["go", "test", "./..."])

    def _answer(self, name: str, cmd: list[str]) -> Result[None, ProcessError]:
        if self.failing == name:
            return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr=f"{name} failed"))
        return Ok(None)
