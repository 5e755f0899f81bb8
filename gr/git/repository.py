"""Git working-copy operations.

``Repository`` wraps a single checkout and runs git through the process
runner. ``VersionControl`` is the typed interface release flows depend on;
``GitCli`` implements it on top of ``Repository`` so tests can swap in a
fake without matching command strings.

Usage:
    vcs = GitCli(console)
    match vcs.clone("git@github.com:goravel/gin.git", Path("gin"), branch="master"):
        case Ok(_):
            vcs.create_branch(Path("gin"), "auto-upgrade/v1.16.0")
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from gr.core.result import Err, Ok, Result
from gr.output.console import Style
from gr.platform.process import ProcessError
from gr.platform.process import run as run_process

if TYPE_CHECKING:
    from gr.output.console import ConsoleProtocol

GIT_TIMEOUT_SECONDS = 30.0
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitCli",
    "GitError",
    "MockVersionControl",
    "Repository",
    "VersionControl",
    "clone",
    "remote_url",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def remote_url(owner: str, repo: str) -> str:
    return f"git@github.com:{owner}/{repo}.git"


def _timeout_for(command: str) -> float:
    if command in {"fetch", "pull", "push", "clone"}:
        return GIT_NETWORK_TIMEOUT_SECONDS
    return GIT_TIMEOUT_SECONDS


def _git_error(command: str, e: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or fallback,
        returncode=e.returncode,
    )


def clone(remote: str, dest: Path, *, branch: str, depth: int | None = 1) -> Result[Repository, GitError]:
    """Clone ``remote`` into ``dest`` (which must not exist yet)."""
    args = ["git", "clone", "--branch", branch]
    if depth is not None:
        args += ["--depth", str(depth)]
    args += [remote, str(dest)]

    parent = dest.parent
    parent.mkdir(parents=True, exist_ok=True)
    result = run_process(args, cwd=parent, timeout=_timeout_for("clone"))
    if isinstance(result, Err):
        return Err(_git_error("clone", result.error, "clone failed"))
    return Ok(Repository(dest))


class Repository:
    """A single git checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def is_clean(self) -> Result[bool, GitError]:
        """Check whether the working tree has no changes (untracked included)."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return Ok(stdout.strip() == "")
            case Err(e):
                return Err(_git_error("status", e, "git status failed"))

    def checkout_new_branch(self, branch: str) -> Result[None, GitError]:
        """Create ``branch`` from HEAD, resetting it if it already exists."""
        result = self._run(["checkout", "-B", branch])
        if isinstance(result, Err):
            return Err(_git_error("checkout", result.error, f"cannot create {branch}"))
        return Ok(None)

    def commit_all(self, message: str) -> Result[None, GitError]:
        added = self._run(["add", "--all"])
        if isinstance(added, Err):
            return Err(_git_error("add", added.error, "git add failed"))
        committed = self._run(["commit", "-m", message])
        if isinstance(committed, Err):
            return Err(_git_error("commit", committed.error, "git commit failed"))
        return Ok(None)

    def push(self, branch: str, *, force: bool = False) -> Result[None, GitError]:
        args = ["push", "origin", branch]
        if force:
            args.append("--force")
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_git_error("push", result.error, f"push of {branch} failed"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            timeout=_timeout_for(command),
        )


class VersionControl(Protocol):
    """Typed git operations used by the release flows."""

    def clone(self, remote: str, dest: Path, *, branch: str) -> Result[None, GitError]: ...

    def create_branch(self, path: Path, branch: str) -> Result[None, GitError]: ...

    def is_clean(self, path: Path) -> Result[bool, GitError]: ...

    def commit_all(self, path: Path, message: str) -> Result[None, GitError]: ...

    def push(self, path: Path, branch: str, *, force: bool = True) -> Result[None, GitError]: ...

    def remove(self, path: Path) -> None:
        """Delete a working copy; missing paths are ignored."""
        ...


class GitCli:
    """VersionControl backed by the git executable.

    Every command is echoed to the console before it runs.
    """

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def clone(self, remote: str, dest: Path, *, branch: str) -> Result[None, GitError]:
        self._echo(f"git clone --branch {branch} --depth 1 {remote} {dest}")
        result = clone(remote, dest, branch=branch)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_branch(self, path: Path, branch: str) -> Result[None, GitError]:
        self._echo(f"git -C {path} checkout -B {branch}")
        return Repository(path).checkout_new_branch(branch)

    def is_clean(self, path: Path) -> Result[bool, GitError]:
        return Repository(path).is_clean()

    def commit_all(self, path: Path, message: str) -> Result[None, GitError]:
        self._echo(f'git -C {path} commit --all -m "{message}"')
        return Repository(path).commit_all(message)

    def push(self, path: Path, branch: str, *, force: bool = True) -> Result[None, GitError]:
        self._echo(f"git -C {path} push origin {branch}{' --force' if force else ''}")
        return Repository(path).push(branch, force=force)

    def remove(self, path: Path) -> None:
        if path.exists():
            shutil.rmtree(path, ignore_errors=True)

    def _echo(self, command: str) -> None:
        self._console.print(f"$ {command}", Style.DIM)


def _empty_ops() -> list[tuple[str, ...]]:
    return []


def _empty_failures() -> dict[str, GitError]:
    return {}


@dataclass
class MockVersionControl:
    """VersionControl that records operations instead of running git.

    ``clean`` is what ``is_clean`` answers; ``failures`` maps an operation
    name ("clone", "create_branch", "commit_all", "push") to the error it
    returns.
    """

    clean: bool = False
    ops: list[tuple[str, ...]] = field(default_factory=_empty_ops)
    failures: dict[str, GitError] = field(default_factory=_empty_failures)

    def clone(self, remote: str, dest: Path, *, branch: str) -> Result[None, GitError]:
        return self._record("clone", remote, dest.name, branch)

    def create_branch(self, path: Path, branch: str) -> Result[None, GitError]:
        return self._record("create_branch", path.name, branch)

    def is_clean(self, path: Path) -> Result[bool, GitError]:
        self.ops.append(("is_clean", path.name))
        return Ok(self.clean)

    def commit_all(self, path: Path, message: str) -> Result[None, GitError]:
        return self._record("commit_all", path.name, message)

    def push(self, path: Path, branch: str, *, force: bool = True) -> Result[None, GitError]:
        return self._record("push", path.name, branch)

    def remove(self, path: Path) -> None:
        self.ops.append(("remove", path.name))

    def names(self) -> list[str]:
        return [op[0] for op in self.ops]

    def _record(self, name: str, *args: str) -> Result[None, GitError]:
        self.ops.append((name, *args))
        failure = self.failures.get(name)
        if failure is not None:
            return Err(failure)
        return Ok(None)
