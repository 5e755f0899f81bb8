"""Maintenance branches and default-branch switches."""

from __future__ import annotations

from pathlib import Path

from gr.core.result import Err, Ok, Result
from gr.git.repository import VersionControl, remote_url
from gr.output.console import ConsoleProtocol
from gr.services.release.config import RepositorySet
from gr.services.release.errors import ReleaseError
from gr.services.release.github import GitHub


def push_branch(
    *,
    vcs: VersionControl,
    console: ConsoleProtocol,
    repos: RepositorySet,
    workdir: Path,
    repo: str,
    branch: str,
    real: bool,
) -> Result[None, ReleaseError]:
    """Create ``branch`` from the default branch of ``repo`` and force-push it."""
    owner = repos.owner
    console.info(f"Pushing branch {branch} for {owner}/{repo}...")
    if not real:
        console.warning(f"Preview mode, skip pushing branch {branch} for {owner}/{repo}")
        return Ok(None)

    path = workdir / repo
    vcs.remove(path)
    try:
        cloned = vcs.clone(remote_url(owner, repo), path, branch=repos.default_branch)
        if isinstance(cloned, Err):
            return Err(
                ReleaseError(
                    kind="command_failed",
                    message=f"failed to clone {owner}/{repo}",
                    hint=cloned.error.message,
                )
            )
        created = vcs.create_branch(path, branch)
        if isinstance(created, Err):
            return Err(
                ReleaseError(
                    kind="command_failed",
                    message=f"failed to create branch {branch} for {owner}/{repo}",
                    hint=created.error.message,
                )
            )
        pushed = vcs.push(path, branch, force=True)
        if isinstance(pushed, Err):
            return Err(
                ReleaseError(
                    kind="command_failed",
                    message=f"failed to push branch {branch} for {owner}/{repo}",
                    hint=pushed.error.message,
                )
            )
    finally:
        vcs.remove(path)

    console.success(f"{owner}/{repo} {branch} pushed")
    return Ok(None)


def set_default_branch(
    *,
    github: GitHub,
    console: ConsoleProtocol,
    owner: str,
    repo: str,
    branch: str,
    real: bool,
) -> Result[None, ReleaseError]:
    if not real:
        console.warning(f"Preview mode, skip setting {owner}/{repo} default branch to {branch}")
        return Ok(None)

    result = github.update_default_branch(owner, repo, branch)
    if isinstance(result, Err):
        return result
    console.success(f"{owner}/{repo} default branch is now {branch}")
    return Ok(None)
