"""Smoke tests of unreleased framework master in dependent repositories."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from gr.core.result import Err, Ok, Result
from gr.git.repository import VersionControl, remote_url
from gr.output.console import ConsoleProtocol
from gr.services.release.config import TEST_FAIL_MARKER, RepositorySet
from gr.services.release.errors import ReleaseError
from gr.services.release.gomod import GoToolchain, Requirement


def smoke_test(
    *,
    vcs: VersionControl,
    go: GoToolchain,
    console: ConsoleProtocol,
    repos: RepositorySet,
    workdir: Path,
    repo: str,
    requirements: Sequence[Requirement],
) -> Result[None, ReleaseError]:
    """Clone ``repo`` at the default branch, bump requirements and run go test."""
    owner = repos.owner
    console.info(f"Testing in {owner}/{repo}...")

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

        got = go.get(path, requirements)
        if isinstance(got, Err):
            return Err(
                ReleaseError(
                    kind="command_failed",
                    message=f"failed to upgrade dependencies for {owner}/{repo}",
                    hint=got.error.stderr.strip() or None,
                )
            )
        tidied = go.tidy(path)
        if isinstance(tidied, Err):
            return Err(
                ReleaseError(
                    kind="command_failed",
                    message=f"failed to tidy go.mod for {owner}/{repo}",
                    hint=tidied.error.stderr.strip() or None,
                )
            )

        tested = go.test(path, fail_marker=TEST_FAIL_MARKER)
        if isinstance(tested, Err):
            return Err(
                ReleaseError(
                    kind="test_failed",
                    message=f"failed to test in {owner}/{repo}",
                    hint=tested.error.stderr.strip() or f"exit {tested.error.returncode}",
                )
            )
    finally:
        vcs.remove(path)

    console.success(f"Testing in {owner}/{repo} success!")
    return Ok(None)


def smoke_test_all(
    *,
    vcs: VersionControl,
    go: GoToolchain,
    console: ConsoleProtocol,
    repos: RepositorySet,
    workdir: Path,
    example: str,
) -> Result[None, ReleaseError]:
    """Every package against framework@master, then the example app against everything."""
    branch = repos.default_branch
    framework = (repos.module(repos.framework), branch)

    for package in repos.packages:
        result = smoke_test(
            vcs=vcs,
            go=go,
            console=console,
            repos=repos,
            workdir=workdir,
            repo=package,
            requirements=[framework],
        )
        if isinstance(result, Err):
            return result

    everything = [framework, *((repos.module(p), branch) for p in repos.packages)]
    return smoke_test(
        vcs=vcs,
        go=go,
        console=console,
        repos=repos,
        workdir=workdir,
        repo=example,
        requirements=everything,
    )
