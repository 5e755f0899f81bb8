"""Dependency-upgrade pull requests.

A working copy is cloned into ``workdir/<repo>``, the go.mod requirements
are bumped on ``auto-upgrade/<tag>`` and a pull request is opened (or an
existing one reused). The working copy is removed before and after.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from gr.core.result import Err, Ok, Result
from gr.git.repository import VersionControl, remote_url
from gr.output.console import ConsoleProtocol
from gr.services.release.config import RepositorySet, upgrade_branch, upgrade_marker, upgrade_title
from gr.services.release.errors import ReleaseError
from gr.services.release.github import GitHub
from gr.services.release.gomod import GoToolchain, Requirement
from gr.services.release.model import NewPullRequest, PullRequest


@dataclass(frozen=True, slots=True)
class UpgradeRequest:
    repo: str
    tag: str
    requirements: tuple[Requirement, ...]
    base: str = "master"


def upgrade_body(tag: str, requirements: Sequence[Requirement]) -> str:
    lines = [upgrade_marker(tag), "", f"Automated upgrade for the {tag} release:", ""]
    lines += [f"- `{module}@{version}`" for module, version in requirements]
    return "\n".join(lines) + "\n"


def find_existing_pr(prs: Sequence[PullRequest], tag: str) -> PullRequest | None:
    """Open PR carrying the upgrade marker, or failing that the same title."""
    marker = upgrade_marker(tag)
    for pr in prs:
        if marker in pr.body:
            return pr
    title = upgrade_title(tag)
    for pr in prs:
        if pr.title == title:
            return pr
    return None


def preview_pull_request(owner: str, repo: str, tag: str) -> PullRequest:
    return PullRequest(
        number=0,
        html_url=f"https://github.com/{owner}/{repo}/pull/{upgrade_branch(tag)}",
        title=upgrade_title(tag),
        head=upgrade_branch(tag),
    )


class UpgradePullRequests:
    def __init__(
        self,
        *,
        github: GitHub,
        vcs: VersionControl,
        go: GoToolchain,
        console: ConsoleProtocol,
        repos: RepositorySet,
        workdir: Path,
        real: bool,
    ) -> None:
        self._github = github
        self._vcs = vcs
        self._go = go
        self._console = console
        self._repos = repos
        self._workdir = workdir
        self._real = real

    def create(self, request: UpgradeRequest) -> Result[PullRequest | None, ReleaseError]:
        """Open the upgrade PR; Ok(None) when the repository is already up to date."""
        owner = self._repos.owner
        self._console.info(f"Creating upgrade PR for {owner}/{request.repo}...")

        if not self._real:
            self._console.warning(f"Preview mode, skip creating upgrade PR for {owner}/{request.repo}")
            return Ok(preview_pull_request(owner, request.repo, request.tag))

        path = self._workdir / request.repo
        self._vcs.remove(path)
        try:
            return self._create(request, path)
        finally:
            self._vcs.remove(path)

    def create_all(
        self, requests: Sequence[UpgradeRequest]
    ) -> Result[dict[str, PullRequest | None], ReleaseError]:
        prs: dict[str, PullRequest | None] = {}
        for request in requests:
            pr = self.create(request)
            if isinstance(pr, Err):
                return pr
            prs[request.repo] = pr.value
        return Ok(prs)

    def _create(self, request: UpgradeRequest, path: Path) -> Result[PullRequest | None, ReleaseError]:
        owner = self._repos.owner
        repo = request.repo
        branch = upgrade_branch(request.tag)
        title = upgrade_title(request.tag)

        cloned = self._vcs.clone(remote_url(owner, repo), path, branch=request.base)
        if isinstance(cloned, Err):
            return self._command_failed(f"failed to clone {owner}/{repo}", cloned.error.message)
        created = self._vcs.create_branch(path, branch)
        if isinstance(created, Err):
            return self._command_failed(f"failed to create {branch} for {owner}/{repo}", created.error.message)

        got = self._go.get(path, request.requirements)
        if isinstance(got, Err):
            return self._command_failed(f"failed to upgrade dependencies for {owner}/{repo}", got.error.stderr)
        tidied = self._go.tidy(path)
        if isinstance(tidied, Err):
            return self._command_failed(f"failed to tidy go.mod for {owner}/{repo}", tidied.error.stderr)

        clean = self._vcs.is_clean(path)
        if isinstance(clean, Err):
            return self._command_failed(f"failed to check status for {owner}/{repo}", clean.error.message)
        if clean.value:
            self._console.warning(f"{owner}/{repo} is already up to date")
            return Ok(None)

        committed = self._vcs.commit_all(path, title)
        if isinstance(committed, Err):
            return self._command_failed(f"failed to commit upgrade for {owner}/{repo}", committed.error.message)
        pushed = self._vcs.push(path, branch, force=True)
        if isinstance(pushed, Err):
            return self._command_failed(f"failed to push upgrade branch for {owner}/{repo}", pushed.error.message)

        open_prs = self._github.get_pull_requests(owner, repo, "open")
        if isinstance(open_prs, Err):
            return open_prs
        existing = find_existing_pr(open_prs.value, request.tag)
        if existing is not None:
            self._console.info(f"Reusing {existing.html_url}")
            return Ok(existing)

        pr = self._github.create_pull_request(
            owner,
            repo,
            NewPullRequest(
                title=title,
                head=branch,
                base=request.base,
                body=upgrade_body(request.tag, request.requirements),
            ),
        )
        if isinstance(pr, Err):
            return pr
        self._console.success(f"Created {pr.value.html_url}")
        return Ok(pr.value)

    @staticmethod
    def _command_failed(message: str, detail: str) -> Err[ReleaseError]:
        return Err(ReleaseError(kind="command_failed", message=message, hint=detail.strip() or None))
