"""Release information for one repository and target tag."""

from __future__ import annotations

import re
from collections.abc import Iterable

from gr.core.result import Err, Ok, Result
from gr.platform.http import HttpClient
from gr.services.release.config import VERSION_FILE, RepositorySet
from gr.services.release.errors import ReleaseError
from gr.services.release.github import GitHub
from gr.services.release.model import ReleaseInformation
from gr.services.release.semver import maintenance_branch

_VERSION_RE = re.compile(r'Version\s*.*?=\s*"([^"]+)"')


def extract_version(source: str, *, owner: str, repo: str) -> Result[str, ReleaseError]:
    """Extract the ``Version`` constant from a Go source file."""
    m = _VERSION_RE.search(source)
    if m is None:
        return Err(
            ReleaseError(
                kind="version_not_found",
                message=f"could not extract {owner}/{repo} version from code",
                hint=f"expected a `Version = \"...\"` assignment in {VERSION_FILE}",
            )
        )
    return Ok(m.group(1))


class Resolver:
    """Collects the latest release, target branch, source version and notes."""

    def __init__(
        self,
        *,
        github: GitHub,
        http: HttpClient,
        repos: RepositorySet,
        raw_url: str = "https://raw.githubusercontent.com",
    ) -> None:
        self._github = github
        self._http = http
        self._repos = repos
        self._raw_url = raw_url.rstrip("/")

    def branch_for_tag(self, repo: str, tag: str) -> Result[str, ReleaseError]:
        """``v1.16.2`` -> ``v1.16.x`` if that branch exists, else the default branch."""
        branch = maintenance_branch(tag)
        if branch is None:
            return Ok(self._repos.default_branch)

        exists = self._github.check_branch_exists(self._repos.owner, repo, branch)
        if isinstance(exists, Err):
            return exists
        return Ok(branch if exists.value else self._repos.default_branch)

    def version_url(self, repo: str, branch: str) -> str:
        return f"{self._raw_url}/{self._repos.owner}/{repo}/refs/heads/{branch}/{VERSION_FILE}"

    def current_version(self, repo: str, branch: str) -> Result[str, ReleaseError]:
        owner = self._repos.owner
        url = self.version_url(repo, branch)
        source = self._http.get_text(url)
        if isinstance(source, Err):
            return Err(
                ReleaseError(
                    kind="github_failed",
                    message=f"failed to fetch {owner}/{repo} {VERSION_FILE}",
                    hint=str(source.error),
                )
            )
        return extract_version(source.value, owner=owner, repo=repo)

    def resolve(self, repo: str, tag: str) -> Result[ReleaseInformation, ReleaseError]:
        owner = self._repos.owner

        latest = self._github.get_latest_release(owner, repo, tag)
        if isinstance(latest, Err):
            return latest
        latest_tag = ""
        if latest.value is not None:
            if latest.value.tag_name is None:
                return Err(
                    ReleaseError(
                        kind="github_failed",
                        message=f"latest release tag name is empty for {owner}/{repo}",
                    )
                )
            latest_tag = latest.value.tag_name

        branch = self.branch_for_tag(repo, tag)
        if isinstance(branch, Err):
            return branch

        current_tag: str | None = None
        if repo in self._repos.version_repos:
            version = self.current_version(repo, branch.value)
            if isinstance(version, Err):
                return version
            current_tag = version.value

        notes = self._github.generate_release_notes(
            owner,
            repo,
            tag=tag,
            previous_tag=latest_tag,
            target=branch.value,
        )
        if isinstance(notes, Err):
            return notes

        return Ok(
            ReleaseInformation(
                repo=repo,
                tag=tag,
                latest_tag=latest_tag,
                branch=branch.value,
                current_tag=current_tag,
                notes=notes.value,
            )
        )

    def resolve_all(
        self, repos: Iterable[str], tag: str
    ) -> Result[list[ReleaseInformation], ReleaseError]:
        """Resolve sequentially; the first failure stops the run."""
        infos: list[ReleaseInformation] = []
        for repo in repos:
            info = self.resolve(repo, tag)
            if isinstance(info, Err):
                return info
            infos.append(info.value)
        return Ok(infos)
