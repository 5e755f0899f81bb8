from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ReleaseNotes:
    name: str
    body: str


@dataclass(frozen=True, slots=True)
class ReleaseInformation:
    """Everything needed to review and publish one repository release."""

    repo: str
    tag: str
    latest_tag: str  # "" when the repository has no release yet
    branch: str
    current_tag: str | None  # version constant in the source, framework/installer only
    notes: ReleaseNotes

    @property
    def current_tag_mismatch(self) -> bool:
        return self.current_tag is not None and self.current_tag != self.tag


@dataclass(frozen=True, slots=True)
class PullRequest:
    number: int
    html_url: str
    title: str
    merged: bool = False
    head: str = ""
    body: str = ""

    @property
    def files_url(self) -> str:
        return f"{self.html_url}/files"


@dataclass(frozen=True, slots=True)
class NewPullRequest:
    title: str
    head: str
    base: str
    body: str = ""


@dataclass(frozen=True, slots=True)
class GitHubRelease:
    tag_name: str | None
    name: str = ""
    body: str = ""
    html_url: str = ""


@dataclass(frozen=True, slots=True)
class NewRelease:
    tag_name: str
    target_commitish: str
    name: str
    body: str
