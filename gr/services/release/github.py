"""GitHub REST gateway.

Only the handful of endpoints the release flows need. Responses are parsed
with the structured helpers; a 404 on branch and release lookups is a
"not found" answer, every other non-2xx status is an error.
"""

from __future__ import annotations

import json
from typing import Literal, Protocol, TypeVar
from urllib.parse import quote, urlencode

from gr.core.result import Err, Ok, Result
from gr.core.structured import StrDict, as_obj_list, as_str_dict, get_bool, get_int, get_str, get_table, get_text
from gr.platform.http import HttpClient, HttpError, HttpResponse
from gr.services.release.errors import ReleaseError
from gr.services.release.model import (
    GitHubRelease,
    NewPullRequest,
    NewRelease,
    PullRequest,
    ReleaseNotes,
)
from gr.services.release.semver import release_line_prefix

T = TypeVar("T")

API_VERSION = "2022-11-28"
LATEST_RELEASE_PAGE_SIZE = 50
PULL_REQUEST_PAGE_SIZE = 100

PullRequestState = Literal["open", "closed", "all"]

__all__ = [
    "GitHub",
    "RestGitHub",
    "PullRequestState",
]


class GitHub(Protocol):
    def check_branch_exists(self, owner: str, repo: str, branch: str) -> Result[bool, ReleaseError]: ...

    def create_pull_request(
        self, owner: str, repo: str, pr: NewPullRequest
    ) -> Result[PullRequest, ReleaseError]: ...

    def create_release(
        self, owner: str, repo: str, release: NewRelease
    ) -> Result[GitHubRelease, ReleaseError]: ...

    def generate_release_notes(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        previous_tag: str,
        target: str,
    ) -> Result[ReleaseNotes, ReleaseError]: ...

    def get_latest_release(
        self, owner: str, repo: str, tag: str
    ) -> Result[GitHubRelease | None, ReleaseError]: ...

    def get_pull_request(self, owner: str, repo: str, number: int) -> Result[PullRequest, ReleaseError]: ...

    def get_pull_requests(
        self, owner: str, repo: str, state: PullRequestState = "open"
    ) -> Result[list[PullRequest], ReleaseError]: ...

    def get_releases(
        self, owner: str, repo: str, *, page: int = 1, per_page: int = 10
    ) -> Result[list[GitHubRelease], ReleaseError]: ...

    def update_default_branch(self, owner: str, repo: str, branch: str) -> Result[None, ReleaseError]: ...


def _error_hint(error: HttpError) -> str:
    detail = ""
    if error.body:
        try:
            data = as_str_dict(json.loads(error.body))
        except ValueError:
            data = None
        if data is not None:
            detail = get_str(data, "message") or ""
    status = f"HTTP {error.status}" if error.status else error.message
    return f"{status}: {detail}" if detail else status


def _parse_release(obj: object) -> GitHubRelease | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    return GitHubRelease(
        tag_name=get_str(data, "tag_name"),
        name=get_text(data, "name"),
        body=get_text(data, "body"),
        html_url=get_str(data, "html_url") or "",
    )


def _parse_pull_request(obj: object) -> PullRequest | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    number = get_int(data, "number")
    html_url = get_str(data, "html_url")
    if number is None or html_url is None:
        return None
    head: StrDict = get_table(data, "head") or {}
    return PullRequest(
        number=number,
        html_url=html_url,
        title=get_text(data, "title"),
        merged=get_bool(data, "merged"),
        head=get_str(head, "ref") or "",
        body=get_text(data, "body"),
    )


class RestGitHub:
    """GitHub gateway over the REST API."""

    def __init__(self, http: HttpClient, *, token: str, api_url: str = "https://api.github.com") -> None:
        self._http = http
        self._api_url = api_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }

    def check_branch_exists(self, owner: str, repo: str, branch: str) -> Result[bool, ReleaseError]:
        path = f"/repos/{owner}/{repo}/branches/{quote(branch, safe='')}"
        result = self._call("GET", path)
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(False)
            return self._fail(f"check branch {branch}", owner, repo, result.error)
        return Ok(True)

    def create_pull_request(
        self, owner: str, repo: str, pr: NewPullRequest
    ) -> Result[PullRequest, ReleaseError]:
        payload = {"title": pr.title, "head": pr.head, "base": pr.base, "body": pr.body}
        result = self._call("POST", f"/repos/{owner}/{repo}/pulls", payload)
        if isinstance(result, Err):
            return self._fail("create pull request", owner, repo, result.error)
        if result.value.status != 201:
            return self._unexpected("create pull request", owner, repo, result.value)
        created = _parse_pull_request(self._json(result.value))
        if created is None:
            return self._malformed("create pull request", owner, repo)
        return Ok(created)

    def create_release(
        self, owner: str, repo: str, release: NewRelease
    ) -> Result[GitHubRelease, ReleaseError]:
        payload = {
            "tag_name": release.tag_name,
            "target_commitish": release.target_commitish,
            "name": release.name,
            "body": release.body,
        }
        result = self._call("POST", f"/repos/{owner}/{repo}/releases", payload)
        if isinstance(result, Err):
            return self._fail("create release", owner, repo, result.error)
        if result.value.status != 201:
            return self._unexpected("create release", owner, repo, result.value)
        created = _parse_release(self._json(result.value))
        if created is None:
            return self._malformed("create release", owner, repo)
        return Ok(created)

    def generate_release_notes(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        previous_tag: str,
        target: str,
    ) -> Result[ReleaseNotes, ReleaseError]:
        payload: dict[str, str] = {"tag_name": tag, "target_commitish": target}
        if previous_tag:
            payload["previous_tag_name"] = previous_tag
        result = self._call("POST", f"/repos/{owner}/{repo}/releases/generate-notes", payload)
        if isinstance(result, Err):
            return self._fail("generate release notes", owner, repo, result.error)
        if result.value.status != 200:
            return self._unexpected("generate release notes", owner, repo, result.value)
        data = as_str_dict(self._json(result.value))
        if data is None:
            return self._malformed("generate release notes", owner, repo)
        return Ok(ReleaseNotes(name=get_text(data, "name"), body=get_text(data, "body")))

    def get_latest_release(
        self, owner: str, repo: str, tag: str
    ) -> Result[GitHubRelease | None, ReleaseError]:
        """Most recent release on the tag's release line, else the most recent one."""
        query = urlencode({"page": 1, "per_page": LATEST_RELEASE_PAGE_SIZE})
        result = self._call("GET", f"/repos/{owner}/{repo}/releases?{query}")
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(None)
            return self._fail("get latest release", owner, repo, result.error)
        items = as_obj_list(self._json(result.value))
        if items is None:
            return self._malformed("get latest release", owner, repo)
        releases = [r for r in (_parse_release(item) for item in items) if r is not None]
        if not releases:
            return Ok(None)

        # v1.16.2 -> v1.16.
        prefix = release_line_prefix(tag)
        for release in releases:
            if release.tag_name is not None and release.tag_name.startswith(prefix):
                return Ok(release)
        return Ok(releases[0])

    def get_pull_request(self, owner: str, repo: str, number: int) -> Result[PullRequest, ReleaseError]:
        op = f"get pull request {number}"
        result = self._call("GET", f"/repos/{owner}/{repo}/pulls/{number}")
        if isinstance(result, Err):
            return self._fail(op, owner, repo, result.error)
        pr = _parse_pull_request(self._json(result.value))
        if pr is None:
            return self._malformed(op, owner, repo)
        return Ok(pr)

    def get_pull_requests(
        self, owner: str, repo: str, state: PullRequestState = "open"
    ) -> Result[list[PullRequest], ReleaseError]:
        query = urlencode({"state": state, "per_page": PULL_REQUEST_PAGE_SIZE})
        result = self._call("GET", f"/repos/{owner}/{repo}/pulls?{query}")
        if isinstance(result, Err):
            return self._fail("get pull requests", owner, repo, result.error)
        items = as_obj_list(self._json(result.value))
        if items is None:
            return self._malformed("get pull requests", owner, repo)
        prs = [pr for pr in (_parse_pull_request(item) for item in items) if pr is not None]
        return Ok(prs)

    def get_releases(
        self, owner: str, repo: str, *, page: int = 1, per_page: int = 10
    ) -> Result[list[GitHubRelease], ReleaseError]:
        query = urlencode({"page": page, "per_page": per_page})
        result = self._call("GET", f"/repos/{owner}/{repo}/releases?{query}")
        if isinstance(result, Err):
            return self._fail("get releases", owner, repo, result.error)
        items = as_obj_list(self._json(result.value))
        if items is None:
            return self._malformed("get releases", owner, repo)
        releases = [r for r in (_parse_release(item) for item in items) if r is not None]
        return Ok(releases)

    def update_default_branch(self, owner: str, repo: str, branch: str) -> Result[None, ReleaseError]:
        result = self._call("PATCH", f"/repos/{owner}/{repo}", {"default_branch": branch})
        if isinstance(result, Err):
            return self._fail(f"set default branch {branch}", owner, repo, result.error)
        return Ok(None)

    def _call(self, method: str, path: str, payload: object = None) -> Result[HttpResponse, HttpError]:
        return self._http.request(
            method,
            f"{self._api_url}{path}",
            headers=self._headers,
            payload=payload,
        )

    @staticmethod
    def _json(response: HttpResponse) -> object:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _fail(op: str, owner: str, repo: str, error: HttpError) -> Result[T, ReleaseError]:
        return Err(
            ReleaseError(
                kind="github_failed",
                message=f"failed to {op} for {owner}/{repo}",
                hint=_error_hint(error),
            )
        )

    @staticmethod
    def _unexpected(op: str, owner: str, repo: str, response: HttpResponse) -> Result[T, ReleaseError]:
        return Err(
            ReleaseError(
                kind="github_failed",
                message=f"failed to {op} for {owner}/{repo}",
                hint=f"unexpected HTTP {response.status}",
            )
        )

    @staticmethod
    def _malformed(op: str, owner: str, repo: str) -> Result[T, ReleaseError]:
        return Err(
            ReleaseError(
                kind="github_failed",
                message=f"failed to {op} for {owner}/{repo}",
                hint="unexpected response payload",
            )
        )
