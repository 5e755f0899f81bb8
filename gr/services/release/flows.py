"""Major, patch and preview release flows.

Each flow is a straight sequence of stages. The first failing stage ends the
flow; anything already published on GitHub stays published.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from gr.core.result import Err, Ok, Result
from gr.git.repository import VersionControl
from gr.output.console import ConsoleProtocol, Style
from gr.output.prompts import Prompter
from gr.platform.http import HttpClient
from gr.services.release.branches import push_branch, set_default_branch
from gr.services.release.config import EXAMPLE_REPO, RepositorySet
from gr.services.release.errors import ReleaseError
from gr.services.release.github import GitHub
from gr.services.release.gomod import GoToolchain, Requirement
from gr.services.release.merge_poll import wait_for_merges
from gr.services.release.model import NewRelease, PullRequest, ReleaseInformation
from gr.services.release.proxy import refresh_proxy
from gr.services.release.resolver import Resolver
from gr.services.release.semver import validate_tag
from gr.services.release.smoke import smoke_test_all
from gr.services.release.upgrade import UpgradePullRequests, UpgradeRequest

TESTED_QUESTION = "Did you test in sub-packages?"
CONFIRMED_QUESTION = "Did you confirm the release information?"

# Existence checks only look at the most recent releases.
RELEASE_EXIST_PAGE_SIZE = 10

DOCS_PULLS_URL = "https://github.com/goravel/docs/pulls"
SUPPORT_POLICY_URL = "https://www.goravel.dev/prologue/releases.html"


def is_release_exist(github: GitHub, owner: str, repo: str, tag: str) -> Result[bool, ReleaseError]:
    """Exact, case-sensitive tag match on the first page of releases."""
    releases = github.get_releases(owner, repo, page=1, per_page=RELEASE_EXIST_PAGE_SIZE)
    if isinstance(releases, Err):
        return releases
    return Ok(any(r.tag_name == tag for r in releases.value))


def show_release_information(console: ConsoleProtocol, owner: str, info: ReleaseInformation) -> None:
    console.divider()
    console.warning(f"Please check {owner}/{info.repo} information:")
    console.newline()
    console.print(f"The latest tag is:     {info.latest_tag or '(none)'}")
    console.print(f"The tag to release is: {info.tag}")
    console.print(f"The target branch is:  {info.branch}")
    if info.current_tag is not None:
        console.print(f"The current tag is:    {info.current_tag}")
        if info.current_tag_mismatch:
            console.newline()
            console.print("The current tag is not the same as the tag to release", Style.ERROR)
    console.newline()
    console.print(info.notes.name, Style.BOLD)
    console.print(info.notes.body)


class Release:
    """Release orchestrator for the goravel repositories."""

    def __init__(
        self,
        *,
        github: GitHub,
        http: HttpClient,
        vcs: VersionControl,
        go: GoToolchain,
        prompter: Prompter,
        console: ConsoleProtocol,
        repos: RepositorySet,
        real: bool,
        workdir: Path,
        raw_url: str = "https://raw.githubusercontent.com",
        proxy: str = "https://proxy.golang.org",
    ) -> None:
        self._github = github
        self._http = http
        self._vcs = vcs
        self._go = go
        self._prompter = prompter
        self._console = console
        self._repos = repos
        self._real = real
        self._workdir = workdir
        self._proxy = proxy
        self._resolver = Resolver(github=github, http=http, repos=repos, raw_url=raw_url)
        self._upgrades = UpgradePullRequests(
            github=github,
            vcs=vcs,
            go=go,
            console=console,
            repos=repos,
            workdir=workdir,
            real=real,
        )

    # Flows

    def major(self, tag: str, *, refresh: bool = False) -> Result[None, ReleaseError]:
        """Release framework, installer and every package, then upgrade the applications."""
        version = validate_tag(tag)
        if isinstance(version, Err):
            return version
        repos = self._repos
        self._announce_mode()

        if refresh:
            refreshed = refresh_proxy(
                http=self._http,
                console=self._console,
                repos=repos,
                proxy=self._proxy,
                targets=[repos.framework, *repos.packages],
            )
            if isinstance(refreshed, Err):
                return refreshed

        tested = self._confirm(TESTED_QUESTION)
        if isinstance(tested, Err):
            return tested
        if not tested.value:
            smoke = smoke_test_all(
                vcs=self._vcs,
                go=self._go,
                console=self._console,
                repos=repos,
                workdir=self._workdir,
                example=EXAMPLE_REPO,
            )
            if isinstance(smoke, Err):
                return smoke

        infos = self._resolve([repos.framework, repos.installer, *repos.packages], tag)
        if isinstance(infos, Err):
            return infos
        framework_info, installer_info, *package_infos = infos.value

        confirmed = self._confirm_information(infos.value)
        if isinstance(confirmed, Err):
            return confirmed

        for info in (framework_info, installer_info):
            released = self._release_repo(info)
            if isinstance(released, Err):
                return released

        framework_req = (repos.module(repos.framework), tag)
        package_prs = self._upgrades.create_all(
            [UpgradeRequest(info.repo, tag, (framework_req,), base=info.branch) for info in package_infos]
        )
        if isinstance(package_prs, Err):
            return package_prs
        polled = self._wait_for_merges(package_prs.value)
        if isinstance(polled, Err):
            return polled

        for info in package_infos:
            released = self._release_repo(info)
            if isinstance(released, Err):
                return released

        everything = (framework_req, *((repos.module(p), tag) for p in repos.packages))
        app_prs = self._upgrade_applications(repos.applications, tag, everything)
        if isinstance(app_prs, Err):
            return app_prs
        polled = self._wait_for_merges(app_prs.value)
        if isinstance(polled, Err):
            return polled

        if version.value.is_minor_release:
            branched = self._open_maintenance_line(version.value.maintenance_branch)
            if isinstance(branched, Err):
                return branched

        self._major_success(tag, version.value.maintenance_branch, version.value.is_minor_release)
        return Ok(None)

    def patch(self, tag: str) -> Result[None, ReleaseError]:
        """Release the framework and the lite skeleton on a maintenance line."""
        version = validate_tag(tag)
        if isinstance(version, Err):
            return version
        repos = self._repos
        self._announce_mode()

        infos = self._resolve([repos.framework, repos.lite], tag)
        if isinstance(infos, Err):
            return infos
        framework_info, lite_info = infos.value

        confirmed = self._confirm_information(infos.value)
        if isinstance(confirmed, Err):
            return confirmed

        released = self._release_repo(framework_info)
        if isinstance(released, Err):
            return released

        framework_req = (repos.module(repos.framework), tag)
        lite_prs = self._upgrades.create_all(
            [UpgradeRequest(repos.lite, tag, (framework_req,), base=lite_info.branch)]
        )
        if isinstance(lite_prs, Err):
            return lite_prs
        polled = self._wait_for_merges(lite_prs.value)
        if isinstance(polled, Err):
            return polled

        released = self._release_repo(lite_info)
        if isinstance(released, Err):
            return released

        self._console.newline()
        self._console.success(
            f"Release {repos.slug(repos.framework)} and {repos.slug(repos.lite)} {tag} success!"
        )
        return Ok(None)

    def preview(self, tag: str, *, packages: bool = False) -> Result[None, ReleaseError]:
        """Print the release information of the scope, changing nothing."""
        version = validate_tag(tag)
        if isinstance(version, Err):
            return version
        repos = self._repos

        scope = [repos.framework, *repos.packages] if packages else [repos.framework, repos.lite]
        infos = self._resolve(scope, tag)
        if isinstance(infos, Err):
            return infos
        for info in infos.value:
            show_release_information(self._console, repos.owner, info)
        self._console.divider()
        return Ok(None)

    # Stages

    def _announce_mode(self) -> None:
        if not self._real:
            self._console.warning("Preview mode: nothing is pushed, released or opened (use --real)")

    def _confirm(self, question: str) -> Result[bool, ReleaseError]:
        answer = self._prompter.confirm(question)
        if isinstance(answer, Err):
            return Err(
                ReleaseError(
                    kind="choice_failed",
                    message=f"failed to read answer to: {question}",
                    hint=answer.error.message,
                )
            )
        return Ok(answer.value)

    def _resolve(self, scope: Sequence[str], tag: str) -> Result[list[ReleaseInformation], ReleaseError]:
        for repo in scope:
            self._console.print(f"Getting {self._repos.slug(repo)} release information for {tag}...", Style.DIM)
        return self._resolver.resolve_all(scope, tag)

    def _confirm_information(self, infos: Sequence[ReleaseInformation]) -> Result[None, ReleaseError]:
        checked = self._confirm(CONFIRMED_QUESTION)
        if isinstance(checked, Err):
            return checked
        if checked.value:
            return Ok(None)

        owner = self._repos.owner
        for info in infos:
            show_release_information(self._console, owner, info)
            self._console.newline()
            answer = self._confirm(f"{owner}/{info.repo} confirmed?")
            if isinstance(answer, Err):
                return answer
            if not answer.value:
                return Err(ReleaseError(kind="not_confirmed", message=f"{owner}/{info.repo} not confirmed"))
        return Ok(None)

    def _release_repo(self, info: ReleaseInformation) -> Result[None, ReleaseError]:
        owner = self._repos.owner
        exists = is_release_exist(self._github, owner, info.repo, info.tag)
        if isinstance(exists, Err):
            return exists
        if exists.value:
            self._console.warning(f"{owner}/{info.repo} {info.tag} has already been released")
            return Ok(None)

        if not self._real:
            self._console.warning(f"Preview mode, skip creating release for {owner}/{info.repo}")
            return Ok(None)

        created = self._github.create_release(
            owner,
            info.repo,
            NewRelease(
                tag_name=info.tag,
                target_commitish=info.branch,
                name=info.notes.name,
                body=info.notes.body,
            ),
        )
        if isinstance(created, Err):
            return created

        link = created.value.html_url or f"https://github.com/{owner}/{info.repo}/releases/tag/{info.tag}"
        self._console.success(f"[{owner}/{info.repo}] release {info.tag} success!")
        self._console.success(f"Release link: {link}")
        return Ok(None)

    def _upgrade_applications(
        self, applications: Sequence[str], tag: str, requirements: tuple[Requirement, ...]
    ) -> Result[dict[str, PullRequest | None], ReleaseError]:
        requests: list[UpgradeRequest] = []
        for app in applications:
            base = self._resolver.branch_for_tag(app, tag)
            if isinstance(base, Err):
                return base
            requests.append(UpgradeRequest(app, tag, requirements, base=base.value))
        return self._upgrades.create_all(requests)

    def _wait_for_merges(self, prs: dict[str, PullRequest | None]) -> Result[None, ReleaseError]:
        return wait_for_merges(
            github=self._github,
            prompter=self._prompter,
            console=self._console,
            owner=self._repos.owner,
            prs=prs,
            real=self._real,
        )

    def _open_maintenance_line(self, branch: str) -> Result[None, ReleaseError]:
        repos = self._repos
        for repo in (repos.framework, *repos.applications):
            pushed = push_branch(
                vcs=self._vcs,
                console=self._console,
                repos=repos,
                workdir=self._workdir,
                repo=repo,
                branch=branch,
                real=self._real,
            )
            if isinstance(pushed, Err):
                return pushed

        for repo in repos.default_branch_repos:
            switched = set_default_branch(
                github=self._github,
                console=self._console,
                owner=repos.owner,
                repo=repo,
                branch=branch,
                real=self._real,
            )
            if isinstance(switched, Err):
                return switched
        return Ok(None)

    def _major_success(self, tag: str, branch: str, new_line: bool) -> None:
        repos = self._repos
        console = self._console
        console.newline()
        console.success(f"Release {repos.slug(repos.framework)} and sub-packages {tag} success!")
        console.warning("The rest jobs:")

        jobs: list[str] = []
        if new_line:
            for app in repos.applications:
                if app not in repos.default_branch_repos:
                    jobs.append(
                        f"Set {repos.slug(app)} {branch} as default branch: "
                        f"https://github.com/{repos.slug(app)}/settings"
                    )
        jobs.append(f"Install the new version via {repos.slug(repos.installer)} and test the project works fine")
        jobs.append(f"Merge the upgrade document PR: {DOCS_PULLS_URL}")
        jobs.append(f"Update the support policy: {SUPPORT_POLICY_URL}")
        for i, job in enumerate(jobs, start=1):
            console.print(f"{i}. {job}")
