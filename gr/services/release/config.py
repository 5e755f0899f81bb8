from __future__ import annotations

from dataclasses import dataclass

from gr.core.config import Config

FRAMEWORK_REPO = "framework"
INSTALLER_REPO = "installer"
LITE_REPO = "goravel-lite"
EXAMPLE_REPO = "example"
GORAVEL_REPO = "goravel"

# Source file holding the `Version` constant of framework and installer.
VERSION_FILE = "support/constant.go"

UPGRADE_BRANCH_PREFIX = "auto-upgrade/"
UPGRADE_COMMIT_TEMPLATE = "chore: Upgrade framework to {tag} (auto)"
UPGRADE_MARKER_TEMPLATE = "<!-- goravel-release:auto-upgrade:{tag} -->"

TEST_FAIL_MARKER = "--- FAIL"


@dataclass(frozen=True, slots=True)
class RepositorySet:
    """The repositories a release touches, in release order."""

    owner: str
    framework: str
    packages: tuple[str, ...]
    installer: str
    lite: str
    applications: tuple[str, ...]
    version_repos: frozenset[str]
    default_branch_repos: tuple[str, ...]
    default_branch: str = "master"

    def slug(self, repo: str) -> str:
        return f"{self.owner}/{repo}"

    def module(self, repo: str) -> str:
        """Go module path of a repository."""
        return f"github.com/{self.owner}/{repo}"


def repository_set(config: Config) -> RepositorySet:
    applications = config.repositories.applications
    return RepositorySet(
        owner=config.github.owner,
        framework=FRAMEWORK_REPO,
        packages=config.repositories.packages,
        installer=INSTALLER_REPO,
        lite=LITE_REPO,
        applications=applications,
        version_repos=frozenset({FRAMEWORK_REPO, INSTALLER_REPO}),
        default_branch_repos=tuple(a for a in applications if a in {GORAVEL_REPO, LITE_REPO}),
        default_branch=config.repositories.default_branch,
    )


def upgrade_branch(tag: str) -> str:
    return f"{UPGRADE_BRANCH_PREFIX}{tag}"


def upgrade_title(tag: str) -> str:
    return UPGRADE_COMMIT_TEMPLATE.format(tag=tag)


def upgrade_marker(tag: str) -> str:
    return UPGRADE_MARKER_TEMPLATE.format(tag=tag)
