"""Operator-paced wait for upgrade pull requests to merge."""

from __future__ import annotations

from collections.abc import Mapping

from gr.core.result import Err, Ok, Result
from gr.output.console import ConsoleProtocol, Style
from gr.output.prompts import Prompter
from gr.services.release.errors import ReleaseError
from gr.services.release.github import GitHub
from gr.services.release.model import PullRequest

CHECK_QUESTION = "Check PRs merge status?"
CHECK_OPTION = "Check"


def is_merged(
    github: GitHub, owner: str, repo: str, pr: PullRequest | None, *, real: bool
) -> Result[bool, ReleaseError]:
    if pr is None:
        return Ok(True)
    if not real:
        return Ok(True)
    current = github.get_pull_request(owner, repo, pr.number)
    if isinstance(current, Err):
        return current
    return Ok(current.value.merged)


def wait_for_merges(
    *,
    github: GitHub,
    prompter: Prompter,
    console: ConsoleProtocol,
    owner: str,
    prs: Mapping[str, PullRequest | None],
    real: bool,
) -> Result[None, ReleaseError]:
    """Loop on the check prompt until every tracked PR is merged.

    ``None`` entries need no upgrade and are never polled. A failed prompt
    read ends the loop with ``choice_failed``.
    """
    width = max((len(repo) for repo in prs), default=0)
    for repo, pr in prs.items():
        if pr is None:
            console.print(f"{repo:<{width}}: no need to upgrade", Style.DIM)
        else:
            console.print(f"{repo:<{width}}: {pr.files_url}")

    pending: dict[str, PullRequest] = {repo: pr for repo, pr in prs.items() if pr is not None}
    if not real and pending:
        console.warning("Preview mode, every PR counts as merged")

    while pending:
        answer = prompter.choice(CHECK_QUESTION, [CHECK_OPTION])
        if isinstance(answer, Err):
            return Err(
                ReleaseError(
                    kind="choice_failed",
                    message="failed to check upgrade PRs merge status",
                    hint=answer.error.message,
                )
            )
        if answer.value != CHECK_OPTION:
            continue

        not_merged: list[str] = []
        for repo, pr in list(pending.items()):
            merged = is_merged(github, owner, repo, pr, real=real)
            if isinstance(merged, Err):
                return merged
            if merged.value:
                console.success(f"{owner}/{repo} merged")
                del pending[repo]
            else:
                not_merged.append(f"{owner}/{repo}")

        if not_merged:
            console.warning(f"Not merged PRs: {', '.join(not_merged)}")

    return Ok(None)
