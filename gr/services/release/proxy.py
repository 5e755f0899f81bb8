"""Go module proxy refresh.

Asking the proxy for ``@v/master.info`` makes it resolve the current master
commit, so ``go get module@master`` in the smoke tests sees fresh code.
"""

from __future__ import annotations

from collections.abc import Iterable

from gr.core.result import Err, Ok, Result
from gr.output.console import ConsoleProtocol
from gr.platform.http import HttpClient
from gr.services.release.config import RepositorySet
from gr.services.release.errors import ReleaseError


def master_info_url(proxy: str, module: str) -> str:
    return f"{proxy.rstrip('/')}/{module}/@v/master.info"


def refresh_proxy(
    *,
    http: HttpClient,
    console: ConsoleProtocol,
    repos: RepositorySet,
    proxy: str,
    targets: Iterable[str],
) -> Result[None, ReleaseError]:
    console.info("Refreshing Go module proxy cache...")
    for repo in targets:
        url = master_info_url(proxy, repos.module(repo))
        result = http.get_text(url)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="proxy_failed",
                    message=f"failed to refresh module proxy for {repos.slug(repo)}",
                    hint=str(result.error),
                )
            )
    console.success("Go module proxy refreshed")
    return Ok(None)
