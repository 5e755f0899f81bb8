from __future__ import annotations

from gr.core.config import Config
from gr.core.result import Err, Ok
from gr.output.console import MockConsole
from gr.platform.http import HttpError, MockHttpClient
from gr.services.release.config import repository_set
from gr.services.release.proxy import master_info_url, refresh_proxy

PROXY = "https://proxy.golang.org"
REPOS = repository_set(Config())


class TestMasterInfoUrl:
    def test_url(self) -> None:
        assert (
            master_info_url(PROXY + "/", "github.com/goravel/gin")
            == "https://proxy.golang.org/github.com/goravel/gin/@v/master.info"
        )


class TestRefreshProxy:
    def test_requests_every_target(self) -> None:
        http = MockHttpClient()
        for repo in ("framework", "gin"):
            http.set_text(master_info_url(PROXY, f"github.com/goravel/{repo}"), '{"Version":"v0.0.0"}')
        console = MockConsole()

        result = refresh_proxy(http=http, console=console, repos=REPOS, proxy=PROXY, targets=["framework", "gin"])

        assert result == Ok(None)
        assert [c.url for c in http.calls] == [
            f"{PROXY}/github.com/goravel/framework/@v/master.info",
            f"{PROXY}/github.com/goravel/gin/@v/master.info",
        ]
        assert http.mutating_calls() == []
        assert console.has_success()

    def test_failure(self) -> None:
        http = MockHttpClient()
        url = master_info_url(PROXY, "github.com/goravel/framework")
        http.set_text(url, HttpError(url=url, status=410, message="Gone"))

        result = refresh_proxy(http=http, console=MockConsole(), repos=REPOS, proxy=PROXY, targets=["framework", "gin"])

        assert isinstance(result, Err)
        assert result.error.kind == "proxy_failed"
        assert result.error.message == "failed to refresh module proxy for goravel/framework"
        assert result.error.hint is not None and "410" in result.error.hint
        assert len(http.calls) == 1
