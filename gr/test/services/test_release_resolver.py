from __future__ import annotations

import pytest

from gr.core.config import Config
from gr.core.result import Err, Ok
from gr.platform.http import MockHttpClient
from gr.services.release.config import repository_set
from gr.services.release.github import RestGitHub
from gr.services.release.model import ReleaseNotes
from gr.services.release.resolver import Resolver, extract_version

API = "https://api.github.com/repos/goravel"
RAW = "https://raw.githubusercontent.com/goravel"


class TestExtractVersion:
    @pytest.mark.parametrize(
        ("source", "version"),
        [
            ('package support\n\nconst (\n\tVersion = "v1.16.0"\n)\n', "v1.16.0"),
            ('const Version="v1.16.0"', "v1.16.0"),
            ('const Version   =   "v1.16.0"', "v1.16.0"),
            ('const Version\t=\t"v1.16.0"', "v1.16.0"),
            ('const Version string = "v1.16.0"', "v1.16.0"),
            ('\tVersion = "v1.16.0-beta.1+meta"', "v1.16.0-beta.1+meta"),
        ],
    )
    def test_matches(self, source: str, version: str) -> None:
        assert extract_version(source, owner="goravel", repo="framework") == Ok(version)

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "package support\n\n// No Version constant here\nconst Name = 1\n",
            'const Version = v1.16.0',
        ],
    )
    def test_missing(self, source: str) -> None:
        result = extract_version(source, owner="goravel", repo="framework")
        assert isinstance(result, Err)
        assert result.error.kind == "version_not_found"
        assert result.error.message == "could not extract goravel/framework version from code"


@pytest.fixture
def http() -> MockHttpClient:
    return MockHttpClient()


@pytest.fixture
def resolver(http: MockHttpClient) -> Resolver:
    repos = repository_set(Config())
    return Resolver(github=RestGitHub(http, token="t"), http=http, repos=repos)


def _notes(http: MockHttpClient, repo: str, tag: str) -> None:
    http.set_json("POST", f"{API}/{repo}/releases/generate-notes", {"name": tag, "body": f"{repo} changes"})


class TestBranchForTag:
    def test_maintenance_branch_exists(self, http: MockHttpClient, resolver: Resolver) -> None:
        http.set_json("GET", f"{API}/gin/branches/v1.16.x", {"name": "v1.16.x"})
        assert resolver.branch_for_tag("gin", "v1.16.2") == Ok("v1.16.x")

    def test_falls_back_to_master(self, http: MockHttpClient, resolver: Resolver) -> None:
        assert resolver.branch_for_tag("gin", "v1.16.2") == Ok("master")

    def test_unparsable_tag_uses_master(self, http: MockHttpClient, resolver: Resolver) -> None:
        assert resolver.branch_for_tag("gin", "nightly") == Ok("master")
        assert http.calls == []


class TestResolve:
    def test_package(self, http: MockHttpClient, resolver: Resolver) -> None:
        http.set_json("GET", f"{API}/gin/releases?page=1&per_page=50", [{"tag_name": "v1.16.1"}])
        http.set_json("GET", f"{API}/gin/branches/v1.16.x", {"name": "v1.16.x"})
        _notes(http, "gin", "v1.16.2")

        result = resolver.resolve("gin", "v1.16.2")

        assert isinstance(result, Ok)
        info = result.value
        assert info.repo == "gin"
        assert info.latest_tag == "v1.16.1"
        assert info.branch == "v1.16.x"
        assert info.current_tag is None
        assert info.notes == ReleaseNotes(name="v1.16.2", body="gin changes")
        assert not any(c.url.startswith(RAW) for c in http.calls)

        notes_call = http.calls[-1]
        assert notes_call.payload == {
            "tag_name": "v1.16.2",
            "target_commitish": "v1.16.x",
            "previous_tag_name": "v1.16.1",
        }

    def test_framework_reads_version_constant(self, http: MockHttpClient, resolver: Resolver) -> None:
        http.set_json("GET", f"{API}/framework/releases?page=1&per_page=50", [])
        http.set_text(f"{RAW}/framework/refs/heads/master/support/constant.go", 'const Version = "v1.17.0"')
        _notes(http, "framework", "v1.17.0")

        result = resolver.resolve("framework", "v1.17.0")

        assert isinstance(result, Ok)
        assert result.value.latest_tag == ""
        assert result.value.current_tag == "v1.17.0"
        assert not result.value.current_tag_mismatch

    def test_framework_version_mismatch_is_reported_not_failed(
        self, http: MockHttpClient, resolver: Resolver
    ) -> None:
        http.set_json("GET", f"{API}/framework/releases?page=1&per_page=50", [{"tag_name": "v1.16.0"}])
        http.set_text(f"{RAW}/framework/refs/heads/master/support/constant.go", 'Version = "v1.16.0"')
        _notes(http, "framework", "v1.17.0")

        result = resolver.resolve("framework", "v1.17.0")

        assert isinstance(result, Ok)
        assert result.value.current_tag_mismatch

    def test_missing_version_constant_fails(self, http: MockHttpClient, resolver: Resolver) -> None:
        http.set_json("GET", f"{API}/installer/releases?page=1&per_page=50", [])
        http.set_text(f"{RAW}/installer/refs/heads/master/support/constant.go", "package support\n")

        result = resolver.resolve("installer", "v1.17.0")

        assert isinstance(result, Err)
        assert result.error.message == "could not extract goravel/installer version from code"
        assert http.mutating_calls() == []

    def test_release_listing_error_stops_resolution(self, http: MockHttpClient, resolver: Resolver) -> None:
        http.set_error("GET", f"{API}/gin/releases?page=1&per_page=50", 401, "Bad credentials")

        result = resolver.resolve("gin", "v1.16.2")

        assert isinstance(result, Err)
        assert "goravel/gin" in result.error.message
        assert len(http.calls) == 1


class TestResolveAll:
    def test_in_order_and_stops_on_first_error(self, http: MockHttpClient, resolver: Resolver) -> None:
        http.set_json("GET", f"{API}/gin/releases?page=1&per_page=50", [])
        _notes(http, "gin", "v1.16.0")

        result = resolver.resolve_all(["gin", "fiber", "s3"], "v1.16.0")

        assert isinstance(result, Err)
        assert "goravel/fiber" in result.error.message
        assert not any("/s3/" in c.url for c in http.calls)

    def test_all_ok(self, http: MockHttpClient, resolver: Resolver) -> None:
        for repo in ("gin", "fiber"):
            http.set_json("GET", f"{API}/{repo}/releases?page=1&per_page=50", [])
            _notes(http, repo, "v1.16.0")

        result = resolver.resolve_all(["fiber", "gin"], "v1.16.0")

        assert isinstance(result, Ok)
        assert [info.repo for info in result.value] == ["fiber", "gin"]
