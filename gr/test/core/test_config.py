"""Tests for gr.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from gr.core.config import (
    DEFAULT_PACKAGES,
    Config,
    load_config,
)
from gr.core.result import Err, Ok


class TestDefaults:
    def test_empty_config_uses_goravel_defaults(self) -> None:
        config = Config.from_dict({}, {})
        assert config.token is None
        assert config.github.owner == "goravel"
        assert config.github.api_url == "https://api.github.com"
        assert config.repositories.packages == DEFAULT_PACKAGES
        assert config.repositories.applications == ("example", "goravel", "goravel-lite")
        assert config.repositories.default_branch == "master"
        assert config.go.proxy == "https://proxy.golang.org"
        assert config.paths.workdir == "."

    def test_default_packages_order(self) -> None:
        assert DEFAULT_PACKAGES[:3] == ("gin", "fiber", "s3")
        assert DEFAULT_PACKAGES[-1] == "redis"
        assert len(DEFAULT_PACKAGES) == 11

    def test_token_from_env(self) -> None:
        config = Config.from_dict({}, {"GITHUB_TOKEN": "  ghp_abc \n"})
        assert config.token == "ghp_abc"

    def test_blank_token_is_missing(self) -> None:
        config = Config.from_dict({}, {"GITHUB_TOKEN": "   "})
        assert config.token is None


class TestFromDict:
    def test_overrides(self) -> None:
        data: dict[str, object] = {
            "github": {"owner": "acme", "api_url": "https://ghe.example.com/api/v3/"},
            "repositories": {"packages": ["gin", " fiber "], "default_branch": "main"},
            "go": {"proxy": "https://goproxy.io/"},
            "paths": {"workdir": "/tmp/release"},
        }
        config = Config.from_dict(data, {})
        assert config.github.owner == "acme"
        assert config.github.api_url == "https://ghe.example.com/api/v3"
        assert config.repositories.packages == ("gin", "fiber")
        assert config.repositories.default_branch == "main"
        assert config.go.proxy == "https://goproxy.io"
        assert config.paths.workdir == "/tmp/release"

    def test_malformed_package_list_falls_back(self) -> None:
        data: dict[str, object] = {"repositories": {"packages": ["gin", 3]}}
        config = Config.from_dict(data, {})
        assert config.repositories.packages == DEFAULT_PACKAGES

    def test_empty_lists_are_kept(self) -> None:
        data: dict[str, object] = {"repositories": {"packages": [], "applications": []}}
        config = Config.from_dict(data, {})
        assert config.repositories.packages == ()
        assert config.repositories.applications == ()


class TestLoadConfig:
    def test_empty_package_list_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "release.toml"
        path.write_text("[repositories]\npackages = []\n", encoding="utf-8")

        result = load_config(path, env={})

        assert isinstance(result, Ok)
        assert result.value.repositories.packages == ()

    def test_explicit_file(self, tmp_path: Path) -> None:
        path = tmp_path / "release.toml"
        path.write_text('[github]\nowner = "acme"\n', encoding="utf-8")

        result = load_config(path, env={"GITHUB_TOKEN": "t"})
        assert isinstance(result, Ok)
        assert result.value.github.owner == "acme"
        assert result.value.token == "t"

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.toml", env={})
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "release.toml"
        path.write_text("[github\nowner=", encoding="utf-8")

        result = load_config(path, env={})
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_no_file_in_cwd_uses_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        result = load_config(env={})
        assert isinstance(result, Ok)
        assert result.value.github.owner == "goravel"

    def test_file_in_cwd_is_picked_up(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "release.toml").write_text('[go]\nproxy = "https://p.example"\n', encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        result = load_config(env={})
        assert isinstance(result, Ok)
        assert result.value.go.proxy == "https://p.example"
