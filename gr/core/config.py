"""Typed configuration loading and access.

Configuration comes from an optional ``release.toml`` and the environment.
Only the GitHub token is mandatory; everything else has defaults matching
the goravel organisation.

Example ``release.toml``:

    [github]
    owner = "goravel"

    [repositories]
    packages = ["gin", "fiber", "postgres"]
    applications = ["example", "goravel", "goravel-lite"]

    [go]
    proxy = "https://proxy.golang.org"
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "ConfigError",
    "GitHubConfig",
    "GoConfig",
    "PathsConfig",
    "RepositoriesConfig",
    "CONFIG_FILE_NAME",
    "TOKEN_ENV_VAR",
    "load_config",
]

CONFIG_FILE_NAME = "release.toml"
TOKEN_ENV_VAR = "GITHUB_TOKEN"

DEFAULT_OWNER = "goravel"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"
DEFAULT_PROXY = "https://proxy.golang.org"
DEFAULT_BRANCH = "master"

DEFAULT_PACKAGES: tuple[str, ...] = (
    "gin",
    "fiber",
    "s3",
    "oss",
    "cos",
    "minio",
    "postgres",
    "mysql",
    "sqlserver",
    "sqlite",
    "redis",
)
DEFAULT_APPLICATIONS: tuple[str, ...] = ("example", "goravel", "goravel-lite")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    owner: str = DEFAULT_OWNER
    api_url: str = DEFAULT_API_URL
    raw_url: str = DEFAULT_RAW_URL


@dataclass(frozen=True, slots=True)
class RepositoriesConfig:
    """Repository names inside the GitHub organisation."""

    packages: tuple[str, ...] = DEFAULT_PACKAGES
    applications: tuple[str, ...] = DEFAULT_APPLICATIONS
    default_branch: str = DEFAULT_BRANCH


@dataclass(frozen=True, slots=True)
class GoConfig:
    proxy: str = DEFAULT_PROXY


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Where working copies are cloned (relative to the current directory)."""

    workdir: str = "."


def _str_list_or(table: StrDict, key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    # An explicit empty list is kept; only a missing or malformed one falls back.
    values = get_str_list(table, key)
    return default if values is None else values


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    token: str | None = None
    github: GitHubConfig = field(default_factory=GitHubConfig)
    repositories: RepositoriesConfig = field(default_factory=RepositoriesConfig)
    go: GoConfig = field(default_factory=GoConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], env: Mapping[str, str]) -> Config:
        """Create Config from parsed TOML plus environment variables."""
        github: StrDict = get_table(data, "github") or {}
        repos: StrDict = get_table(data, "repositories") or {}
        go: StrDict = get_table(data, "go") or {}
        paths: StrDict = get_table(data, "paths") or {}

        token = env.get(TOKEN_ENV_VAR, "").strip() or None

        return cls(
            token=token,
            github=GitHubConfig(
                owner=get_str(github, "owner") or DEFAULT_OWNER,
                api_url=(get_str(github, "api_url") or DEFAULT_API_URL).rstrip("/"),
                raw_url=(get_str(github, "raw_url") or DEFAULT_RAW_URL).rstrip("/"),
            ),
            repositories=RepositoriesConfig(
                packages=_str_list_or(repos, "packages", DEFAULT_PACKAGES),
                applications=_str_list_or(repos, "applications", DEFAULT_APPLICATIONS),
                default_branch=get_str(repos, "default_branch") or DEFAULT_BRANCH,
            ),
            go=GoConfig(proxy=(get_str(go, "proxy") or DEFAULT_PROXY).rstrip("/")),
            paths=PathsConfig(workdir=get_str(paths, "workdir") or "."),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[Config, ConfigError]:
    """Load configuration.

    Args:
        path: TOML file. When None, ``release.toml`` in the current directory
            is used if it exists, defaults otherwise.
        env: Environment mapping (``os.environ`` when None).

    Returns:
        Ok(Config) on success, Err(ConfigError) if an explicit file is
        missing or unreadable.
    """
    environ: Mapping[str, str] = os.environ if env is None else env

    data: StrDict = {}
    if path is None:
        default_path = Path.cwd() / CONFIG_FILE_NAME
        if default_path.is_file():
            path = default_path
    if path is not None:
        parsed = _parse_toml(path)
        if isinstance(parsed, Err):
            return parsed
        data = parsed.value

    return Ok(Config.from_dict(data, environ))
