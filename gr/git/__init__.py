"""Git operations."""

from .repository import (
    GitCli,
    GitError,
    MockVersionControl,
    Repository,
    VersionControl,
    clone,
    remote_url,
)

__all__ = [
    "GitCli",
    "GitError",
    "MockVersionControl",
    "Repository",
    "VersionControl",
    "clone",
    "remote_url",
]
