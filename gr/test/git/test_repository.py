"""Tests for git/repository.py."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from gr.core.result import Err, Ok
from gr.git.repository import (
    GitCli,
    GitError,
    MockVersionControl,
    Repository,
    clone,
    remote_url,
)
from gr.output.console import MockConsole, Style


def make_completed_process(
    stdout: str = "", stderr: str = "", returncode: int = 0
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=["git"],
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )


def test_remote_url() -> None:
    assert remote_url("goravel", "gin") == "git@github.com:goravel/gin.git"


class TestRepository:
    """Tests for Repository class."""

    @patch("subprocess.run")
    def test_is_clean_true(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")
        assert Repository(tmp_path).is_clean() == Ok(True)

    @patch("subprocess.run")
    def test_is_clean_false(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout=" M go.mod\n M go.sum\n")
        assert Repository(tmp_path).is_clean() == Ok(False)

    @patch("subprocess.run")
    def test_is_clean_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stderr="fatal: not a git repository", returncode=128)
        result = Repository(tmp_path).is_clean()
        assert isinstance(result, Err)
        assert result.error.command == "status"
        assert result.error.returncode == 128

    @patch("subprocess.run")
    def test_checkout_new_branch_resets(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        assert Repository(tmp_path).checkout_new_branch("auto-upgrade/v1.16.0") == Ok(None)
        args = mock_run.call_args[0][0]
        assert args[-3:] == ["checkout", "-B", "auto-upgrade/v1.16.0"]

    @patch("subprocess.run")
    def test_commit_all_adds_then_commits(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        assert Repository(tmp_path).commit_all("chore: Upgrade framework to v1.16.0 (auto)") == Ok(None)
        calls = [c[0][0] for c in mock_run.call_args_list]
        assert calls[0][-2:] == ["add", "--all"]
        assert calls[1][-3:] == ["commit", "-m", "chore: Upgrade framework to v1.16.0 (auto)"]

    @patch("subprocess.run")
    def test_commit_stops_when_add_fails(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stderr="fatal: pathspec", returncode=1)
        result = Repository(tmp_path).commit_all("msg")
        assert isinstance(result, Err)
        assert result.error.command == "add"
        assert mock_run.call_count == 1

    @patch("subprocess.run")
    def test_force_push(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        assert Repository(tmp_path).push("v1.17.x", force=True) == Ok(None)
        args = mock_run.call_args[0][0]
        assert args[-4:] == ["push", "origin", "v1.17.x", "--force"]
        assert mock_run.call_args[1]["timeout"] == 180.0

    @patch("subprocess.run")
    def test_push_rejected(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stderr="! [rejected]", returncode=1)
        result = Repository(tmp_path).push("master")
        assert isinstance(result, Err)
        assert result.error.message == "! [rejected]"


class TestClone:
    @patch("subprocess.run")
    def test_shallow_clone_of_branch(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        dest = tmp_path / "work" / "gin"

        result = clone(remote_url("goravel", "gin"), dest, branch="master")

        assert isinstance(result, Ok)
        assert result.value.path == dest
        args = mock_run.call_args[0][0]
        assert args == [
            "git",
            "clone",
            "--branch",
            "master",
            "--depth",
            "1",
            "git@github.com:goravel/gin.git",
            str(dest),
        ]
        assert mock_run.call_args[1]["cwd"] == str(tmp_path / "work")

    @patch("subprocess.run")
    def test_clone_failure(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stderr="Permission denied (publickey).", returncode=128)
        result = clone("git@github.com:goravel/gin.git", tmp_path / "gin", branch="master")
        assert isinstance(result, Err)
        assert result.error == GitError(command="clone", message="Permission denied (publickey).", returncode=128)


class TestGitCli:
    @patch("subprocess.run")
    def test_commands_are_echoed(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()
        console = MockConsole()
        vcs = GitCli(console)

        vcs.create_branch(tmp_path, "v1.17.x")
        vcs.push(tmp_path, "v1.17.x")

        assert console.count(Style.DIM) == 2
        assert console.messages[1].endswith("push origin v1.17.x --force")

    def test_remove(self, tmp_path: Path) -> None:
        work = tmp_path / "gin"
        (work / "sub").mkdir(parents=True)
        (work / "sub" / "go.mod").write_text("module x\n")
        vcs = GitCli(MockConsole())

        vcs.remove(work)
        vcs.remove(work)

        assert not work.exists()


class TestMockVersionControl:
    def test_records_and_fails(self, tmp_path: Path) -> None:
        vcs = MockVersionControl(failures={"push": GitError(command="push", message="rejected")})

        assert vcs.clone("r", tmp_path / "gin", branch="master") == Ok(None)
        assert vcs.is_clean(tmp_path / "gin") == Ok(False)
        pushed = vcs.push(tmp_path / "gin", "auto-upgrade/v1.16.0")

        assert isinstance(pushed, Err)
        assert vcs.names() == ["clone", "is_clean", "push"]
