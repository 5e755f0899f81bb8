from __future__ import annotations

from pathlib import Path

from gr.core.config import Config
from gr.core.result import Err, Ok
from gr.git.repository import GitError, MockVersionControl
from gr.output.console import MockConsole
from gr.services.release.config import repository_set
from gr.services.release.gomod import MockGoToolchain
from gr.services.release.smoke import smoke_test, smoke_test_all

REPOS = repository_set(Config())
FRAMEWORK_MASTER = "github.com/goravel/framework@master"


class TestSmokeTest:
    def test_success(self, tmp_path: Path) -> None:
        vcs = MockVersionControl()
        go = MockGoToolchain()
        console = MockConsole()

        result = smoke_test(
            vcs=vcs,
            go=go,
            console=console,
            repos=REPOS,
            workdir=tmp_path,
            repo="gin",
            requirements=[("github.com/goravel/framework", "master")],
        )

        assert result == Ok(None)
        assert vcs.names() == ["remove", "clone", "remove"]
        assert vcs.ops[1] == ("clone", "git@github.com:goravel/gin.git", "gin", "master")
        assert go.calls == [("get", "gin", FRAMEWORK_MASTER), ("tidy", "gin"), ("test", "gin")]
        assert "Testing in goravel/gin success!" in console.messages

    def test_failing_tests(self, tmp_path: Path) -> None:
        vcs = MockVersionControl()

        result = smoke_test(
            vcs=vcs,
            go=MockGoToolchain(failing="test"),
            console=MockConsole(),
            repos=REPOS,
            workdir=tmp_path,
            repo="gin",
            requirements=[],
        )

        assert isinstance(result, Err)
        assert result.error.kind == "test_failed"
        assert result.error.message == "failed to test in goravel/gin"
        assert vcs.names()[-1] == "remove"

    def test_clone_failure(self, tmp_path: Path) -> None:
        go = MockGoToolchain()

        result = smoke_test(
            vcs=MockVersionControl(failures={"clone": GitError(command="clone", message="denied")}),
            go=go,
            console=MockConsole(),
            repos=REPOS,
            workdir=tmp_path,
            repo="gin",
            requirements=[],
        )

        assert isinstance(result, Err)
        assert result.error.kind == "command_failed"
        assert result.error.hint == "denied"
        assert go.calls == []


class TestSmokeTestAll:
    def test_packages_then_example(self, tmp_path: Path) -> None:
        go = MockGoToolchain()

        result = smoke_test_all(
            vcs=MockVersionControl(),
            go=go,
            console=MockConsole(),
            repos=REPOS,
            workdir=tmp_path,
            example="example",
        )

        assert result == Ok(None)
        tested = [call[1] for call in go.calls if call[0] == "test"]
        assert tested == [*REPOS.packages, "example"]

        example_get = next(call for call in go.calls if call[:2] == ("get", "example"))
        assert example_get[2] == FRAMEWORK_MASTER
        assert len(example_get) == 3 + len(REPOS.packages)
        assert "github.com/goravel/gin@master" in example_get

    def test_stops_at_first_failure(self, tmp_path: Path) -> None:
        go = MockGoToolchain(failing="test")

        result = smoke_test_all(
            vcs=MockVersionControl(),
            go=go,
            console=MockConsole(),
            repos=REPOS,
            workdir=tmp_path,
            example="example",
        )

        assert isinstance(result, Err)
        assert result.error.message == f"failed to test in goravel/{REPOS.packages[0]}"
        assert [call for call in go.calls if call[0] == "test"] == [("test", REPOS.packages[0])]
