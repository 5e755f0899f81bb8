"""Tests for gr.output.errors module."""

from __future__ import annotations

import pytest

from gr.core.errors import ErrorCode
from gr.output.console import MockConsole, Style
from gr.output.errors import print_release_error, release_error_exit_code
from gr.services.release.errors import ReleaseError


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("not_confirmed", ErrorCode.USER_ERROR),
        ("choice_failed", ErrorCode.USER_ERROR),
        ("invalid_tag", ErrorCode.USER_ERROR),
        ("token_missing", ErrorCode.ENV_ERROR),
        ("github_failed", ErrorCode.NETWORK_ERROR),
        ("proxy_failed", ErrorCode.NETWORK_ERROR),
        ("version_not_found", ErrorCode.NETWORK_ERROR),
        ("command_failed", ErrorCode.RELEASE_ERROR),
        ("test_failed", ErrorCode.RELEASE_ERROR),
    ],
)
def test_exit_code_mapping(kind, code: ErrorCode) -> None:
    assert release_error_exit_code(ReleaseError(kind=kind, message="x")) == int(code)


def test_print_includes_hint() -> None:
    console = MockConsole()
    print_release_error(
        ReleaseError(kind="github_failed", message="failed to get releases for goravel/gin", hint="HTTP 502"),
        console,
    )
    assert console.messages == [
        "error: failed to get releases for goravel/gin",
        "hint: HTTP 502",
    ]
    assert console.outputs[1].style == Style.DIM


def test_print_not_confirmed() -> None:
    console = MockConsole()
    print_release_error(ReleaseError(kind="not_confirmed", message="goravel/gin not confirmed"), console)
    assert console.messages == ["error: goravel/gin not confirmed, release aborted"]
