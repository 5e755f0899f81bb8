"""Subprocess execution with Result-based error handling.

Usage:
    result = run(["git", "--version"], cwd=Path("."))
    match result:
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from gr.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_streaming"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process.
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_streaming(
    cmd: list[str],
    cwd: Path,
    on_line: Callable[[str], None],
    *,
    fail_marker: str | None = None,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command while forwarding its output line by line.

    stdout and stderr are drained by two reader threads. Each line is passed
    to ``on_line`` (calls are serialized). If ``fail_marker`` appears in any
    line the run fails even when the process exits with status 0. Undecodable
    bytes are replaced. If ``on_line`` raises, forwarding stops but both
    streams are still drained to the end and the run fails.

    Returns:
        Ok(None) on success, Err(ProcessError) on non-zero exit, marker hit
        or a failing ``on_line``.
    """
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    lock = threading.Lock()
    failed = False
    callback_error: Exception | None = None

    def drain(stream: IO[str] | None) -> None:
        nonlocal failed, callback_error
        if stream is None:
            return
        with stream:
            for raw in iter(stream.readline, ""):
                line = raw.rstrip("\n")
                with lock:
                    if fail_marker is not None and fail_marker in line:
                        failed = True
                    if callback_error is not None:
                        continue
                    try:
                        on_line(line)
                    except Exception as e:
                        callback_error = e

    readers = [
        threading.Thread(target=drain, args=(proc.stdout,), daemon=True),
        threading.Thread(target=drain, args=(proc.stderr,), daemon=True),
    ]
    for reader in readers:
        reader.start()

    returncode = proc.wait()
    for reader in readers:
        reader.join()

    if returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr="")
        )
    if callback_error is not None:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=returncode,
                stdout="",
                stderr=f"output handler failed: {callback_error}",
            )
        )
    if failed:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=returncode,
                stdout="",
                stderr=f"output contains {fail_marker!r}",
            )
        )

    return Ok(None)
