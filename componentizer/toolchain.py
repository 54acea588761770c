"""Subprocess plumbing for the external WebAssembly toolchain."""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence


class ToolchainError(RuntimeError):
    """Raised when an external tool fails."""


class ToolNotFoundError(ToolchainError):
    """Raised when a required executable cannot be located."""

    def __init__(self, executable: str) -> None:
        super().__init__(f"'{executable}' not found. Is it installed and on PATH?")
        self.executable = executable


@dataclass
class CommandResult:
    """Captured outcome of a finished command."""

    args: Sequence[str]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)

    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace").strip()


CommandRunner = Callable[..., CommandResult]


def run_command(
    args: Iterable[str],
    *,
    cwd: Path,
    env: dict[str, str] | None = None,
    input: bytes | None = None,
    capture_output: bool = True,
) -> CommandResult:
    """Run a command to completion without raising on a non-zero exit status."""
    argv = [str(arg) for arg in args]
    try:
        completed = subprocess.run(
            argv,
            cwd=str(cwd),
            env=env,
            input=input,
            capture_output=capture_output,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ToolNotFoundError(argv[0]) from exc
    return CommandResult(
        args=argv,
        returncode=completed.returncode,
        stdout=completed.stdout or b"",
        stderr=completed.stderr or b"",
    )


__all__ = [
    "CommandResult",
    "CommandRunner",
    "ToolNotFoundError",
    "ToolchainError",
    "run_command",
]
