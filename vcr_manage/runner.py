#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Execution of external commands (docker, s2i, docker-compose).
"""

import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from rich.console import Console

from .errors import CommandFailed, MissingExecutableError

console = Console()

S2I_DOWNLOAD_HINT = (
    "It can be downloaded from here: "
    "https://github.com/openshift/source-to-image/releases\n"
    "Make sure you extract the binary and place it in a directory on your path."
)


@dataclass
class CommandResult:
    """Outcome of one external command"""

    args: list[str]
    returncode: int
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return shlex.join(self.args)


def require_executable(name: str, hint: str = "") -> str:
    """Return the full path of ``name`` or fail with guidance"""
    path = shutil.which(name)
    if path is None:
        raise MissingExecutableError(name, hint)
    return path


class ProcessRunner:
    """Runs commands sequentially in the project directory"""

    def __init__(
        self,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        dry_run: bool = False,
    ):
        self.cwd = cwd
        self.env = dict(env) if env is not None else None
        self.dry_run = dry_run

    def with_env(self, env: Mapping[str, str]) -> "ProcessRunner":
        return ProcessRunner(cwd=self.cwd, env=env, dry_run=self.dry_run)

    def run(self, cmd: Sequence[str], *, check: bool = True) -> CommandResult:
        """Run a command attached to the terminal.

        With ``check`` a non-zero exit raises CommandFailed, which stops the
        calling sequence.
        """
        args = list(cmd)
        console.print(f"\n[dim]Running: {shlex.join(args)}[/dim]\n")

        if self.dry_run:
            console.print("[yellow]DRY RUN - command not executed[/yellow]")
            return CommandResult(args, 0)

        try:
            completed = subprocess.run(args, cwd=self.cwd, env=self.env)
            result = CommandResult(args, completed.returncode)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            result = CommandResult(args, 130)
        except FileNotFoundError:
            console.print(f"[red]Error: {args[0]} not found[/red]")
            result = CommandResult(args, 127)

        if check and not result.ok:
            raise CommandFailed(result)
        return result

    def capture(self, cmd: Sequence[str]) -> CommandResult:
        """Run a command and capture its output, never raising on failure"""
        args = list(cmd)
        if self.dry_run:
            return CommandResult(args, 0)

        try:
            completed = subprocess.run(
                args,
                cwd=self.cwd,
                env=self.env,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            return CommandResult(args, 127)
        return CommandResult(args, completed.returncode, completed.stdout or "")
