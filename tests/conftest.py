# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

import subprocess
from pathlib import Path
from typing import Any, Sequence

import pytest

from vcr_manage import runner


class FakeProcesses:
    """Stand-in for subprocess.run that records every call"""

    def __init__(self):
        self.calls: list[tuple[list[str], dict[str, Any]]] = []
        self._responses: list[tuple[list[str], int, str]] = []

    def respond(self, prefix: Sequence[str], returncode: int = 0, stdout: str = ""):
        """Answer commands starting with ``prefix``"""
        self._responses.append((list(prefix), returncode, stdout))

    def __call__(self, args, **kwargs):
        args = list(args)
        self.calls.append((args, kwargs))
        for prefix, returncode, stdout in self._responses:
            if args[: len(prefix)] == prefix:
                return subprocess.CompletedProcess(args, returncode, stdout=stdout)
        return subprocess.CompletedProcess(args, 0, stdout="")

    @property
    def commands(self) -> list[list[str]]:
        return [args for args, _ in self.calls]


@pytest.fixture
def processes(monkeypatch) -> FakeProcesses:
    fake = FakeProcesses()
    monkeypatch.setattr(runner.subprocess, "run", fake)
    return fake


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    # build contexts live next to the project directory (../client, ../server)
    path = tmp_path / "docker"
    path.mkdir()
    return path
