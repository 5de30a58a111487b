#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Compose manager for the application lifecycle commands.
"""

import shlex
import shutil
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .arguments import DATABASE_CONTAINERS, ClassifiedArgs, startup_params
from .builds import ImageBuilder
from .environment import ManageEnvironment
from .errors import CommandFailed
from .ledger import split_seeds
from .models import ToolSettings
from .runner import CommandResult, ProcessRunner

# Rich Console for beautiful output
console = Console()

WORKER_SERVICE = "vcr-worker"
WORKER_REPLICAS = 2
WEB_DEV_SERVICE = "vcr-web-dev"
API_SERVICE = "vcr-api"

TEST_API_OVERRIDES = {
    "DATABASE_ENGINE": "sqlite",
    "ENABLE_REALTIME_INDEXING": "0",
    "INDY_DISABLED": "true",
    "SKIP_INDEXING_ON_STARTUP": "true",
}


def select_project_volumes(volumes: Iterable[str], project_name: str) -> list[str]:
    """Volumes owned by the compose project (``<project>_`` prefix)"""
    prefix = f"{project_name}_"
    return [volume for volume in volumes if volume.startswith(prefix)]


class ComposeManager:
    """Runs docker-compose commands against the project"""

    def __init__(
        self,
        project_dir: Path,
        environment: ManageEnvironment,
        runner: ProcessRunner,
        arguments: Optional[ClassifiedArgs] = None,
        tool: Optional[ToolSettings] = None,
    ):
        self.project_dir = project_dir
        self.environment = environment
        self.runner = runner
        self.arguments = arguments or ClassifiedArgs()
        self.tool = tool or ToolSettings()
        self.compose_cmd = shlex.split(self.tool.compose_exe)

    @property
    def settings(self):
        return self.environment.settings

    @property
    def images(self) -> ImageBuilder:
        return ImageBuilder(
            self.runner,
            self.settings,
            self.project_dir,
            s2i_exe=self.tool.s2i_exe,
            docker_exe=self.tool.docker_exe,
        )

    def compose(self, *args: str, check: bool = True) -> CommandResult:
        return self.runner.run([*self.compose_cmd, *args], check=check)

    def follow_logs(self, *services: str) -> int:
        return self.compose("logs", "-f", *services, check=False).returncode

    # ------------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------------

    def up(self) -> int:
        """Recreate and start containers, then follow the logs"""
        self.compose(
            "up",
            "-d",
            "--scale",
            f"{WORKER_SERVICE}={WORKER_REPLICAS}",
            *startup_params(self.arguments),
        )
        return self.follow_logs()

    def restart(self) -> None:
        self.compose("stop", *self.arguments.containers)
        self.compose("up", "-d", *startup_params(self.arguments))

    def stop(self) -> None:
        self.compose("stop", *self.arguments.names)

    def logs(self) -> int:
        return self.follow_logs(*self.arguments.names)

    def web_dev(self) -> int:
        if "--rebuild" in self.arguments.flags:
            self.compose("build", WEB_DEV_SERVICE)
        return self.compose(
            "run", "--rm", "--service-ports", WEB_DEV_SERVICE, check=False
        ).returncode

    def startdb(self) -> int:
        self.compose("up", "-d", *DATABASE_CONTAINERS)
        return self.follow_logs()

    def stopdb(self) -> None:
        self.compose("stop", *DATABASE_CONTAINERS)

    def down(self) -> None:
        """Remove containers, project volumes and the local build cache"""
        console.print("Stopping and removing any running containers ...")
        self.compose("stop")
        self.compose("rm", "-f")
        self.remove_project_volumes()

        cache_dir = self.project_dir / self.tool.build_cache_dir
        if cache_dir.exists() and not self.runner.dry_run:
            console.print(f"[dim]Removing build cache {cache_dir}[/dim]")
            shutil.rmtree(cache_dir, ignore_errors=True)

    def remove_project_volumes(self) -> list[str]:
        project_name = self.settings.core.compose_project_name
        listing = self.runner.capture([self.tool.docker_exe, "volume", "ls", "-q"])
        volumes = select_project_volumes(listing.stdout.split(), project_name)

        if not volumes:
            console.print("No project volumes exist.")
            return []

        console.print("Removing project volumes ...")
        self.runner.run([self.tool.docker_exe, "volume", "rm", *volumes])
        return volumes

    # ------------------------------------------------------------------------
    # Containers as tools
    # ------------------------------------------------------------------------

    def shell(self) -> int:
        tokens = self.arguments.passthrough
        service = tokens[0] if tokens else API_SERVICE
        command = tokens[1:] or ["bash"]
        return self.compose("run", "--rm", service, *command, check=False).returncode

    def api(self) -> int:
        return self.compose(
            "run",
            "--rm",
            API_SERVICE,
            "python",
            "manage.py",
            *self.arguments.passthrough,
            check=False,
        ).returncode

    def test_api(self) -> int:
        """Rebuild the API image and run its test suite with coverage"""
        try:
            self.images.build_api()
        except CommandFailed:
            console.print("[red]API image build failed; the tests were not run[/red]")
            raise

        test_args = shlex.join(self.arguments.passthrough)
        script = f"coverage run manage.py test {test_args}".rstrip()
        script += " && coverage report -m"
        result = self.compose(
            "run",
            "--rm",
            "--no-deps",
            API_SERVICE,
            "/bin/bash",
            "-c",
            script,
            check=False,
        )
        if result.ok:
            console.print("\n[green]✓[/green] API tests passed")
        else:
            console.print(f"\n[red]✗ API tests failed[/red] (Exit code: {result.returncode})")
        return result.returncode

    # ------------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------------

    def seeds(self) -> list[str]:
        """Seeds to register: every seed= argument, else INDY_WALLET_SEED"""
        explicit = split_seeds(self.arguments.values_of("seed"))
        if explicit:
            return explicit
        return split_seeds([self.settings.core.indy_wallet_seed])

    def print_environment(self) -> None:
        for name, section in self.settings.sections().items():
            table = Table(
                title=name,
                show_header=True,
                header_style="bold magenta",
            )
            table.add_column("Variable", style="cyan", no_wrap=True)
            table.add_column("Value", style="yellow")
            for variable, value in section.to_environment().items():
                table.add_row(variable, value)
            console.print(table)

        console.print(
            Panel(
                f"Project: {self.settings.core.compose_project_name}\n"
                f"Docker host: {self.settings.core.docker_host}\n"
                f"Project directory: {self.project_dir}",
                title="[bold green]Environment[/bold green]",
                border_style="green",
            )
        )
