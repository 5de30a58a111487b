#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Image builds for the application containers.

Paths are relative to the project directory, where the commands run.
"""

import shutil
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

from rich.console import Console

from .errors import MissingThemeError, UnknownBuildTargetError
from .models import ManageSettings
from .runner import ProcessRunner

console = Console()

WEB_CONTEXT = "../client"
NGINX_RUNTIME_CONTEXT = "../client/openshift/templates/nginx-runtime"
NODEJS_BUILDER_IMAGE = "registry.access.redhat.com/ubi8/nodejs-14"
SOLR_BASE_SOURCE = "https://github.com/bcgov/openshift-solr.git"
SOLR_CORES = "../server/solr/cores"
DB_CONTEXT = "../server/db"
SCHEMA_SPY_SOURCE = "https://github.com/bcgov/SchemaSpy.git"
API_SOURCE = "../server"
PYTHON_BUILDER_IMAGE = "registry.access.redhat.com/ubi8/python-38"
AGENT_CONTEXT = "agent"
ECHO_APP_CONTEXT = "../echo-app"


class BuildTarget(str, Enum):
    ALL = "all"
    SOLR = "solr"
    DB = "db"
    SCHEMA_SPY = "schema-spy"
    API = "api"
    AGENT = "agent"
    ECHO_APP = "echo-app"
    WEB = "web"


def resolve_build_target(name: Optional[str]) -> BuildTarget:
    """Map a target name (``vcr-`` prefix optional) to a BuildTarget"""
    if not name:
        return BuildTarget.ALL
    key = name.lower()
    if key.startswith("vcr-"):
        key = key[len("vcr-") :]
    try:
        return BuildTarget(key)
    except ValueError:
        raise UnknownBuildTargetError(name) from None


class ImageBuilder:
    """Issues docker and s2i builds"""

    def __init__(
        self,
        runner: ProcessRunner,
        settings: ManageSettings,
        project_dir: Path,
        s2i_exe: str = "s2i",
        docker_exe: str = "docker",
    ):
        self.runner = runner
        self.settings = settings
        self.project_dir = project_dir
        self.s2i_exe = s2i_exe
        self.docker_exe = docker_exe

    def build(self, target: BuildTarget) -> None:
        BUILD_ROUTINES[target](self)

    def build_all(self) -> None:
        for target in BuildTarget:
            if target is not BuildTarget.ALL:
                BUILD_ROUTINES[target](self)

    def docker_build(self, tag: str, context: str, dockerfile: Optional[str] = None):
        cmd = [self.docker_exe, "build", "-t", tag]
        if dockerfile:
            cmd.extend(["-f", dockerfile])
        cmd.append(context)
        self.runner.run(cmd)

    def build_solr(self) -> None:
        console.print("\n[bold cyan]Building solr-base image ...[/bold cyan]")
        self.docker_build("solr-base", SOLR_BASE_SOURCE)

        console.print("\n[bold cyan]Building vcr-solr image ...[/bold cyan]")
        self.runner.run([self.s2i_exe, "build", SOLR_CORES, "solr-base", "vcr-solr"])

    def build_db(self) -> None:
        console.print("\n[bold cyan]Building vcr-db image ...[/bold cyan]")
        self.docker_build("vcr-db", DB_CONTEXT, f"{DB_CONTEXT}/Dockerfile")

    def build_schema_spy(self) -> None:
        console.print("\n[bold cyan]Building schema-spy image ...[/bold cyan]")
        self.docker_build("schema-spy", SCHEMA_SPY_SOURCE)

    def build_api(self) -> None:
        console.print(
            f"\n[bold cyan]Building vcr-api image from {PYTHON_BUILDER_IMAGE} ...[/bold cyan]"
        )
        core = self.settings.core
        self.runner.run(
            [
                self.s2i_exe,
                "build",
                "-e",
                f"HTTP_PROXY={core.http_proxy}",
                "-e",
                f"HTTPS_PROXY={core.https_proxy}",
                "-e",
                f"PIP_INDEX_URL={core.pip_index_url}",
                API_SOURCE,
                PYTHON_BUILDER_IMAGE,
                "vcr-api",
            ]
        )

    def build_agent(self) -> None:
        console.print("\n[bold cyan]Building vcr-agent image ...[/bold cyan]")
        self.docker_build("vcr-agent", AGENT_CONTEXT, f"{AGENT_CONTEXT}/Dockerfile")

    def build_echo_app(self) -> None:
        console.print("\n[bold cyan]Building echo-app image ...[/bold cyan]")
        self.docker_build("echo-app", ECHO_APP_CONTEXT, f"{ECHO_APP_CONTEXT}/Dockerfile")

    def build_web(self) -> None:
        web = self.settings.web
        with self.staged_theme():
            console.print("\n[bold cyan]Building nginx-runtime image ...[/bold cyan]")
            self.docker_build(
                "nginx-runtime",
                NGINX_RUNTIME_CONTEXT,
                f"{NGINX_RUNTIME_CONTEXT}/Dockerfile",
            )

            console.print(
                f"\n[bold cyan]Building vcr-web image from {NODEJS_BUILDER_IMAGE} ...[/bold cyan]"
            )
            self.runner.run(
                [
                    self.s2i_exe,
                    "build",
                    "-e",
                    f"THEME={web.theme}",
                    "-e",
                    f"WEB_BASE_HREF={web.base_href}",
                    "-e",
                    f"WEB_DEPLOY_URL={web.deploy_url}",
                    "--runtime-image",
                    "nginx-runtime",
                    "--runtime-artifact",
                    "/opt/app-root/src/dist/:app/",
                    WEB_CONTEXT,
                    NODEJS_BUILDER_IMAGE,
                    "vcr-web",
                ]
            )

    @contextmanager
    def staged_theme(self) -> Iterator[Optional[Path]]:
        """Copy a custom theme into the web build context for one build.

        Yields the staged directory, or None when nothing was copied.
        """
        theme = self.settings.web.theme
        if not theme:
            raise MissingThemeError(
                "You must specify a theme. For example: THEME=default"
            )

        theme_path = self.settings.web.theme_path
        if theme == "default" or not theme_path:
            yield None
            return

        source = self.project_dir / theme_path / theme
        if not source.is_dir():
            raise MissingThemeError(f"Theme '{theme}' not found in {source.parent}")

        target = self.project_dir / WEB_CONTEXT / "src" / "themes" / theme
        if target.exists() or self.runner.dry_run:
            yield None
            return

        console.print(f"[dim]Copying theme {source} -> {target}[/dim]")
        shutil.copytree(source, target)
        try:
            yield target
        finally:
            shutil.rmtree(target, ignore_errors=True)


BUILD_ROUTINES: dict[BuildTarget, Callable[[ImageBuilder], None]] = {
    BuildTarget.ALL: ImageBuilder.build_all,
    BuildTarget.SOLR: ImageBuilder.build_solr,
    BuildTarget.DB: ImageBuilder.build_db,
    BuildTarget.SCHEMA_SPY: ImageBuilder.build_schema_spy,
    BuildTarget.API: ImageBuilder.build_api,
    BuildTarget.AGENT: ImageBuilder.build_agent,
    BuildTarget.ECHO_APP: ImageBuilder.build_echo_app,
    BuildTarget.WEB: ImageBuilder.build_web,
}
