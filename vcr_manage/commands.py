#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CLI commands for managing the application containers.
"""

import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Annotated, Iterator, Optional

import typer
from rich.console import Console
from typer.core import TyperGroup

from .arguments import ClassifiedArgs, classify_arguments
from .builds import resolve_build_target
from .environment import configure_environment
from .errors import ManageError
from .ledger import print_registration_summary, register_dids, registration_url, seed_payload
from .manager import TEST_API_OVERRIDES, ComposeManager
from .models import ToolSettings
from .runner import S2I_DOWNLOAD_HINT, ProcessRunner, require_executable

console = Console()


class CaseInsensitiveGroup(TyperGroup):
    """Command group matching command names case-insensitively.

    A missing or unknown command prints the usage and exits with status 1.
    """

    def get_command(self, ctx: typer.Context, cmd_name: str):
        return super().get_command(ctx, cmd_name.lower())

    def resolve_command(self, ctx: typer.Context, args: list[str]):
        if args and self.get_command(ctx, args[0]) is None:
            console.print(f"[red]Error: No such command '{args[0]}'.[/red]")
            typer.echo(ctx.get_help())
            ctx.exit(1)
        cmd_name, cmd, rest = super().resolve_command(ctx, args)
        # the invoked name selects per-command behaviour, e.g. seed checks
        return (cmd_name.lower() if cmd_name else cmd_name), cmd, rest


app = typer.Typer(
    name="manage",
    help="Build and run the credential registry containers",
    add_completion=False,
    cls=CaseInsensitiveGroup,
)

# KEY=VALUE pairs and -flags are collected as plain arguments
PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

ArgsArgument = Annotated[
    Optional[list[str]],
    typer.Argument(help="Container names, -flags and KEY=VALUE assignments"),
]


@dataclass
class AppState:
    tool: ToolSettings
    dry_run: bool = False


@contextmanager
def handle_errors() -> Iterator[None]:
    try:
        yield
    except ManageError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(e.exit_code)


def open_manager(
    ctx: typer.Context,
    arguments: ClassifiedArgs,
    overrides: Optional[dict[str, str]] = None,
) -> ComposeManager:
    """Resolve the environment for the invoked command"""
    state: AppState = ctx.obj
    project_dir = state.tool.resolved_project_dir()
    runner = ProcessRunner(cwd=project_dir, dry_run=state.dry_run)
    environment = configure_environment(
        ctx.info_name or "",
        arguments,
        project_dir=project_dir,
        runner=runner,
        tool=state.tool,
        overrides=overrides,
    )
    return ComposeManager(
        project_dir,
        environment,
        runner.with_env(environment.variables),
        arguments=arguments,
        tool=state.tool,
    )


# ============================================================================
# CLI Commands
# ============================================================================


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print commands without executing them"),
    ] = False,
):
    """Build and run the credential registry containers"""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(1)

    tool = ToolSettings()
    with handle_errors():
        require_executable(tool.s2i_exe, S2I_DOWNLOAD_HINT)
    ctx.obj = AppState(tool=tool, dry_run=dry_run)


@app.command(context_settings=PASSTHROUGH)
def build(ctx: typer.Context, args: ArgsArgument = None):
    """Build the docker images (all, or one of: web, solr, db, schema-spy, api, agent, echo-app)"""
    arguments = classify_arguments(args or [])
    with handle_errors():
        target = resolve_build_target(arguments.names[0] if arguments.names else None)
        manager = open_manager(ctx, arguments)
        manager.images.build(target)


@app.command(context_settings=PASSTHROUGH)
def up(ctx: typer.Context, args: ArgsArgument = None):
    """Create and start the containers (default: all), then follow the logs"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        code = manager.up()
    sys.exit(code)


app.command(
    "start",
    context_settings=PASSTHROUGH,
    help="Same as up",
)(up)


@app.command(context_settings=PASSTHROUGH)
def restart(ctx: typer.Context, args: ArgsArgument = None):
    """Stop and start the containers (default: all)"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        manager.restart()


@app.command(context_settings=PASSTHROUGH)
def logs(ctx: typer.Context, args: ArgsArgument = None):
    """Follow the container logs (ctrl-c to exit)"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        code = manager.logs()
    sys.exit(code)


@app.command("web-dev", context_settings=PASSTHROUGH)
def web_dev(ctx: typer.Context, args: ArgsArgument = None):
    """Run vcr-web in development mode (--rebuild to rebuild the image first)"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        code = manager.web_dev()
    sys.exit(code)


@app.command(context_settings=PASSTHROUGH)
def stop(ctx: typer.Context, args: ArgsArgument = None):
    """Stop the containers without removing them"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        manager.stop()


@app.command(context_settings=PASSTHROUGH)
def startdb(ctx: typer.Context, args: ArgsArgument = None):
    """Start the databases only, then follow the logs"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        code = manager.startdb()
    sys.exit(code)


@app.command(context_settings=PASSTHROUGH)
def stopdb(ctx: typer.Context, args: ArgsArgument = None):
    """Stop the databases"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        manager.stopdb()


@app.command(context_settings=PASSTHROUGH)
def down(ctx: typer.Context, args: ArgsArgument = None):
    """Remove the containers, the project volumes and the build cache"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        manager.down()


app.command(
    "rm",
    context_settings=PASSTHROUGH,
    help="Same as down",
)(down)


@app.command(context_settings=PASSTHROUGH)
def registerdids(ctx: typer.Context, args: ArgsArgument = None):
    """Register DIDs for seeds with the ledger (e.g. seed=my_seed_000...)"""
    state: AppState = ctx.obj
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))

    core = manager.settings.core
    url = registration_url(manager.settings.api.ledger_url or "", core.docker_host)
    seeds = manager.seeds()

    if state.dry_run:
        for seed in seeds:
            console.print(f"[dim]POST {url} {seed_payload(seed)}[/dim]")
        console.print("[yellow]DRY RUN - nothing was registered[/yellow]")
        return

    results = register_dids(seeds, url, timeout=state.tool.registration_timeout)
    print_registration_summary(results)


@app.command(context_settings=PASSTHROUGH)
def shell(ctx: typer.Context, args: ArgsArgument = None):
    """Open a shell in a container (default: vcr-api)"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        code = manager.shell()
    sys.exit(code)


@app.command(context_settings=PASSTHROUGH)
def api(ctx: typer.Context, args: ArgsArgument = None):
    """Run a Django management command in vcr-api"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        code = manager.api()
    sys.exit(code)


@app.command("test-api", context_settings=PASSTHROUGH)
def test_api(ctx: typer.Context, args: ArgsArgument = None):
    """Rebuild vcr-api and run its unit tests with coverage"""
    with handle_errors():
        manager = open_manager(
            ctx, classify_arguments(args or []), overrides=TEST_API_OVERRIDES
        )
        code = manager.test_api()
    sys.exit(code)


@app.command(context_settings=PASSTHROUGH)
def env(ctx: typer.Context, args: ArgsArgument = None):
    """Show the resolved environment"""
    with handle_errors():
        manager = open_manager(ctx, classify_arguments(args or []))
        manager.print_environment()


def main():
    """Main entry point"""
    app()
