#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Resolution of the environment handed to docker, s2i and docker-compose.

Layers, lowest precedence first: built-in defaults, the process environment,
the project ``.env`` file, command overrides, command-line assignments.
"""

import os
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values
from rich.console import Console

from .arguments import ClassifiedArgs
from .errors import MissingSeedError
from .models import ManageSettings, ToolSettings
from .runner import ProcessRunner

console = Console()

SEED_REQUIRED_COMMANDS = frozenset({"up", "start", "restart", "registerdids"})


@dataclass
class ManageEnvironment:
    settings: ManageSettings
    variables: dict[str, str]


def load_env_file(path: Path) -> dict[str, str]:
    """Read KEY=VALUE pairs from an env file, if it exists"""
    if not path.is_file():
        return {}
    values = dotenv_values(path, interpolate=False)
    return {key: value for key, value in values.items() if value is not None}


def get_host_ip_address() -> Optional[str]:
    """Get the first non-loopback network interface IP address"""
    try:
        # Connecting a UDP socket sends nothing; it only selects the interface
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            ip_address = s.getsockname()[0]
            if not ip_address.startswith("127."):
                return ip_address
    except OSError:
        pass

    return None


def detect_docker_host(
    runner: ProcessRunner,
    docker_exe: str = "docker",
    image: str = "eclipse/che-ip",
) -> str:
    """Ask a throwaway container for the docker host address"""
    result = runner.capture([docker_exe, "run", "--rm", "--net=host", image])
    address = result.stdout.strip()
    if result.ok and address:
        return address

    console.print(
        "[yellow]Could not detect the docker host address, "
        "falling back to the host IP[/yellow]"
    )
    return get_host_ip_address() or "localhost"


def resolve_seed(
    variables: Mapping[str, str], command_line: Optional[Mapping[str, str]] = None
) -> str:
    """Wallet seed; a seed given on the command line wins over lower layers"""
    command_line = command_line or {}
    return (
        command_line.get("seed")
        or command_line.get("INDY_WALLET_SEED")
        or variables.get("INDY_WALLET_SEED")
        or variables.get("seed", "")
    )


def configure_environment(
    command: str,
    arguments: ClassifiedArgs,
    *,
    project_dir: Path,
    runner: ProcessRunner,
    tool: Optional[ToolSettings] = None,
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> ManageEnvironment:
    """Resolve the compose environment for ``command``.

    Fails with MissingSeedError for seed-dependent commands before any
    external tool is invoked.
    """
    tool = tool or ToolSettings()

    variables = dict(os.environ if base is None else base)
    variables.update(load_env_file(project_dir / tool.env_file))
    variables.update(overrides or {})
    variables.update(arguments.variables)

    seed = resolve_seed(variables, arguments.variables)
    if command in SEED_REQUIRED_COMMANDS and not seed:
        raise MissingSeedError(command)
    variables["INDY_WALLET_SEED"] = seed

    if not variables.get("DOCKERHOST"):
        variables["DOCKERHOST"] = detect_docker_host(
            runner, tool.docker_exe, tool.docker_host_image
        )

    settings = ManageSettings.from_environment(variables)
    variables.update(settings.to_environment())
    return ManageEnvironment(settings=settings, variables=variables)
