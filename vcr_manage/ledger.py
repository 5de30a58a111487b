#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DID registration against the development ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import requests
from requests.exceptions import RequestException
from rich.console import Console
from rich.table import Table

console = Console()

JSON_HEADERS = {"content-type": "application/json"}
LOCAL_LEDGER_URL = "http://localhost:9000"


@dataclass
class RegistrationResult:
    seed: str
    url: str
    status_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and self.status_code < 400


def seed_payload(seed: str) -> dict[str, str]:
    return {"seed": seed}


def registration_url(ledger_url: str, docker_host: str) -> str:
    """URL of the ledger's registration endpoint.

    The default ledger on the docker host is reached through localhost.
    """
    if ledger_url == f"http://{docker_host}:9000" and docker_host != "localhost":
        ledger_url = LOCAL_LEDGER_URL
    return f"{ledger_url}/register"


def split_seeds(values: Iterable[str]) -> list[str]:
    return [seed for value in values for seed in value.split()]


def register_dids(
    seeds: Iterable[str], url: str, *, timeout: float = 30.0
) -> list[RegistrationResult]:
    """POST one registration per seed; failures are recorded, not raised"""
    results: list[RegistrationResult] = []
    for seed in seeds:
        console.print(f"\nRegistering [cyan]{seed}[/cyan] with the ledger ...")
        try:
            resp = requests.post(
                url, json=seed_payload(seed), headers=JSON_HEADERS, timeout=timeout
            )
        except RequestException as e:
            results.append(RegistrationResult(seed=seed, url=url, error=str(e)))
            continue
        results.append(
            RegistrationResult(seed=seed, url=url, status_code=resp.status_code)
        )
    return results


def print_registration_summary(results: list[RegistrationResult]) -> None:
    table = Table(
        title="DID Registration",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Seed", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Detail", style="dim")

    for result in results:
        if result.ok:
            status = "[green]✓ Registered[/green]"
        else:
            status = "[red]✗ Failed[/red]"
        if result.error:
            detail = result.error
        else:
            detail = f"HTTP {result.status_code}"
        table.add_row(result.seed, status, detail)

    console.print()
    console.print(table)
