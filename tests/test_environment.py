# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

import os
from pathlib import Path

import pytest

from vcr_manage import environment
from vcr_manage.arguments import classify_arguments
from vcr_manage.environment import configure_environment, load_env_file
from vcr_manage.errors import MissingSeedError
from vcr_manage.models import ManageSettings, ToolSettings
from vcr_manage.runner import ProcessRunner

DOCKER_HOST = {"DOCKERHOST": "10.0.0.5"}


def configure(project_dir: Path, command="build", tokens=(), base=None, overrides=None):
    return configure_environment(
        command,
        classify_arguments(tokens),
        project_dir=project_dir,
        runner=ProcessRunner(cwd=project_dir),
        tool=ToolSettings(),
        base=DOCKER_HOST if base is None else base,
        overrides=overrides,
    )


def static_defaults() -> list[tuple[str, str]]:
    """(variable, default) for every field with a fixed default"""
    defaults = []
    for section in ManageSettings.model_fields.values():
        for field in section.annotation.model_fields.values():
            if field.default is not None and field.alias not in (
                "DOCKERHOST",
                "INDY_WALLET_SEED",
            ):
                defaults.append((field.alias, field.default))
    return defaults


@pytest.mark.parametrize(("name", "default"), static_defaults())
def test_unset_variables_get_their_default(project_dir, name, default):
    variables = configure(project_dir).variables
    assert variables[name] == default


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("COMPOSE_PROJECT_NAME", "vcr"),
        ("API_HTTP_PORT", "8081"),
        ("APPLICATION_URL", "http://localhost:8080"),
        ("DATABASE_NAME", "THE_ORG_BOOK"),
        ("DATABASE_USER", "DB_USER"),
        ("LEDGER_URL", "http://10.0.0.5:9000"),
        ("AGENT_ENDPOINT", "http://10.0.0.5:8021"),
        ("AGENT_ADMIN_URL", "http://vcr-agent:8024"),
        ("AGENT_ADMIN_MODE", "admin-insecure-mode"),
        ("THEME", "default"),
        ("TRACE_TARGET", "log"),
    ],
)
def test_documented_defaults(project_dir, name, expected):
    assert configure(project_dir).variables[name] == expected


def test_command_line_overrides_env_file_and_process_environment(project_dir):
    (project_dir / ".env").write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    base = {**DOCKER_HOST, "LOG_LEVEL": "INFO"}

    assert configure(project_dir, base=base).variables["LOG_LEVEL"] == "DEBUG"
    assert (
        configure(project_dir, tokens=["LOG_LEVEL=ERROR"], base=base).variables[
            "LOG_LEVEL"
        ]
        == "ERROR"
    )


def test_process_environment_overrides_defaults(project_dir):
    base = {**DOCKER_HOST, "WEB_HTTP_PORT": "9080"}
    assert configure(project_dir, base=base).variables["WEB_HTTP_PORT"] == "9080"


def test_env_file_comments_ignored_and_unknown_keys_passed_through(project_dir):
    (project_dir / ".env").write_text(
        "# local overrides\n"
        "COMPOSE_FILE=docker-compose.yml:docker-compose.dev.yml\n"
        "API_HTTP_PORT=9001\n",
        encoding="utf-8",
    )

    variables = configure(project_dir).variables

    assert variables["COMPOSE_FILE"] == "docker-compose.yml:docker-compose.dev.yml"
    assert variables["API_HTTP_PORT"] == "9001"
    assert "# local overrides" not in variables


def test_env_file_values_are_not_interpolated(tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("API_URL=http://${DOCKERHOST}:8081/api/\n", encoding="utf-8")
    assert load_env_file(env_file) == {"API_URL": "http://${DOCKERHOST}:8081/api/"}


def test_missing_env_file_is_empty(tmp_path: Path):
    assert load_env_file(tmp_path / ".env") == {}


def test_empty_command_line_value_follows_defaulting_rule(project_dir):
    variables = configure(project_dir, tokens=["LOG_LEVEL=", "API_URL="]).variables

    assert variables["LOG_LEVEL"] == "WARN"
    assert variables["API_URL"] == ""


def test_overrides_sit_between_env_file_and_command_line(project_dir):
    (project_dir / ".env").write_text("DATABASE_ENGINE=postgresql\n", encoding="utf-8")
    overrides = {"DATABASE_ENGINE": "sqlite", "INDY_DISABLED": "true"}

    variables = configure(project_dir, overrides=overrides).variables
    assert variables["DATABASE_ENGINE"] == "sqlite"

    variables = configure(
        project_dir, tokens=["INDY_DISABLED=false"], overrides=overrides
    ).variables
    assert variables["INDY_DISABLED"] == "false"


def test_admin_mode_built_from_api_key(project_dir):
    variables = configure(project_dir, tokens=["AGENT_ADMIN_API_KEY=s3cret"]).variables
    assert variables["AGENT_ADMIN_MODE"] == "admin-api-key s3cret"


def test_stale_admin_mode_in_env_file_is_rederived(project_dir):
    (project_dir / ".env").write_text(
        "AGENT_ADMIN_MODE=admin-insecure-mode\n", encoding="utf-8"
    )

    variables = configure(project_dir, tokens=["AGENT_ADMIN_API_KEY=s3cret"]).variables

    assert variables["AGENT_ADMIN_MODE"] == "admin-api-key s3cret"


@pytest.mark.parametrize("command", ["up", "start", "restart", "registerdids"])
def test_seed_required_before_any_external_tool(project_dir, processes, command):
    with pytest.raises(MissingSeedError):
        configure(project_dir, command=command, base={})

    assert processes.calls == []


@pytest.mark.parametrize("command", ["build", "stop", "down", "logs"])
def test_seed_not_required_for_other_commands(project_dir, command):
    configure(project_dir, command=command)


def test_seed_argument_becomes_wallet_seed(project_dir):
    variables = configure(project_dir, command="up", tokens=["seed=my_seed"]).variables
    assert variables["INDY_WALLET_SEED"] == "my_seed"


def test_command_line_seed_overrides_wallet_seed(project_dir):
    (project_dir / ".env").write_text("INDY_WALLET_SEED=from_file\n", encoding="utf-8")
    base = {**DOCKER_HOST, "INDY_WALLET_SEED": "from_env"}

    variables = configure(
        project_dir, command="start", tokens=["seed=my_seed"], base=base
    ).variables

    assert variables["INDY_WALLET_SEED"] == "my_seed"


def test_wallet_seed_takes_precedence_over_seed_in_lower_layers(project_dir):
    base = {**DOCKER_HOST, "INDY_WALLET_SEED": "from_env", "seed": "other"}
    variables = configure(project_dir, command="start", base=base).variables
    assert variables["INDY_WALLET_SEED"] == "from_env"


def test_empty_command_line_seed_keeps_wallet_seed(project_dir):
    base = {**DOCKER_HOST, "INDY_WALLET_SEED": "from_env"}
    variables = configure(project_dir, command="up", tokens=["seed="], base=base).variables
    assert variables["INDY_WALLET_SEED"] == "from_env"


def test_docker_host_detected_when_unset(project_dir, processes):
    processes.respond(["docker", "run"], stdout="172.17.0.1\n")

    variables = configure(project_dir, base={}).variables

    assert processes.commands == [
        ["docker", "run", "--rm", "--net=host", "eclipse/che-ip"]
    ]
    assert variables["DOCKERHOST"] == "172.17.0.1"
    assert variables["LEDGER_URL"] == "http://172.17.0.1:9000"


def test_docker_host_falls_back_when_detection_fails(
    project_dir, processes, monkeypatch
):
    processes.respond(["docker", "run"], returncode=125)
    monkeypatch.setattr(environment, "get_host_ip_address", lambda: None)

    assert configure(project_dir, base={}).variables["DOCKERHOST"] == "localhost"


def test_configure_does_not_touch_process_environment(project_dir, monkeypatch):
    monkeypatch.delenv("SOLR_CORE_NAME", raising=False)
    configure(project_dir)

    assert "SOLR_CORE_NAME" not in os.environ
