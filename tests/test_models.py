# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

from pathlib import Path

import pytest
from pydantic import ValidationError

from vcr_manage.models import (
    AgentSettings,
    CoreSettings,
    DatabaseSettings,
    ManageSettings,
    ToolSettings,
    WebSettings,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "vcr"),
        ("", "vcr"),
        ("orgbook", "orgbook"),
    ],
)
def test_unset_or_empty_falls_back_to_default(value, expected):
    variables = {} if value is None else {"COMPOSE_PROJECT_NAME": value}
    assert CoreSettings.model_validate(variables).compose_project_name == expected


def test_unset_only_keeps_explicit_empty_value():
    assert WebSettings.model_validate({}).theme == "default"
    assert WebSettings.model_validate({"THEME": ""}).theme == ""
    assert WebSettings.model_validate({"API_URL": ""}).api_url == ""


def test_field_names_are_not_read_from_environment():
    # only the upper-case variable names count
    assert CoreSettings.model_validate({"debug": "1"}).debug == ""


def test_database_connection_follows_postgresql_credentials():
    db = DatabaseSettings.model_validate(
        {"POSTGRESQL_DATABASE": "registry", "POSTGRESQL_USER": "alice"}
    )

    assert db.name == "registry"
    assert db.user == "alice"
    assert db.password == "DB_PASSWORD"


def test_explicit_database_name_is_kept():
    db = DatabaseSettings.model_validate(
        {"POSTGRESQL_DATABASE": "registry", "DATABASE_NAME": "other"}
    )
    assert db.name == "other"


@pytest.mark.parametrize(
    ("variables", "expected"),
    [
        ({}, "admin-insecure-mode"),
        ({"AGENT_ADMIN_API_KEY": ""}, "admin-insecure-mode"),
        ({"AGENT_ADMIN_API_KEY": "s3cret"}, "admin-api-key s3cret"),
        (
            {"AGENT_ADMIN_API_KEY": "s3cret", "AGENT_ADMIN_MODE": "admin-insecure-mode"},
            "admin-api-key s3cret",
        ),
        ({"AGENT_ADMIN_MODE": "admin-api-key old"}, "admin-insecure-mode"),
    ],
)
def test_agent_admin_mode(variables, expected):
    assert AgentSettings.model_validate(variables).admin_mode == expected


def test_docker_host_derived_urls():
    settings = ManageSettings.from_environment(
        {"DOCKERHOST": "10.0.0.5", "AGENT_HTTP_INTERFACE_PORT": "9021"}
    )

    assert settings.api.ledger_url == "http://10.0.0.5:9000"
    assert settings.agent.endpoint == "http://10.0.0.5:9021"
    assert settings.agent.admin_url == "http://vcr-agent:8024"


def test_explicit_empty_ledger_url_is_kept():
    settings = ManageSettings.from_environment({"DOCKERHOST": "h", "LEDGER_URL": ""})
    assert settings.api.ledger_url == ""


def test_to_environment_uses_variable_names():
    variables = ManageSettings.from_environment({"DOCKERHOST": "h"}).to_environment()

    assert variables["COMPOSE_PROJECT_NAME"] == "vcr"
    assert variables["IpFilters"] == ""
    assert all(isinstance(value, str) for value in variables.values())


def test_tool_settings_read_manage_prefix(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("MANAGE_COMPOSE_EXE", "docker compose")
    monkeypatch.setenv("MANAGE_PROJECT_DIR", str(tmp_path))

    tool = ToolSettings()

    assert tool.compose_exe == "docker compose"
    assert tool.resolved_project_dir() == tmp_path.resolve()


def test_tool_settings_reject_non_positive_timeout(monkeypatch):
    monkeypatch.setenv("MANAGE_REGISTRATION_TIMEOUT", "0")
    with pytest.raises(ValidationError):
        ToolSettings()
