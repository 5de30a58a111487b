#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Configuration models for the compose environment and the manage tool.

Every ``*Settings`` section maps one field to one environment variable (the
field alias). Values stay strings: they are handed to docker-compose verbatim.
"""

from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ============================================================================
# Environment table
# ============================================================================


def env_field(
    alias: str,
    default: Optional[str] = "",
    *,
    keep_empty: bool = False,
    description: Optional[str] = None,
) -> Any:
    """Declare an environment-backed field.

    ``keep_empty=False`` behaves like ``${VAR:-default}`` (an empty value falls
    back to the default), ``keep_empty=True`` like ``${VAR-default}``.
    """
    return Field(
        default=default,
        alias=alias,
        description=description,
        json_schema_extra={"keep_empty": keep_empty},
    )


class EnvSection(BaseModel):
    """Base for a group of environment variables"""

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def fall_back_when_empty(cls, v: Any, info: ValidationInfo) -> Any:
        """Apply the field default to empty values unless the field keeps them"""
        if v != "" or info.field_name is None:
            return v
        field = cls.model_fields[info.field_name]
        extra = field.json_schema_extra if isinstance(field.json_schema_extra, dict) else {}
        if extra.get("keep_empty"):
            return v
        return field.get_default(call_default_factory=True)

    def to_environment(self) -> dict[str, str]:
        """Dump the section keyed by environment variable name"""
        return {
            name: "" if value is None else str(value)
            for name, value in self.model_dump(by_alias=True).items()
        }


class CoreSettings(EnvSection):
    """Project-wide settings"""

    compose_project_name: str = env_field("COMPOSE_PROJECT_NAME", "vcr")
    indy_wallet_seed: str = env_field(
        "INDY_WALLET_SEED", keep_empty=True, description="Wallet seed for the agent"
    )
    docker_host: str = env_field(
        "DOCKERHOST", "localhost", description="Address of the docker host"
    )
    sti_scripts_path: str = env_field("STI_SCRIPTS_PATH", "/usr/libexec/s2i")
    rust_log: str = env_field("RUST_LOG", "warning")
    rust_backtrace: str = env_field("RUST_BACKTRACE", "full")
    debug: str = env_field("DEBUG", keep_empty=True)
    log_level: str = env_field("LOG_LEVEL", "WARN")
    http_proxy: str = env_field("HTTP_PROXY", keep_empty=True)
    https_proxy: str = env_field("HTTPS_PROXY", keep_empty=True)
    pip_index_url: str = env_field("PIP_INDEX_URL", keep_empty=True)


class WebSettings(EnvSection):
    """vcr-web settings"""

    theme: str = env_field(
        "THEME", "default", keep_empty=True, description="Theme to build into vcr-web"
    )
    theme_path: str = env_field(
        "THEME_PATH",
        keep_empty=True,
        description="Directory holding custom themes, one sub-directory per theme",
    )
    http_port: str = env_field("WEB_HTTP_PORT", "8080")
    base_href: str = env_field("WEB_BASE_HREF", "/")
    deploy_url: str = env_field("WEB_DEPLOY_URL", "/")
    api_url: str = env_field("API_URL", "http://vcr-api:8080/api/", keep_empty=True)
    ip_filters: str = env_field("IpFilters", keep_empty=True)
    real_ip_from: str = env_field("RealIpFrom", keep_empty=True)
    basic_username: str = env_field("HTTP_BASIC_USERNAME", keep_empty=True)
    basic_password: str = env_field("HTTP_BASIC_PASSWORD", keep_empty=True)


class DatabaseSettings(EnvSection):
    """vcr-db and schema-spy settings"""

    postgresql_database: str = env_field("POSTGRESQL_DATABASE", "THE_ORG_BOOK")
    postgresql_user: str = env_field("POSTGRESQL_USER", "DB_USER")
    postgresql_password: str = env_field("POSTGRESQL_PASSWORD", "DB_PASSWORD")
    service_name: str = env_field("DATABASE_SERVICE_NAME", "vcr-db")
    engine: str = env_field("DATABASE_ENGINE", "postgresql", keep_empty=True)
    name: Optional[str] = env_field("DATABASE_NAME", None)
    user: Optional[str] = env_field("DATABASE_USER", None)
    password: Optional[str] = env_field("DATABASE_PASSWORD", None)
    schema_spy_http_port: str = env_field("SCHEMA_SPY_HTTP_PORT", "8082")

    def model_post_init(self, __context: Any):
        """Point the API connection settings at the vcr-db credentials"""
        if self.name is None:
            self.name = self.postgresql_database
        if self.user is None:
            self.user = self.postgresql_user
        if self.password is None:
            self.password = self.postgresql_password


class WalletSettings(EnvSection):
    """wallet-db settings"""

    wallet_type: str = env_field("WALLET_TYPE", "postgres_storage")
    encryption_key: str = env_field("WALLET_ENCRYPTION_KEY", "key")
    host: str = env_field("POSTGRESQL_WALLET_HOST", "wallet-db")
    port: str = env_field("POSTGRESQL_WALLET_PORT", "5432")
    user: str = env_field("POSTGRESQL_WALLET_USER", "DB_USER")
    password: str = env_field("POSTGRESQL_WALLET_PASSWORD", "DB_PASSWORD")
    admin_password: str = env_field(
        "POSTGRESQL_WALLET_ADMIN_PASSWORD", "mysecretpassword"
    )


class SolrSettings(EnvSection):
    """vcr-solr settings"""

    http_port: str = env_field("SOLR_HTTP_PORT", "8983")
    service_name: str = env_field("SOLR_SERVICE_NAME", "vcr-solr")
    core_name: str = env_field("SOLR_CORE_NAME", "aries_vcr")
    batch_size: str = env_field("SOLR_BATCH_SIZE", "500")
    enable_realtime_indexing: str = env_field("ENABLE_REALTIME_INDEXING", "1")
    skip_indexing_on_startup: str = env_field(
        "SKIP_INDEXING_ON_STARTUP", keep_empty=True
    )


class ApiSettings(EnvSection):
    """vcr-api and vcr-worker settings"""

    http_port: str = env_field("API_HTTP_PORT", "8081")
    django_secret_key: str = env_field(
        "DJANGO_SECRET_KEY",
        "wpn1GZrouOryH2FshRrpVHcEhMfMLtmTWMC2K5Vhx8MAi74H5y",
        description="Development key only",
    )
    django_debug: str = env_field("DJANGO_DEBUG", "True")
    django_log_level: str = env_field("DJANGO_LOG_LEVEL", "WARN", keep_empty=True)
    optimize_table_row_counts: str = env_field(
        "OPTIMIZE_TABLE_ROW_COUNTS", keep_empty=True
    )
    indy_disabled: str = env_field("INDY_DISABLED", keep_empty=True)
    sql_debug: str = env_field("SQL_DEBUG")
    web_concurrency: str = env_field("WEB_CONCURRENCY", "5")
    application_url: str = env_field(
        "APPLICATION_URL", "http://localhost:8080", keep_empty=True
    )
    genesis_url: str = env_field("GENESIS_URL", keep_empty=True)
    ledger_url: Optional[str] = env_field(
        "LEDGER_URL",
        None,
        keep_empty=True,
        description="Defaults to port 9000 on the docker host",
    )
    ledger_protocol_version: str = env_field(
        "LEDGER_PROTOCOL_VERSION", keep_empty=True
    )
    record_timings: str = env_field("RECORD_TIMINGS", "false")
    ack_error_pct: str = env_field("ACK_ERROR_PCT", "0")
    update_cred_type_timestamp: str = env_field("UPDATE_CRED_TYPE_TIMESTAMP", "true")
    create_credential_claims: str = env_field("CREATE_CREDENTIAL_CLAIMS", "false")
    process_inbound_credentials: str = env_field(
        "PROCESS_INBOUND_CREDENTIALS", "true"
    )


class AgentSettings(EnvSection):
    """vcr-agent settings"""

    admin_port: str = env_field("AGENT_ADMIN_PORT", "8024")
    http_interface_port: str = env_field("AGENT_HTTP_INTERFACE_PORT", "8021")
    ws_interface_port: str = env_field("AGENT_WS_INTERFACE_PORT", "8023")
    name: str = env_field("AGENT_NAME", "aries-vcr")
    wallet_name: str = env_field("AGENT_WALLET_NAME", "vcr_agent_wallet")
    admin_api_key: str = env_field("AGENT_ADMIN_API_KEY", keep_empty=True)
    admin_mode: Optional[str] = env_field(
        "AGENT_ADMIN_MODE", None, description="Always derived from AGENT_ADMIN_API_KEY"
    )
    endpoint: Optional[str] = env_field(
        "AGENT_ENDPOINT", None, description="Defaults to the docker host address"
    )
    admin_url: Optional[str] = env_field("AGENT_ADMIN_URL", None)
    webhook_url: str = env_field("WEBHOOK_URL", "http://vcr-api:8080/agentcb")

    def model_post_init(self, __context: Any):
        """Derive admin settings from the configured ports and API key"""
        # always derived; a supplied AGENT_ADMIN_MODE is ignored
        if self.admin_api_key:
            self.admin_mode = f"admin-api-key {self.admin_api_key}"
        else:
            self.admin_mode = "admin-insecure-mode"
        if self.admin_url is None:
            self.admin_url = f"http://vcr-agent:{self.admin_port}"


class QueueSettings(EnvSection):
    """rabbitmq settings"""

    service_name: str = env_field("RABBITMQ_SVC_NAME", "rabbitmq")
    user: str = env_field("RABBITMQ_USER", "RABBITMQ_USER")
    password: str = env_field("RABBITMQ_PASSWORD", "RABBITMQ_PASSWORD")
    management_port: str = env_field("RABBITMQ_MGMT_PORT", "15672")


class TracingSettings(EnvSection):
    """Agent event tracing toggles"""

    events: str = env_field("TRACE_EVENTS", "false")
    target: str = env_field("TRACE_TARGET", "log")
    tag: str = env_field("TRACE_TAG", "acapy.events")
    proof_events: str = env_field("TRACE_PROOF_EVENTS", "false")


class ManageSettings(BaseModel):
    """Resolved environment for every compose service"""

    core: CoreSettings = Field(default_factory=CoreSettings)
    web: WebSettings = Field(default_factory=WebSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)
    solr: SolrSettings = Field(default_factory=SolrSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)

    def model_post_init(self, __context: Any):
        """Fill values that depend on the docker host address"""
        docker_host = self.core.docker_host
        if self.api.ledger_url is None:
            self.api.ledger_url = f"http://{docker_host}:9000"
        if self.agent.endpoint is None:
            self.agent.endpoint = f"http://{docker_host}:{self.agent.http_interface_port}"

    @classmethod
    def from_environment(cls, variables: Mapping[str, str]) -> "ManageSettings":
        """Build every section from a flat variable mapping"""
        return cls(
            **{
                name: field.annotation.model_validate(dict(variables))
                for name, field in cls.model_fields.items()
            }
        )

    def sections(self) -> dict[str, EnvSection]:
        return {name: getattr(self, name) for name in type(self).model_fields}

    def to_environment(self) -> dict[str, str]:
        variables: dict[str, str] = {}
        for section in self.sections().values():
            variables.update(section.to_environment())
        return variables


# ============================================================================
# Tool settings
# ============================================================================


class ToolSettings(BaseSettings):
    """Settings of the manage tool itself, read from MANAGE_* variables"""

    model_config = SettingsConfigDict(
        env_prefix="MANAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    s2i_exe: str = Field(default="s2i", description="Source-to-Image executable")
    docker_exe: str = Field(default="docker", description="Docker executable")
    compose_exe: str = Field(
        default="docker-compose",
        description="Compose command, e.g. 'docker-compose' or 'docker compose'",
    )
    project_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding docker-compose.yml (defaults to the tool's directory)",
    )
    env_file: str = Field(default=".env", description="Env file inside project_dir")
    docker_host_image: str = Field(
        default="eclipse/che-ip", description="Image that prints the docker host IP"
    )
    build_cache_dir: str = Field(
        default=".cache", description="Local build cache removed by 'down'"
    )
    registration_timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for ledger requests"
    )

    def resolved_project_dir(self) -> Path:
        if self.project_dir is not None:
            return self.project_dir.resolve()
        return Path(__file__).parent.parent.resolve()
