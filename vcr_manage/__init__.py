#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Container build and lifecycle management package.
"""

from .arguments import DEFAULT_CONTAINERS, ClassifiedArgs, classify_arguments
from .builds import BuildTarget, ImageBuilder, resolve_build_target
from .commands import app, main
from .environment import ManageEnvironment, configure_environment
from .errors import (
    CommandFailed,
    ManageError,
    MissingExecutableError,
    MissingSeedError,
    MissingThemeError,
    UnknownBuildTargetError,
)
from .ledger import RegistrationResult, register_dids, registration_url
from .manager import ComposeManager
from .models import (
    AgentSettings,
    ApiSettings,
    CoreSettings,
    DatabaseSettings,
    ManageSettings,
    QueueSettings,
    SolrSettings,
    ToolSettings,
    TracingSettings,
    WalletSettings,
    WebSettings,
)
from .runner import CommandResult, ProcessRunner

__all__ = [
    # Commands
    "app",
    "main",
    # Manager
    "ComposeManager",
    "ImageBuilder",
    "ProcessRunner",
    "CommandResult",
    # Arguments and environment
    "DEFAULT_CONTAINERS",
    "ClassifiedArgs",
    "classify_arguments",
    "ManageEnvironment",
    "configure_environment",
    # Builds
    "BuildTarget",
    "resolve_build_target",
    # Ledger
    "RegistrationResult",
    "register_dids",
    "registration_url",
    # Errors
    "ManageError",
    "CommandFailed",
    "MissingExecutableError",
    "MissingSeedError",
    "MissingThemeError",
    "UnknownBuildTargetError",
    # Models
    "ManageSettings",
    "ToolSettings",
    "CoreSettings",
    "WebSettings",
    "DatabaseSettings",
    "WalletSettings",
    "SolrSettings",
    "ApiSettings",
    "AgentSettings",
    "QueueSettings",
    "TracingSettings",
]
