#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2026 plumiume
# SPDX-License-Identifier: MIT
# License: MIT License (https://opensource.org/licenses/MIT)
# See LICENSE.txt for details.

"""
Manage the docker and s2i builds and the docker-compose lifecycle of the
credential registry containers.

This is the main entry point that delegates to the vcr_manage package.
"""

from vcr_manage.commands import main

if __name__ == "__main__":
    main()
