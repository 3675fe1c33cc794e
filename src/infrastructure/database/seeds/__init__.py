# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database seed package.

This package contains seed data for local development and demos.
"""

from src.infrastructure.database.seeds.demo import seed_demo_data

__all__ = ["seed_demo_data"]
