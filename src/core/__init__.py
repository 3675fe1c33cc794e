# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for EduPractice.

This package contains shared building blocks:
- config: Application configuration and settings
- errors: Error taxonomy raised by domain services
"""
