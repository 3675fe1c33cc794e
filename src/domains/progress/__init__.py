# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Progress domain package.

Atomic per-(student, subject) progress accounting.
"""

from src.domains.progress.ledger import (
    ProgressLedger,
    ProgressTotals,
    merge_progress,
    validate_batch,
)

__all__ = [
    "ProgressLedger",
    "ProgressTotals",
    "merge_progress",
    "validate_batch",
]
