"""EduPractice Backend.

Assessment submission and progress-consistency engine for the EduPractice
practice platform: grading, mastery tracking and class roster invariants.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
