# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums used by API models and services."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator

from src.utils.datetime import ensure_utc

# Stored timestamps are UTC; SQLite hands them back without tzinfo
UtcDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class TestKind(str, Enum):
    """Kind of test a submission belongs to."""

    __test__ = False

    PRACTICE = "practice"
    MOCK = "mock"
    PAST_PAPER = "past_paper"


class AnswerType(str, Enum):
    """How a question expects to be answered.

    - SINGLE_CHOICE: one option, correct answer stored as a string
    - MULTI_CHOICE: several options, correct answer stored as an ordered list
    - BOOLEAN: true/false, correct answer stored as a boolean
    """

    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    BOOLEAN = "boolean"


class Difficulty(str, Enum):
    """Question difficulty tier."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Role(str, Enum):
    """Administrator role."""

    ADMIN = "admin"
    TEACHER = "teacher"
    SUPER_ADMIN = "super_admin"


class Permission(str, Enum):
    """Administrative permission codes. ALL grants everything."""

    MANAGE_SUBJECTS = "manage_subjects"
    MANAGE_QUESTIONS = "manage_questions"
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_ENROLLMENTS = "manage_enrollments"
    MANAGE_CLASSES = "manage_classes"
    ALL = "*"
