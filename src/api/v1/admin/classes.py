# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class roster administration endpoints.

This module provides endpoints for class management:
- POST / - Create a class
- GET /{class_id} - Get class with teacher, students and subjects
- POST /{class_id}/students - Add a student
- DELETE /{class_id}/students/{student_id} - Remove a student
- PUT /{class_id}/teacher - Assign the class teacher
- POST /{class_id}/subjects - Add a subject

All endpoints require the manage_classes permission, except subject
creation which requires manage_subjects.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import RequirePermission, get_app_settings, get_db
from src.core.config import Settings
from src.domains.roster.service import ClassRosterGuard
from src.infrastructure.database.models import AdminAccount
from src.models.common import Permission
from src.models.roster import (
    AssignTeacherRequest,
    ClassCreateRequest,
    ClassResponse,
    ClassRosterResponse,
    StudentCreateRequest,
    StudentResponse,
    SubjectCreateRequest,
    SubjectResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

require_manage_classes = RequirePermission(Permission.MANAGE_CLASSES)
require_manage_subjects = RequirePermission(Permission.MANAGE_SUBJECTS)


def _get_service(db: AsyncSession, settings: Settings) -> ClassRosterGuard:
    """Get roster service configured from settings."""
    return ClassRosterGuard(db=db, default_max_students=settings.roster.default_max_students)


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create class",
)
async def create_class(
    data: ClassCreateRequest,
    admin: AdminAccount = Depends(require_manage_classes),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> ClassResponse:
    """Create a new class in the given or active academic year."""
    logger.info("Creating class %s by %s", data.name, admin.id)
    return await _get_service(db, settings).create_class(data, created_by=admin.id)


@router.get(
    "/{class_id}",
    response_model=ClassRosterResponse,
    summary="Get class roster",
)
async def get_class_roster(
    class_id: str,
    admin: AdminAccount = Depends(require_manage_classes),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> ClassRosterResponse:
    """Get a class with its teacher, students and active subjects."""
    return await _get_service(db, settings).get_class_roster(class_id)


@router.post(
    "/{class_id}/students",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add student",
    description="Add a student within class capacity and enroll them in compulsory subjects.",
)
async def add_student(
    class_id: str,
    data: StudentCreateRequest,
    admin: AdminAccount = Depends(require_manage_classes),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> StudentResponse:
    """Add a student to a class."""
    return await _get_service(db, settings).add_student(class_id, data)


@router.delete(
    "/{class_id}/students/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove student",
    description="Delete a student together with their enrollments, progress and results.",
)
async def remove_student(
    class_id: str,
    student_id: str,
    admin: AdminAccount = Depends(require_manage_classes),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Remove a student from a class."""
    await _get_service(db, settings).remove_student(class_id, student_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{class_id}/teacher",
    response_model=ClassResponse,
    summary="Assign class teacher",
)
async def assign_class_teacher(
    class_id: str,
    data: AssignTeacherRequest,
    admin: AdminAccount = Depends(require_manage_classes),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> ClassResponse:
    """Make a teacher the class teacher of a class."""
    return await _get_service(db, settings).assign_class_teacher(class_id, data.teacher_id)


@router.post(
    "/{class_id}/subjects",
    response_model=SubjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add subject",
)
async def add_subject(
    class_id: str,
    data: SubjectCreateRequest,
    admin: AdminAccount = Depends(require_manage_subjects),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SubjectResponse:
    """Add a subject to a class."""
    return await _get_service(db, settings).add_subject(class_id, data)
