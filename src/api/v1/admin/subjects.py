# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject administration endpoints.

- PATCH /{subject_id} - Update a subject
- DELETE /{subject_id} - Remove a subject and deactivate its enrollments
- POST /{subject_id}/enrollments - Enroll students explicitly
- GET /{subject_id}/enrollments - List enrollments
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import RequirePermission, get_app_settings, get_db
from src.core.config import Settings
from src.domains.enrollment.service import EnrollmentRegistry
from src.domains.roster.service import ClassRosterGuard
from src.infrastructure.database.models import AdminAccount
from src.models.common import Permission
from src.models.roster import (
    BulkEnrollmentResult,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollStudentsRequest,
    SubjectResponse,
    SubjectUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

require_manage_subjects = RequirePermission(Permission.MANAGE_SUBJECTS)
require_manage_enrollments = RequirePermission(Permission.MANAGE_ENROLLMENTS)


@router.patch(
    "/{subject_id}",
    response_model=SubjectResponse,
    summary="Update subject",
    description="Update a subject. Becoming compulsory enrolls every active student of the class.",
)
async def update_subject(
    subject_id: str,
    data: SubjectUpdateRequest,
    admin: AdminAccount = Depends(require_manage_subjects),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SubjectResponse:
    """Update a subject."""
    service = ClassRosterGuard(db=db, default_max_students=settings.roster.default_max_students)
    return await service.update_subject(subject_id, data)


@router.delete(
    "/{subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove subject",
)
async def remove_subject(
    subject_id: str,
    admin: AdminAccount = Depends(require_manage_subjects),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Deactivate a subject and its enrollments."""
    service = ClassRosterGuard(db=db, default_max_students=settings.roster.default_max_students)
    await service.remove_subject(subject_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{subject_id}/enrollments",
    response_model=BulkEnrollmentResult,
    summary="Enroll students",
)
async def enroll_students(
    subject_id: str,
    data: EnrollStudentsRequest,
    admin: AdminAccount = Depends(require_manage_enrollments),
    db: AsyncSession = Depends(get_db),
) -> BulkEnrollmentResult:
    """Enroll students in a subject; already enrolled students are counted."""
    logger.info(
        "Enrolling %d students in subject %s by %s",
        len(data.student_ids),
        subject_id,
        admin.id,
    )
    return await EnrollmentRegistry(db).enroll_students(subject_id, data.student_ids)


@router.get(
    "/{subject_id}/enrollments",
    response_model=EnrollmentListResponse,
    summary="List enrollments",
)
async def list_enrollments(
    subject_id: str,
    active_only: Annotated[bool, Query(description="Only active enrollments")] = True,
    admin: AdminAccount = Depends(require_manage_enrollments),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentListResponse:
    """List enrollments of a subject."""
    enrollments = await EnrollmentRegistry(db).list_enrollments(subject_id, active_only=active_only)
    items = [EnrollmentResponse.model_validate(e) for e in enrollments]
    return EnrollmentListResponse(items=items, total=len(items))
