# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Administrator account endpoints.

- POST / - Create an administrator account

The first account can be created without an identity (bootstrap). Once an
administrator exists, only a super admin may create further accounts.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_admin, get_db
from src.domains.admin.service import AdminService
from src.models.admin import AdminCreateRequest, AdminResponse
from src.models.common import Role

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AdminResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create administrator",
    description="Create an administrator. Open while no administrator exists, then super admin only.",
)
async def create_admin(
    data: AdminCreateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AdminResponse:
    """Create an administrator account.

    Args:
        data: Account data.
        request: HTTP request carrying the caller identity.
        db: Database session.

    Returns:
        Created administrator.

    Raises:
        HTTPException: If the caller may not create administrators.
    """
    service = AdminService(db)

    if await service.count_admins() > 0:
        acting = await get_current_admin(request, db)
        if acting.role != Role.SUPER_ADMIN.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Super admin access required",
            )
        logger.info("Administrator %s creating account for %s", acting.id, data.email)
    else:
        logger.info("Bootstrapping first administrator account: %s", data.email)

    return await service.create_admin(data)
