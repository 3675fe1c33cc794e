# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Administrator dashboard endpoint.

- GET / - Counts for the active academic year and the newest classes

Requires the view_analytics permission.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import RequirePermission, get_db
from src.domains.analytics.service import StatsService
from src.infrastructure.database.models import AdminAccount
from src.models.analytics import DashboardStatsResponse
from src.models.common import Permission

router = APIRouter()

require_view_analytics = RequirePermission(Permission.VIEW_ANALYTICS)


@router.get(
    "",
    response_model=DashboardStatsResponse,
    summary="Dashboard statistics",
)
async def get_dashboard_stats(
    admin: AdminAccount = Depends(require_view_analytics),
    db: AsyncSession = Depends(get_db),
) -> DashboardStatsResponse:
    """Summarize the active academic year."""
    return await StatsService(db).get_dashboard_stats()
