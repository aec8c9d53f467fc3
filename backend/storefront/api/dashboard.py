from fastapi import APIRouter, Depends

from storefront.core.deps import get_dashboard_service, require_permission
from storefront.models.role import Permission
from storefront.schemas.auth import Subject
from storefront.schemas.product import DashboardStats
from storefront.services.dashboard import DashboardService

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    subject: Subject = Depends(require_permission(Permission.VIEW_DASHBOARD)),
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.get_stats(subject)
