"""What the current caller may do: permission summary and route checks for the UI."""

from fastapi import APIRouter, Depends, Query

from storefront.core.deps import get_access_control, get_current_subject
from storefront.rbac import AccessControl
from storefront.rbac.registry import display_name
from storefront.schemas.auth import AccessSummary, RouteCheckResponse, Subject

router = APIRouter(prefix="/api/v1/access", tags=["access"])


@router.get("/me", response_model=AccessSummary)
async def get_my_access(
    subject: Subject = Depends(get_current_subject),
    access: AccessControl = Depends(get_access_control),
):
    highest = access.hierarchy.highest_role(subject.roles)
    return AccessSummary(
        id=subject.id,
        authenticated=subject.authenticated,
        roles=sorted(subject.roles, key=access.hierarchy.rank, reverse=True),
        permissions=sorted(access.registry.aggregate_permissions(subject.roles)),
        role_label=display_name(highest) if highest is not None else None,
        is_staff=access.hierarchy.is_elevated(subject.roles),
    )


@router.get("/route", response_model=RouteCheckResponse)
async def check_route(
    path: str = Query(..., min_length=1),
    subject: Subject = Depends(get_current_subject),
    access: AccessControl = Depends(get_access_control),
):
    """Ask whether the caller may open a UI route, and where to go if not."""
    outcome = access.routes.navigate(path, subject)
    return RouteCheckResponse(
        path=outcome.path,
        allowed=outcome.decision.allowed,
        reason=outcome.decision.reason,
        missing_permission=outcome.decision.missing_permission,
        redirect_to=outcome.redirect_to,
    )
