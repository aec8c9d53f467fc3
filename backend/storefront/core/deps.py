"""Dependency injection: subject resolution, access-control wiring, permission enforcement."""

import logging

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import AuthenticationError
from storefront.core.security import decode_access_token
from storefront.db.base import get_db
from storefront.models.role import Permission, RoleType
from storefront.rbac import AccessControl
from storefront.schemas.auth import Subject
from storefront.services.authz import ensure_permission
from storefront.services.dashboard import DashboardService
from storefront.services.orders import OrderService
from storefront.services.products import ProductService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_access_control(request: Request) -> AccessControl:
    return request.app.state.access


def _parse_roles(raw_roles: object) -> frozenset[RoleType]:
    if not isinstance(raw_roles, list):
        raise ValueError("roles claim must be a list")
    roles = set()
    for raw in raw_roles:
        try:
            roles.add(RoleType(raw))
        except ValueError:
            logger.warning("Dropping unknown role %r from token", raw)
    return frozenset(roles)


async def get_current_subject(token: str | None = Depends(oauth2_scheme)) -> Subject:
    """Decode the bearer token into a Subject. No token means an anonymous subject."""
    if token is None:
        return Subject.anonymous()

    try:
        payload = decode_access_token(token)
        subject_id = payload.get("sub")
        if not subject_id:
            raise AuthenticationError()
        return Subject(
            id=str(subject_id),
            roles=_parse_roles(payload.get("roles", [])),
            authenticated=True,
        )
    except (JWTError, ValueError):
        raise AuthenticationError() from None


def require_permission(permission: Permission):
    """Dependency factory: gate the endpoint on a single permission."""

    async def checker(
        subject: Subject = Depends(get_current_subject),
        access: AccessControl = Depends(get_access_control),
    ) -> Subject:
        ensure_permission(access.gate, subject, permission)
        return subject

    return checker


def get_order_service(
    db: AsyncSession = Depends(get_db),
    access: AccessControl = Depends(get_access_control),
) -> OrderService:
    return OrderService(db, access)


def get_product_service(
    db: AsyncSession = Depends(get_db),
    access: AccessControl = Depends(get_access_control),
) -> ProductService:
    return ProductService(db, access)


def get_dashboard_service(
    db: AsyncSession = Depends(get_db),
    access: AccessControl = Depends(get_access_control),
) -> DashboardService:
    return DashboardService(db, access)
