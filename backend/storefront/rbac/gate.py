"""Authorization gate: the single decision function behind every privileged operation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from storefront.models.role import Permission, RoleType
from storefront.rbac.registry import RolePermissionMap


@dataclass(frozen=True)
class AuthorizationDecision:
    """Outcome shared by the gate and the route guard evaluator."""

    allowed: bool
    reason: str | None = None
    missing_permission: Permission | None = None

    @classmethod
    def allow(cls) -> "AuthorizationDecision":
        return cls(allowed=True)

    @classmethod
    def deny(
        cls, reason: str, missing_permission: Permission | None = None
    ) -> "AuthorizationDecision":
        return cls(allowed=False, reason=reason, missing_permission=missing_permission)


class AuthorizationGate:
    """Pure predicate over the role set passed in; no I/O, no caching.

    Denial is a normal return value here. The service layer turns a denial
    into an ``AuthorizationError``.
    """

    def __init__(self, registry: RolePermissionMap):
        self.registry = registry

    def can_access(self, roles: Iterable[RoleType | str], permission: Permission | str) -> bool:
        return self.registry.has_any(roles, permission)

    def can_access_any(
        self, roles: Iterable[RoleType | str], permissions: Iterable[Permission | str]
    ) -> bool:
        roles = tuple(roles)
        return any(self.can_access(roles, permission) for permission in permissions)

    def check(
        self, roles: Iterable[RoleType | str], permission: Permission | str
    ) -> AuthorizationDecision:
        if self.can_access(roles, permission):
            return AuthorizationDecision.allow()
        permission = Permission(permission)
        return AuthorizationDecision.deny(
            f"Access denied: {permission.value} requires different permissions",
            missing_permission=permission,
        )
