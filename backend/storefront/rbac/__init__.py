"""Role/permission authorization core.

Everything here is pure and stateless. ``build_access_control`` assembles
the immutable pieces once at startup; callers receive them by injection so
tests can swap in alternate maps.
"""

from dataclasses import dataclass

from storefront.rbac.gate import AuthorizationDecision, AuthorizationGate
from storefront.rbac.hierarchy import DEFAULT_ROLE_RANKS, RoleHierarchy
from storefront.rbac.registry import DEFAULT_ROLE_PERMISSIONS, RolePermissionMap
from storefront.rbac.route_guard import (
    DEFAULT_ROUTE_GUARDS,
    NavigationOutcome,
    RouteGuard,
    RouteGuardConfig,
    RouteGuardEvaluator,
    RouteGuardTable,
)
from storefront.rbac.scope import ResourceKind, ScopeFilter, ScopePredicate


@dataclass(frozen=True)
class AccessControl:
    registry: RolePermissionMap
    hierarchy: RoleHierarchy
    gate: AuthorizationGate
    scopes: ScopeFilter
    routes: RouteGuard


def build_access_control(
    role_permissions=None,
    role_ranks=None,
    route_guards=None,
    *,
    login_path: str = "/auth/login",
    cashier_home: str = "/cashier/pos",
) -> AccessControl:
    registry = RolePermissionMap(
        DEFAULT_ROLE_PERMISSIONS if role_permissions is None else role_permissions
    )
    gate = AuthorizationGate(registry)
    routes = RouteGuard(
        RouteGuardTable(DEFAULT_ROUTE_GUARDS if route_guards is None else route_guards),
        RouteGuardEvaluator(gate),
        login_path=login_path,
        cashier_home=cashier_home,
    )
    return AccessControl(
        registry=registry,
        hierarchy=RoleHierarchy(DEFAULT_ROLE_RANKS if role_ranks is None else role_ranks),
        gate=gate,
        scopes=ScopeFilter(registry),
        routes=routes,
    )


__all__ = [
    "AccessControl",
    "AuthorizationDecision",
    "AuthorizationGate",
    "NavigationOutcome",
    "ResourceKind",
    "RoleHierarchy",
    "RolePermissionMap",
    "RouteGuard",
    "RouteGuardConfig",
    "RouteGuardEvaluator",
    "RouteGuardTable",
    "ScopeFilter",
    "ScopePredicate",
    "build_access_control",
]
