"""Route guards for the UI layer.

These decisions are advisory: they decide what a screen should render or
where to redirect. The service layer re-checks every operation through the
gate, because a route can always be bypassed by calling the API directly.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from storefront.models.role import Permission, RoleType
from storefront.rbac.gate import AuthorizationDecision, AuthorizationGate
from storefront.schemas.auth import Subject


@dataclass(frozen=True)
class RouteGuardConfig:
    """Per-path declaration. Roles and permissions are each OR-matched."""

    require_auth: bool = False
    allow_guest: bool = False
    required_roles: tuple[RoleType, ...] = ()
    required_permissions: tuple[Permission, ...] = ()

    def __post_init__(self) -> None:
        # Unknown tokens fail here, when the table is built, not per request
        object.__setattr__(
            self, "required_roles", tuple(dict.fromkeys(RoleType(r) for r in self.required_roles))
        )
        object.__setattr__(
            self,
            "required_permissions",
            tuple(dict.fromkeys(Permission(p) for p in self.required_permissions)),
        )


class RouteGuardEvaluator:
    def __init__(self, gate: AuthorizationGate):
        self.gate = gate

    def evaluate(self, config: RouteGuardConfig, subject: Subject) -> AuthorizationDecision:
        """Short-circuits on the first failing rule."""
        if config.require_auth and not subject.authenticated:
            return AuthorizationDecision.deny("Authentication required")

        if not subject.authenticated and not config.allow_guest:
            return AuthorizationDecision.deny("Guests are not allowed on this page")

        if config.required_roles:
            if not any(role in subject.roles for role in config.required_roles):
                return AuthorizationDecision.deny(
                    "Required roles: " + ", ".join(r.value for r in config.required_roles)
                )

        if config.required_permissions:
            if not self.gate.can_access_any(subject.roles, config.required_permissions):
                return AuthorizationDecision.deny(
                    "Required permissions: "
                    + ", ".join(p.value for p in config.required_permissions),
                    missing_permission=config.required_permissions[0],
                )

        return AuthorizationDecision.allow()


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def _segments_match(pattern: str, path: str) -> bool:
    pattern_parts = pattern.strip("/").split("/")
    path_parts = path.strip("/").split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    for expected, actual in zip(pattern_parts, path_parts):
        if expected.startswith(":"):
            if not actual:
                return False
        elif expected != actual:
            return False
    return True


class RouteGuardTable(Mapping[str, RouteGuardConfig]):
    """Read-only path → config table, built once at startup."""

    def __init__(self, routes: Mapping[str, RouteGuardConfig]):
        for path, config in routes.items():
            if not path.startswith("/"):
                raise ValueError(f"Route path must start with '/': {path!r}")
            if not isinstance(config, RouteGuardConfig):
                raise TypeError(f"Route {path!r} must map to a RouteGuardConfig")
        self._routes: Mapping[str, RouteGuardConfig] = MappingProxyType(dict(routes))

    def __getitem__(self, path: str) -> RouteGuardConfig:
        return self._routes[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def config_for(self, path: str) -> RouteGuardConfig | None:
        """Exact match first, then ``:param`` patterns (fewest params wins)."""
        path = _normalize(path)
        if path in self._routes:
            return self._routes[path]
        candidates = [
            pattern for pattern in self._routes
            if ":" in pattern and _segments_match(pattern, path)
        ]
        if not candidates:
            return None
        best = min(candidates, key=lambda p: p.count(":"))
        return self._routes[best]

    def is_protected(self, path: str) -> bool:
        return self.config_for(path) is not None


_ADMINS: Final = (RoleType.SUPERADMIN, RoleType.OWNER)
_STAFF: Final = (RoleType.SUPERADMIN, RoleType.OWNER, RoleType.CASHIER)

DEFAULT_ROUTE_GUARDS: Final[dict[str, RouteGuardConfig]] = {
    "/": RouteGuardConfig(allow_guest=True),
    "/products": RouteGuardConfig(allow_guest=True),
    "/products/:id": RouteGuardConfig(allow_guest=True),
    "/cart": RouteGuardConfig(
        require_auth=True, required_permissions=(Permission.VIEW_CART,)
    ),
    "/checkout": RouteGuardConfig(
        require_auth=True, required_permissions=(Permission.CHECKOUT,)
    ),
    "/orders": RouteGuardConfig(
        require_auth=True,
        required_permissions=(Permission.VIEW_OWN_ORDERS, Permission.VIEW_ALL_ORDERS),
    ),
    "/dashboard": RouteGuardConfig(
        require_auth=True,
        required_roles=_STAFF,
        required_permissions=(Permission.VIEW_DASHBOARD,),
    ),
    "/admin": RouteGuardConfig(
        require_auth=True,
        required_roles=_ADMINS,
        required_permissions=(Permission.ACCESS_ADMIN_PANEL,),
    ),
    "/products/manage": RouteGuardConfig(
        require_auth=True,
        required_roles=_ADMINS,
        required_permissions=(Permission.CREATE_PRODUCT,),
    ),
    "/categories/manage": RouteGuardConfig(
        require_auth=True,
        required_roles=_ADMINS,
        required_permissions=(Permission.MANAGE_CATEGORIES,),
    ),
    "/notifications": RouteGuardConfig(require_auth=True),
    "/addresses": RouteGuardConfig(require_auth=True),
    "/payments": RouteGuardConfig(require_auth=True),
    "/cashier/pos": RouteGuardConfig(require_auth=True, required_roles=_STAFF),
    "/admin/audit-logs": RouteGuardConfig(
        require_auth=True,
        required_roles=_ADMINS,
        required_permissions=(Permission.VIEW_AUDIT_LOGS,),
    ),
    "/admin/cleanup": RouteGuardConfig(
        require_auth=True,
        required_roles=_ADMINS,
        required_permissions=(Permission.ACCESS_ADMIN_PANEL,),
    ),
}


@dataclass(frozen=True)
class NavigationOutcome:
    path: str
    decision: AuthorizationDecision
    redirect_to: str | None = None


def is_cashier_only(subject: Subject) -> bool:
    return RoleType.CASHIER in subject.roles and not any(r in subject.roles for r in _ADMINS)


class RouteGuard:
    """Table lookup + evaluation + the redirect policy the UI applies on denial."""

    def __init__(
        self,
        table: RouteGuardTable,
        evaluator: RouteGuardEvaluator,
        *,
        login_path: str = "/auth/login",
        cashier_home: str = "/cashier/pos",
    ):
        self.table = table
        self.evaluator = evaluator
        self.login_path = login_path
        self.cashier_home = cashier_home

    def evaluate_route(self, path: str, subject: Subject) -> AuthorizationDecision:
        config = self.table.config_for(path)
        if config is None:
            return AuthorizationDecision.deny(f"Unknown route: {_normalize(path)}")
        return self.evaluator.evaluate(config, subject)

    def navigate(self, path: str, subject: Subject) -> NavigationOutcome:
        path = _normalize(path)

        # Cashiers work from the point-of-sale screen only
        if is_cashier_only(subject) and not path.startswith(self.cashier_home):
            return NavigationOutcome(
                path=path,
                decision=AuthorizationDecision.deny("Cashiers are limited to the point of sale"),
                redirect_to=self.cashier_home,
            )

        decision = self.evaluate_route(path, subject)
        if decision.allowed:
            return NavigationOutcome(path=path, decision=decision)

        config = self.table.config_for(path)
        if config is not None and config.require_auth and not subject.authenticated:
            return NavigationOutcome(path=path, decision=decision, redirect_to=self.login_path)
        if is_cashier_only(subject):
            return NavigationOutcome(path=path, decision=decision, redirect_to=self.cashier_home)
        return NavigationOutcome(path=path, decision=decision)
