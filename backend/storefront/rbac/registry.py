"""Static role → permission registry.

RBAC Matrix:
┌─────────────────────┬────────────┬───────┬─────────┬──────┐
│ Permission          │ Superadmin │ Owner │ Cashier │ User │
├─────────────────────┼────────────┼───────┼─────────┼──────┤
│ view_products       │     ✓      │   ✓   │    ✓    │  ✓   │
│ create_product      │     ✓      │   ✓   │         │      │
│ edit_product        │     ✓      │   ✓   │         │      │
│ delete_product      │     ✓      │   ✓   │         │      │
│ manage_categories   │     ✓      │   ✓   │         │      │
│ view_cart           │     ✓      │   ✓   │         │  ✓   │
│ add_to_cart         │     ✓      │   ✓   │         │  ✓   │
│ checkout            │     ✓      │   ✓   │    ✓    │  ✓   │
│ view_own_orders     │     ✓      │   ✓   │    ✓    │  ✓   │
│ view_all_orders     │     ✓      │   ✓   │         │      │
│ create_order        │     ✓      │   ✓   │    ✓    │  ✓   │
│ update_order_status │     ✓      │   ✓   │         │      │
│ view_dashboard      │     ✓      │   ✓   │    ✓    │      │
│ manage_users        │     ✓      │   ✓   │         │      │
│ access_admin_panel  │     ✓      │   ✓   │         │      │
│ view_audit_logs     │     ✓      │   ✓   │         │      │
└─────────────────────┴────────────┴───────┴─────────┴──────┘

Permissions are never inherited: a role holds exactly what its row lists.
Multi-role subjects hold the union of their roles' permissions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Final

from storefront.models.role import Permission, RoleType

DEFAULT_ROLE_PERMISSIONS: Final[dict[RoleType, frozenset[Permission]]] = {
    RoleType.SUPERADMIN: frozenset(Permission),  # All permissions
    RoleType.OWNER: frozenset(Permission),  # All permissions
    RoleType.CASHIER: frozenset({
        Permission.VIEW_PRODUCTS,
        Permission.CHECKOUT,
        Permission.VIEW_OWN_ORDERS,  # own sales only
        Permission.CREATE_ORDER,
        Permission.VIEW_DASHBOARD,  # sales dashboard
    }),
    RoleType.USER: frozenset({
        Permission.VIEW_PRODUCTS,
        Permission.VIEW_CART,
        Permission.ADD_TO_CART,
        Permission.CHECKOUT,
        Permission.VIEW_OWN_ORDERS,
        Permission.CREATE_ORDER,
    }),
}

ROLE_DISPLAY_NAMES: Final[dict[RoleType, str]] = {
    RoleType.SUPERADMIN: "Super Admin",
    RoleType.OWNER: "Store Owner",
    RoleType.CASHIER: "Cashier",
    RoleType.USER: "Customer",
}

ROLE_DESCRIPTIONS: Final[dict[RoleType, str]] = {
    RoleType.SUPERADMIN: "Full system access - can manage everything",
    RoleType.OWNER: "Can manage products, categories, and view orders",
    RoleType.CASHIER: "Can process orders and manage sales",
    RoleType.USER: "Regular customer with shopping capabilities",
}


class RolePermissionMap:
    """Immutable, total mapping from every role to the permissions it grants.

    Validation happens once, at construction: a missing role, an unknown
    role or an unknown permission raises ``ValueError``. Lookups never fail;
    a role string outside the closed set simply grants nothing.
    """

    def __init__(self, mapping: Mapping[RoleType | str, Iterable[Permission | str]]):
        self._mapping: Mapping[RoleType, frozenset[Permission]] = MappingProxyType(
            self.validate(mapping)
        )

    @staticmethod
    def validate(
        mapping: Mapping[RoleType | str, Iterable[Permission | str]],
    ) -> dict[RoleType, frozenset[Permission]]:
        errors = []
        validated: dict[RoleType, frozenset[Permission]] = {}

        for role, permissions in mapping.items():
            try:
                role_type = RoleType(role)
            except ValueError:
                errors.append(f"Invalid role in mapping: {role!r}")
                continue

            granted = set()
            for permission in permissions:
                try:
                    granted.add(Permission(permission))
                except ValueError:
                    errors.append(f"Role '{role_type.value}' has invalid permission: {permission!r}")
            validated[role_type] = frozenset(granted)

        missing = set(RoleType) - set(validated)
        if missing:
            errors.append(
                "Mapping is not total, missing roles: "
                + ", ".join(sorted(r.value for r in missing))
            )

        if errors:
            raise ValueError(
                "Role permission map validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        return validated

    def permissions_of(self, role: RoleType | str) -> frozenset[Permission]:
        return self._mapping.get(role, frozenset())

    def has_permission(self, role: RoleType | str, permission: Permission | str) -> bool:
        return permission in self.permissions_of(role)

    def has_any(self, roles: Iterable[RoleType | str], permission: Permission | str) -> bool:
        """True iff at least one role grants the permission (union semantics)."""
        return any(self.has_permission(role, permission) for role in roles)

    def aggregate_permissions(self, roles: Iterable[RoleType | str]) -> frozenset[Permission]:
        granted: set[Permission] = set()
        for role in roles:
            granted |= self.permissions_of(role)
        return frozenset(granted)

    def is_known_role(self, role: RoleType | str) -> bool:
        return role in self._mapping

    def roles(self) -> frozenset[RoleType]:
        return frozenset(self._mapping)


def display_name(role: RoleType) -> str:
    return ROLE_DISPLAY_NAMES[role]


def describe(role: RoleType) -> str:
    return ROLE_DESCRIPTIONS[role]
