"""Role ranking for "at least as privileged as" comparisons.

Rank is for labeling and coarse UI decisions only. It never grants a
permission: a cashier outranks a user but does not inherit anything from
the roles above it, and security decisions always go through the gate.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Final

from storefront.models.role import RoleType

DEFAULT_ROLE_RANKS: Final[dict[RoleType, int]] = {
    RoleType.SUPERADMIN: 4,
    RoleType.OWNER: 3,
    RoleType.CASHIER: 2,
    RoleType.USER: 1,
}


class RoleHierarchy:
    def __init__(self, ranks: Mapping[RoleType | str, int]):
        validated: dict[RoleType, int] = {}
        for role, rank in ranks.items():
            validated[RoleType(role)] = int(rank)
        missing = set(RoleType) - set(validated)
        if missing:
            raise ValueError(
                "Role hierarchy is not total, missing roles: "
                + ", ".join(sorted(r.value for r in missing))
            )
        self._ranks: Mapping[RoleType, int] = MappingProxyType(validated)

    def rank(self, role: RoleType | str) -> int:
        # Roles outside the closed set rank below everything
        return self._ranks.get(role, 0)

    def is_at_least(self, role: RoleType | str, target: RoleType | str) -> bool:
        return self.rank(role) >= self.rank(target)

    def highest_role(self, roles: Iterable[RoleType | str]) -> RoleType | None:
        known = [RoleType(r) for r in roles if r in self._ranks]
        if not known:
            return None
        return max(known, key=self.rank)

    def any_at_least(self, roles: Iterable[RoleType | str], target: RoleType | str) -> bool:
        return any(self.is_at_least(role, target) for role in roles)

    def is_elevated(self, roles: Iterable[RoleType | str]) -> bool:
        """Staff check for labeling: at least cashier."""
        return self.any_at_least(roles, RoleType.CASHIER)
