"""Resource scoping: which rows of a resource a subject may see.

Permission answers "may this subject see orders at all"; scope answers
"which orders". A scope is a ``ScopePredicate``: unrestricted, or an OR of
equality clauses. An empty OR matches nothing, so every ambiguous branch
falls through to deny-all.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, and_, false, or_, true
from sqlalchemy.sql.elements import ColumnElement

from storefront.models.role import Permission, RoleType
from storefront.rbac.registry import RolePermissionMap
from storefront.schemas.auth import Subject


class ResourceKind(str, enum.Enum):
    ORDERS = "orders"
    PRODUCTS = "products"


def _field_value(row: Any, field: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(field)
    return getattr(row, field, None)


@dataclass(frozen=True)
class FieldMatch:
    """AND of ``field == value`` pairs."""

    equals: tuple[tuple[str, Any], ...]

    def matches(self, row: Any) -> bool:
        return all(_field_value(row, field) == value for field, value in self.equals)

    def clause(self, model: type) -> ColumnElement[bool]:
        return and_(*(getattr(model, field) == value for field, value in self.equals))


@dataclass(frozen=True)
class ScopePredicate:
    unrestricted: bool = False
    any_of: tuple[FieldMatch, ...] = ()

    @classmethod
    def everything(cls) -> "ScopePredicate":
        return cls(unrestricted=True)

    @classmethod
    def nothing(cls) -> "ScopePredicate":
        return cls()

    @classmethod
    def where(cls, **equals: Any) -> "ScopePredicate":
        return cls(any_of=(FieldMatch(tuple(sorted(equals.items()))),))

    @property
    def is_deny_all(self) -> bool:
        return not self.unrestricted and not self.any_of

    def union(self, other: "ScopePredicate") -> "ScopePredicate":
        if self.unrestricted or other.unrestricted:
            return ScopePredicate.everything()
        return ScopePredicate(any_of=self.any_of + other.any_of)

    def matches(self, row: Any) -> bool:
        if self.unrestricted:
            return True
        return any(match.matches(row) for match in self.any_of)

    def clause(self, model: type) -> ColumnElement[bool]:
        if self.unrestricted:
            return true()
        if not self.any_of:
            return false()
        return or_(*(match.clause(model) for match in self.any_of))

    def apply(self, query: Select, model: type) -> Select:
        if self.unrestricted:
            return query
        return query.where(self.clause(model))


# Rows any visitor may browse
PUBLIC_CATALOG = ScopePredicate.where(is_active=True, is_archived=False)


class ScopeFilter:
    """Computes scope predicates from the subject's current roles. Stateless."""

    def __init__(self, registry: RolePermissionMap):
        self.registry = registry

    def _ambiguous(self, subject: Subject) -> bool:
        return any(not self.registry.is_known_role(role) for role in subject.roles)

    def for_orders(self, subject: Subject) -> ScopePredicate:
        """Owners and superadmins see everything; cashiers see the sales they
        processed; customers see orders placed for them. A subject holding
        both cashier and user roles sees the union of both sets."""
        if not subject.authenticated or self._ambiguous(subject):
            return ScopePredicate.nothing()

        roles = subject.roles
        if self.registry.has_any(roles, Permission.VIEW_ALL_ORDERS):
            return ScopePredicate.everything()
        if not subject.id or not self.registry.has_any(roles, Permission.VIEW_OWN_ORDERS):
            return ScopePredicate.nothing()

        scope = ScopePredicate.nothing()
        if RoleType.CASHIER in roles:
            scope = scope.union(ScopePredicate.where(cashier_id=subject.id))
        if RoleType.USER in roles:
            scope = scope.union(ScopePredicate.where(user_id=subject.id))
        return scope

    def for_products(self, subject: Subject) -> ScopePredicate:
        """Staff manage the full inventory lifecycle; everyone else only
        sees active, unarchived products."""
        if self._ambiguous(subject):
            return ScopePredicate.nothing()
        if self.registry.has_any(subject.roles, Permission.VIEW_DASHBOARD):
            return ScopePredicate.everything()
        return PUBLIC_CATALOG

    def scope_for(self, kind: ResourceKind | str, subject: Subject) -> ScopePredicate:
        try:
            kind = ResourceKind(kind)
        except ValueError:
            return ScopePredicate.nothing()
        if kind is ResourceKind.ORDERS:
            return self.for_orders(subject)
        return self.for_products(subject)
