"""Unit tests for the scope filter: which orders and products a subject sees."""

from itertools import product as cartesian

import pytest
from sqlalchemy import select

from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.role import RoleType
from storefront.rbac import ResourceKind, ScopePredicate
from storefront.schemas.auth import Subject

ORDER_ROWS = [
    {"id": f"o{i}", "cashier_id": cashier, "user_id": user}
    for i, (cashier, user) in enumerate(cartesian(["C1", "C2", None], ["U1", "C1", None]))
]

PRODUCT_ROWS = [
    {"name": "active", "is_active": True, "is_archived": False},
    {"name": "inactive", "is_active": False, "is_archived": False},
    {"name": "archived", "is_active": True, "is_archived": True},
]


def _visible(predicate: ScopePredicate, rows: list[dict]) -> list[dict]:
    return [row for row in rows if predicate.matches(row)]


def _where(query) -> str:
    return str(query).split("WHERE", 1)[1]


def _invalid_subject(*roles: str) -> Subject:
    # Bypasses validation to simulate a corrupted role claim
    return Subject.model_construct(id="X1", roles=frozenset(roles), authenticated=True)


# ── Orders ─────────────────────────────────────────

def test_admins_see_all_orders(access):
    for role in (RoleType.SUPERADMIN, RoleType.OWNER):
        scope = access.scopes.for_orders(Subject.of("A1", role))
        assert scope.unrestricted
        assert _visible(scope, ORDER_ROWS) == ORDER_ROWS


def test_cashier_sees_only_own_sales(access):
    scope = access.scopes.for_orders(Subject.of("C1", RoleType.CASHIER))
    visible = _visible(scope, ORDER_ROWS)
    assert visible
    assert all(row["cashier_id"] == "C1" for row in visible)


def test_user_sees_only_own_orders(access):
    scope = access.scopes.for_orders(Subject.of("U1", RoleType.USER))
    visible = _visible(scope, ORDER_ROWS)
    assert visible
    assert all(row["user_id"] == "U1" for row in visible)


@pytest.mark.parametrize(
    "roles",
    [(RoleType.CASHIER,), (RoleType.USER,), (RoleType.CASHIER, RoleType.USER)],
)
def test_ownership_visibility(access, roles):
    subject = Subject.of("C1", *roles)
    scope = access.scopes.for_orders(subject)
    for row in ORDER_ROWS:
        expected = (RoleType.CASHIER in roles and row["cashier_id"] == "C1") or (
            RoleType.USER in roles and row["user_id"] == "C1"
        )
        assert scope.matches(row) is expected, row


def test_cashier_and_user_sees_union(access):
    scope = access.scopes.for_orders(Subject.of("C1", RoleType.CASHIER, RoleType.USER))
    visible = {row["id"] for row in _visible(scope, ORDER_ROWS)}
    as_cashier = {row["id"] for row in ORDER_ROWS if row["cashier_id"] == "C1"}
    as_user = {row["id"] for row in ORDER_ROWS if row["user_id"] == "C1"}
    assert visible == as_cashier | as_user


def test_order_scope_is_idempotent(access):
    scope = access.scopes.for_orders(Subject.of("C1", RoleType.CASHIER))
    once = _visible(scope, ORDER_ROWS)
    assert _visible(scope, once) == once


@pytest.mark.asyncio
async def test_order_scope_sql_is_idempotent(access, session, make_product, make_order):
    coffee = await make_product()
    await make_order(coffee, cashier_id="C1")
    await make_order(coffee, cashier_id="C2")
    await make_order(coffee, user_id="C1")

    scope = access.scopes.for_orders(Subject.of("C1", RoleType.CASHIER))
    once = scope.apply(select(Order.id), Order)
    twice = scope.apply(once, Order)

    ids_once = set((await session.execute(once)).scalars())
    ids_twice = set((await session.execute(twice)).scalars())
    assert len(ids_once) == 1
    assert ids_once == ids_twice


def test_anonymous_sees_no_orders(access):
    scope = access.scopes.for_orders(Subject.anonymous())
    assert scope.is_deny_all
    assert _visible(scope, ORDER_ROWS) == []


def test_cashier_does_not_inherit_view_all(access):
    scope = access.scopes.for_orders(Subject.of("C1", RoleType.CASHIER))
    assert not scope.unrestricted


@pytest.mark.parametrize(
    "roles",
    [("auditor",), ("auditor", "cashier"), ("owner", "auditor"), ("superadmin", "")],
)
def test_unknown_role_fails_closed(access, roles):
    subject = _invalid_subject(*roles)
    for kind in ResourceKind:
        scope = access.scopes.scope_for(kind, subject)
        assert scope.is_deny_all
        assert not scope.unrestricted


def test_unknown_resource_kind_fails_closed(access):
    scope = access.scopes.scope_for("invoices", Subject.of("A1", RoleType.OWNER))
    assert scope.is_deny_all


def test_deny_all_renders_false_clause(access):
    scope = access.scopes.for_orders(Subject.anonymous())
    compiled = str(scope.apply(select(Order), Order).compile(compile_kwargs={"literal_binds": True}))
    assert "false" in compiled.lower() or "0 = 1" in compiled


# ── Products ───────────────────────────────────────

@pytest.mark.parametrize(
    "subject",
    [Subject.anonymous(), Subject.of("U1", RoleType.USER)],
    ids=["guest", "user"],
)
def test_public_catalog_for_non_staff(access, subject):
    scope = access.scopes.for_products(subject)
    assert [row["name"] for row in _visible(scope, PRODUCT_ROWS)] == ["active"]


@pytest.mark.parametrize("role", [RoleType.SUPERADMIN, RoleType.OWNER, RoleType.CASHIER])
def test_staff_see_full_inventory(access, role):
    scope = access.scopes.scope_for(ResourceKind.PRODUCTS, Subject.of("S1", role))
    assert _visible(scope, PRODUCT_ROWS) == PRODUCT_ROWS


def test_product_scope_ignores_ownership(access):
    scope = access.scopes.for_products(Subject.of("U1", RoleType.USER))
    row = {"is_active": True, "is_archived": False, "created_by": "someone-else"}
    assert scope.matches(row)


def test_product_clause_filters_flags(access):
    scope = access.scopes.for_products(Subject.anonymous())
    where = _where(scope.apply(select(Product), Product))
    assert "products.is_active" in where
    assert "products.is_archived" in where


# ── Predicate algebra ──────────────────────────────

def test_union_with_everything_is_everything():
    assert ScopePredicate.nothing().union(ScopePredicate.everything()).unrestricted


def test_union_of_nothing_is_nothing():
    assert ScopePredicate.nothing().union(ScopePredicate.nothing()).is_deny_all
