"""Unit tests for the route guard evaluator, table lookup and navigation policy."""

from dataclasses import replace
from itertools import combinations

import pytest

from storefront.models.role import Permission, RoleType
from storefront.rbac import RouteGuardConfig, RouteGuardEvaluator, RouteGuardTable
from storefront.rbac.route_guard import DEFAULT_ROUTE_GUARDS
from storefront.schemas.auth import Subject

SUBJECTS = [Subject.anonymous()] + [
    Subject.of("S1", *combo)
    for size in range(1, len(RoleType) + 1)
    for combo in combinations(RoleType, size)
]


@pytest.fixture
def evaluator(access):
    return RouteGuardEvaluator(access.gate)


def _allowed(evaluator, config):
    return {i for i, subject in enumerate(SUBJECTS) if evaluator.evaluate(config, subject).allowed}


# ── Evaluator ──────────────────────────────────────

def test_admin_route_denies_cashier_naming_roles(evaluator):
    config = RouteGuardConfig(
        require_auth=True,
        required_roles=("superadmin", "owner"),
        required_permissions=("access_admin_panel",),
    )
    decision = evaluator.evaluate(config, Subject.of("C1", RoleType.CASHIER))
    assert not decision.allowed
    assert "superadmin" in decision.reason
    assert "owner" in decision.reason


def test_admin_route_allows_owner(evaluator):
    decision = evaluator.evaluate(DEFAULT_ROUTE_GUARDS["/admin"], Subject.of("O1", RoleType.OWNER))
    assert decision.allowed
    assert decision.reason is None


def test_auth_required_checked_first(evaluator):
    decision = evaluator.evaluate(DEFAULT_ROUTE_GUARDS["/admin"], Subject.anonymous())
    assert decision.reason == "Authentication required"


def test_guest_not_allowed_without_flag(evaluator):
    decision = evaluator.evaluate(RouteGuardConfig(), Subject.anonymous())
    assert not decision.allowed
    assert decision.reason == "Guests are not allowed on this page"


def test_guest_allowed_on_public_route(evaluator):
    assert evaluator.evaluate(DEFAULT_ROUTE_GUARDS["/products"], Subject.anonymous()).allowed


def test_missing_permission_reported(evaluator):
    config = RouteGuardConfig(require_auth=True, required_permissions=(Permission.VIEW_CART,))
    decision = evaluator.evaluate(config, Subject.of("C1", RoleType.CASHIER))
    assert not decision.allowed
    assert decision.missing_permission == Permission.VIEW_CART


def test_permissions_are_or_matched(evaluator):
    decision = evaluator.evaluate(DEFAULT_ROUTE_GUARDS["/orders"], Subject.of("U1", RoleType.USER))
    assert decision.allowed


def test_config_rejects_unknown_tokens():
    with pytest.raises(ValueError):
        RouteGuardConfig(required_roles=("auditor",))
    with pytest.raises(ValueError):
        RouteGuardConfig(required_permissions=("teleport",))


def test_config_dedupes_tokens():
    config = RouteGuardConfig(required_roles=("owner", RoleType.OWNER, "cashier"))
    assert config.required_roles == (RoleType.OWNER, RoleType.CASHIER)


@pytest.mark.parametrize("path", sorted(DEFAULT_ROUTE_GUARDS))
def test_dropping_requirements_only_widens(evaluator, path):
    config = DEFAULT_ROUTE_GUARDS[path]
    before = _allowed(evaluator, config)
    relaxed = [
        replace(config, required_roles=()),
        replace(config, required_permissions=()),
        replace(config, require_auth=False),
        replace(config, required_roles=(), required_permissions=()),
    ]
    for widened in relaxed:
        assert before <= _allowed(evaluator, widened)


# ── Table ──────────────────────────────────────────

def test_table_is_read_only():
    table = RouteGuardTable(DEFAULT_ROUTE_GUARDS)
    with pytest.raises(TypeError):
        table["/new"] = RouteGuardConfig()  # type: ignore[index]


def test_table_rejects_relative_paths():
    with pytest.raises(ValueError):
        RouteGuardTable({"admin": RouteGuardConfig()})


def test_exact_match_beats_pattern():
    table = RouteGuardTable(DEFAULT_ROUTE_GUARDS)
    assert table.config_for("/products/manage") is DEFAULT_ROUTE_GUARDS["/products/manage"]
    assert table.config_for("/products/42") is DEFAULT_ROUTE_GUARDS["/products/:id"]


def test_lookup_normalizes_path():
    table = RouteGuardTable(DEFAULT_ROUTE_GUARDS)
    assert table.config_for("/admin/?tab=users") is DEFAULT_ROUTE_GUARDS["/admin"]
    assert not table.is_protected("/nowhere")


# ── Navigation ─────────────────────────────────────

def test_unknown_route_denied(access):
    decision = access.routes.evaluate_route("/nowhere", Subject.of("O1", RoleType.OWNER))
    assert not decision.allowed
    assert decision.reason.startswith("Unknown route")


def test_anonymous_redirected_to_login(access):
    outcome = access.routes.navigate("/checkout", Subject.anonymous())
    assert not outcome.decision.allowed
    assert outcome.redirect_to == access.routes.login_path


def test_cashier_confined_to_pos(access):
    cashier = Subject.of("C1", RoleType.CASHIER)
    outcome = access.routes.navigate("/dashboard", cashier)
    assert not outcome.decision.allowed
    assert outcome.redirect_to == "/cashier/pos"

    assert access.routes.navigate("/cashier/pos", cashier).decision.allowed


def test_cashier_with_admin_role_not_confined(access):
    outcome = access.routes.navigate("/dashboard", Subject.of("O1", RoleType.CASHIER, RoleType.OWNER))
    assert outcome.decision.allowed
    assert outcome.redirect_to is None


def test_authenticated_denial_has_no_redirect(access):
    outcome = access.routes.navigate("/admin", Subject.of("U1", RoleType.USER))
    assert not outcome.decision.allowed
    assert outcome.redirect_to is None


def test_denied_cashier_sent_back_to_pos(access):
    outcome = access.routes.navigate("/cashier/pos/unknown", Subject.of("C1", RoleType.CASHIER))
    assert not outcome.decision.allowed
    assert outcome.redirect_to == "/cashier/pos"
