"""Subject and access request/response schemas."""

from pydantic import BaseModel, ConfigDict, model_validator

from storefront.models.role import Permission, RoleType


# ── Subject ────────────────────────────────────────
class Subject(BaseModel):
    """The caller as resolved by the identity provider.

    Anonymous callers have no id and no roles; every permission check
    denies them unless the operation explicitly allows guests.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    roles: frozenset[RoleType] = frozenset()
    authenticated: bool = False

    @model_validator(mode="after")
    def _check_identity(self) -> "Subject":
        if not self.authenticated and (self.roles or self.id is not None):
            raise ValueError("anonymous subject cannot carry an id or roles")
        if self.authenticated and not self.id:
            raise ValueError("authenticated subject requires an id")
        return self

    @classmethod
    def anonymous(cls) -> "Subject":
        return cls()

    @classmethod
    def of(cls, subject_id: str, *roles: RoleType | str) -> "Subject":
        return cls(id=subject_id, roles=frozenset(RoleType(r) for r in roles), authenticated=True)


# ── Access summary ─────────────────────────────────
class AccessSummary(BaseModel):
    id: str | None
    authenticated: bool
    roles: list[RoleType]
    permissions: list[Permission]
    role_label: str | None
    is_staff: bool


class RouteCheckResponse(BaseModel):
    path: str
    allowed: bool
    reason: str | None = None
    missing_permission: Permission | None = None
    redirect_to: str | None = None
