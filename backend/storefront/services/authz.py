"""Turns gate decisions into typed errors at the service boundary."""

import logging

from storefront.core.errors import AuthorizationError
from storefront.models.role import Permission
from storefront.rbac.gate import AuthorizationGate
from storefront.schemas.auth import Subject

logger = logging.getLogger(__name__)


def _roles_label(subject: Subject) -> str:
    return ", ".join(sorted(subject.roles)) or "-"


def ensure_permission(gate: AuthorizationGate, subject: Subject, permission: Permission) -> None:
    """Raise AuthorizationError unless one of the subject's roles grants the permission.

    Re-evaluated on every call from the role set the caller passes in.
    """
    if gate.can_access(subject.roles, permission):
        logger.debug(
            "Authorization granted: subject=%s roles=%s permission=%s",
            subject.id, _roles_label(subject), permission.value,
        )
        return

    logger.warning(
        "Authorization denied: subject=%s roles=%s permission=%s",
        subject.id or "anonymous", _roles_label(subject), permission.value,
    )
    raise AuthorizationError(permission.value)
