"""Typed application errors rendered as JSON by the exception handler in main."""

from typing import Any

from fastapi import status


class AppError(Exception):
    code: str = "APP_ERROR"
    message: str = "Application error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    details: Any | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if details is not None:
            self.details = details

        super().__init__(self.message)


class NotFoundError(AppError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = status.HTTP_404_NOT_FOUND


class AuthenticationError(AppError):
    code = "AUTH_ERROR"
    message = "Could not validate credentials"
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    """The subject's roles do not grant the permission the operation needs."""

    code = "AUTHORIZATION_ERROR"
    message = "You lack the permission required for this action"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, permission: str, message: str | None = None):
        self.permission = permission
        super().__init__(
            message or f"You do not have permission to perform this action: {permission}",
            details={"permission": permission},
        )


class OwnershipMismatchError(AppError):
    """The permission is held, but the target record belongs to someone else."""

    code = "OWNERSHIP_MISMATCH"
    message = "You may only act on your own records"
    status_code = status.HTTP_403_FORBIDDEN


class OrderValidationError(AppError):
    """The cart breaks a checkout rule: stock, per-item or per-order limits.

    ``code`` names the rule, e.g. ``EXCEEDS_STOCK``.
    """

    code = "ORDER_VALIDATION_ERROR"
    message = "Order is not valid"
    status_code = status.HTTP_400_BAD_REQUEST


class ReferentialConstraintError(AppError):
    code = "REFERENTIAL_CONSTRAINT"
    message = "Resource is referenced by other records"
    status_code = status.HTTP_409_CONFLICT


def error_payload(
    code: str,
    message: str,
    details: Any | None = None,
) -> dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details}}
