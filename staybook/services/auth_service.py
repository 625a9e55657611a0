"""Caller identity resolution and role checks.

Sign-in, OTP and session issuance live in an upstream gateway which forwards
the authenticated user id and role. Admin callers must additionally present
the shared ADMIN_TOKEN as a bearer token.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Iterable, Optional

from staybook.domain.models import UserRole
from staybook.utils.config import Settings, get_settings


class AuthenticationError(Exception):
    """Base authentication failure."""


class MissingIdentityError(AuthenticationError):
    """Raised when no user id or an unknown role is forwarded."""


class AdminTokenNotConfiguredError(AuthenticationError):
    """Raised when ADMIN_TOKEN is missing."""


class InvalidAdminTokenError(AuthenticationError):
    """Raised when provided token is invalid."""


class RoleNotPermittedError(Exception):
    """Raised when an authenticated caller's role is not allowed."""


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: UserRole


class AuthService:
    """Builds an Actor from forwarded identity and enforces role gates."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def _expected_token(self) -> str:
        if not self._settings.admin_token:
            raise AdminTokenNotConfiguredError(
                "ADMIN_TOKEN is not configured. Set ADMIN_TOKEN in environment variables."
            )
        return self._settings.admin_token

    def validate_admin_token(self, bearer_token: str | None) -> None:
        expected = self._expected_token()
        if bearer_token is None:
            raise InvalidAdminTokenError("Admin requests require a bearer token")
        if not secrets.compare_digest(bearer_token, expected):
            raise InvalidAdminTokenError("Invalid admin token")

    def resolve_actor(
        self,
        user_id: str | None,
        role: str | None,
        bearer_token: str | None = None,
    ) -> Actor:
        if not user_id or not user_id.strip():
            raise MissingIdentityError("X-User-Id header is required")
        try:
            resolved_role = UserRole((role or UserRole.USER.value).strip().lower())
        except ValueError as exc:
            raise MissingIdentityError(f"Unknown role: {role}") from exc
        if resolved_role is UserRole.ADMIN:
            self.validate_admin_token(bearer_token)
        return Actor(user_id=user_id.strip(), role=resolved_role)

    @staticmethod
    def require_role(actor: Actor, allowed: Iterable[UserRole]) -> Actor:
        allowed_roles = tuple(allowed)
        if actor.role not in allowed_roles:
            names = ", ".join(role.value for role in allowed_roles)
            raise RoleNotPermittedError(f"This action requires one of: {names}")
        return actor
