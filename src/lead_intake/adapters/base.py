"""Auth provider protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from lead_intake.models import AuthUser


@runtime_checkable
class AuthProvider(Protocol):
    """Protocol for identity providers.

    Implementations raise AuthError on failure; AuthSession turns that
    into a result for callers.
    """

    def sign_in(self, email: str, password: str) -> AuthUser: ...

    def sign_up(self, email: str, password: str) -> AuthUser: ...

    def sign_out(self, user: AuthUser) -> None: ...
