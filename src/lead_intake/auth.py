"""Sign-in session over a pluggable auth provider."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from lead_intake.adapters.identity_toolkit import IdentityToolkitProvider
from lead_intake.adapters.mock import MockAuthProvider
from lead_intake.exceptions import AuthError
from lead_intake.models import AuthResult, OperationResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from lead_intake.adapters.base import AuthProvider
    from lead_intake.config import AuthConfig
    from lead_intake.models import AuthUser

logger = logging.getLogger(__name__)

SIGN_IN_IN_PROGRESS = "Login já em andamento"


def build_auth_provider(config: AuthConfig) -> AuthProvider:
    if config.use_mock:
        return MockAuthProvider()
    if not config.api_key:
        msg = "An API key is required for the identity provider"
        raise ValueError(msg)
    return IdentityToolkitProvider(config.api_key, timeout=config.timeout)


class AuthSession:
    """Tracks the signed-in user for one client session.

    Only one sign-in attempt may run at a time; an overlapping attempt
    is rejected immediately rather than queued.
    """

    def __init__(self, provider: AuthProvider) -> None:
        self.provider = provider
        self._user: AuthUser | None = None
        self._sign_in_lock = threading.Lock()

    @property
    def sign_in_pending(self) -> bool:
        return self._sign_in_lock.locked()

    def current_user(self) -> AuthUser | None:
        return self._user

    def sign_in(self, email: str, password: str) -> AuthResult:
        return self._attempt("sign in", self.provider.sign_in, email, password)

    def sign_up(self, email: str, password: str) -> AuthResult:
        return self._attempt("sign up", self.provider.sign_up, email, password)

    def sign_out(self) -> OperationResult:
        user = self._user
        if user is None:
            return OperationResult(success=True)
        try:
            self.provider.sign_out(user)
        except AuthError as exc:
            logger.exception("Sign out error")
            return OperationResult(success=False, error=str(exc))
        self._user = None
        return OperationResult(success=True)

    def _attempt(
        self,
        action: str,
        call: Callable[[str, str], AuthUser],
        email: str,
        password: str,
    ) -> AuthResult:
        if not self._sign_in_lock.acquire(blocking=False):
            logger.warning("Rejected overlapping %s attempt", action)
            return AuthResult(success=False, error=SIGN_IN_IN_PROGRESS)
        try:
            logger.info("Attempting %s for %s", action, email)
            user = call(email, password)
        except AuthError as exc:
            logger.exception("%s error", action.capitalize())
            return AuthResult(success=False, error=str(exc))
        finally:
            self._sign_in_lock.release()

        self._user = user
        logger.info("%s successful: %s", action.capitalize(), user.uid)
        return AuthResult(success=True, user=user)
