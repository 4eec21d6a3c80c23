"""Mock auth provider for local runs and tests."""

from __future__ import annotations

import logging
from dataclasses import replace

from lead_intake.exceptions import AuthError
from lead_intake.models import AuthUser

logger = logging.getLogger(__name__)

MOCK_USER = AuthUser(
    uid="mock-user-123",
    display_name="Usuário Teste",
    email="teste@cdforge.shop",
)


class MockAuthProvider:
    """Accept any non-empty credentials as the fixed test user."""

    def sign_in(self, email: str, password: str) -> AuthUser:
        if not email or not password:
            msg = "Credenciais inválidas"
            raise AuthError(msg)
        logger.info("Mock sign-in for %s", email)
        return replace(MOCK_USER, email=email)

    def sign_up(self, email: str, password: str) -> AuthUser:
        if not email or not password:
            msg = "Dados inválidos"
            raise AuthError(msg)
        return replace(MOCK_USER, email=email)

    def sign_out(self, user: AuthUser) -> None:
        logger.info("Mock sign-out for %s", user.uid)
