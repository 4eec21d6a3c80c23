"""Email/password auth against the Identity Toolkit REST API."""

from __future__ import annotations

import logging
from typing import Any

import requests

from lead_intake.exceptions import AuthError
from lead_intake.models import AuthUser

logger = logging.getLogger(__name__)

BASE_URL = "https://identitytoolkit.googleapis.com/v1"

_ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "Email não cadastrado",
    "INVALID_PASSWORD": "Senha incorreta",
    "INVALID_LOGIN_CREDENTIALS": "Credenciais inválidas",
    "USER_DISABLED": "Conta desativada",
    "EMAIL_EXISTS": "Email já cadastrado",
    "INVALID_EMAIL": "Email inválido",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Muitas tentativas, tente novamente mais tarde",
}


class IdentityToolkitProvider:
    """Sign users in and up with email and password.

    Tokens are not kept; a session only needs the resulting identity.
    """

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def sign_in(self, email: str, password: str) -> AuthUser:
        return self._authenticate("accounts:signInWithPassword", email, password)

    def sign_up(self, email: str, password: str) -> AuthUser:
        return self._authenticate("accounts:signUp", email, password)

    def sign_out(self, user: AuthUser) -> None:
        # ID tokens are stateless; nothing to revoke server-side
        logger.debug("Signed out %s", user.uid)

    def _authenticate(self, endpoint: str, email: str, password: str) -> AuthUser:
        body = self._post(
            endpoint,
            {"email": email, "password": password, "returnSecureToken": True},
        )
        uid = body.get("localId")
        if not uid:
            msg = "Resposta inválida do provedor de identidade"
            raise AuthError(msg)
        return AuthUser(
            uid=uid,
            display_name=body.get("displayName") or None,
            email=body.get("email") or email,
            photo_url=body.get("profilePicture") or None,
        )

    def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self.session.post(
                f"{BASE_URL}/{endpoint}",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            msg = "Identity provider timeout"
            raise AuthError(msg) from exc
        except requests.RequestException as exc:
            msg = f"Identity provider request failed: {exc}"
            raise AuthError(msg) from exc

        if not resp.ok:
            raise AuthError(self._error_message(resp))

        try:
            body = resp.json()
        except ValueError as exc:
            msg = "Resposta inválida do provedor de identidade"
            raise AuthError(msg) from exc
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        """Map the provider's error code to a user-facing message."""
        try:
            code = resp.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return f"Identity provider returned HTTP {resp.status_code}"
        # Codes may carry detail after a colon, e.g. "WEAK_PASSWORD : ..."
        key = str(code).split(":", 1)[0].strip()
        return _ERROR_MESSAGES.get(key, str(code))
