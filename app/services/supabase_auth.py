"""Thin wrapper around the Supabase Auth (GoTrue) REST API."""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import get_settings


logger = logging.getLogger(__name__)

USER_ALREADY_EXISTS = "user_already_exists"


class AuthError(Exception):
    """Base exception for Supabase Auth failures."""

    def __init__(self, message: str, *, status_code: int | None = None, error_code: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class AuthConfigError(RuntimeError):
    """Raised when SUPABASE_URL or SUPABASE_ANON_KEY is missing."""


class AuthUserExists(AuthError):
    """Raised when sign-up hits an already registered email."""


@dataclass(slots=True)
class AuthSession:
    access_token: str
    refresh_token: str | None
    expires_in: int | None
    user_id: str | None
    email: str | None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AuthSession":
        user = payload.get("user") or {}
        return cls(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            user_id=user.get("id"),
            email=user.get("email"),
        )


def generate_pkce_pair() -> tuple[str, str]:
    """Return a ``(verifier, s256 challenge)`` pair for the PKCE flow."""

    verifier = secrets.token_urlsafe(48)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


class SupabaseAuthClient:
    """Sign-in, sign-up and password flows against the hosted auth service."""

    def __init__(
        self,
        *,
        url: str | None = None,
        anon_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.url = (url or settings.supabase_url or "").rstrip("/")
        self.anon_key = anon_key or settings.supabase_anon_key
        self.timeout = 10.0
        self._transport = transport

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> Any:
        if not self.url or not self.anon_key:
            raise AuthConfigError("Supabase environment variables are not configured")
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.request(
                method,
                f"{self.url}/auth/v1{path}",
                params=params,
                json=json,
                headers=headers,
            )
        if not response.is_success:
            message, error_code = _error_details(response)
            logger.info("Supabase auth %s %s failed (%s): %s", method, path, response.status_code, message)
            raise AuthError(message, status_code=response.status_code, error_code=error_code)
        if not response.content:
            return {}
        return response.json()

    def sign_in_with_password(self, *, email: str, password: str) -> AuthSession:
        payload = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return AuthSession.from_payload(payload)

    def sign_up(self, *, email: str, password: str, metadata: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            return self._request(
                "POST",
                "/signup",
                json={"email": email, "password": password, "data": metadata or {}},
            )
        except AuthError as exc:
            if exc.error_code == USER_ALREADY_EXISTS:
                raise AuthUserExists(str(exc), status_code=exc.status_code, error_code=exc.error_code) from exc
            raise

    def reset_password_for_email(self, email: str, *, redirect_to: str, code_challenge: str) -> None:
        self._request(
            "POST",
            "/recover",
            params={"redirect_to": redirect_to},
            json={
                "email": email,
                "code_challenge": code_challenge,
                "code_challenge_method": "s256",
            },
        )

    def exchange_code_for_session(self, *, auth_code: str, code_verifier: str) -> AuthSession:
        payload = self._request(
            "POST",
            "/token",
            params={"grant_type": "pkce"},
            json={"auth_code": auth_code, "code_verifier": code_verifier},
        )
        return AuthSession.from_payload(payload)

    def update_password(self, *, access_token: str, password: str) -> None:
        self._request("PUT", "/user", json={"password": password}, access_token=access_token)

    def sign_out(self, *, access_token: str) -> None:
        self._request("POST", "/logout", access_token=access_token)


def _error_details(response: httpx.Response) -> tuple[str, str | None]:
    """Return the human message and GoTrue ``error_code`` from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}", None
    if not isinstance(body, dict):
        return f"HTTP {response.status_code}", None
    error_code = body.get("error_code")
    for key in ("msg", "error_description", "message", "error_code", "error"):
        if body.get(key):
            return str(body[key]), error_code
    return f"HTTP {response.status_code}", error_code
