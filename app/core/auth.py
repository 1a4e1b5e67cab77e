"""Authentication dependencies for validating Supabase JWTs."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Mapping

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"

DEV_USER = {"sub": "developer-user-123", "email": "dev@example.com"}


def get_access_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """Return the bearer token (or session cookie), 401 when signed out."""

    if credentials is not None and credentials.credentials:
        return credentials.credentials
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="You must be logged in",
        headers={"WWW-Authenticate": "Bearer"},
    )


ASYMMETRIC_ALGORITHMS = ("RS256", "ES256")


def _unauthorized(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@lru_cache(maxsize=8)
def _jwks_client(jwks_url: str) -> jwt.PyJWKClient:
    """One JWKS client per URL so its signing-key cache survives requests."""
    return jwt.PyJWKClient(jwks_url)


def _token_algorithm(token: str) -> str | None:
    try:
        return jwt.get_unverified_header(token).get("alg")
    except jwt.PyJWTError:
        return None


def get_current_user(token: str = Depends(get_access_token)) -> Mapping[str, Any]:
    """Verify the Supabase JWT token and return the payload."""
    settings = get_settings()
    alg = _token_algorithm(token)

    if alg not in ASYMMETRIC_ALGORITHMS and not settings.supabase_jwt_secret:
        if settings.auth_dev_fallback:
            logger.warning("SUPABASE_JWT_SECRET not configured. Using dummy user for dev.")
            return dict(DEV_USER)
        logger.error("SUPABASE_JWT_SECRET not configured. Rejecting %s token.", alg or "malformed")
        raise _unauthorized()

    try:
        if alg in ASYMMETRIC_ALGORITHMS:
            if not settings.supabase_url:
                logger.error("SUPABASE_URL is missing in environment variables. Cannot fetch JWKS for %s.", alg)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Server configuration error",
                )

            jwks_url = f"{settings.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
            signing_key = _jwks_client(jwks_url).get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=list(ASYMMETRIC_ALGORITHMS),
                options={"verify_aud": False},
            )
        else:
            # Legacy shared secret
            payload = jwt.decode(
                token,
                settings.supabase_jwt_secret,
                algorithms=["HS256"],
                options={"verify_aud": False},
            )
    except HTTPException:
        raise
    except jwt.ExpiredSignatureError as exc:
        logger.info("JWT validation failed: token expired")
        raise _unauthorized("Session has expired") from exc
    except (jwt.PyJWTError, ValueError) as exc:
        logger.info("JWT validation failed: %s", exc)
        raise _unauthorized() from exc

    if not payload.get("sub"):
        raise _unauthorized()
    return payload


def get_current_user_id(user: Mapping[str, Any] = Depends(get_current_user)) -> str:
    return str(user["sub"])
