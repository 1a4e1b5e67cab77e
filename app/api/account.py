"""Account routes: sign-in, sign-up, password reset and sign-out."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from app.core.auth import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, get_access_token
from app.core.config import get_settings
from app.schemas import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SessionResponse,
    UpdatePasswordRequest,
)
from app.services.supabase_auth import (
    AuthError,
    AuthSession,
    AuthUserExists,
    SupabaseAuthClient,
    generate_pkce_pair,
)
from app.services.validation import (
    MAX_NAME_LENGTH,
    collect_field_errors,
    sanitize_input,
    validate_email,
    validate_name,
    validate_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["account"])

PKCE_VERIFIER_COOKIE = "sb-code-verifier"
GENERIC_FAILURE = "Something went wrong. Please try again."


def get_auth_client() -> SupabaseAuthClient:
    return SupabaseAuthClient()


def _field_errors_response(field_errors: dict[str, str]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "fieldErrors": field_errors},
    )


def _safe_next(next_path: str | None) -> str:
    """Only allow same-site relative redirects."""

    if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
        return "/"
    return next_path


def _set_session_cookies(response, session: AuthSession) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        session.access_token,
        max_age=session.expires_in,
        httponly=True,
        samesite="lax",
    )
    if session.refresh_token:
        response.set_cookie(REFRESH_TOKEN_COOKIE, session.refresh_token, httponly=True, samesite="lax")


def _session_response(session: AuthSession, *, redirect_to: str) -> JSONResponse:
    body = SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user_id=session.user_id,
        email=session.email,
        redirect_to=redirect_to,
    )
    response = JSONResponse(content=body.model_dump())
    _set_session_cookies(response, session)
    return response


@router.post("/login", response_model=SessionResponse)
def login(payload: LoginRequest, auth: SupabaseAuthClient = Depends(get_auth_client)):
    field_errors = collect_field_errors(
        email=validate_email(payload.email),
        password=validate_password(payload.password),
    )
    if field_errors:
        return _field_errors_response(field_errors)

    try:
        session = auth.sign_in_with_password(
            email=sanitize_input(payload.email),
            password=payload.password,
        )
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        ) from exc
    return _session_response(session, redirect_to="/?loggedIn=true")


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, auth: SupabaseAuthClient = Depends(get_auth_client)):
    field_errors = collect_field_errors(
        first_name=validate_name(payload.first_name, "First name"),
        last_name=validate_name(payload.last_name, "Last name"),
        email=validate_email(payload.email),
        password=validate_password(payload.password),
    )
    if field_errors:
        return _field_errors_response(field_errors)

    try:
        auth.sign_up(
            email=sanitize_input(payload.email),
            password=payload.password,
            metadata={
                "first_name": sanitize_input(payload.first_name, MAX_NAME_LENGTH),
                "last_name": sanitize_input(payload.last_name, MAX_NAME_LENGTH),
            },
        )
    except AuthUserExists as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        ) from exc
    except AuthError as exc:
        logger.exception("Sign-up failed")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=GENERIC_FAILURE) from exc
    return MessageResponse(
        success="Account created. Check your email to confirm your address.",
        redirect_to="/login?registered=true",
    )


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, auth: SupabaseAuthClient = Depends(get_auth_client)):
    field_errors = collect_field_errors(email=validate_email(payload.email))
    if field_errors:
        return _field_errors_response(field_errors)

    verifier, challenge = generate_pkce_pair()
    redirect_to = f"{get_settings().site_url.rstrip('/')}/auth/callback?next=/update-password"
    try:
        auth.reset_password_for_email(
            sanitize_input(payload.email),
            redirect_to=redirect_to,
            code_challenge=challenge,
        )
    except AuthError as exc:
        logger.exception("Password reset request failed")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=GENERIC_FAILURE) from exc

    # Same message for unknown emails so accounts cannot be enumerated
    body = MessageResponse(
        success="If an account exists with that email, you will receive a password reset link."
    )
    response = JSONResponse(content=body.model_dump())
    response.set_cookie(PKCE_VERIFIER_COOKIE, verifier, max_age=3600, httponly=True, samesite="lax")
    return response


@router.get("/callback")
def auth_callback(
    request: Request,
    code: str | None = None,
    next: str | None = None,
    auth: SupabaseAuthClient = Depends(get_auth_client),
) -> RedirectResponse:
    """Finish an emailed auth link by exchanging its code for a session."""

    verifier = request.cookies.get(PKCE_VERIFIER_COOKIE)
    if code and verifier:
        try:
            session = auth.exchange_code_for_session(auth_code=code, code_verifier=verifier)
        except AuthError:
            logger.info("Auth code exchange failed")
        else:
            response = RedirectResponse(url=_safe_next(next))
            _set_session_cookies(response, session)
            response.delete_cookie(PKCE_VERIFIER_COOKIE)
            return response
    return RedirectResponse(url="/login")


@router.post("/update-password", response_model=MessageResponse)
def update_password(
    payload: UpdatePasswordRequest,
    access_token: str = Depends(get_access_token),
    auth: SupabaseAuthClient = Depends(get_auth_client),
):
    field_errors = collect_field_errors(password=validate_password(payload.password))
    if field_errors:
        return _field_errors_response(field_errors)
    if payload.password != payload.confirm_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Passwords do not match")

    try:
        auth.update_password(access_token=access_token, password=payload.password)
    except AuthError as exc:
        logger.warning("Password update failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update password. Please try again.",
        ) from exc
    return MessageResponse(success="Password updated.", redirect_to="/login?passwordReset=true")


@router.post("/logout", response_model=MessageResponse)
def logout(
    access_token: str = Depends(get_access_token),
    auth: SupabaseAuthClient = Depends(get_auth_client),
):
    try:
        auth.sign_out(access_token=access_token)
    except AuthError as exc:
        # the local session is cleared regardless
        logger.warning("Sign-out failed upstream: %s", exc)
    response = JSONResponse(content=MessageResponse(success="Signed out.", redirect_to="/").model_dump())
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return response
