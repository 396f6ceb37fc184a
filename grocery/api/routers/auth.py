# grocery/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from grocery.api.deps import bearer, get_auth_service, require_user
from grocery.api.errors import http_error
from grocery.domain.errors import StoreError
from grocery.domain.schemas import (
    IdentityOut,
    PasswordResetConfirmIn,
    PasswordResetIn,
    SessionOut,
    SignInIn,
    SignUpIn,
)
from grocery.security.identity import Identity
from grocery.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=IdentityOut, status_code=201)
def sign_up(payload: SignUpIn, auth: AuthService = Depends(get_auth_service)):
    try:
        return auth.sign_up(payload.email, payload.password, payload.metadata())
    except StoreError as e:
        raise http_error(e)


@router.post("/login", response_model=SessionOut)
def sign_in(payload: SignInIn, auth: AuthService = Depends(get_auth_service)):
    try:
        return auth.sign_in(payload.email, payload.password)
    except StoreError as e:
        raise http_error(e)


@router.post("/logout", status_code=204)
def sign_out(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
):
    if credentials is None:
        raise HTTPException(status_code=401, detail="Login required")
    try:
        auth.end_session(credentials.credentials)
    except StoreError as e:
        raise http_error(e)


@router.get("/me", response_model=IdentityOut)
def me(identity: Identity = Depends(require_user)):
    return {"id": identity.user_id, "email": identity.email}


@router.post("/password-reset", status_code=202)
def request_password_reset(payload: PasswordResetIn, auth: AuthService = Depends(get_auth_service)):
    # same answer whether or not the address exists
    try:
        auth.request_password_reset(payload.email)
    except StoreError as e:
        raise http_error(e)
    return {"detail": "If the address is registered, a reset link is on its way"}


@router.post("/password-reset/confirm", status_code=204)
def confirm_password_reset(payload: PasswordResetConfirmIn, auth: AuthService = Depends(get_auth_service)):
    try:
        auth.reset_password(payload.token, payload.new_password)
    except StoreError as e:
        raise http_error(e)
