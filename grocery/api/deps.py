# grocery/api/deps.py
from functools import lru_cache

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from grocery.data.database import get_db
from grocery.domain.errors import TransientStorageError
from grocery.security.identity import Identity, bind_identity
from grocery.services.auth_service import AuthService
from grocery.services.session_store import SessionStore

bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore()


def get_auth_service(
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(db, store)


def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
) -> Identity:
    if credentials is None:
        return Identity.anonymous()
    try:
        identity = auth.current_identity(credentials.credentials)
    except TransientStorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require_user(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_authenticated:
        raise HTTPException(
            status_code=401,
            detail="Login required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def get_scoped_db(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
) -> Session:
    """Request session bound to the caller, every query through it is policy-filtered."""
    return bind_identity(db, identity)


def get_user_db(
    identity: Identity = Depends(require_user),
    db: Session = Depends(get_db),
) -> Session:
    return bind_identity(db, identity)
