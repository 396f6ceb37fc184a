# grocery/services/auth_service.py
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy.orm import Session

from grocery.data.models.user import UserModel
from grocery.domain.enums import Role
from grocery.domain.errors import AuthenticationError, StoreError
from grocery.repos.user_repo import UserRepo
from grocery.security.identity import Identity
from grocery.services.notification_service import NotificationService
from grocery.services.session_store import SessionStore
from grocery.utils.logging import get_logger
from grocery.utils.settings import (
    ACCESS_TOKEN_TTL_SECONDS,
    BCRYPT_ROUNDS,
    JWT_ALGORITHM,
    JWT_SECRET,
    PASSWORD_RESET_TTL_SECONDS,
)

logger = get_logger(__name__)

ACCESS = "access"
RESET = "reset"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))


class AuthService:
    """
    Password sign-up/sign-in with bearer tokens.

    Tokens are HS256 JWTs carrying a ``jti``; ending a session puts that id on
    the revocation list in Redis.
    """

    def __init__(self, db: Session, session_store: SessionStore):
        self.repo = UserRepo(db)
        self.session_store = session_store

    def _issue(self, user: UserModel, token_type: str, ttl: int) -> tuple[str, str, datetime]:
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=ttl)
        token_id = uuid.uuid4().hex
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "role": Role.AUTHENTICATED.value,
            "typ": token_type,
            "jti": token_id,
            "iat": now,
            "exp": expires_at,
        }
        return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM), token_id, expires_at

    def _decode(self, token: str, token_type: str) -> dict | None:
        try:
            claims = jwt.decode(
                token,
                JWT_SECRET,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["sub", "jti", "exp"]},
            )
        except jwt.InvalidTokenError:
            return None
        if claims.get("typ") != token_type:
            return None
        return claims

    def sign_up(self, email: str, password: str, metadata: dict | None = None) -> dict:
        user = UserModel(
            id=uuid.uuid4(),
            email=email.lower(),
            password_hash=hash_password(password),
            raw_user_meta_data=metadata or {},
        )
        try:
            self.repo.create_user(user)
            self.repo.commit()
        except StoreError:
            self.repo.rollback()
            raise

        logger.info(f"Created identity {user.id}")
        return {"id": user.id, "email": user.email}

    def sign_in(self, email: str, password: str) -> dict:
        user = self.repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Rejected sign-in attempt")
            raise AuthenticationError("Invalid email or password")

        token, token_id, expires_at = self._issue(user, ACCESS, ACCESS_TOKEN_TTL_SECONDS)
        logger.info(f"Opened session {token_id} for {user.id}")
        return {
            "access_token": token,
            "token_type": "bearer",
            "expires_at": expires_at,
            "user": {"id": user.id, "email": user.email},
        }

    def current_identity(self, token: str) -> Identity | None:
        claims = self._decode(token, ACCESS)
        if claims is None:
            return None
        if self.session_store.is_revoked(claims["jti"]):
            return None

        try:
            user_id = uuid.UUID(claims["sub"])
        except ValueError:
            return None

        user = self.repo.get_user(user_id)
        if user is None:
            return None
        return Identity.user(user.id, email=user.email, session_id=claims["jti"])

    def end_session(self, token: str) -> bool:
        claims = self._decode(token, ACCESS)
        if claims is None:
            return False
        remaining = int(claims["exp"] - datetime.now(timezone.utc).timestamp())
        self.session_store.revoke(claims["jti"], remaining)
        return True

    def request_password_reset(self, email: str) -> str | None:
        """Queues a reset mail; unknown addresses are accepted without a trace in the response."""
        user = self.repo.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown address")
            return None

        token, _, _ = self._issue(user, RESET, PASSWORD_RESET_TTL_SECONDS)
        NotificationService.send_password_reset(user.email, token)
        return token

    def reset_password(self, token: str, new_password: str) -> None:
        claims = self._decode(token, RESET)
        if claims is None or self.session_store.is_revoked(claims["jti"]):
            raise AuthenticationError("Invalid or expired reset token")

        try:
            affected = self.repo.set_password_hash(uuid.UUID(claims["sub"]), hash_password(new_password))
            if affected != 1:
                raise AuthenticationError("Invalid or expired reset token")
            self.repo.commit()
        except StoreError:
            self.repo.rollback()
            raise

        remaining = int(claims["exp"] - datetime.now(timezone.utc).timestamp())
        self.session_store.revoke(claims["jti"], remaining)
        logger.info(f"Password changed for {claims['sub']}")
