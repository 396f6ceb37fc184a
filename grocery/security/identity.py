import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from grocery.domain.enums import Role

IDENTITY_KEY = "identity"


@dataclass(frozen=True)
class Identity:
    """Requesting principal that every row policy is evaluated against."""

    role: Role = Role.ANON
    user_id: uuid.UUID | None = None
    email: str | None = None
    session_id: str | None = None

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @classmethod
    def user(cls, user_id: uuid.UUID, email: str | None = None, session_id: str | None = None) -> "Identity":
        return cls(role=Role.AUTHENTICATED, user_id=user_id, email=email, session_id=session_id)

    @classmethod
    def service(cls) -> "Identity":
        return cls(role=Role.SERVICE)

    @property
    def is_service(self) -> bool:
        return self.role == Role.SERVICE

    @property
    def is_authenticated(self) -> bool:
        return self.role == Role.AUTHENTICATED and self.user_id is not None


ANONYMOUS = Identity.anonymous()


def bind_identity(session: Session, identity: Identity) -> Session:
    session.info[IDENTITY_KEY] = identity
    return session


def current_identity(session: Session) -> Identity:
    # sessions that were never bound act as anonymous
    return session.info.get(IDENTITY_KEY, ANONYMOUS)
