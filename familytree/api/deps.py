import logging
from dataclasses import dataclass
from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
import jwt
from ..db.session import SessionLocal
from ..models.user import User
from ..services.access import Requester
from ..services.security import GUEST_SESSION_HEADER, IdentityClaims, verify_id_token
from ..services.user_service import get_or_create

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)
guest_scheme = APIKeyHeader(name=GUEST_SESSION_HEADER, auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@dataclass
class Identity:
    requester: Requester
    user: User | None = None
    claims: IdentityClaims | None = None


def get_identity(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    guest_session_id: str | None = Depends(guest_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    """Resolve the bearer identity token and/or the guest session header.

    A bad identity token is rejected unless a guest session header came with
    it, in which case the request continues as that guest.
    """
    guest_session_id = guest_session_id or None
    if creds and creds.credentials:
        try:
            claims = verify_id_token(creds.credentials)
        except jwt.PyJWTError as e:
            logger.warning(f"Identity token rejected: {str(e)}")
            if not guest_session_id:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token.")
        else:
            user = get_or_create(db, claims)
            return Identity(Requester(user_id=user.id, guest_session_id=guest_session_id), user, claims)
    return Identity(Requester(guest_session_id=guest_session_id))


def get_requester(identity: Identity = Depends(get_identity)) -> Requester:
    if not identity.requester.user_id and not identity.requester.guest_session_id:
        raise HTTPException(status_code=401, detail="Unauthorized: No user or guest session found.")
    return identity.requester


def get_current_user(identity: Identity = Depends(get_identity)) -> User:
    if not identity.user:
        raise HTTPException(status_code=401, detail="Authentication required.")
    return identity.user
