from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import logging
from ..models.user import User
from .security import IdentityClaims
from .store import commit

logger = logging.getLogger(__name__)


def get_by_subject(db: Session, subject: str) -> User | None:
    return db.execute(select(User).where(User.subject == subject)).scalar_one_or_none()


def get_or_create(db: Session, claims: IdentityClaims) -> User:
    """Local user for a verified identity; created on first sight of the subject."""
    user = get_by_subject(db, claims.subject)
    if user:
        return user
    try:
        user = User(
            subject=claims.subject,
            email=claims.email.strip().lower() if claims.email else None,
            display_name=claims.name,
            profile_picture=claims.picture,
            tree_ids=[],
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"User created: id={user.id}, subject={user.subject}")
        return user
    except IntegrityError:
        # created by a concurrent request for the same subject
        db.rollback()
        user = get_by_subject(db, claims.subject)
        if not user:
            raise
        return user


def sync_profile(db: Session, user: User, claims: IdentityClaims) -> User:
    updated = False
    if claims.name and user.display_name != claims.name:
        user.display_name = claims.name
        updated = True
    if claims.picture and user.profile_picture != claims.picture:
        user.profile_picture = claims.picture
        updated = True
    if updated:
        commit(db, f"sync user {user.id}")
        db.refresh(user)
        logger.info(f"User profile synced: id={user.id}")
    return user
