import logging
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..core.errors import InvalidArgument, NotFound
from ..models.tree import FamilyTree
from ..models.user import User
from . import store
from .security import new_guest_session_id

logger = logging.getLogger(__name__)


def start_guest_session() -> str:
    guest_session_id = new_guest_session_id()
    logger.info("Guest session started")
    return guest_session_id


def claim(db: Session, *, guest_session_id: str, user: User) -> list[FamilyTree]:
    """Transfer every unclaimed tree of a guest session to ``user``.

    The ownership switch is a conditional single-row update (owner must
    still be empty), so a token can be claimed once; later attempts find
    nothing and raise NotFound.
    """
    if not guest_session_id:
        raise InvalidArgument("Guest session ID is required in the request body.")
    candidates = db.execute(
        select(FamilyTree.id).where(
            FamilyTree.guest_session_id == guest_session_id,
            FamilyTree.owner_id.is_(None),
        ).order_by(FamilyTree.created_at)
    ).scalars().all()

    claimed: list[str] = []
    for tree_id in candidates:
        result = db.execute(
            update(FamilyTree)
            .where(
                FamilyTree.id == tree_id,
                FamilyTree.guest_session_id == guest_session_id,
                FamilyTree.owner_id.is_(None),
            )
            .values(owner_id=user.id, guest_session_id=None)
        )
        store.commit(db, f"claim tree {tree_id}")
        if result.rowcount:
            claimed.append(tree_id)
    if not claimed:
        raise NotFound("No unclaimed tree found for this guest session, or tree already claimed.")

    for tree_id in claimed:
        store.push_user_tree(db, user_id=user.id, tree_id=tree_id)
    logger.info(f"Trees claimed: user={user.id} trees={claimed}")
    trees = [db.get(FamilyTree, tree_id) for tree_id in claimed]
    for t in trees:
        db.refresh(t)
    return trees
