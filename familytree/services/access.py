import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ..core.errors import Denied, NotFound
from ..models.tree import FamilyTree
from .store import get_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requester:
    """Who is asking: an authenticated user, a guest session, or (rarely) both headers."""
    user_id: str | None = None
    guest_session_id: str | None = None


def can_access(tree: FamilyTree, requester: Requester) -> bool:
    # the owner always has access
    if requester.user_id and tree.owner_id and tree.owner_id == requester.user_id:
        return True
    # a guest only while the tree is still unclaimed
    if requester.guest_session_id and tree.guest_session_id == requester.guest_session_id and not tree.owner_id:
        return True
    return False


def authorize(db: Session, tree_id: str, requester: Requester, write_required: bool = False) -> FamilyTree:
    """Return the tree if ``requester`` may use it.

    Raises NotFound when the id is malformed or no tree matches, and Denied
    otherwise. ``write_required`` is accepted so callers can state intent;
    reads and writes currently follow the same rule.
    """
    tree = get_tree(db, tree_id)
    if not tree:
        raise NotFound("Family tree not found.")
    if not can_access(tree, requester):
        logger.warning(
            f"Access denied: tree={tree_id} user={requester.user_id} "
            f"guest={'yes' if requester.guest_session_id else 'no'} write={write_required}"
        )
        raise Denied("User not authorized to access this tree.")
    return tree
