"""Per-document reads and writes for trees, members and users.

Every write helper touches exactly one row and commits it before returning,
mirroring a document store that offers atomic single-document updates and
nothing wider. List-valued fields behave as sets: adding an id that is
already present, or removing one that is absent, is a no-op, so any helper
can be re-run safely after an interrupted cascade.
"""
import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import FamilyTreeError, Internal, InvalidArgument, NotFound
from ..models.member import FamilyMember
from ..models.tree import FamilyTree
from ..models.user import User

logger = logging.getLogger(__name__)

PARENT_SLOTS = ("mother", "father")


def is_valid_id(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Store write failed ({what}): {str(e)}", exc_info=True)
        db.rollback()
        raise Internal(f"Store write failed: {what}") from e
    except FamilyTreeError:
        db.rollback()
        raise


# --- reads -----------------------------------------------------------------

def get_tree(db: Session, tree_id: str) -> FamilyTree | None:
    if not is_valid_id(tree_id):
        return None
    return db.get(FamilyTree, tree_id)


def get_member(db: Session, tree_id: str, member_id: str) -> FamilyMember | None:
    if not is_valid_id(member_id):
        return None
    m = db.get(FamilyMember, member_id)
    if not m or m.tree_id != tree_id:
        return None
    return m


def require_member(db: Session, tree_id: str, member_id: str, label: str = "Family member") -> FamilyMember:
    if not is_valid_id(member_id):
        raise InvalidArgument(f"Invalid {label.lower()} ID format: {member_id}")
    m = get_member(db, tree_id, member_id)
    if not m:
        raise NotFound(f"{label} with ID {member_id} not found in this tree.")
    return m


def list_members(db: Session, tree_id: str) -> list[FamilyMember]:
    stmt = select(FamilyMember).where(FamilyMember.tree_id == tree_id).order_by(FamilyMember.created_at)
    return list(db.execute(stmt).scalars())


def members_in_order(db: Session, tree: FamilyTree) -> list[FamilyMember]:
    """Members of ``tree`` in the order of its member list."""
    by_id = {m.id: m for m in list_members(db, tree.id)}
    return [by_id[mid] for mid in tree.member_ids if mid in by_id]


# --- single-document writes ------------------------------------------------

def insert(db: Session, doc, what: str):
    db.add(doc)
    commit(db, what)
    db.refresh(doc)
    return doc


def _with(items: list, value) -> list:
    return list(items or []) if value in (items or []) else [*(items or []), value]


def _without(items: list, value) -> list:
    return [x for x in (items or []) if x != value]


def push_tree_member(db: Session, tree_id: str, member_id: str) -> FamilyTree | None:
    tree = db.get(FamilyTree, tree_id)
    if not tree:
        return None
    if member_id not in tree.member_ids:
        tree.member_ids = _with(tree.member_ids, member_id)
        commit(db, f"tree {tree_id} add member")
    return tree


def pull_tree_member(db: Session, tree_id: str, member_id: str) -> FamilyTree | None:
    tree = db.get(FamilyTree, tree_id)
    if not tree:
        return None
    if member_id in tree.member_ids:
        tree.member_ids = _without(tree.member_ids, member_id)
        commit(db, f"tree {tree_id} remove member")
    return tree


def add_child(db: Session, parent_id: str, child_id: str) -> FamilyMember | None:
    parent = db.get(FamilyMember, parent_id)
    if not parent:
        return None
    if child_id not in parent.children:
        parent.children = _with(parent.children, child_id)
        commit(db, f"member {parent_id} add child")
    return parent


def pull_child(db: Session, parent_id: str, child_id: str) -> FamilyMember | None:
    parent = db.get(FamilyMember, parent_id)
    if not parent:
        return None
    if child_id in parent.children:
        parent.children = _without(parent.children, child_id)
        commit(db, f"member {parent_id} remove child")
    return parent


def set_parent(db: Session, child_id: str, slot: str, parent_id: str) -> FamilyMember | None:
    if slot not in PARENT_SLOTS:
        raise InvalidArgument(f"Unknown parent slot: {slot}")
    child = db.get(FamilyMember, child_id)
    if not child:
        return None
    if getattr(child, slot) != parent_id:
        setattr(child, slot, parent_id)
        commit(db, f"member {child_id} set {slot}")
    return child


def clear_parent(db: Session, child_id: str, parent_id: str) -> FamilyMember | None:
    """Clear whichever parent slot of the child holds ``parent_id``."""
    child = db.get(FamilyMember, child_id)
    if not child:
        return None
    changed = False
    for slot in PARENT_SLOTS:
        if getattr(child, slot) == parent_id:
            setattr(child, slot, None)
            changed = True
    if changed:
        commit(db, f"member {child_id} clear parent")
    return child


def add_spouse(db: Session, member_id: str, spouse_id: str, relationship_type: str | None = None) -> FamilyMember | None:
    member = db.get(FamilyMember, member_id)
    if not member:
        return None
    # check before push: one entry per spouse id
    if spouse_id not in member.spouse_ids:
        member.spouses = [*member.spouses, {"spouse_id": spouse_id, "relationship_type": relationship_type or "spouse"}]
        commit(db, f"member {member_id} add spouse")
    return member


def pull_spouse(db: Session, member_id: str, spouse_id: str) -> FamilyMember | None:
    member = db.get(FamilyMember, member_id)
    if not member:
        return None
    if spouse_id in member.spouse_ids:
        member.spouses = [s for s in member.spouses if s["spouse_id"] != spouse_id]
        commit(db, f"member {member_id} remove spouse")
    return member


def update_fields(db: Session, doc, fields: dict, what: str):
    for key, value in fields.items():
        setattr(doc, key, value)
    commit(db, what)
    db.refresh(doc)
    return doc


def delete_document(db: Session, doc, what: str) -> None:
    db.delete(doc)
    commit(db, what)


def delete_member_documents(db: Session, member_ids: Iterable[str]) -> int:
    n = 0
    for mid in member_ids:
        m = db.get(FamilyMember, mid)
        if m:
            delete_document(db, m, f"delete member {mid}")
            n += 1
    return n


def push_user_tree(db: Session, *, user_id: str, tree_id: str) -> User | None:
    user = db.get(User, user_id)
    if not user:
        return None
    if tree_id not in user.tree_ids:
        user.tree_ids = _with(user.tree_ids, tree_id)
        commit(db, f"user {user_id} add tree")
    return user


def pull_user_tree(db: Session, *, user_id: str, tree_id: str) -> User | None:
    user = db.get(User, user_id)
    if not user:
        return None
    if tree_id in user.tree_ids:
        user.tree_ids = _without(user.tree_ids, tree_id)
        commit(db, f"user {user_id} remove tree")
    return user
