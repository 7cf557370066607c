import logging
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.errors import InvalidArgument
from ..models.member import FamilyMember, MemberRole
from ..models.tree import FamilyTree, Privacy
from ..schemas.member import MemberCreate
from ..schemas.tree import TreeCreate, TreeUpdate
from . import store
from .access import Requester
from .relationships import add_member
from .security import new_share_token

logger = logging.getLogger(__name__)

SEED_ROLES = (MemberRole.MOTHER, MemberRole.FATHER, MemberRole.SELF)


def _seed_by_role(members: list[MemberCreate]) -> dict[MemberRole, MemberCreate]:
    roles = [m.role for m in members]
    if sorted(roles) != sorted(SEED_ROLES):
        raise InvalidArgument("You must provide all of: self, mother, father in members.")
    for m in members:
        if m.spouses or m.children or (m.role != MemberRole.SELF and (m.mother or m.father)):
            raise InvalidArgument("Seed members cannot reference other members.")
    return {m.role: m for m in members}


def create_tree(db: Session, requester: Requester, data: TreeCreate) -> tuple[FamilyTree, list[FamilyMember]]:
    """Create a tree owned by the requester, optionally seeded with self, mother and father."""
    if not requester.user_id and not requester.guest_session_id:
        raise InvalidArgument("A tree needs an authenticated user or a guest session.")
    seed = _seed_by_role(data.members) if data.members is not None else None

    tree = FamilyTree(
        name=data.name,
        description=data.description,
        privacy=data.privacy,
        owner_id=requester.user_id,
        guest_session_id=None if requester.user_id else requester.guest_session_id,
        member_ids=[],
    )
    if data.privacy == Privacy.PUBLIC_LINK:
        tree.shareable_link = new_share_token()
    tree = store.insert(db, tree, "create tree")
    if tree.owner_id:
        store.push_user_tree(db, user_id=tree.owner_id, tree_id=tree.id)
    logger.info(f"Tree created: id={tree.id} owner={tree.owner_id} guest={tree.guest_session_id is not None}")

    members: list[FamilyMember] = []
    if seed:
        mother = add_member(db, tree, seed[MemberRole.MOTHER])
        father = add_member(db, tree, seed[MemberRole.FATHER])
        me = add_member(db, tree, seed[MemberRole.SELF].model_copy(update={"mother": mother.id, "father": father.id}))
        members = [mother, father, me]
        db.refresh(tree)
    return tree, members


def list_trees(db: Session, requester: Requester) -> list[FamilyTree]:
    if requester.user_id:
        q = select(FamilyTree).where(FamilyTree.owner_id == requester.user_id)
    elif requester.guest_session_id:
        q = select(FamilyTree).where(FamilyTree.guest_session_id == requester.guest_session_id, FamilyTree.owner_id.is_(None))
    else:
        return []
    return list(db.execute(q.order_by(FamilyTree.created_at)).scalars())


def list_user_trees(db: Session, user_id: str, tree_ids: list[str]) -> list[FamilyTree]:
    if not tree_ids:
        return []
    q = select(FamilyTree).where(FamilyTree.id.in_(tree_ids), FamilyTree.owner_id == user_id)
    by_id = {t.id: t for t in db.execute(q).scalars()}
    return [by_id[i] for i in tree_ids if i in by_id]


def update_tree(db: Session, tree: FamilyTree, patch: TreeUpdate) -> FamilyTree:
    fields = patch.model_dump(exclude_unset=True)
    if not fields:
        raise InvalidArgument("No update fields provided.")
    if "name" in fields:
        name = (fields["name"] or "").strip()
        if not name:
            raise InvalidArgument("Family tree name is required.")
        fields["name"] = name
    if "privacy" in fields:
        if fields["privacy"] is None:
            raise InvalidArgument("privacy cannot be cleared.")
        if fields["privacy"] == Privacy.PUBLIC_LINK and not tree.shareable_link:
            fields["shareable_link"] = new_share_token()
        elif fields["privacy"] == Privacy.PRIVATE:
            fields["shareable_link"] = None
    tree = store.update_fields(db, tree, fields, f"update tree {tree.id}")
    logger.info(f"Tree updated: id={tree.id} fields={sorted(fields)}")
    return tree


def delete_tree(db: Session, tree: FamilyTree) -> int:
    """Delete every member of the tree, then the tree itself."""
    tree_id, owner_id = tree.id, tree.owner_id
    member_ids = [m.id for m in store.list_members(db, tree_id)]
    for mid in member_ids:
        store.pull_tree_member(db, tree_id, mid)
        store.delete_member_documents(db, [mid])
    if owner_id:
        store.pull_user_tree(db, user_id=owner_id, tree_id=tree_id)
    store.delete_document(db, db.get(FamilyTree, tree_id), f"delete tree {tree_id}")
    logger.info(f"Tree deleted: id={tree_id} members={len(member_ids)}")
    return len(member_ids)
