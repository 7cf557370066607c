"""Relationship Mutator: the only code that writes relationship edges.

Members carry denormalized edges (``mother``, ``father``, ``spouses``,
``children``) that must stay bidirectional. There are no multi-document
transactions, so each operation validates everything it can up front and
then applies a fixed sequence of single-document set-add / set-remove steps
from ``store``. A crash between steps leaves the graph behind, never
corrupt: re-running the operation converges.
"""
import logging

from sqlalchemy.orm import Session

from ..core.errors import InvalidArgument, InvalidState
from ..models.member import FamilyMember, Gender, MemberRole
from ..models.tree import FamilyTree
from ..schemas.member import (
    ChildCreate,
    MemberCreate,
    MemberFields,
    MemberUpdate,
    SiblingCreate,
    SpouseCreate,
)
from . import store

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "first_name",
    "last_name",
    "gender",
    "date_of_birth",
    "place_of_birth",
    "date_of_death",
    "place_of_death",
    "profile_picture_url",
    "biography",
)
EDGE_FIELDS = ("mother", "father", "spouses", "children")
REQUIRED_FIELDS = ("first_name", "gender")


def _describe(data: MemberFields | SpouseCreate) -> dict:
    fields = {k: getattr(data, k) for k in SCALAR_FIELDS}
    if not fields["first_name"] or not fields["gender"]:
        raise InvalidArgument("First name and gender are required.")
    return fields


def _unique(ids) -> list[str]:
    out: list[str] = []
    for i in ids:
        if i not in out:
            out.append(i)
    return out


def _create(
    db: Session,
    tree: FamilyTree,
    fields: dict,
    role: MemberRole,
    *,
    mother: str | None = None,
    father: str | None = None,
    spouses: list[dict] | None = None,
    children: list[str] | None = None,
) -> FamilyMember:
    m = FamilyMember(
        tree_id=tree.id,
        role=role,
        mother=mother,
        father=father,
        spouses=spouses or [],
        children=children or [],
        **fields,
    )
    return store.insert(db, m, f"create member in tree {tree.id}")


def parent_slot(parent_gender: Gender, parent_id: str | None, child: FamilyMember, parent_type: str | None = None) -> str:
    """Pick the child's ``mother`` or ``father`` field for a parent.

    A parent already in one of the slots keeps it, and naming the other slot
    is an InvalidState. Otherwise an explicit ``parent_type`` wins, then the
    parent's gender; for any other gender the first free slot is used. A
    slot already holding a different member is an InvalidState.
    """
    if parent_type and parent_type not in store.PARENT_SLOTS:
        raise InvalidArgument(f"parent_type must be one of {', '.join(store.PARENT_SLOTS)}.")
    held = [s for s in store.PARENT_SLOTS if parent_id and getattr(child, s) == parent_id]
    if held:
        if parent_type and parent_type != held[0]:
            raise InvalidState(f"Member {parent_id} is already the {held[0]} of {child.id}.")
        return held[0]
    if parent_type:
        slot = parent_type
    elif parent_gender == Gender.FEMALE:
        slot = "mother"
    elif parent_gender == Gender.MALE:
        slot = "father"
    else:
        free = [s for s in store.PARENT_SLOTS if not getattr(child, s)]
        if not free:
            raise InvalidState(f"Member {child.id} already has both parents set.")
        slot = free[0]
    current = getattr(child, slot)
    if current and current != parent_id:
        raise InvalidState(f"Member {child.id} already has a {slot}.")
    return slot


# --- creation --------------------------------------------------------------

def add_member(db: Session, tree: FamilyTree, data: MemberCreate) -> FamilyMember:
    fields = _describe(data)
    if data.role == MemberRole.SELF and not (data.mother and data.father):
        raise InvalidArgument("Mother and father are required for self.")
    if data.mother and data.mother == data.father:
        raise InvalidArgument("Mother and father must be different members.")

    # every referenced id is checked before the first write
    if data.mother:
        store.require_member(db, tree.id, data.mother, "Mother")
    if data.father:
        store.require_member(db, tree.id, data.father, "Father")
    spouses: list[dict] = []
    for link in data.spouses:
        store.require_member(db, tree.id, link.spouse_id, "Spouse")
        if link.spouse_id not in [s["spouse_id"] for s in spouses]:
            spouses.append({"spouse_id": link.spouse_id, "relationship_type": link.relationship_type or "spouse"})
    child_slots: dict[str, str] = {}
    for child_id in _unique(data.children):
        if child_id in (data.mother, data.father):
            raise InvalidArgument("A member cannot be both parent and child of the same member.")
        child = store.require_member(db, tree.id, child_id, "Child")
        child_slots[child_id] = parent_slot(data.gender, None, child)

    member = _create(
        db, tree, fields, data.role,
        mother=data.mother,
        father=data.father,
        spouses=spouses,
        children=list(child_slots),
    )
    store.push_tree_member(db, tree.id, member.id)
    for parent_id in member.parent_ids():
        store.add_child(db, parent_id, member.id)
    for link in spouses:
        store.add_spouse(db, link["spouse_id"], member.id, link["relationship_type"])
    for child_id, slot in child_slots.items():
        store.set_parent(db, child_id, slot, member.id)

    logger.info(f"Member added: id={member.id} tree={tree.id} role={member.role}")
    db.refresh(member)
    return member


def add_child(db: Session, tree: FamilyTree, member_id: str, data: ChildCreate) -> FamilyMember:
    store.require_member(db, tree.id, member_id, "Parent")
    if not data.mother_id and not data.father_id:
        raise InvalidArgument("At least one parent (mother_id or father_id) must be specified.")
    if data.mother_id and data.mother_id == data.father_id:
        raise InvalidArgument("Mother and father must be different members.")
    fields = _describe(data)
    if data.mother_id:
        store.require_member(db, tree.id, data.mother_id, "Mother")
    if data.father_id:
        store.require_member(db, tree.id, data.father_id, "Father")

    child = _create(db, tree, fields, MemberRole.CHILD, mother=data.mother_id, father=data.father_id)
    store.push_tree_member(db, tree.id, child.id)
    for parent_id in child.parent_ids():
        store.add_child(db, parent_id, child.id)

    logger.info(f"Child added: id={child.id} tree={tree.id} parents={child.parent_ids()}")
    db.refresh(child)
    return child


def add_sibling(db: Session, tree: FamilyTree, member_id: str, data: SiblingCreate) -> FamilyMember:
    member = store.require_member(db, tree.id, member_id)
    # siblings are only placed under two known parents, never guessed
    if not member.mother or not member.father:
        raise InvalidState("Cannot add sibling: member must have both parents defined.")
    fields = _describe(data)

    sibling = _create(db, tree, fields, MemberRole.SIBLING, mother=member.mother, father=member.father)
    store.push_tree_member(db, tree.id, sibling.id)
    store.add_child(db, sibling.mother, sibling.id)
    store.add_child(db, sibling.father, sibling.id)

    logger.info(f"Sibling added: id={sibling.id} of member={member_id} tree={tree.id}")
    db.refresh(sibling)
    return sibling


def add_spouse(db: Session, tree: FamilyTree, member_id: str, data: SpouseCreate) -> FamilyMember:
    """Create a spouse for a member, or link an existing one via ``spouse_id``."""
    if data.spouse_id:
        _, spouse = link_spouse(
            db, tree, member_id=member_id, spouse_id=data.spouse_id, relationship_type=data.relationship_type
        )
        return spouse

    store.require_member(db, tree.id, member_id)
    fields = _describe(data)
    rel = data.relationship_type or "spouse"

    spouse = _create(
        db, tree, fields, MemberRole.SPOUSE,
        spouses=[{"spouse_id": member_id, "relationship_type": rel}],
    )
    store.push_tree_member(db, tree.id, spouse.id)
    store.add_spouse(db, member_id, spouse.id, rel)

    logger.info(f"Spouse added: id={spouse.id} of member={member_id} tree={tree.id}")
    db.refresh(spouse)
    return spouse


# --- linking existing members ----------------------------------------------

def link_parent(
    db: Session, tree: FamilyTree, *, child_id: str, parent_id: str, parent_type: str | None = None
) -> tuple[FamilyMember, FamilyMember]:
    if child_id == parent_id:
        raise InvalidArgument("Cannot link member to self as parent.")
    child = store.require_member(db, tree.id, child_id, "Child")
    parent = store.require_member(db, tree.id, parent_id, "Parent")
    slot = parent_slot(parent.gender, parent.id, child, parent_type)

    store.set_parent(db, child.id, slot, parent.id)
    store.add_child(db, parent.id, child.id)

    logger.info(f"Parent linked: child={child_id} {slot}={parent_id} tree={tree.id}")
    db.refresh(child)
    db.refresh(parent)
    return child, parent


def unlink_parent(db: Session, tree: FamilyTree, *, child_id: str, parent_id: str) -> tuple[FamilyMember, FamilyMember]:
    if child_id == parent_id:
        raise InvalidArgument("A member cannot be its own parent.")
    child = store.require_member(db, tree.id, child_id, "Child")
    parent = store.require_member(db, tree.id, parent_id, "Parent")

    store.clear_parent(db, child.id, parent.id)
    store.pull_child(db, parent.id, child.id)

    logger.info(f"Parent unlinked: child={child_id} parent={parent_id} tree={tree.id}")
    db.refresh(child)
    db.refresh(parent)
    return child, parent


def link_spouse(
    db: Session, tree: FamilyTree, *, member_id: str, spouse_id: str, relationship_type: str | None = None
) -> tuple[FamilyMember, FamilyMember]:
    if member_id == spouse_id:
        raise InvalidArgument("Cannot link member to self as spouse.")
    member = store.require_member(db, tree.id, member_id)
    spouse = store.require_member(db, tree.id, spouse_id, "Spouse")

    store.add_spouse(db, member.id, spouse.id, relationship_type)
    store.add_spouse(db, spouse.id, member.id, relationship_type)

    logger.info(f"Spouse linked: {member_id} <-> {spouse_id} tree={tree.id}")
    db.refresh(member)
    db.refresh(spouse)
    return member, spouse


def unlink_spouse(db: Session, tree: FamilyTree, *, member_id: str, spouse_id: str) -> tuple[FamilyMember, FamilyMember]:
    if member_id == spouse_id:
        raise InvalidArgument("A member cannot be its own spouse.")
    member = store.require_member(db, tree.id, member_id)
    spouse = store.require_member(db, tree.id, spouse_id, "Spouse")

    store.pull_spouse(db, member.id, spouse.id)
    store.pull_spouse(db, spouse.id, member.id)

    logger.info(f"Spouse unlinked: {member_id} </> {spouse_id} tree={tree.id}")
    db.refresh(member)
    db.refresh(spouse)
    return member, spouse


# --- deletion --------------------------------------------------------------

def delete_member(db: Session, tree: FamilyTree, member_id: str) -> None:
    """Delete a member and every reference to it.

    Steps run in an order where no surviving document points at the id once
    the member document itself is gone; each step can be repeated.
    """
    store.require_member(db, tree.id, member_id)

    store.pull_tree_member(db, tree.id, member_id)
    others = [m for m in store.list_members(db, tree.id) if m.id != member_id]
    for other in others:
        if member_id in other.children:
            store.pull_child(db, other.id, member_id)
    for other in others:
        if member_id in (other.mother, other.father):
            # the slot is cleared; the child itself stays
            store.clear_parent(db, other.id, member_id)
    for other in others:
        if member_id in other.spouse_ids:
            store.pull_spouse(db, other.id, member_id)
    store.delete_member_documents(db, [member_id])

    logger.info(f"Member deleted: id={member_id} tree={tree.id}")


def delete_sibling(db: Session, tree: FamilyTree, member_id: str) -> None:
    member = store.require_member(db, tree.id, member_id)
    if member.role != MemberRole.SIBLING:
        raise InvalidState("Member was not added as a sibling.")
    delete_member(db, tree, member_id)


# --- generic update ----------------------------------------------------------

def update_member(db: Session, tree: FamilyTree, member_id: str, patch: MemberUpdate) -> FamilyMember:
    """Apply a whitelisted patch.

    Relationship fields are written as given and NOT mirrored onto the other
    members; use the link/unlink operations for that. Referenced ids must
    still belong to the tree.
    """
    member = store.require_member(db, tree.id, member_id)
    fields = patch.model_dump(exclude_unset=True, include=set(SCALAR_FIELDS + EDGE_FIELDS))
    if not fields:
        raise InvalidArgument("No update fields provided.")
    for name in REQUIRED_FIELDS:
        if name in fields and not fields[name]:
            raise InvalidArgument(f"{name} cannot be cleared.")

    for slot in store.PARENT_SLOTS:
        ref = fields.get(slot)
        if ref:
            if ref == member_id:
                raise InvalidArgument("A member cannot be its own parent.")
            store.require_member(db, tree.id, ref, slot.capitalize())
    mother = fields.get("mother", member.mother)
    if mother and mother == fields.get("father", member.father):
        raise InvalidArgument("Mother and father must be different members.")
    if "spouses" in fields:
        spouses: list[dict] = []
        for link in fields["spouses"] or []:
            if link["spouse_id"] == member_id:
                raise InvalidArgument("A member cannot be its own spouse.")
            store.require_member(db, tree.id, link["spouse_id"], "Spouse")
            if link["spouse_id"] not in [s["spouse_id"] for s in spouses]:
                spouses.append({"spouse_id": link["spouse_id"], "relationship_type": link.get("relationship_type") or "spouse"})
        fields["spouses"] = spouses
    if "children" in fields:
        children = _unique(fields["children"] or [])
        for child_id in children:
            if child_id == member_id:
                raise InvalidArgument("A member cannot be its own child.")
            store.require_member(db, tree.id, child_id, "Child")
        fields["children"] = children

    member = store.update_fields(db, member, fields, f"update member {member_id}")
    logger.info(f"Member updated: id={member_id} fields={sorted(fields)}")
    return member
