from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...schemas.member import (
    ChildCreate,
    LinkParentIn,
    LinkSpouseIn,
    MemberCreate,
    MemberOut,
    MemberUpdate,
    ParentLinkOut,
    SiblingCreate,
    SpouseCreate,
    SpouseLinkOut,
)
from ...services import relationships, store
from ...services.access import Requester, authorize
from ..deps import get_db, get_requester

router = APIRouter()


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_member(tree_id: str, payload: MemberCreate, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester, write_required=True)
    return relationships.add_member(db, tree, payload)


@router.get("", response_model=list[MemberOut])
def list_members(tree_id: str, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester)
    return store.members_in_order(db, tree)


@router.get("/{member_id}", response_model=MemberOut)
def get_member(tree_id: str, member_id: str, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester)
    return store.require_member(db, tree.id, member_id)


@router.put("/{member_id}", response_model=MemberOut)
def update_member(
    tree_id: str, member_id: str, payload: MemberUpdate,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    return relationships.update_member(db, tree, member_id, payload)


@router.delete("/{member_id}")
def delete_member(tree_id: str, member_id: str, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester, write_required=True)
    relationships.delete_member(db, tree, member_id)
    return {"message": "Family member successfully deleted and references updated."}


# --- relationship management -------------------------------------------------

@router.post("/{member_id}/add-child", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_child(
    tree_id: str, member_id: str, payload: ChildCreate,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    return relationships.add_child(db, tree, member_id, payload)


@router.post("/{member_id}/add-sibling", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_sibling(
    tree_id: str, member_id: str, payload: SiblingCreate,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    return relationships.add_sibling(db, tree, member_id, payload)


@router.post("/{member_id}/add-spouse", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_spouse(
    tree_id: str, member_id: str, payload: SpouseCreate,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    return relationships.add_spouse(db, tree, member_id, payload)


@router.post("/{member_id}/link-parent/{parent_id}", response_model=ParentLinkOut)
def link_parent(
    tree_id: str, member_id: str, parent_id: str, payload: LinkParentIn | None = None,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    parent_type = payload.parent_type if payload else None
    child, parent = relationships.link_parent(db, tree, child_id=member_id, parent_id=parent_id, parent_type=parent_type)
    return ParentLinkOut(message="Parent linked successfully.", child=MemberOut.model_validate(child), parent=MemberOut.model_validate(parent))


@router.delete("/{member_id}/link-parent/{parent_id}", response_model=ParentLinkOut)
def unlink_parent(
    tree_id: str, member_id: str, parent_id: str,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    child, parent = relationships.unlink_parent(db, tree, child_id=member_id, parent_id=parent_id)
    return ParentLinkOut(message="Parent unlinked successfully.", child=MemberOut.model_validate(child), parent=MemberOut.model_validate(parent))


@router.post("/{member_id}/link-spouse/{spouse_id}", response_model=SpouseLinkOut)
def link_spouse(
    tree_id: str, member_id: str, spouse_id: str, payload: LinkSpouseIn | None = None,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    rel = payload.relationship_type if payload else None
    member, spouse = relationships.link_spouse(db, tree, member_id=member_id, spouse_id=spouse_id, relationship_type=rel)
    return SpouseLinkOut(message="Spouse linked successfully.", member=MemberOut.model_validate(member), spouse=MemberOut.model_validate(spouse))


@router.delete("/{member_id}/link-spouse/{spouse_id}", response_model=SpouseLinkOut)
def unlink_spouse(
    tree_id: str, member_id: str, spouse_id: str,
    db: Session = Depends(get_db), requester: Requester = Depends(get_requester),
):
    tree = authorize(db, tree_id, requester, write_required=True)
    member, spouse = relationships.unlink_spouse(db, tree, member_id=member_id, spouse_id=spouse_id)
    return SpouseLinkOut(message="Spouse unlinked successfully.", member=MemberOut.model_validate(member), spouse=MemberOut.model_validate(spouse))


@router.delete("/{member_id}/delete-sibling")
def delete_sibling(tree_id: str, member_id: str, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester, write_required=True)
    relationships.delete_sibling(db, tree, member_id)
    return {"message": "Sibling deleted."}
