from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...models.member import FamilyMember
from ...models.tree import FamilyTree
from ...schemas.member import MemberOut
from ...schemas.tree import IntegrityOut, TreeCreate, TreeDetailOut, TreeOut, TreeUpdate
from ...services import store
from ...services.access import Requester, authorize
from ...services.integrity import check_tree
from ...services.tree_service import create_tree, delete_tree, list_trees, update_tree
from ..deps import get_db, get_requester

router = APIRouter()


def _detail(tree: FamilyTree, members: list[FamilyMember]) -> TreeDetailOut:
    tree_out = TreeOut.model_validate(tree)
    return TreeDetailOut(**tree_out.model_dump(), members=[MemberOut.model_validate(m) for m in members])


@router.post("", response_model=TreeDetailOut, status_code=status.HTTP_201_CREATED)
def create(payload: TreeCreate, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree, members = create_tree(db, requester, payload)
    return _detail(tree, members)


@router.get("", response_model=list[TreeOut])
def my_trees(db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    return list_trees(db, requester)


@router.get("/{tree_id}", response_model=TreeDetailOut)
def get_one(tree_id: str, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester)
    return _detail(tree, store.members_in_order(db, tree))


@router.put("/{tree_id}", response_model=TreeOut)
def update(tree_id: str, payload: TreeUpdate, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester, write_required=True)
    return update_tree(db, tree, payload)


@router.delete("/{tree_id}")
def delete(tree_id: str, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester, write_required=True)
    deleted = delete_tree(db, tree)
    return {"message": "Tree and all its members deleted.", "members_deleted": deleted}


@router.get("/{tree_id}/integrity", response_model=IntegrityOut)
def integrity(tree_id: str, db: Session = Depends(get_db), requester: Requester = Depends(get_requester)):
    tree = authorize(db, tree_id, requester)
    problems = check_tree(db, tree)
    return IntegrityOut(tree_id=tree.id, consistent=not problems, problems=problems)
