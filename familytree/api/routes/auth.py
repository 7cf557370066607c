from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
from ...schemas.tree import TreeOut
from ...schemas.user import MeOut, UserOut
from ...services.tree_service import list_user_trees
from ...services.user_service import sync_profile
from ...models.user import User
from ..deps import Identity, get_current_user, get_db, get_identity

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_me_out(db: Session, user: User) -> MeOut:
    trees = list_user_trees(db, user.id, user.tree_ids)
    user_out = UserOut.model_validate(user)
    return MeOut(**user_out.model_dump(), trees=[TreeOut.model_validate(t) for t in trees])


@router.get("/me", response_model=MeOut)
def me(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return _build_me_out(db, current)


@router.post("/sync-user", response_model=MeOut)
def sync_user(
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    identity: Identity = Depends(get_identity),
):
    user = sync_profile(db, current, identity.claims)
    return _build_me_out(db, user)
