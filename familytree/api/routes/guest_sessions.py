from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ...schemas.guest import ClaimIn, ClaimOut, GuestSessionOut
from ...services.guest_service import claim, start_guest_session
from ...models.user import User
from ..deps import get_current_user, get_db

router = APIRouter()


@router.post("/start", response_model=GuestSessionOut)
def start():
    # the client sends this back in the X-Guest-Session-Id header
    return GuestSessionOut(guest_session_id=start_guest_session())


@router.post("/claim", response_model=ClaimOut)
def claim_guest_tree(payload: ClaimIn, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    trees = claim(db, guest_session_id=payload.guest_session_id, user=current)
    return ClaimOut(tree_ids=[t.id for t in trees], tree_names=[t.name for t in trees])
