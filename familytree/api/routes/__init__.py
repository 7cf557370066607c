from fastapi import APIRouter
from . import auth, trees, members, guest_sessions

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(guest_sessions.router, prefix="/guest-sessions", tags=["Guest sessions"])
router.include_router(trees.router, prefix="/trees", tags=["Trees"])
router.include_router(members.router, prefix="/trees/{tree_id}/members", tags=["Members"])
