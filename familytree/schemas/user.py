from typing import List, Optional
from .common import ORMModel
from .tree import TreeOut


class UserOut(ORMModel):
    id: str
    subject: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    profile_picture: Optional[str] = None
    tree_ids: List[str] = []


class MeOut(UserOut):
    trees: List[TreeOut] = []
