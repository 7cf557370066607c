from datetime import datetime, timezone
def utcnow():
    return datetime.now(timezone.utc)
from .user import User
from .tree import FamilyTree
from .member import FamilyMember
