from ..models.user import User
from ..models.tree import FamilyTree, Privacy
from ..models.member import FamilyMember, Gender, MemberRole
from ..db.base_class import Base
