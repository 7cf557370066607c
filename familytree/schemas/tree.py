from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, field_validator
from ..models.tree import Privacy
from .common import ORMModel
from .member import MemberCreate, MemberOut


class TreeCreate(BaseModel):
    name: str
    description: str | None = None
    privacy: Privacy = Privacy.PRIVATE
    # optional seed: exactly one self, one mother and one father
    members: List[MemberCreate] | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Family tree name is required.")
        return v


class TreeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    privacy: Privacy | None = None


class TreeOut(ORMModel):
    id: str
    name: str
    description: str | None = None
    privacy: Privacy
    shareable_link: str | None = None
    owner_id: str | None = None
    guest_session_id: str | None = None
    member_ids: List[str] = []
    created_at: datetime
    updated_at: datetime


class TreeDetailOut(TreeOut):
    members: List[MemberOut] = []


class IntegrityOut(BaseModel):
    tree_id: str
    consistent: bool
    problems: List[str] = []
