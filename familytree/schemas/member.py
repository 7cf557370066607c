from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel, Field
from ..models.member import Gender, MemberRole
from .common import ORMModel


class SpouseLink(BaseModel):
    spouse_id: str
    relationship_type: str | None = "spouse"


class MemberFields(BaseModel):
    """Descriptive fields shared by every way of creating a member."""
    first_name: str = Field(min_length=1)
    last_name: str | None = None
    gender: Gender
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    date_of_death: date | None = None
    place_of_death: str | None = None
    profile_picture_url: str | None = None
    biography: str | None = None


class MemberCreate(MemberFields):
    role: MemberRole
    mother: str | None = None
    father: str | None = None
    spouses: list[SpouseLink] = []
    children: list[str] = []


class ChildCreate(MemberFields):
    mother_id: str | None = None
    father_id: str | None = None


class SiblingCreate(MemberFields):
    pass


class SpouseCreate(BaseModel):
    # either describe a new member, or point at an existing one with spouse_id
    spouse_id: str | None = None
    relationship_type: str | None = "spouse"
    first_name: str | None = None
    last_name: str | None = None
    gender: Gender | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    date_of_death: date | None = None
    place_of_death: str | None = None
    profile_picture_url: str | None = None
    biography: str | None = None


class MemberUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = None
    gender: Gender | None = None
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    date_of_death: date | None = None
    place_of_death: str | None = None
    profile_picture_url: str | None = None
    biography: str | None = None
    mother: str | None = None
    father: str | None = None
    spouses: list[SpouseLink] | None = None
    children: list[str] | None = None


class LinkParentIn(BaseModel):
    parent_type: Literal["mother", "father"] | None = None


class LinkSpouseIn(BaseModel):
    relationship_type: str | None = "spouse"


class MemberOut(ORMModel):
    id: str
    tree_id: str
    first_name: str
    last_name: str | None = None
    gender: Gender
    date_of_birth: date | None = None
    place_of_birth: str | None = None
    date_of_death: date | None = None
    place_of_death: str | None = None
    profile_picture_url: str | None = None
    biography: str | None = None
    role: MemberRole
    mother: str | None = None
    father: str | None = None
    spouses: list[SpouseLink] = []
    children: list[str] = []
    created_at: datetime
    updated_at: datetime


class ParentLinkOut(BaseModel):
    message: str
    child: MemberOut
    parent: MemberOut


class SpouseLinkOut(BaseModel):
    message: str
    member: MemberOut
    spouse: MemberOut
