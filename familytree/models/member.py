from datetime import date
from enum import StrEnum
from sqlalchemy import String, DateTime, Date, ForeignKey, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from uuid import uuid4
from ..db.base_class import Base
from . import utcnow


class Gender(StrEnum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class MemberRole(StrEnum):
    SELF = "self"
    MOTHER = "mother"
    FATHER = "father"
    SIBLING = "sibling"
    SPOUSE = "spouse"
    CHILD = "child"


class FamilyMember(Base):
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    tree_id: Mapped[str] = mapped_column(String(36), ForeignKey("familytree.id"), index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(128))
    gender: Mapped[Gender] = mapped_column(nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    place_of_birth: Mapped[str | None] = mapped_column(String(255))
    date_of_death: Mapped[date | None] = mapped_column(Date)
    place_of_death: Mapped[str | None] = mapped_column(String(255))
    profile_picture_url: Mapped[str | None] = mapped_column(String(512))
    biography: Mapped[str | None] = mapped_column(Text)
    # creation-time tag relative to the tree's reference person, not a live edge
    role: Mapped[MemberRole] = mapped_column(nullable=False)

    # Relationship edges are plain member ids, kept in step by
    # services.relationships rather than by database cascades.
    mother: Mapped[str | None] = mapped_column(String(36))
    father: Mapped[str | None] = mapped_column(String(36))
    spouses: Mapped[list[dict]] = mapped_column(JSON, default=list, nullable=False)
    children: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def spouse_ids(self) -> list[str]:
        return [s["spouse_id"] for s in self.spouses]

    def parent_ids(self) -> list[str]:
        return [p for p in (self.mother, self.father) if p]
