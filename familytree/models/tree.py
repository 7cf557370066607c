from enum import StrEnum
from sqlalchemy import String, DateTime, ForeignKey, Text, JSON, CheckConstraint, event
from sqlalchemy.orm import Mapped, mapped_column
from uuid import uuid4
from ..core.errors import InvalidArgument
from ..db.base_class import Base
from . import utcnow


class Privacy(StrEnum):
    PRIVATE = "private"
    PUBLIC_LINK = "public_link"
    PUBLIC = "public"


class FamilyTree(Base):
    __table_args__ = (
        CheckConstraint(
            "owner_id IS NULL OR guest_session_id IS NULL",
            name="ck_tree_single_owner",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    privacy: Mapped[Privacy] = mapped_column(default=Privacy.PRIVATE)
    shareable_link: Mapped[str | None] = mapped_column(String(64), unique=True)
    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("user.id"), index=True)
    guest_session_id: Mapped[str | None] = mapped_column(String(64), index=True)
    # member ids in insertion order
    member_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


@event.listens_for(FamilyTree, "before_insert")
@event.listens_for(FamilyTree, "before_update")
def _check_single_owner(mapper, connection, tree: FamilyTree):
    if tree.owner_id and tree.guest_session_id:
        raise InvalidArgument("A family tree cannot have both an owner and a guest session ID.")
    if not tree.owner_id and not tree.guest_session_id:
        raise InvalidArgument("A family tree needs an owner or a guest session ID.")
