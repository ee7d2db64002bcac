"""
WayShare Backend - Notification SQLAlchemy Model
=================================================

What:  ORM model for the `notifications` table: one row per message shown
       to a member, with a read flag.

Query Patterns:
    - Member inbox: WHERE member_id = :id ORDER BY timestamp DESC LIMIT :size
      → Uses idx_notifications_member_timestamp
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wayshare.database import Base
from wayshare.models.types import Identifier, UTCDateTime

if TYPE_CHECKING:
    from wayshare.models.member import Member


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    message: Mapped[str] = mapped_column(String(1024), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_read: Mapped[Optional[bool]] = mapped_column(
        Boolean,
        nullable=True,
        default=False,
        server_default=text("false"),
    )
    member_id: Mapped[Optional[int]] = mapped_column(
        Identifier,
        ForeignKey("members.id", name="fk_notification__member_id"),
        nullable=True,
    )

    member: Mapped[Optional["Member"]] = relationship(back_populates="notifications")

    __table_args__ = (
        Index("idx_notifications_member_timestamp", "member_id", timestamp.desc()),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, member_id={self.member_id}, is_read={self.is_read})>"
